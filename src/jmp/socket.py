""" The :class:`Socket` adapter applies the :class:`jmp.Message` codec to
    everything sent and received on a :class:`jmp.transport.Endpoint`.
"""

import itertools
import logging
import threading

from . import transport
from .message import DEFAULT_SCHEME, Message

logger = logging.getLogger(__name__)


class Socket:
    """ A ZeroMQ socket of the requested *socket_type* that speaks the
        Jupyter messaging protocol. Every message sent or received is signed
        or verified with the same hashing *scheme* and *key*; an empty *key*
        disables signing. If *debug* is True every message sent or received
        is logged.

        Listeners for the 'message' event are invoked with a decoded
        :class:`jmp.Message` instead of the raw frames, and only if the
        frames decoded successfully. Listeners for any other event are
        registered directly with the underlying endpoint.

        An existing *endpoint* can be supplied instead of having one created
        here; it need only provide the same methods as
        :class:`jmp.transport.Endpoint`.
    """

    def __init__(self, socket_type, scheme=DEFAULT_SCHEME, key='', debug=False,
                                            endpoint=None, context=None):

        if endpoint is None:
            endpoint = transport.Endpoint(socket_type, context)

        self.endpoint = endpoint
        self.scheme = scheme or DEFAULT_SCHEME
        self.key = key or ''
        self.debug = debug

        # Registration tokens map to a (handler, wrapped) tuple. Handlers need
        # not be hashable, so the reverse index is a list of (handler, token)
        # pairs in registration order, matched by equality.

        self._by_token = dict()
        self._by_handler = list()
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)


    # Operations passed through to the endpoint without modification.

    def bind(self, address):
        self.endpoint.bind(address)
        return self


    def connect(self, address):
        self.endpoint.connect(address)
        return self


    def close(self):
        self.endpoint.close()


    def receive(self, timeout=None):
        return self.endpoint.receive(timeout)


    def start(self):
        self.endpoint.start()
        return self


    def send(self, message, flags=0):
        """ Send a :class:`jmp.Message`, encoding and signing it first. Any
            other *message* is handed to the endpoint as raw frames; a lone
            bytes or str value is sent as a single frame.
        """

        if isinstance(message, Message):
            if self.debug:
                logger.debug('SEND: %r', message)
            message = message.encode(self.scheme, self.key)
        elif isinstance(message, bytes):
            message = [message]
        elif isinstance(message, str):
            message = [message.encode()]

        self.endpoint.send(message, flags)
        return self


    def on(self, event, handler):
        """ Register *handler* for *event*. For the 'message' event a
            registration token is returned, which can later be handed to
            :func:`remove_listener` in place of the handler.
        """

        if event != 'message':
            self.endpoint.on(event, handler)
            return None

        token, wrapped = self._register(handler, once=False)
        self.endpoint.on(event, wrapped)
        return token

    add_listener = on


    def once(self, event, handler):
        """ Register *handler* for a single invocation of *event*. As with
            :func:`on`, a 'message' handler returns a token, and remains
            removable by token or handler until it has been invoked.
        """

        if event != 'message':
            self.endpoint.once(event, handler)
            return None

        token, wrapped = self._register(handler, once=True)
        self.endpoint.once(event, wrapped)
        return token


    def remove_listener(self, event, handler):
        """ Remove a listener for *event*. For the 'message' event *handler*
            can be either the original handler or the token returned when it
            was registered; the earliest registration for a handler is
            removed first.
        """

        if event != 'message':
            self.endpoint.remove_listener(event, handler)
            return self

        wrapped = self._unregister(handler)

        if wrapped is None:
            self.endpoint.remove_listener(event, handler)
        else:
            self.endpoint.remove_listener(event, wrapped)

        return self


    def remove_all_listeners(self, event=None):
        """ Remove all listeners for *event*, or for every event if *event*
            is None.
        """

        if event is None or event == 'message':
            with self._lock:
                self._by_token.clear()
                self._by_handler.clear()

        self.endpoint.remove_all_listeners(event)
        return self


    def listeners(self, event):
        """ Return the listeners registered for *event*. For the 'message'
            event these are the original handlers, not their wrappers.
        """

        if event != 'message':
            return self.endpoint.listeners(event)

        with self._lock:
            lookup = dict((wrapped, handler) for handler, wrapped in self._by_token.values())

        return [lookup.get(wrapped, wrapped) for wrapped in self.endpoint.listeners(event)]


    def _register(self, handler, once):

        if not callable(handler):
            raise TypeError('handler must be callable')

        token = next(self._tokens)

        def wrapped(*frames):
            if once:
                self._unregister(token)

            message = Message()
            if not message.decode(frames, self.scheme, self.key):
                return

            if self.debug:
                logger.debug('RECEIVE: %r', message)

            handler(message)

        with self._lock:
            self._by_token[token] = (handler, wrapped)
            self._by_handler.append((handler, token))

        return token, wrapped


    def _unregister(self, handler):
        """ Drop the bookkeeping for *handler*, which may also be a token.
            Returns the wrapped listener, or None if there was no match.
        """

        with self._lock:
            if isinstance(handler, int):
                token = handler
            else:
                for candidate, token in self._by_handler:
                    if candidate == handler:
                        break
                else:
                    return None

            try:
                original, wrapped = self._by_token.pop(token)
            except KeyError:
                return None

            self._by_handler.remove((original, token))

        return wrapped


# end of class Socket


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
