""" A thin ZeroMQ endpoint with an event-listener registry. This is the
    transport collaborator for :class:`jmp.Socket`: it moves multipart
    frames, and delivers each received frame sequence to the listeners
    registered for the 'message' event. It has no awareness of the
    protocol carried in those frames.
"""

import atexit
import logging
import threading
import traceback
import zmq


logger = logging.getLogger(__name__)
zmq_context = zmq.Context()


class TransportError(Exception):
    """ Base class for all transport-layer errors.
    """


class TransportClosed(TransportError):
    """ An operation was attempted on an endpoint that has been closed.
    """


class Endpoint:
    """ Wrap a single ZeroMQ socket of the requested *socket_type*. Incoming
        multipart messages are emitted as 'message' events, with each frame
        passed as a positional argument to the listener; they are received
        either one at a time via :func:`receive`, or continuously by a
        background thread established via :func:`start`.
    """

    timeout = 0.1

    def __init__(self, socket_type, context=None):

        if context is None:
            context = zmq_context

        self.socket = context.socket(socket_type)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket_lock = threading.Lock()

        self.closed = False
        self.thread = None

        self._listeners = dict()
        self._listeners_lock = threading.Lock()


    def bind(self, address):
        try:
            self.socket.bind(address)
        except zmq.ZMQError as e:
            raise TransportError('unable to bind %s: %s' % (address, e)) from e


    def connect(self, address):
        try:
            self.socket.connect(address)
        except zmq.ZMQError as e:
            raise TransportError('unable to connect %s: %s' % (address, e)) from e


    def close(self):
        """ Stop any background receive thread and close the socket. Any
            'close' listeners are invoked once the socket is closed.
        """

        if self.closed:
            return

        self.closed = True

        thread = self.thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self.thread = None

        with self.socket_lock:
            self.socket.close()

        self.emit('close')


    def send(self, frames, flags=0):
        """ Send the sequence of *frames* as a single multipart message.
        """

        if self.closed:
            raise TransportClosed('cannot send on a closed endpoint')

        with self.socket_lock:
            self.socket.send_multipart(frames, flags=flags)


    def receive(self, timeout=None):
        """ Wait up to *timeout* seconds for a multipart message and emit it
            to the 'message' listeners. A *timeout* of None blocks
            indefinitely. Returns True if a message was received.
        """

        if self.closed:
            raise TransportClosed('cannot receive on a closed endpoint')

        if timeout is None:
            milliseconds = None
        else:
            milliseconds = int(timeout * 1000)

        if self.socket.poll(milliseconds, zmq.POLLIN) == 0:
            return False

        with self.socket_lock:
            frames = self.socket.recv_multipart(zmq.NOBLOCK)

        self.emit('message', *frames)
        return True


    def start(self):
        """ Receive and emit messages continuously in a background thread,
            until the endpoint is closed.
        """

        if self.thread is not None:
            return

        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def run(self):

        while not self.closed:
            try:
                self.receive(self.timeout)
            except TransportClosed:
                break
            except zmq.ZMQError:
                if self.closed:
                    break
                raise
            except Exception:
                logger.error('listener failed:\n%s', traceback.format_exc())


    def on(self, event, listener):
        """ Add *listener* to the end of the listeners for *event*.
        """

        self._add(event, listener, False)
        return self

    add_listener = on


    def once(self, event, listener):
        """ Add *listener* for a single invocation; it is removed before it
            is called.
        """

        self._add(event, listener, True)
        return self


    def remove_listener(self, event, listener):
        """ Remove the first registration of *listener* for *event*, if any.
        """

        with self._listeners_lock:
            registered = self._listeners.get(event, ())

            for index, (candidate, once) in enumerate(registered):
                if candidate == listener:
                    del registered[index]
                    break

        return self


    def remove_all_listeners(self, event=None):
        """ Remove all listeners for *event*, or for every event if *event*
            is None.
        """

        with self._listeners_lock:
            if event is None:
                self._listeners.clear()
            else:
                self._listeners.pop(event, None)

        return self


    def listeners(self, event):
        """ Return a list of the listeners currently registered for *event*.
        """

        with self._listeners_lock:
            registered = self._listeners.get(event, ())
            return [listener for listener, once in registered]


    def emit(self, event, *args):
        """ Invoke every listener registered for *event* with *args*. Returns
            True if there were any listeners.
        """

        with self._listeners_lock:
            registered = self._listeners.get(event)
            if not registered:
                return False

            invoke = list()
            for registration in tuple(registered):
                listener, once = registration
                if once:
                    registered.remove(registration)
                invoke.append(listener)

        for listener in invoke:
            listener(*args)

        return True


    def _add(self, event, listener, once):

        if not callable(listener):
            raise TypeError('listener must be callable')

        with self._listeners_lock:
            try:
                registered = self._listeners[event]
            except KeyError:
                registered = list()
                self._listeners[event] = registered

            registered.append((listener, once))


# end of class Endpoint



def _cleanup():
    zmq_context.destroy(linger=0)


atexit.register(_cleanup)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
