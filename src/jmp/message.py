""" A class representation of a Jupyter protocol message, along with the
    logic to translate it to and from the multipart frames that travel on
    the wire.
"""

import hmac
import logging
import uuid

from . import json


# The delimiter separates the routing identities prepended by ZeroMQ from
# the signed body of the message. Everything before it is an identity.

DELIMITER = b'<IDS|MSG>'
DEFAULT_SCHEME = 'sha256'

logger = logging.getLogger(__name__)


class ProtocolError(ValueError):
    """ Raised when a message body that passed signature verification cannot
        be interpreted as JSON objects.
    """


class Message:
    """ The :class:`Message` is a thin encapsulation of one Jupyter protocol
        message. The fields are largely in order of how they are represented
        on the wire: the ZeroMQ routing *idents*, the *header*, the
        *parent_header*, the *metadata*, and the *content*. Any frames
        following the content are retained as *blobs* when decoding, but are
        never emitted when encoding.

        :ivar signature_ok: None unless the message was decoded with a
            signing key, in which case it is True if the HMAC signature
            matched, and False otherwise.
    """

    def __init__(self, idents=None, header=None, parent_header=None,
                       metadata=None, content=None, blobs=None):

        self.idents = idents or list()
        self.header = header or dict()
        self.parent_header = parent_header or dict()
        self.metadata = metadata or dict()
        self.content = content or dict()
        self.blobs = blobs or list()
        self.signature_ok = None


    def __repr__(self):

        msg_type = self.header.get('msg_type')
        return '<Message %s header=%r parent_header=%r metadata=%r content=%r>' % (
            msg_type, self.header, self.parent_header, self.metadata, self.content)


    @classmethod
    def from_frames(cls, frames, scheme=DEFAULT_SCHEME, key=''):
        """ Return a new :class:`Message` decoded from *frames*, or None if
            the frames do not constitute a usable message.
        """

        message = cls()
        if message.decode(frames, scheme, key):
            return message
        return None


    def decode(self, frames, scheme=DEFAULT_SCHEME, key=''):
        """ Populate this :class:`Message` from the multipart *frames*
            received on a ZeroMQ socket. If a *key* is provided the HMAC
            signature is verified using the hashing *scheme*.

            Returns True if the message is usable. An incomplete frame
            sequence, a missing delimiter, or a signature mismatch is logged
            and False is returned; in each case the body of the message is
            left unpopulated. A body that cannot be parsed raises
            :class:`ProtocolError`.
        """

        scheme = scheme or DEFAULT_SCHEME
        frames = [_as_bytes(frame) for frame in frames]

        idents = list()
        index = 0
        count = len(frames)

        while index < count:
            frame = frames[index]
            if frame == DELIMITER:
                break
            idents.append(frame)
            index += 1

        self.idents = idents

        if index == count:
            logger.warning('DECODE: missing delimiter in %d frames', count)
            return False

        # The delimiter must be followed by the signature, header, parent
        # header, metadata, and content.

        if count - index - 1 < 5:
            logger.warning('DECODE: not enough message frames: %d after delimiter',
                                                        count - index - 1)
            return False

        signature = frames[index + 1]
        body = frames[index + 2:index + 6]

        if key:
            expected = sign(body, scheme, key)
            self.signature_ok = hmac.compare_digest(expected, signature)

            if not self.signature_ok:
                logger.warning('DECODE: incorrect message signature: obtained %r, expected %r',
                                                        signature, expected)
                return False

        header, parent_header, metadata, content = [_parse(frame) for frame in body]

        self.header = header
        self.parent_header = parent_header
        self.metadata = metadata
        self.content = content
        self.blobs = frames[index + 6:]

        return True


    def encode(self, scheme=DEFAULT_SCHEME, key=''):
        """ Return the list of frames that represent this :class:`Message`
            on the wire. The body is signed if a *key* is provided. Blobs are
            not included.
        """

        scheme = scheme or DEFAULT_SCHEME

        body = [json.dumps(self.header),
                json.dumps(self.parent_header),
                json.dumps(self.metadata),
                json.dumps(self.content)]

        if key:
            signature = sign(body, scheme, key)
        else:
            signature = b''

        frames = list(_as_bytes(ident) for ident in self.idents)
        frames.append(DELIMITER)
        frames.append(signature)
        frames.extend(body)

        return frames


    def respond(self, socket, msg_type, content=None, metadata=None, protocol_version=None):
        """ Send a response to this message over the provided *socket*, which
            is expected to be a :class:`jmp.Socket` or anything else with a
            compatible :func:`send` method. The response is routed back to
            the original requester via the same idents, and the header of
            this message becomes the parent header of the response. The
            newly constructed response is returned.
        """

        header = dict()
        header['msg_id'] = str(uuid.uuid4())
        for field in ('username', 'session'):
            if field in self.header:
                header[field] = self.header[field]
        header['msg_type'] = msg_type

        version = self.header.get('version')
        if protocol_version:
            version = protocol_version

        if version:
            header['version'] = version

        response = Message()
        response.idents = list(self.idents)
        response.header = header
        response.parent_header = self.header
        response.content = content or dict()
        response.metadata = metadata or dict()

        socket.send(response)
        return response


# end of class Message



def sign(body, scheme=DEFAULT_SCHEME, key=''):
    """ Return the hex-encoded HMAC digest, as bytes, of the four *body*
        frames: header, parent header, metadata, and content, in that order.
        The same computation is used to sign outbound messages and to verify
        inbound ones.
    """

    if isinstance(key, str):
        key = key.encode()

    digest = hmac.new(key, digestmod=scheme)

    for frame in body:
        digest.update(frame)

    return digest.hexdigest().encode()



def _as_bytes(frame):
    """ Frames may arrive as bytes, strings, or :class:`zmq.Frame` instances;
        normalize them all to bytes.
    """

    if isinstance(frame, bytes):
        return frame

    if isinstance(frame, str):
        return frame.encode()

    try:
        return frame.bytes
    except AttributeError:
        return bytes(frame)



def _parse(frame):

    try:
        return json.loads_object(frame)
    except (json.DecodeError, UnicodeDecodeError) as e:
        raise ProtocolError('message body is not a JSON object: %s' % (e)) from e


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
