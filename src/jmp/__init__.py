""" Python implementation of the Jupyter messaging protocol. This includes
    the :class:`Message` codec, which translates between protocol messages
    and ZeroMQ multipart frames, and the :class:`Socket` adapter that applies
    the codec transparently to everything sent or received on an endpoint.
"""

# ZeroMQ bindings, for the socket type constants.

import zmq

# Utility components.

from . import json

# Submodules used by multiple other components.

from . import message
from . import transport

# Primary public-facing interfaces.

from .message import Message, ProtocolError, DELIMITER
from .socket import Socket
from .transport import Endpoint, TransportError, TransportClosed

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
