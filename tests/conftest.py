import itertools
import jmp
import pytest
import zmq


class RecordingEndpoint(jmp.Endpoint):
    """ An endpoint that records outbound frames instead of sending them.
        Inbound messages are simulated by emitting 'message' directly.
    """

    def __init__(self):
        jmp.Endpoint.__init__(self, zmq.DEALER)
        self.sent = list()

    def send(self, frames, flags=0):
        self.sent.append((list(frames), flags))


@pytest.fixture
def endpoint():

    endpoint = RecordingEndpoint()
    yield endpoint
    endpoint.close()


_addresses = itertools.count()


@pytest.fixture
def address():
    return 'inproc://jmp-test-%d' % (next(_addresses))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
