''' Wrapper module for the equivalent of :func:`json.loads` and
    :func:`json.dumps`, backed by msgspec. As with the other performant
    JSON libraries, the 'dumps' operation here returns bytes.
'''

import msgspec


DecodeError = msgspec.DecodeError

encoder = msgspec.json.Encoder()
decoder = msgspec.json.Decoder()

# Every section of a protocol message must be a JSON object; decoding
# anything else is treated the same as malformed JSON.

object_decoder = msgspec.json.Decoder(dict)

dumps = encoder.encode
loads = decoder.decode
loads_object = object_decoder.decode

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
