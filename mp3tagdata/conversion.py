# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""Conversion between native integers and the big-endian size fields of ID3v2."""

class Syncsafe:
    """Conversion to/from syncsafe integers.
    Syncsafe integers are big-endian 7-bit byte sequences.
    """
    @staticmethod
    def decode(data):
        "Decodes a syncsafe integer; the top bit of each byte is ignored."
        value = 0
        for b in data:
            value <<= 7
            value += b & 0x7F
        return value

    @staticmethod
    def encode(i, *, width=4):
        """Encodes a nonnegative integer into syncsafe format.

        Bits that do not fit into width * 7 bits are dropped, so values
        of 2**28 and above wrap around with the default width.
        """
        if i < 0:
            raise ValueError("value is negative")
        data = bytearray()
        for n in range(width):
            data.append(i & 0x7F)
            i >>= 7
        data.reverse()
        return bytes(data)

class Int8:
    """Conversion to/from binary integer values of any length."""

    @staticmethod
    def decode(data):
        "Decodes an 8-bit big-endian integer of any length"
        value = 0
        for b in data:
            value <<= 8
            value += b
        return value

    @staticmethod
    def encode(i, *, width=4):
        "Encodes a nonnegative integer into big-endian bytes of given length"
        if i is None:
            i = 0
        if i < 0: raise ValueError("Nonnegative integer expected")
        data = bytearray()
        for n in range(width):
            data.append(i & 0xFF)
            i >>= 8
        return bytes(data[::-1])

_codecs = { 7: Syncsafe, 8: Int8 }

def read_id3_int(data, bits=7):
    """Decode the 4-byte size field in data.

    bits is 7 for syncsafe fields and 8 for plain big-endian ones.
    """
    return _codecs[bits].decode(data[:4])

def write_id3_int(value, bits=7):
    "Encode value as a 4-byte size field; the inverse of read_id3_int."
    return _codecs[bits].encode(value, width=4)

def size_bits(version):
    "Bits per byte in frame size fields: ID3v2.3 uses plain integers."
    return 8 if version == 3 else 7
