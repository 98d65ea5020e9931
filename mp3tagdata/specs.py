# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""Field codecs for ID3v2 frame payloads.

Each spec reads one field from the front of a payload slice and returns
the decoded value together with the unread remainder.  Reads never look
past the slice they are given; the slice itself is bounded by the
frame's declared extent (see FrameLayout.span).
"""

import abc

from abc import abstractmethod

from mp3tagdata.errors import *

# The idea for the Spec system comes from Mutagen.

ANSI, UTF16, UTF16BE, UTF8 = range(4)

class Spec(metaclass=abc.ABCMeta):
    def __init__(self, name):
        self.name = name

    _optional = False

    @abstractmethod
    def read(self, frame, data): pass

    @abstractmethod
    def write(self, frame, value): pass

    def validate(self, frame, value):
        if value is not None:
            self.write(frame, value)
        return value

    def to_str(self, value):
        return "{0}={1}".format(self.name, repr(value))

class ByteSpec(Spec):
    def read(self, frame, data):
        if len(data) < 1:
            raise EOFError()
        return data[0], data[1:]
    def write(self, frame, value):
        return bytes([value])
    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, int):
            raise TypeError("Not a byte")
        if value not in range(256):
            raise ValueError("Invalid byte value")
        return value

class BinaryDataSpec(Spec):
    def read(self, frame, data):
        return bytes(data), bytes()
    def write(self, frame, value):
        return bytes(value)
    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError("Not a byte sequence")
        return bytes(value)
    def to_str(self, value):
        value = value or b""
        return '{0}={1}{2}'.format(self.name, value[0:16], "..." if len(value) > 16 else "")

class SimpleStringSpec(Spec):
    def __init__(self, name, length):
        super().__init__(name)
        self.length = length
    def read(self, frame, data):
        if len(data) < self.length:
            raise EOFError()
        return bytes(data[:self.length]).decode('iso-8859-1'), data[self.length:]
    def write(self, frame, value):
        if value is None:
            return b" " * self.length
        data = value.encode('iso-8859-1')
        if len(data) != self.length:
            raise ValueError("String length mismatch")
        return data
    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, str):
            raise TypeError("Not a string")
        if len(value) != self.length:
            raise ValueError("String length mismatch")
        value.encode('iso-8859-1')
        return value

class LanguageSpec(SimpleStringSpec):
    "ISO-639-2 language code"
    def __init__(self, name):
        super().__init__(name, 3)

class NullTerminatedStringSpec(Spec):
    def read(self, frame, data):
        rawstr, sep, data = bytes(data).partition(b"\x00")
        return rawstr.decode('iso-8859-1'), data
    def write(self, frame, value):
        return value.encode('iso-8859-1') + b"\x00"
    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, str):
            raise TypeError("Not a string")
        value.encode('iso-8859-1')
        return value

class EncodingSpec(ByteSpec):
    "EncodingSpec must be the first spec."
    def read(self, frame, data):
        enc, data = super().read(frame, data)
        if enc & 0xFC:
            raise FrameError("Invalid encoding 0x{0:X}".format(enc))
        return enc, data
    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, int):
            raise TypeError("Not an encoding")
        if ANSI <= value <= UTF8:
            return value
        raise ValueError("Invalid encoding 0x{0:X}".format(value))
    def to_str(self, value):
        if value is None:
            return "<undef>"
        return EncodedStringSpec._encodings[value][0]

def decode_text(data, encoding):
    """Decode raw string bytes in the given ID3 text encoding.

    Wide strings lose a dangling odd byte and any byte order mark.
    """
    enc, term = EncodedStringSpec._encodings[encoding]
    data = bytes(data)
    if len(term) == 2:
        data = data[:len(data) & ~1]
    text = data.decode(enc)
    if text.startswith("\ufeff"):
        text = text[1:]
    return text

class EncodedStringSpec(Spec):
    """A string terminated by a NUL character of the frame's encoding.

    Used for the description prefix in comment frames.  Wide strings are
    terminated by a NUL code unit, so the scan only looks at even offsets.
    """
    _encodings = (('iso-8859-1', b"\x00"),
                  ('utf-16', b"\x00\x00"),
                  ('utf-16-be', b"\x00\x00"),
                  ('utf-8', b"\x00"))
    preferred_encodings = (ANSI, UTF8)

    def read(self, frame, data):
        enc, term = self._encodings[frame.encoding]
        if len(term) == 1:
            rawstr, sep, data = bytes(data).partition(term)
        else:
            index = len(data)
            for i in range(0, len(data) - 1, 2):
                if data[i:i+2] == term:
                    index = i
                    break
            rawstr = data[:index]
            data = data[index+2:]
        return decode_text(rawstr, frame.encoding), data

    def write(self, frame, value):
        enc, term = self._encodings[frame.encoding]
        return value.encode(enc) + term

    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, str):
            raise TypeError("Not a string")
        if frame.encoding is not None:
            self.write(frame, value)
        return value

class EncodedFullTextSpec(EncodedStringSpec):
    """A string running to the end of the frame, with no terminator.

    Trailing NULs are stripped; some encoders count a terminator in the
    frame size.
    """
    def read(self, frame, data):
        return decode_text(data, frame.encoding).rstrip("\x00"), bytes()

    def write(self, frame, value):
        enc, term = self._encodings[frame.encoding]
        return value.encode(enc)
