# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""Class definitions for ID3v2 frames, and a bounds-checked view of raw frame bytes."""

import abc
import re

from mp3tagdata.errors import *
from mp3tagdata.specs import *
from mp3tagdata.conversion import read_id3_int, write_id3_int, size_bits

_FRAME23_STATUS_READ_ONLY = 0x20
_FRAME24_STATUS_READ_ONLY = 0x10

_frame_id_pattern = re.compile(b"^[A-Z0-9]{4}$")

def is_frame_id(data):
    "True if data is four characters from A-Z and 0-9."
    return _frame_id_pattern.match(bytes(data)) is not None

def is_valid_frame(data, offset=0):
    """True if data at offset looks like the start of an ID3v2 frame.

    A NUL byte means we have reached the padding after the last frame.
    """
    if offset >= len(data) or data[offset] == 0:
        return False
    return is_frame_id(data[offset:offset + 4])

class FrameLayout:
    """Read-only accessors over one frame (10-byte header + payload) in a buffer.

    The buffer is never copied or modified; every accessor reads fields at
    fixed offsets from the frame start.  Offsets past the frame's declared
    extent yield empty data instead of reading into the next frame.
    """
    header_size = 10

    def __init__(self, data, offset=0, version=4):
        self.data = data
        self.offset = offset
        self.version = version

    def __repr__(self):
        return "<FrameLayout {0!r} at {1}, {2} bytes>".format(
            self.frameid, self.offset, self.size)

    @property
    def has_header(self):
        return len(self.data) - self.offset >= self.header_size

    @property
    def frameid(self):
        return bytes(self.data[self.offset:self.offset + 4]).decode("ASCII")

    @property
    def size(self):
        "Payload size in bytes, decoded according to the tag version."
        if not self.has_header:
            return 0
        return read_id3_int(self.data[self.offset + 4:self.offset + 8],
                            size_bits(self.version))

    @property
    def status_flags(self):
        return self.data[self.offset + 8]

    @property
    def format_flags(self):
        return self.data[self.offset + 9]

    @property
    def is_read_only(self):
        if self.version == 3:
            return bool(self.status_flags & _FRAME23_STATUS_READ_ONLY)
        return bool(self.status_flags & _FRAME24_STATUS_READ_ONLY)

    @property
    def flags(self):
        return {"read_only"} if self.has_header and self.is_read_only else set()

    @property
    def frame_bytes(self):
        "Bytes occupied by the whole frame, header included."
        return self.header_size + self.size

    @property
    def end(self):
        return self.offset + self.frame_bytes

    @property
    def is_complete(self):
        "True if the header and the declared payload both fit in the buffer."
        return self.has_header and self.end <= len(self.data)

    def text_bytes(self, start):
        """Number of bytes from start (relative to the frame) to the frame's end.

        Returns 0 instead of going negative when start lies past the
        declared extent, which only happens for malformed frames.
        """
        extent = self.frame_bytes
        if start > extent:
            return 0
        return extent - start

    def span(self, start):
        "The bytes from start (relative to the frame) to the frame's end."
        begin = self.offset + start
        return bytes(self.data[begin:begin + self.text_bytes(start)])

    @property
    def payload(self):
        return self.span(self.header_size)

    @property
    def raw(self):
        "The complete frame, header included, as stored in the buffer."
        return bytes(self.data[self.offset:self.end])

def encode_frame(frameid, payload, version):
    """Build a complete frame from its payload.

    Status and format flags are always written as zero.
    """
    data = bytearray()
    if not is_frame_id(frameid.encode("ASCII")):
        raise ValueError("Invalid ID3v2 frame id {0}".format(repr(frameid)))
    data.extend(frameid.encode("ASCII"))
    data.extend(write_id3_int(len(payload), size_bits(version)))
    data.extend(b"\x00\x00")
    assert len(data) == FrameLayout.header_size
    data.extend(payload)
    return bytes(data)


class Frame(metaclass=abc.ABCMeta):
    _framespec = tuple()
    _allow_duplicates = False

    def __init__(self, frameid=None, flags=None, **kwargs):
        self.frameid = frameid if frameid else type(self).__name__
        self.flags = flags if flags else set()
        self.offsets = dict()
        assert len(self._framespec) > 0
        for spec in self._framespec:
            val = kwargs.get(spec.name, None)
            setattr(self, spec.name, val)

    def __setattr__(self, name, value):
        # Automatic validation on assignment
        for spec in self._framespec:
            if name == spec.name:
                value = spec.validate(self, value)
                break
        super().__setattr__(name, value)

    def __eq__(self, other):
        return (isinstance(other, type(self))
                and self.frameid == other.frameid
                and self.flags == other.flags
                and self._framespec == other._framespec
                and all(getattr(self, spec.name, None) ==
                        getattr(other, spec.name, None)
                        for spec in self._framespec))

    @classmethod
    def _from_layout(cls, layout):
        """Decode the frame at layout.

        Records the frame-relative offset where each field starts in
        frame.offsets.
        """
        frame = cls(frameid=layout.frameid, flags=layout.flags)
        pos = layout.header_size
        for spec in frame._framespec:
            data = layout.span(pos)
            try:
                val, rest = spec.read(frame, data)
            except EOFError:
                if not spec._optional:
                    raise
                break
            setattr(frame, spec.name, val)
            frame.offsets[spec.name] = pos
            pos += len(data) - len(rest)
        return frame

    def _to_data(self):
        "Encode the payload (everything after the frame header)."
        def encode_fields():
            data = bytearray()
            for spec in self._framespec:
                if spec._optional and getattr(self, spec.name) is None:
                    break
                data.extend(spec.write(self, getattr(self, spec.name)))
            return bytes(data)

        def try_preferred_encodings():
            orig_encoding = self.encoding
            try:
                for encoding in EncodedStringSpec.preferred_encodings:
                    try:
                        self.encoding = encoding
                        return encode_fields()
                    except UnicodeEncodeError:
                        pass
            finally:
                self.encoding = orig_encoding
            raise ValueError("Could not encode strings")

        if not isinstance(self._framespec[0], EncodingSpec):
            return encode_fields()
        elif self.encoding is None:
            return try_preferred_encodings()
        else:
            try:
                return encode_fields()
            except UnicodeEncodeError:
                return try_preferred_encodings()

    def _encode(self, version):
        return encode_frame(self.frameid, self._to_data(), version)

    def __repr__(self):
        stype = type(self).__name__
        args = []
        if stype != self.frameid:
            args.append("frameid={0!r}".format(self.frameid))
        if self.flags:
            args.append("flags={0!r}".format(self.flags))
        for spec in self._framespec:
            if isinstance(spec, BinaryDataSpec):
                data = getattr(self, spec.name)
                if isinstance(data, (bytes, bytearray)):
                    args.append("{0}=<{1} bytes of binary data {2!r}{3}>".format(
                            spec.name, len(data),
                            data[:20], "..." if len(data) > 20 else ""))
                else:
                    args.append(repr(data))
            else:
                args.append("{0}={1!r}".format(spec.name, getattr(self, spec.name)))
        return "{0}({1})".format(stype, ", ".join(args))

    def _str_fields(self):
        fields = []
        for spec in self._framespec:
            fields.append(spec.to_str(getattr(self, spec.name, None)))
        return ", ".join(fields)

    def __str__(self):
        flag = " "
        if "read_only" in self.flags: flag = "r"
        if isinstance(self, ErrorFrame): flag = "!"
        return "{0}{1}({2})".format(flag, self.frameid, self._str_fields())

class UnknownFrame(Frame):
    "Any frame we do not interpret; passed through unchanged on write."
    _framespec = (BinaryDataSpec("data"),)
    _allow_duplicates = True

class ErrorFrame(Frame):
    _framespec = (BinaryDataSpec("data"),)
    _allow_duplicates = True

    def __init__(self, frameid, data, exception, **kwargs):
        super().__init__(frameid=frameid, flags=set(), **kwargs)
        self.data = data
        self.exception = exception

    def _str_fields(self):
        strs = ["ERROR"]
        if self.exception:
            strs.append(str(self.exception))
        strs.append(repr(self.data))
        return ", ".join(strs)

class TextFrame(Frame):
    _framespec = (EncodingSpec("encoding"),
                  EncodedFullTextSpec("text"))

    def __init__(self, text=None, frameid=None, flags=None, **kwargs):
        super().__init__(frameid=frameid, flags=flags, text=text, **kwargs)

    def _str_fields(self):
        return "{0} {1!r}".format(EncodingSpec("encoding").to_str(self.encoding),
                                  self.text)

class CommentFrame(Frame):
    """Comment: language code, a short description, then the comment itself.

    New comments are written with an empty description in English.
    """
    _framespec = (EncodingSpec("encoding"),
                  LanguageSpec("lang"),
                  EncodedStringSpec("desc"),
                  EncodedFullTextSpec("text"))
    _allow_duplicates = True

    def __init__(self, text=None, frameid=None, flags=None, **kwargs):
        kwargs.setdefault("lang", "eng")
        kwargs.setdefault("desc", "")
        super().__init__(frameid=frameid, flags=flags, text=text, **kwargs)

class PrivateFrame(Frame):
    _framespec = (NullTerminatedStringSpec("owner"), BinaryDataSpec("data"))
    _allow_duplicates = True

def is_frame_class(cls):
    return (isinstance(cls, type)
            and issubclass(cls, Frame)
            and len(cls.__name__) == 4
            and cls.__name__ == cls.__name__.upper())
