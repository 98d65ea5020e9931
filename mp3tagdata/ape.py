# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""Locating and reading APEv2 tags at the end of a file.

The tag is a 32-byte header, a list of key/value items, and a 32-byte
footer with the same layout as the header.  All integers are 32-bit
little-endian, unlike ID3v2.
"""

import struct

from warnings import warn

from mp3tagdata.errors import *

SIGNATURE = b"APETAGEX"

_APE_READ_ONLY = 1 << 0
_APE_ITEM_TYPE_MASK = 3 << 1
_APE_ITEM_BINARY = 1 << 1
_APE_IS_HEADER = 1 << 29
_APE_NO_FOOTER = 1 << 30
_APE_HAS_HEADER = 1 << 31

_header_struct = struct.Struct("<8sIIII8s")
_item_struct = struct.Struct("<II")

def find_signature(file, signature=SIGNATURE, chunk_size=4096, length=None, limit=None):
    """Search file backwards from its end for signature.

    Reads chunk_size bytes at a time; each window overlaps the one after
    it by len(signature) - 1 bytes so that a signature straddling a
    window boundary is still seen.  Returns the absolute offset of the
    first match in the window where one is found, or None if the start
    of the file (or limit bytes before its end) is reached without one.
    """
    if length is None:
        length = file.seek(0, 2)
    floor = 0 if limit is None else max(length - limit, 0)
    end = length
    while end > floor:
        start = max(end - chunk_size, floor)
        file.seek(start)
        data = file.read(min(end + len(signature) - 1, length) - start)
        index = data.find(signature)
        if index >= 0:
            return start + index
        end = start
    return None

class ApeTagHeader:
    "Accessors for a 32-byte APEv2 header or footer."
    size = 32

    def __init__(self, data, offset=0):
        if len(data) - offset < self.size:
            raise EOFError("APE header truncated")
        (self.id, self.version, self.tag_size, self.item_count,
         self.flags, self.reserved) = _header_struct.unpack_from(data, offset)

    def __repr__(self):
        return "<ApeTagHeader: {0} v{1}, {2} items, {3} bytes{4}>".format(
            self.id, self.version, self.item_count, self.tag_size,
            ", header" if self.is_header else "")

    @property
    def is_valid(self):
        return self.id == SIGNATURE

    @property
    def has_header(self):
        return bool(self.flags & _APE_HAS_HEADER)

    @property
    def has_footer(self):
        return not self.flags & _APE_NO_FOOTER

    @property
    def is_header(self):
        return bool(self.flags & _APE_IS_HEADER)

    @property
    def is_read_only(self):
        return bool(self.flags & _APE_READ_ONLY)

class ApeItem:
    min_key_size = 2
    max_key_size = 255

    def __init__(self, key, value, flags=0):
        self.key = key
        self.value = value
        self.flags = flags

    def __repr__(self):
        if self.is_binary:
            return "ApeItem({0!r}, <{1} bytes of binary data>)".format(self.key, len(self.value))
        return "ApeItem({0!r}, {1!r})".format(self.key, self.text)

    @classmethod
    def _from_data(cls, data, offset):
        """Decode the item at offset in data; return (item, offset of next item).

        Raises EOFError if the item runs past the end of data.
        """
        if len(data) - offset < _item_struct.size:
            raise EOFError("APE item header truncated")
        value_size, flags = _item_struct.unpack_from(data, offset)
        offset += _item_struct.size
        end = data.find(b"\x00", offset, offset + cls.max_key_size + 1)
        if end < 0:
            raise EOFError("APE item key unterminated")
        if end - offset < cls.min_key_size:
            raise EOFError("APE item key too short")
        key = bytes(data[offset:end]).decode("ASCII", "replace")
        offset = end + 1
        if offset + value_size > len(data):
            raise EOFError("APE item value truncated")
        value = bytes(data[offset:offset + value_size])
        return cls(key, value, flags), offset + value_size

    @property
    def is_binary(self):
        return (self.flags & _APE_ITEM_TYPE_MASK) == _APE_ITEM_BINARY

    @property
    def is_text(self):
        return not self.is_binary

    @property
    def is_read_only(self):
        return bool(self.flags & _APE_READ_ONLY)

    @property
    def text(self):
        return self.value.decode("utf-8", "replace")

class ApeTag:
    """An APEv2 tag read from a file.

    offset is the absolute position of the tag (of its header when it has
    one).  Items are kept in file order; lookups by key ignore case.
    """
    def __init__(self, offset, header):
        self.offset = offset
        self.header = header
        self.items = []

    def __repr__(self):
        return "<ApeTag at {0}: {1} items>".format(self.offset, len(self.items))

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __contains__(self, key):
        return self.get(key) is not None

    def __getitem__(self, key):
        item = self.get(key)
        if item is None:
            raise KeyError(key)
        return item

    def get(self, key, default=None):
        for item in self.items:
            if item.key.lower() == key.lower():
                return item
        return default

    def keys(self):
        return [item.key for item in self.items]

    @classmethod
    def read(cls, file, chunk_size=4096, limit=None):
        "Find and read the APEv2 tag in file; return None if there is none."
        length = file.seek(0, 2)
        offset = find_signature(file, SIGNATURE, chunk_size, length, limit)
        if offset is None:
            return None
        file.seek(offset)
        try:
            header = ApeTagHeader(file.read(ApeTagHeader.size))
        except EOFError as e:
            warn("Invalid APE tag at offset {0}: {1}".format(offset, e), ApeWarning)
            return None

        start = offset + ApeTagHeader.size
        if not header.is_header:
            # Found the footer; the items precede it.
            start = offset + ApeTagHeader.size - header.tag_size
            if start < 0:
                warn("Invalid APE tag size {0}".format(header.tag_size), ApeWarning)
                return None
            offset = start
            if header.has_header and start >= ApeTagHeader.size:
                file.seek(start - ApeTagHeader.size)
                try:
                    candidate = ApeTagHeader(file.read(ApeTagHeader.size))
                except EOFError:
                    candidate = None
                if candidate is not None and candidate.is_valid and candidate.is_header:
                    header = candidate
                    offset = start - ApeTagHeader.size

        file.seek(start)
        tag = cls(offset, header)
        tag._parse_items(file.read(header.tag_size))
        return tag

    def _parse_items(self, data):
        pos = 0
        for i in range(self.header.item_count):
            try:
                item, pos = ApeItem._from_data(data, pos)
            except EOFError as e:
                warn("APE tag at offset {0} ends after {1} of {2} items: {3}"
                     .format(self.offset, i, self.header.item_count, e), ApeWarning)
                return
            self.items.append(item)
        if self.header.has_footer:
            try:
                footer = ApeTagHeader(data, pos)
            except EOFError:
                footer = None
            if footer is None or not footer.is_valid or footer.is_header:
                warn("APE tag at offset {0} has no matching footer".format(self.offset),
                     ApeWarning)
