# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""Reading and rewriting the ID3v2 tag at the start of an MP3 file."""

from concurrent.futures import ThreadPoolExecutor
from warnings import warn

from mp3tagdata.errors import *
from mp3tagdata.conversion import Syncsafe
from mp3tagdata.frametable import FrameTable
from mp3tagdata.ape import ApeTag
from mp3tagdata.genres import resolve_genre

import mp3tagdata.id3 as id3
import mp3tagdata.fileutil as fileutil

_TAG_EXTENDED_HEADER = 0x40
_TAG_EXPERIMENTAL = 0x20
_TAG_UNKNOWN_MASK = 0x0F

class TagHeader:
    """The 10-byte ID3v2 tag header.

    size is the length of the frame section that follows the header; it
    is always stored as a syncsafe integer.
    """
    size_bytes = 10

    def __init__(self, data):
        if len(data) < self.size_bytes:
            raise EOFError
        self.signature = bytes(data[0:3])
        self.version = data[3]
        self.revision = data[4]
        self.flags = data[5]
        self.size = Syncsafe.decode(data[6:10])

    def __repr__(self):
        return "<TagHeader: ID3v2.{0}.{1}, flags 0x{2:02X}, {3} bytes>".format(
            self.version, self.revision, self.flags, self.size)

    def validate(self):
        if self.signature != b"ID3":
            raise NoTagError("ID3v2 tag not found")
        if self.version < 3 or self.version == 0xFF or self.revision == 0xFF:
            raise TagError("Obsolete ID3 version: 2.{0}.{1}"
                           .format(self.version, self.revision))
        if self.version > 4:
            raise TagError("Unknown ID3 version: 2.{0}.{1}"
                           .format(self.version, self.revision))
        if self.flags & (_TAG_EXTENDED_HEADER | _TAG_EXPERIMENTAL | _TAG_UNKNOWN_MASK):
            raise TagError("Unsupported ID3 header flags: 0x{0:02X}".format(self.flags))

    def encode(self, size=None):
        data = bytearray(b"ID3")
        data.append(self.version)
        data.append(self.revision)
        data.append(self.flags)
        data.extend(Syncsafe.encode(self.size if size is None else size, width=4))
        return bytes(data)

def _friendly_text_frame(frameid):
    def getter(self):
        return self.get_text(frameid)
    def setter(self, value):
        self.set_text(frameid, value)
    def deleter(self):
        self.set_text(frameid, "")
    return property(getter, setter, deleter,
                    "Text of the {0} frame; empty if missing.".format(frameid))

class Mp3TagData:
    """The ID3v2.3/2.4 tag of one MP3 file.

    load() reads the tag into memory; the getters and setters work on that
    copy, and write() puts it back into the file, leaving the audio data
    (and any trailing APEv2 tag) untouched.  After a write the file is
    loaded again from scratch.

    Not safe for concurrent use; callers must serialize access.
    """

    # Padding added when the frames no longer fit into the existing tag
    padding_bytes = 2048

    # Frame sections declaring more than this are rejected as implausible
    max_frame_section_size = 8 << 20

    read_ape = True
    ape_chunk_size = 4096
    ape_search_limit = None

    # Number of times a failed open is retried when writing
    write_retries = 1

    def __init__(self, path=None):
        self.path = path
        self._reset()

    def _reset(self):
        self.header = None
        self._frame_buffer = bytes()
        self._table = FrameTable()
        self.ape = None
        self.audio_buffer_offset = 0

    def __repr__(self):
        if self.header is None:
            return "<Mp3TagData: no tag>"
        return "<{0}: ID3v2.{1} tag with {2} frames>".format(
            type(self).__name__, self.header.version, len(self._table))

    def __str__(self):
        return self.describe()

    @classmethod
    def read(cls, path):
        "Read the tag of path; raise an exception if it can't be loaded."
        tag = cls(path)
        tag._load(path)
        return tag

    # Loading

    def load(self, path):
        """Read the tag from path, replacing anything loaded before.

        Returns False (after a TagWarning) if the file has no usable tag.
        """
        try:
            self._load(path)
        except (Error, EOFError, OSError) as e:
            warn("Can't read ID3v2 tag from {0}: {1}".format(path, str(e) or type(e).__name__),
                 TagWarning)
            return False
        return True

    def _load(self, path):
        self.path = path
        self._reset()
        file = open(path, "rb")
        try:
            header = TagHeader(fileutil.xread(file, TagHeader.size_bytes))
            header.validate()
            if header.size > self.max_frame_section_size:
                raise TagError("Implausible tag size: {0}".format(header.size))
            buffer = file.read(header.size)
            ape = None
            if self.read_ape:
                ape = ApeTag.read(file, self.ape_chunk_size, self.ape_search_limit)
        except BaseException:
            file.close()
            raise

        # The file is closed while the frames are being parsed.
        table = FrameTable(name=path)
        with ThreadPoolExecutor(max_workers=1) as executor:
            closing = executor.submit(file.close)
            table.load(buffer, header.version)
            closing.result()

        self.header = header
        self._frame_buffer = buffer
        self._table = table
        self.ape = ape
        self.audio_buffer_offset = TagHeader.size_bytes + header.size

    # Frame access

    @property
    def version(self):
        return self.header.version if self.header else None

    @property
    def frame_count(self):
        return len(self._table)

    def frames(self):
        "Decoded frames in file order, excluding the ones marked for delete."
        return list(self._table.live_frames())

    def get_text(self, frame_type):
        """Return the text of the given text frame.

        frame_type is a frame class (TIT2), a frame id ("TIT2") or a
        friendly name ("title").  A missing frame reads as "".
        """
        return self._table.get_text(id3.frame_id(frame_type))

    def set_text(self, frame_type, value):
        "Set the text of a text frame; an empty value removes the frame."
        self._table.set_text(id3.frame_id(frame_type), value)

    @property
    def comment_count(self):
        return self._table.comment_count

    def get_comment(self, index=0):
        "Return comment number index, or \"\" if there is no such comment."
        return self._table.get_comment(index)

    def set_comment(self, index, value):
        """Set comment number index; an empty value removes the comment.

        Setting index comment_count adds a new comment.
        """
        self._table.set_comment(index, value)

    title = _friendly_text_frame("TIT2")
    subtitle = _friendly_text_frame("TIT3")
    genre = _friendly_text_frame("TCON")
    artist = _friendly_text_frame("TPE1")
    album = _friendly_text_frame("TALB")
    composer = _friendly_text_frame("TCOM")
    orchestra = _friendly_text_frame("TPE2")
    original_artist = _friendly_text_frame("TOPE")
    year = _friendly_text_frame("TYER")
    original_year = _friendly_text_frame("TORY")
    track = _friendly_text_frame("TRCK")
    bpm = _friendly_text_frame("TBPM")
    duration = _friendly_text_frame("TLEN")
    key = _friendly_text_frame("TKEY")
    conductor = _friendly_text_frame("TPE3")
    language = _friendly_text_frame("TLAN")
    mood = _friendly_text_frame("TMOO")

    @property
    def genre_name(self):
        "The genre with ID3v1 genre references like \"(17)\" resolved."
        return resolve_genre(self.genre)

    def _get_comment(self):
        return self.get_comment(0)

    def _set_comment(self, value):
        self.set_comment(0, value)

    comment = property(_get_comment, _set_comment, doc="The first comment.")

    # Writing

    @property
    def is_dirty(self):
        return self._table.is_dirty

    def write(self):
        """Write changed frames back to the file and reload it.

        Returns False if nothing changed or the file couldn't be written.
        After a failed write the file may be partially modified; load()
        it again rather than trusting the state in memory.
        """
        if not self.is_dirty:
            return False
        try:
            self._write()
        except (Error, EOFError, OSError) as e:
            warn("Can't write ID3v2 tag to {0}: {1}".format(self.path, str(e) or type(e).__name__),
                 TagWarning)
            return False
        return self.load(self.path)

    def _padding(self, frame_section_size):
        if frame_section_size > len(self._frame_buffer):
            return self.padding_bytes
        return len(self._frame_buffer) - frame_section_size

    def _write(self):
        if self.header is None:
            raise NoTagError("No ID3v2 tag loaded")
        frame_section_size = self._table.total_write_bytes()
        padding = self._padding(frame_section_size)
        data = bytearray(self.header.encode(frame_section_size + padding))
        data.extend(self._table.encode())
        data.extend(b"\x00" * padding)
        old_length = TagHeader.size_bytes + len(self._frame_buffer)
        with fileutil.opened_for_update(self.path, self.write_retries) as file:
            fileutil.replace_chunk(file, 0, old_length, data)

    def describe(self):
        "A human-readable summary of the tag."
        lines = ["Path: {0}".format(self.path)]
        if self.header is None:
            lines.append("No ID3v2 tag")
            return "\n".join(lines)
        hdr = self.header
        lines.append("Id3: {0}".format(hdr.signature.decode("ASCII")))
        lines.append("Version: {0}.{1}".format(hdr.version, hdr.revision))
        lines.append("Flags: 0x{0:02X}".format(hdr.flags))
        lines.append("Size: {0} (0x{0:X})".format(hdr.size))
        lines.append("Audio offset: {0}".format(self.audio_buffer_offset))
        for frame in self.frames():
            lines.append("    " + str(frame))
        if self.ape is not None:
            lines.append("APE tag at {0}: {1} items".format(self.ape.offset, len(self.ape)))
        return "\n".join(lines)

def read_tag(filename):
    return Mp3TagData.read(filename)
