# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""The ordered collection of frames in one tag, with per-frame edit state."""

import collections

from warnings import warn

from mp3tagdata.errors import *
from mp3tagdata.id3 import COMM, frame_class, is_text_frame_id

import mp3tagdata.frames as Frames

# Frame states
UNMODIFIED = "unmodified"   # bytes are the original ones in the frame buffer
REPLACED = "replaced"       # bytes are a new encoding owned by the frame
DELETED = "deleted"         # excluded from output on the next write

def decode_frame(layout):
    "Decode the frame at layout; undecodable payloads become ErrorFrames."
    try:
        return frame_class(layout.frameid)._from_layout(layout)
    except (FrameError, ValueError, EOFError) as e:
        return Frames.ErrorFrame(layout.frameid, layout.payload, e)

class StoredFrame:
    """One frame of the tag and its edit state.

    layout always views the most relevant bytes: the original frame while
    unmodified, the replacement once replaced.  A deleted frame keeps
    its last layout so that its identity is still known, but contributes
    nothing to the written tag.
    """
    def __init__(self, layout):
        self.layout = layout
        self.state = UNMODIFIED

    @classmethod
    def new(cls, data, version):
        frame = cls(Frames.FrameLayout(data, 0, version))
        frame.state = REPLACED
        return frame

    def __repr__(self):
        return "<StoredFrame {0} {1}>".format(self.frameid, self.state)

    @property
    def frameid(self):
        return self.layout.frameid

    @property
    def is_dirty(self):
        return self.state == REPLACED

    @property
    def is_deleted(self):
        return self.state == DELETED

    def replace(self, data):
        layout = Frames.FrameLayout(data, 0, self.layout.version)
        if layout.frameid != self.frameid:
            raise ValueError("Frame id mismatch: {0} != {1}"
                             .format(layout.frameid, self.frameid))
        self.layout = layout
        self.state = REPLACED

    def delete(self):
        self.state = DELETED

    def write_bytes(self):
        "Number of bytes this frame contributes to the written tag."
        if self.state == DELETED:
            return 0
        return self.layout.frame_bytes

    def get_data(self):
        return self.layout.raw

    def decode(self):
        return decode_frame(self.layout)

class FrameTable:
    """All frames of a tag in file order, plus indexes of text and comment frames.

    Frames are never removed from the table before the tag is written;
    deleting a frame only marks it and drops it from the indexes.
    """
    def __init__(self, version=4, name=None):
        self.version = version
        self.name = name
        self.frames = []
        self.text_positions = []
        self.comment_positions = []

    def __len__(self):
        return len(self.frames)

    def __repr__(self):
        return "<FrameTable: ID3v2.{0}, {1} frames>".format(self.version, len(self.frames))

    def _where(self):
        return " in {0}".format(self.name) if self.name else ""

    # Reading frames

    def load(self, data, version):
        """Parse frames from the frame section in data.

        Parsing stops at the first NUL byte (padding), at an invalid frame
        id, or at a frame that does not fit in data.  Frames parsed before
        that point are kept.
        """
        self.version = version
        self.frames = []
        self.text_positions = []
        self.comment_positions = []
        offset = 0
        while offset is not None:
            offset = self._parse_frame(data, offset)
        self._check_duplicates()

    def _parse_frame(self, data, offset):
        "Append the frame at offset; return the offset of the next frame or None."
        if offset >= len(data):
            return None
        if not Frames.is_valid_frame(data, offset):
            return None
        layout = Frames.FrameLayout(data, offset, self.version)
        if not layout.is_complete:
            warn("Truncated frame {0} at offset {1}{2}"
                 .format(layout.frameid, offset, self._where()), FrameWarning)
            return None
        self._append(StoredFrame(layout))
        return layout.end

    def _append(self, frame):
        pos = len(self.frames)
        self.frames.append(frame)
        if is_text_frame_id(frame.frameid):
            self.text_positions.append(pos)
        elif frame.frameid == COMM.frameid:
            self.comment_positions.append(pos)
        return pos

    def _check_duplicates(self):
        counts = collections.Counter(self.frames[pos].frameid
                                     for pos in self.text_positions)
        for frameid, count in counts.items():
            if count > 1 and not frame_class(frameid)._allow_duplicates:
                warn("Duplicate frame {0}{1}".format(frameid, self._where()),
                     DuplicateFrameWarning)

    def text_position(self, frameid):
        "Position of the first live text frame with frameid, or None."
        for pos in self.text_positions:
            if self.frames[pos].frameid == frameid:
                return pos
        return None

    def comment_position(self, index):
        if 0 <= index < len(self.comment_positions):
            return self.comment_positions[index]
        return None

    def _decoded_value(self, pos):
        frame = self.frames[pos].decode()
        if isinstance(frame, Frames.ErrorFrame):
            warn("Can't decode frame {0}{1}: {2}"
                 .format(frame.frameid, self._where(), frame.exception),
                 ErrorFrameWarning)
            return ""
        return frame.text or ""

    def get_text(self, frameid):
        "Return the text of frame frameid; \"\" if it is not present."
        if not is_text_frame_id(frameid):
            raise ValueError("{0} is not a text frame".format(frameid))
        pos = self.text_position(frameid)
        if pos is None:
            return ""
        return self._decoded_value(pos)

    @property
    def comment_count(self):
        return len(self.comment_positions)

    def get_comment(self, index):
        "Return comment number index; \"\" if there is no such comment."
        pos = self.comment_position(index)
        if pos is None:
            return ""
        return self._decoded_value(pos)

    def live_frames(self):
        "Decoded frames that will be written, in file order."
        for frame in self.frames:
            if not frame.is_deleted:
                yield frame.decode()

    # Changing frames

    def set_text(self, frameid, value):
        """Replace the text of frame frameid, adding the frame if necessary.

        An empty value deletes the frame.
        """
        if not is_text_frame_id(frameid):
            raise ValueError("{0} is not a text frame".format(frameid))
        if not value:
            self.delete_text_frame(frameid)
            return
        data = frame_class(frameid)(value, frameid=frameid)._encode(self.version)
        pos = self.text_position(frameid)
        if pos is None:
            self._append(StoredFrame.new(data, self.version))
        else:
            self.frames[pos].replace(data)

    def set_comment(self, index, value):
        """Replace comment number index; index == comment_count adds a comment.

        An empty value deletes the comment.
        """
        if not value:
            self.delete_comment_frame(index)
            return
        if not 0 <= index <= self.comment_count:
            raise IndexError("Comment index {0} out of range".format(index))
        data = COMM(value)._encode(self.version)
        if index == self.comment_count:
            self._append(StoredFrame.new(data, self.version))
        else:
            self.frames[self.comment_positions[index]].replace(data)

    def delete_text_frame(self, frameid):
        pos = self.text_position(frameid)
        if pos is None:
            return
        self.frames[pos].delete()
        self.text_positions.remove(pos)

    def delete_comment_frame(self, index):
        pos = self.comment_position(index)
        if pos is None:
            return
        self.frames[pos].delete()
        self.comment_positions.remove(pos)

    # Writing frames

    @property
    def is_dirty(self):
        return any(frame.state != UNMODIFIED for frame in self.frames)

    def total_write_bytes(self):
        return sum(frame.write_bytes() for frame in self.frames)

    def encode(self):
        "The frame section without padding: every frame not marked for delete."
        return b"".join(frame.get_data() for frame in self.frames
                        if not frame.is_deleted)
