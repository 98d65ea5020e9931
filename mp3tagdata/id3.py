# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""The ID3v2.3/2.4 frames this package knows by name.

Any other frame is passed through untouched; unknown "T" frames are still
readable and writable as plain text frames.
"""

import types

import mp3tagdata.frames as Frames
from mp3tagdata.specs import *


# 4.2.1. Identification frames
class TIT2(Frames.TextFrame):
    "Title/songname/content description"

class TIT3(Frames.TextFrame):
    "Subtitle/Description refinement"
# Rare, e.g. "Op. 6"

class TALB(Frames.TextFrame):
    "Album/Movie/Show title"

class TRCK(Frames.TextFrame):
    "Track number/Position in set"
# #/#


# 4.2.2. Involved persons frames
class TPE1(Frames.TextFrame):
    "Lead performer(s)/Soloist(s)"

class TPE2(Frames.TextFrame):
    "Band/orchestra/accompaniment"
# Often used as "Album Artist"

class TPE3(Frames.TextFrame):
    "Conductor/performer refinement"

class TOPE(Frames.TextFrame):
    "Original artist(s)/performer(s)"

class TCOM(Frames.TextFrame): "Composer"


# 4.2.3. Derived and subjective properties frames

class TBPM(Frames.TextFrame): "BPM (beats per minute)"
# integer in string format

class TLEN(Frames.TextFrame): "Length"
# milliseconds in string format; often wrong for VBR files

class TKEY(Frames.TextFrame): "Initial key"
# /^([CDEFGAB][b#]?[m]?|o)$/

class TLAN(Frames.TextFrame): "Language(s)"
# /^...$/  ISO 639-2

class TCON(Frames.TextFrame): "Content type"
# integer  - ID3v1
# id3v2.3: (number), see mp3tagdata.genres

class TMOO(Frames.TextFrame): "Mood"


# ID3v2.3 dates, superseded by TDRC/TDOR in 2.4 but still common

class TYER(Frames.TextFrame): "Year"
# YYYY

class TORY(Frames.TextFrame): "Original release year"


# 4.2.6. User defined information frame

class TXXX(Frames.Frame):
    "User defined text information frame"
    _framespec = (EncodingSpec("encoding"),
                  EncodedStringSpec("description"),
                  EncodedFullTextSpec("value"))
    _allow_duplicates = True


# 4.10. Comments

class COMM(Frames.CommentFrame):
    "Comments"


# 4.27. Private frame

class PRIV(Frames.PrivateFrame):
    "Private frame"


def _collect_frames():
    d = dict()
    for name, obj in globals().items():
        if Frames.is_frame_class(obj) and obj.__module__ == __name__:
            obj.frameid = name
            d[name] = obj
    return d

known_frames = types.MappingProxyType(_collect_frames())

frame_types = types.MappingProxyType({
    "title": TIT2,
    "subtitle": TIT3,
    "genre": TCON,
    "artist": TPE1,
    "album": TALB,
    "composer": TCOM,
    "orchestra": TPE2,
    "original_artist": TOPE,
    "year": TYER,
    "original_year": TORY,
    "track": TRCK,
    "bpm": TBPM,
    "duration": TLEN,
    "key": TKEY,
    "conductor": TPE3,
    "language": TLAN,
    "mood": TMOO,
    "comment": COMM,
    })

def frame_id(key):
    """Normalize a frame class, frame id or friendly name to a frame id.

    >>> frame_id(TIT2), frame_id("TIT2"), frame_id("title")
    ('TIT2', 'TIT2', 'TIT2')
    """
    if Frames.is_frame_class(key):
        return key.frameid
    if isinstance(key, str):
        if key.lower() in frame_types:
            return frame_types[key.lower()].frameid
        try:
            if Frames.is_frame_id(key.encode("ASCII")):
                return key
        except UnicodeEncodeError:
            pass
    raise KeyError("Invalid frame type " + repr(key))

def is_text_frame_id(frameid):
    "True for frames holding a single string; TXXX is structured differently."
    return frameid.startswith("T") and frameid != "TXXX"

def frame_class(frameid):
    "Return the class used to decode frames with the given id."
    if frameid in known_frames:
        return known_frames[frameid]
    if is_text_frame_id(frameid):
        return Frames.TextFrame
    return Frames.UnknownFrame
