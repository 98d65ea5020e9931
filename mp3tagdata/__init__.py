# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

import mp3tagdata.frames
import mp3tagdata.tags
import mp3tagdata.id3
import mp3tagdata.ape

from mp3tagdata.errors import *
from mp3tagdata.frames import Frame, ErrorFrame, UnknownFrame, TextFrame, CommentFrame, PrivateFrame
from mp3tagdata.tags import Mp3TagData, read_tag
from mp3tagdata.ape import ApeTag, ApeItem
from mp3tagdata.genres import get_genre, max_genre

version = (0, 1, 0)
versionstr = ".".join((str(v) for v in version))
