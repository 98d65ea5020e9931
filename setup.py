#!/usr/bin/env python3

from setuptools import setup

setup(
    name="mp3tagdata",
    version="0.1.0",
    packages=["mp3tagdata"],
    python_requires=">=3.6",
    license="BSD",
    description="ID3v2.3/2.4 tag editing for MP3 files in pure Python 3",
    long_description="""
Reads and rewrites the ID3v2 tag at the start of an MP3 file: text
frames (title, artist, album, year, ...) and comments.  Frames that are
not edited are written back byte for byte, and the audio data (with any
APEv2 tag after it) is preserved when the tag grows or shrinks.
""",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Topic :: Multimedia :: Sound/Audio"
        ],
    )
