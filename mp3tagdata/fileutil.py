# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""File manipulation utilities."""

import os
import signal
import tempfile

from contextlib import contextmanager
from warnings import warn

from mp3tagdata.errors import TagWarning

def xread(file, length):
    "Read exactly length bytes from file; raise EOFError if file ends sooner."
    data = file.read(length)
    if len(data) != length:
        raise EOFError
    return data

@contextmanager
def opened(filename, mode):
    "Open filename, or do nothing if filename is already an open file object"
    if isinstance(filename, (str, bytes, os.PathLike)):
        file = open(filename, mode)
        try:
            yield file
        finally:
            if not file.closed:
                file.close()
    else:
        yield filename

@contextmanager
def opened_for_update(filename, retries=1):
    """Open filename for reading and writing.

    A failed open is retried up to retries more times, which gets past
    transient sharing violations; the last failure is raised.
    """
    attempt = 0
    while True:
        try:
            file = open(filename, "rb+")
            break
        except OSError as e:
            if attempt >= retries:
                raise
            attempt += 1
            warn("Can't open {0} for writing ({1}); retrying".format(filename, e),
                 TagWarning)
    try:
        yield file
    finally:
        file.close()

@contextmanager
def suppress_interrupt():
    """Suppress KeyboardInterrupt exceptions while the context is active.

    The suppressed interrupt (if any) is raised when the context is exited.
    Signal handlers can only be replaced from the main thread; elsewhere
    this does nothing.
    """
    interrupted = False

    def sigint_handler(signum, frame):
        nonlocal interrupted
        interrupted = True

    try:
        s = signal.signal(signal.SIGINT, sigint_handler)
    except ValueError:
        yield None
        return
    try:
        yield None
    finally:
        signal.signal(signal.SIGINT, s)
    if interrupted:
        raise KeyboardInterrupt()

def replace_chunk(filename, offset, length, chunk, max_mem=5):
    """Replace length bytes of data with chunk, starting at offset.
    Any KeyboardInterrupts arriving while replace_chunk is runnning
    are deferred until the operation is complete.

    The operation works directly on the original file; an error or a
    crash may lead to corrupt file contents.  When the chunk changes
    size, everything after the replaced data is read before the chunk
    is written, and appended after it.  Up to max_mem megabytes of it
    are kept in memory; the rest goes to a temporary file.
    """
    with suppress_interrupt():
        _replace_chunk(filename, offset, length, chunk, max_mem)

def _replace_chunk(filename, offset, length, chunk, max_mem):
    with opened(filename, "rb+") as file:
        # If the sizes match, we can simply overwrite the original data.
        if length == len(chunk):
            file.seek(offset)
            file.write(chunk)
            return

        oldsize = file.seek(0, 2)

        # If the orig chunk is exactly at the end of the file, we can
        # simply truncate the file and then append the new chunk.
        if offset + length >= oldsize:
            file.seek(offset)
            file.truncate()
            file.write(chunk)
            return

        file.seek(offset + length)
        temp = tempfile.SpooledTemporaryFile(
            max_size=max_mem * (1<<20),
            prefix="mp3tagdata-",
            suffix=".tmp")
        try:
            _copy_chunk(file, temp, oldsize - offset - length)
            file.seek(offset)
            file.truncate()
            file.write(chunk)
            temp.seek(0)
            _copy_chunk(temp, file, oldsize - offset - length)
        finally:
            temp.close()

def _copy_chunk(src, dst, length):
    "Copy length bytes from file src to file dst."
    BUFSIZE = 128 * 1024
    while length > 0:
        l = min(BUFSIZE, length)
        buf = xread(src, l)
        dst.write(buf)
        length -= l
