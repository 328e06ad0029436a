# -*- coding: utf-8 -*-
"""Content digests computed over fixed-size chunks."""

import hashlib
import io
import os
from contextlib import closing

from .utils import to_bytes

#: Bytes read per step; memory use stays bounded for any input size.
CHUNK_SIZE = 8192

DEFAULT_ALGORITHM = "md5"


class Stream(object):
    """Common interface for file-like objects.

    The input `obj` can be a file-like object or a path to a file. If `obj` is
    a path to a file, then it will be opened until :meth:`close` is called.
    If `obj` is a file-like object, then it's original position will be
    restored when :meth:`close` is called instead of closing the object
    automatically. Closing of the stream is deferred to whatever process passed
    the stream in.

    Successive readings of the stream is supported without having to manually
    set it's position back to ``0``. Objects that can't seek, like pipes, are
    read once from their current position.
    """

    def __init__(self, obj, chunk_size=CHUNK_SIZE):
        if hasattr(obj, "read"):
            seekable = obj.seekable() if hasattr(obj, "seekable") else True
            pos = obj.tell() if seekable else None
            owned = False
        elif isinstance(obj, (str, os.PathLike)) and os.path.isfile(obj):
            obj = io.open(obj, "rb")
            seekable = True
            pos = None
            owned = True
        else:
            raise ValueError("Object must be a valid file path or "
                             "a readable object.")

        self._obj = obj
        self._pos = pos
        self._seekable = seekable
        self._owned = owned
        self.chunk_size = chunk_size

    def __iter__(self):
        """Read underlying IO object in chunks and yield bytes. Return object
        to original position if we didn't open it originally.
        """
        if self._seekable:
            self._obj.seek(0)

        while True:
            data = self._obj.read(self.chunk_size)

            if not data:
                break

            yield to_bytes(data)

        if self._pos is not None:
            self._obj.seek(self._pos)

    def close(self):
        """Close underlying IO object if we opened it, else return it to
        original position.
        """
        if self._owned:
            self._obj.close()
        elif self._pos is not None:
            self._obj.seek(self._pos)


def computehash(stream, algorithm=DEFAULT_ALGORITHM):
    """Compute hash of `stream` using `algorithm`.

    Args:
        stream (Stream): Chunked source to digest.
        algorithm (str): Any name accepted by :func:`hashlib.new`.

    Returns:
        str: Lowercase hexadecimal digest.
    """
    hasher = hashlib.new(algorithm)
    for data in stream:
        hasher.update(data)
    return hasher.hexdigest()


def digest_file(path, algorithm=DEFAULT_ALGORITHM):
    """Return the hex digest of the file at `path`.

    Raises:
        IOError: If the file can't be opened or read.
    """
    with io.open(path, "rb") as fileobj:
        return digest_stream(fileobj, algorithm)


def digest_stream(fileobj, algorithm=DEFAULT_ALGORITHM):
    """Return the hex digest of a readable object, leaving its position as it
    was found. A non-seekable object is consumed from its current position.
    """
    with closing(Stream(fileobj)) as stream:
        return computehash(stream, algorithm)


def digest_bytes(data, algorithm=DEFAULT_ALGORITHM):
    """Return the hex digest of an in-memory buffer."""
    return digest_stream(io.BytesIO(to_bytes(data)), algorithm)
