# -*- coding: utf-8 -*-
"""Derive sharded storage keys from content digests.

A key for digest ``abcdef1234`` with extension ``png`` in the ``dev`` tree is
``dev/ab/cd/abcdef1234.png``. The environment tag keeps ``dev`` and ``prod``
content in separate trees even when the same bytes land in both.
"""

import os
import posixpath
import string
from collections import namedtuple

from .digest import DEFAULT_ALGORITHM, digest_bytes, digest_file
from .errors import InvalidDigest

#: Number of shard directories below the environment tag.
DEPTH = 2
#: Hex characters per shard directory.
WIDTH = 2

HEXDIGITS = frozenset(string.hexdigits)


class StorageKey(namedtuple("StorageKey", ["shard_dir", "file_name"])):
    """Storage key of a piece of content.

    Attributes:
        shard_dir (str): ``<env>/<xx>/<yy>`` directory holding the content.
        file_name (str): Full key, ``<shard_dir>/<digest>.<ext>``.
    """


def shard(digest, depth=DEPTH, width=WIDTH):
    """Return the first `depth` tokens of `width` characters of `digest`."""
    return [digest[i * width:width * (i + 1)] for i in range(depth)]


def derive_path(digest, extension, env):
    """Build the :class:`StorageKey` for `digest` in the `env` tree.

    Any leading ``.`` of `extension` is dropped and exactly one is put back.
    No filesystem access happens here.

    Raises:
        InvalidDigest: If `digest` is shorter than 4 characters or not hex.
        ValueError: If `env` is empty or contains a separator.
    """
    if not isinstance(digest, str) or len(digest) < DEPTH * WIDTH:
        raise InvalidDigest(digest)
    if not HEXDIGITS.issuperset(digest):
        raise InvalidDigest(digest, "digest must be hexadecimal")

    if not env or "/" in env:
        raise ValueError("env tag must be a single path segment: {0!r}".format(env))

    shard_dir = posixpath.join(env, *shard(digest))
    extension = (extension or "").lstrip(".")
    name = digest + "." + extension if extension else digest

    return StorageKey(shard_dir, posixpath.join(shard_dir, name))


def local_dir(shard_dir, upload_root):
    """Return the local directory for `shard_dir` below `upload_root`."""
    return posixpath.join(upload_root, shard_dir)


def file_ext(filename):
    """Return the text after the last ``.`` of `filename`, or ``""``."""
    parts = filename.replace("\\", "/").rsplit("/", 1)[-1].split(".")
    if len(parts) > 1:
        return parts[-1]
    return ""


def key_for_file(path, env, algorithm=DEFAULT_ALGORITHM):
    """Digest the file at `path` and key it by its own suffix.

    Returns:
        tuple: ``(StorageKey, digest)``
    """
    digest = digest_file(path, algorithm)
    return derive_path(digest, file_ext(os.fspath(path)), env), digest


def key_for_bytes(data, extension, env, algorithm=DEFAULT_ALGORITHM):
    """Digest an uploaded buffer and key it with `extension`.

    Returns:
        tuple: ``(StorageKey, digest)``
    """
    digest = digest_bytes(data, algorithm)
    return derive_path(digest, extension, env), digest


def object_key(path, env, algorithm=DEFAULT_ALGORITHM):
    """Return the object storage key for the file at `path`."""
    key, _ = key_for_file(path, env, algorithm)
    return key.file_name
