# -*- coding: utf-8 -*-
"""ShardFS is a content-addressable file storage toolkit. Content is filed
under a key derived from its digest::

    <env>/<xx>/<yy>/<digest>.<ext>

where ``xx`` and ``yy`` are the first four characters of the digest and
``env`` separates environments such as ``dev`` and ``prod``.

Alongside the store it provides:

- chunked digests of files and buffers,
- file type detection from magic bytes,
- zip packing of directory trees and unpacking that refuses members which
  would escape the destination directory,
- downloading of remote files.
"""

from .__meta__ import (
    __title__,
    __summary__,
    __url__,
    __version__,
    __author__,
    __email__,
    __license__,
)

from .archive import ArchiveResult, pack, unpack
from .config import Revision, Settings
from .digest import digest_bytes, digest_file, digest_stream
from .errors import (
    FetchError,
    InvalidDigest,
    PathTraversal,
    ShardFSError,
    UnsupportedFormat,
)
from .fetch import fetch
from .keys import StorageKey, derive_path, local_dir
from .shardfs import HashAddress, ShardFS


__all__ = (
    "ArchiveResult",
    "FetchError",
    "HashAddress",
    "InvalidDigest",
    "PathTraversal",
    "Revision",
    "Settings",
    "ShardFS",
    "ShardFSError",
    "StorageKey",
    "UnsupportedFormat",
    "derive_path",
    "digest_bytes",
    "digest_file",
    "digest_stream",
    "fetch",
    "local_dir",
    "pack",
    "unpack",
)
