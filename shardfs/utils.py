# -*- coding: utf-8 -*-


"""
common utils for shardfs
"""


import logging
import ntpath
import os
import posixpath
from typing import List, Optional, Union

import fs as pyfs
from fs.base import FS

from .errors import PathTraversal

logger = logging.getLogger(__name__)


def compact(items):
    """Return only truthy elements of `items`."""
    return [item for item in items if item]


def to_bytes(data) -> bytes:
    """Return `data` as bytes, encoding text as UTF-8. Other buffers such as
    ``bytearray`` or ``memoryview`` are copied as is.
    """
    if isinstance(data, str):
        return data.encode("utf8")
    if not isinstance(data, bytes):
        data = bytes(data)
    return data


def is_subpath(subpath: str, path: str) -> bool:
    """Return whether `subpath` lies strictly below `path`.

    Both paths are normalized lexically; the filesystem is never consulted,
    so symlinks are not resolved.
    """
    path = os.path.normpath(os.path.abspath(path))
    subpath = os.path.normpath(os.path.abspath(subpath))
    if subpath == path:
        return False

    # Append os.sep so that paths like /usr/var2/log doesn't match /usr/var.
    if not path.endswith(os.sep):
        path += os.sep
    return subpath.startswith(path)


def split_member(name: str) -> Optional[List[str]]:
    """Split an archive member or download name into path parts.

    Backslashes are treated as separators. Returns ``None`` for names that
    are absolute or carry a drive letter.
    """
    name = name.replace("\\", "/")
    if posixpath.isabs(name) or ntpath.splitdrive(name)[0]:
        return None
    return compact(name.split("/"))


def load_fs(root: Union[FS, str]) -> FS:
    """Return a pyfilesystem2 filesystem for `root`.

    `root` may already be a filesystem, otherwise it is treated as an FS URL
    or a local directory and opened, creating it when missing.
    """
    if isinstance(root, FS):
        return root
    return pyfs.open_fs(root, create=True)


def remove(path: str) -> bool:
    """Delete the file at `path` if it exists.

    Returns whether a file was removed. A missing file is only logged.
    """
    if not os.path.lexists(path):
        logger.warning("file does not exist: %s", path)
        return False

    os.remove(path)
    return True


def safe_join(root, name):
    """Return the normalized path of member `name` below `root`.

    Purely lexical, nothing on disk is consulted.

    Raises:
        PathTraversal: If the result isn't strictly below `root`, which
            covers ``..`` segments, absolute names and drive letters.
    """
    root = os.path.normpath(os.path.abspath(root))
    parts = split_member(name)

    if not parts:
        raise PathTraversal(name, root)

    candidate = os.path.normpath(os.path.join(root, *parts))

    if not is_subpath(candidate, root):
        raise PathTraversal(name, root)

    return candidate
