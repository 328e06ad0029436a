# -*- coding: utf-8 -*-
"""Pack directories into zip archives and unpack them safely.

Every member name is checked before anything is written for it: a member
that would land outside of the destination directory aborts the unpack with
:class:`~shardfs.errors.PathTraversal`.
"""

import logging
import os
import shutil
import stat
import tempfile
import time
import zipfile
from collections import namedtuple

from .digest import CHUNK_SIZE
from .errors import PathTraversal, UnsupportedFormat
from .utils import safe_join

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"

#: Mode given to extracted files whose archive entry stores none.
DEFAULT_FILE_MODE = 0o644


class ArchiveResult(namedtuple("ArchiveResult", ["path", "files", "bytes"])):
    """Outcome of :func:`pack`: archive path, files packed and their total
    uncompressed size.
    """


def walkfiles(path):
    """Recursively walk `path` and yield files in a stable order."""
    for folder, subfolders, folder_files in os.walk(path):
        subfolders.sort()
        for file_ in sorted(folder_files):
            yield os.path.join(folder, file_)


def pack(source_dir, archive_path):
    """Write every file below `source_dir` into a new zip at `archive_path`.

    Member names are relative to the parent of `source_dir`, so the archive
    holds ``photos/a.jpg`` for ``/data/photos/a.jpg``. Directories get no
    members of their own. Each member is deflated and keeps the source file's
    modification time and permission bits.

    A failure leaves whatever was written at `archive_path`; removing it is up
    to the caller.

    Returns:
        ArchiveResult

    Raises:
        NotADirectoryError: If `source_dir` is not a directory.
        IOError: If a source file can't be read or the archive written.
    """
    source_dir = os.path.normpath(os.path.abspath(source_dir))
    if not os.path.isdir(source_dir):
        raise NotADirectoryError(source_dir)

    base = os.path.dirname(source_dir)
    files = 0
    size = 0

    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zf:
        for path in walkfiles(source_dir):
            arcname = os.path.relpath(path, base).replace(os.sep, "/")
            info = zipfile.ZipInfo.from_file(path, arcname,
                                             strict_timestamps=False)
            info.compress_type = zipfile.ZIP_DEFLATED

            with open(path, "rb") as src, zf.open(info, "w") as dst:
                shutil.copyfileobj(src, dst, CHUNK_SIZE)

            logger.debug("packed %s", arcname)
            files += 1
            size += info.file_size

    logger.info("packed %d files (%d bytes) from %s into %s",
                files, size, source_dir, archive_path)

    return ArchiveResult(os.fspath(archive_path), files, size)


def default_destination(archive_path):
    """Return the temp directory named after `archive_path`."""
    name = os.path.basename(os.fspath(archive_path))
    if name.endswith(ARCHIVE_SUFFIX):
        name = name[:-len(ARCHIVE_SUFFIX)]
    return os.path.join(tempfile.gettempdir(), name)


def member_mode(info):
    """Return the unix mode stored in a zip entry, ``0`` when absent."""
    return info.external_attr >> 16


def unpack(archive_path, destination=None):
    """Extract the zip at `archive_path` below `destination`.

    With no `destination` a directory named after the archive is used in the
    system temp directory. Members are processed in archive order; when one
    is rejected, those before it stay extracted and the destination should be
    considered dirty.

    Returns:
        str: The destination directory.

    Raises:
        PathTraversal: If a member would resolve outside of `destination`, or
            is a symbolic link.
        UnsupportedFormat: If `archive_path` isn't a zip archive.
        IOError: If reading the archive or writing a member fails.
    """
    if not destination:
        destination = default_destination(archive_path)
    destination = os.path.normpath(os.path.abspath(destination))

    try:
        zf = zipfile.ZipFile(archive_path)
    except zipfile.BadZipFile as exc:
        raise UnsupportedFormat(archive_path, str(exc)) from exc

    os.makedirs(destination, exist_ok=True)

    with zf:
        for info in zf.infolist():
            try:
                target = safe_join(destination, info.filename)
            except PathTraversal:
                logger.error("rejected member %r of %s", info.filename,
                             archive_path)
                raise

            mode = member_mode(info)
            if stat.S_ISLNK(mode):
                logger.error("rejected link member %r of %s", info.filename,
                             archive_path)
                raise PathTraversal(info.filename, destination)

            if info.is_dir():
                os.makedirs(target, exist_ok=True)
                continue

            try:
                _extract(zf, info, target,
                         stat.S_IMODE(mode) or DEFAULT_FILE_MODE)
            except (zipfile.BadZipFile, RuntimeError,
                    NotImplementedError) as exc:
                # zipfile raises RuntimeError for encrypted members and
                # NotImplementedError for unknown compression methods.
                logger.error("can not extract member %r of %s: %s",
                             info.filename, archive_path, exc)
                raise UnsupportedFormat(archive_path, str(exc)) from exc

    logger.info("unpacked %s into %s", archive_path, destination)

    return destination


def _extract(zf, info, target, mode):
    """Stream one file member to `target` and apply its mode and mtime."""
    with zf.open(info) as src:
        os.makedirs(os.path.dirname(target), exist_ok=True)

        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as dst:
            shutil.copyfileobj(src, dst, CHUNK_SIZE)

    os.chmod(target, mode)
    mtime = time.mktime(info.date_time + (0, 0, -1))
    os.utime(target, (mtime, mtime))

    logger.debug("extracted %s", info.filename)
