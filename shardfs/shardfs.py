"""Module for ShardFS class."""

import hashlib
import io
import logging
import uuid
from collections import namedtuple
from contextlib import closing, contextmanager
from typing import Iterable, Iterator, List, Optional, Tuple, Union

import fs as pyfs
import fs.errors
import fs.path
import fs.tools
from fs.permissions import Permissions

from . import utils as u
from .config import Settings
from .digest import DEFAULT_ALGORITHM, Stream, computehash
from .errors import InvalidDigest
from .keys import derive_path

logger = logging.getLogger(__name__)

#: Name prefix of files still being written by :meth:`ShardFS.put`.
TMP_PREFIX = ".tmp-"


class HashAddress(namedtuple("HashAddress", ["id", "relpath", "is_duplicate"])):
    """File address containing the content digest, the path relative to the
    store root and whether the content was already stored.
    """

    def __new__(cls, id, relpath, is_duplicate=False):
        return super(HashAddress, cls).__new__(cls, id, relpath, is_duplicate)


Key = Union[str, HashAddress]


class ShardFS(object):
    """Content addressable file manager over a pyfilesystem2 filesystem.

    Content lives at ``<env>/<xx>/<yy>/<digest>.<ext>`` where ``xx`` and
    ``yy`` are the first four characters of its digest.

    Attributes:
        fs: Backing filesystem.
        env (str): Environment tree this store reads and writes. Defaults to
            the ``SHARDFS_ENV`` setting.
        algorithm (str): Hash algorithm to use when computing file hash.
            Algorithm should be available in ``hashlib`` module, ie, a member
            of `hashlib.algorithms_available`. Defaults to ``'md5'``.
        dmode (int, optional): Directory mode permission to set for
            subdirectories. Defaults to ``0o755`` which allows owner/group to
            read/write and everyone else to read and everyone to execute.
    """

    def __init__(self,
                 root: Union[pyfs.base.FS, str],
                 env: Optional[str] = None,
                 algorithm: str = DEFAULT_ALGORITHM,
                 dmode: Optional[int] = 0o755):

        self.fs = u.load_fs(root)
        self.env = env or Settings.from_env().env
        self.algorithm = algorithm
        self.dmode = dmode

    def put(self, content, extension: Optional[str] = None) -> HashAddress:
        """Store contents of `content` in the backing filesystem using its
        content hash for the address.

        Args:
            content: Readable object or path to a local file.
            extension: Optional extension to append to file when saving.

        Returns:
            File's hash address.
        """
        with closing(Stream(content)) as stream, \
                self._tmpfile(stream) as (tmp, hashid):
            path, is_duplicate = self._move(tmp, hashid, extension)

        return HashAddress(hashid, path, is_duplicate)

    def get(self, k: Key) -> Optional[HashAddress]:
        """Return :class:`HashAddress` from given id or path. If `k` does not
        refer to a valid file, then `None` is returned.
        """
        path = self._fs_path(k)

        if path is None:
            return None

        return HashAddress(self.unshard(path), path)

    def open(self, k: Key, mode: str = "rb") -> io.IOBase:
        """Return open IOBase object from given id or path.

        Raises:
            IOError: If file doesn't exist.
        """
        path = self._fs_path(k)
        if path is None:
            raise IOError("Could not locate file: {0}".format(k))

        return self.fs.open(path, mode)

    def delete(self, k: Key) -> None:
        """Delete file using id or path. Remove any empty directories after
        deleting. No exception is raised if file doesn't exist.
        """
        path = self._fs_path(k)
        if path is None:
            return

        self.fs.remove(path)
        logger.debug("deleted %s", path)
        self._remove_empty(pyfs.path.dirname(path))

    def files(self) -> Iterable[str]:
        """Return generator that yields the relative path of every file in
        the :attr:`env` tree.
        """
        if not self.fs.isdir(self.env):
            return
        for path in self.fs.walk.files(self.env, exclude=[TMP_PREFIX + "*"]):
            yield pyfs.path.relpath(path)

    def folders(self) -> Iterable[str]:
        """Return generator that yields all directories in the :attr:`env`
        tree that contain files.
        """
        if not self.fs.isdir(self.env):
            return
        for step in self.fs.walk(self.env, exclude=[TMP_PREFIX + "*"]):
            if step.files:
                yield pyfs.path.relpath(step.path)

    def count(self) -> int:
        """Return count of the number of files in the :attr:`env` tree."""
        return sum(1 for _ in self.files())

    def size(self) -> int:
        """Return the total size in bytes of all files in the :attr:`env`
        tree.
        """
        if not self.fs.isdir(self.env):
            return 0
        return sum(info.size
                   for _, info in self.fs.walk.info(
                       self.env, namespaces=["details"],
                       exclude=[TMP_PREFIX + "*"])
                   if info.is_file)

    def exists(self, k: Key) -> bool:
        """Check whether a given file id or path exists."""
        return bool(self._fs_path(k))

    def unshard(self, path: str) -> str:
        """Unshard path to determine hash value."""
        if not self.fs.isfile(path):
            raise ValueError("Cannot unshard path. The path {0!r} doesn't "
                             "exist in the filesystem.".format(path))

        return pyfs.path.splitext(pyfs.path.basename(path))[0]

    def repair(self, extensions: bool = True) -> List[Tuple[str, HashAddress]]:
        """Repair any file locations whose content address doesn't match its
        file path.
        """
        repaired = []
        corrupted = list(self._corrupted(extensions=extensions))

        for path, address in corrupted:
            if self.fs.isfile(address.relpath):
                # File already exists so just delete corrupted path.
                self.fs.remove(path)

            else:
                # File doesn't exist, so move it.
                self._makedirs(pyfs.path.dirname(address.relpath))
                self.fs.move(path, address.relpath)

            logger.info("repaired %s -> %s", path, address.relpath)
            repaired.append((path, address))

        # check for empty directories created by the repair.
        for d in {pyfs.path.dirname(p) for p, _ in repaired}:
            self._remove_empty(d)

        return repaired

    def __contains__(self, k: Key) -> bool:
        """Return whether a given file id or path is contained in the store."""
        return self.exists(k)

    def __iter__(self) -> Iterable[str]:
        """Iterate over all files in the backing store."""
        return self.files()

    def __len__(self) -> int:
        """Return count of the number of files in the :attr:`env` tree."""
        return self.count()

    @contextmanager
    def _tmpfile(self, stream: Stream) -> Iterator[Tuple[str, str]]:
        """Write `stream` to a temporary file in the :attr:`env` tree while
        hashing it, and yield ``(path, hashid)``. The temporary file is
        removed on exit unless it was moved into place.
        """
        self._makedirs(self.env)
        tmp = pyfs.path.join(self.env, TMP_PREFIX + uuid.uuid4().hex)
        hasher = hashlib.new(self.algorithm)

        try:
            with self.fs.open(tmp, mode="wb") as p:
                for data in stream:
                    hasher.update(data)
                    p.write(data)

            yield tmp, hasher.hexdigest()
        finally:
            if self.fs.exists(tmp):
                self.fs.remove(tmp)
            self._remove_empty(self.env)

    def _move(self,
              tmp: str,
              hashid: str,
              extension: Optional[str] = None):
        """Move the completely written temporary file `tmp` to the key of
        `hashid` with an optional file extension appended.

        Returns a pair of

        - relative path,
        - boolean noting whether or not we have a duplicate.
        """
        key = derive_path(hashid, extension, self.env)
        path = key.file_name

        if self.fs.isfile(path):
            is_duplicate = True

        else:
            # Only move the file if it doesn't already exist.
            is_duplicate = False
            self._makedirs(key.shard_dir)
            self.fs.move(tmp, path, overwrite=True)
            logger.debug("stored %s", path)

        return (path, is_duplicate)

    def _remove_empty(self, path: str) -> None:
        """Successively remove all empty folders starting with `path` and
        proceeding "up" through directory tree until reaching the root
        folder.
        """
        try:
            pyfs.tools.remove_empty(self.fs, path)
        except pyfs.errors.ResourceNotFound:
            # Guard against paths that don't exist in the FS.
            return None

    def _makedirs(self, dir_path: str) -> None:
        """Physically create the folder path."""
        perms = Permissions.create(self.dmode)
        self.fs.makedirs(dir_path, permissions=perms, recreate=True)

    def _fs_path(self, k: Key) -> Optional[str]:
        """Attempt to determine the real path of a file id or path through
        successive checking of candidate paths. If the real path is stored
        with an extension, the path is considered a match if the basename
        matches the expected file path of the id.
        """
        # if the input is ALREADY a hash address, pull out the relative path.
        if isinstance(k, HashAddress):
            k = k.relpath

        # Check if input was a fs path already.
        try:
            if self.fs.isfile(k):
                return pyfs.path.relpath(pyfs.path.normpath(k))
        except pyfs.errors.IllegalBackReference:
            return None

        # Check if input was an ID.
        try:
            key = derive_path(k, "", self.env)
        except InvalidDigest:
            return None

        if self.fs.isfile(key.file_name):
            return key.file_name

        # Check for any version of the path stored with some extension.
        if self.fs.isdir(key.shard_dir):
            for info in self.fs.filterdir(key.shard_dir,
                                          files=[k + ".*"],
                                          exclude_dirs=["*"]):
                return pyfs.path.join(key.shard_dir, info.name)

        # Could not determine a match.
        return None

    def _corrupted(self, extensions: bool = True
                   ) -> Iterable[Tuple[str, HashAddress]]:
        """Return generator that yields corrupted files as ``(path, address)``,
        where ``path`` is the path of the corrupted file and ``address`` is
        the :class:`HashAddress` of the expected location.
        """
        for path in self.files():
            with self.fs.openbin(path) as fileobj, \
                    closing(Stream(fileobj)) as stream:
                hashid = computehash(stream, self.algorithm)

            extension = pyfs.path.splitext(path)[1] if extensions else None
            expected_path = derive_path(hashid, extension, self.env).file_name

            if expected_path != path:
                yield (path, HashAddress(hashid, expected_path))
