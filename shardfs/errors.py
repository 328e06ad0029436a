# -*- coding: utf-8 -*-
"""Exceptions raised by shardfs.

Plain ``OSError`` (``IOError``) failures from the operating system are never
wrapped; they reach the caller untouched.
"""


class ShardFSError(Exception):
    """Base class for all shardfs errors."""


class InvalidDigest(ShardFSError, ValueError):
    """Raised when a digest cannot be sharded into a storage key."""

    def __init__(self, digest, reason="digest must be at least 4 hex characters"):
        super().__init__("invalid digest {0!r}: {1}".format(digest, reason))
        self.digest = digest


class PathTraversal(ShardFSError):
    """Raised when a member name would resolve outside of its root."""

    def __init__(self, path, root):
        super().__init__(
            "illegal file path {0!r}: escapes {1!r}".format(path, root))
        self.path = path
        self.root = root


class UnsupportedFormat(ShardFSError):
    """Raised when a file can not be read in the expected format."""

    def __init__(self, path, message="not a valid zip archive"):
        super().__init__("{0}: {1}".format(path, message))
        self.path = path


class FetchError(ShardFSError, IOError):
    """Raised when an HTTP transfer fails."""

    def __init__(self, url, message, status_code=None):
        super().__init__("{0} {1}".format(message, url))
        self.url = url
        self.status_code = status_code
