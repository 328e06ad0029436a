# -*- coding: utf-8 -*-
"""Runtime settings: which environment tree keys belong to, where local
uploads live and which build revision is deployed.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_ENV = "dev"
DEFAULT_UPLOAD_ROOT = "upload"
DEFAULT_REVISION_FILE = "conf/git-rev-hash"

PRODUCTION_ENVS = frozenset({"prod", "production", "pro"})

ENV_VAR = "SHARDFS_ENV"
UPLOAD_ROOT_VAR = "SHARDFS_UPLOAD_ROOT"
REVISION_FILE_VAR = "SHARDFS_REVISION_FILE"

# Revision values reported when the revision file can't be used.
REVISION_MISSING = "-1"
REVISION_UNREADABLE = "-2"

REVISION_SIZE = 32


@dataclass(frozen=True)
class Settings:
    """Environment lookups consumed by the key deriver and the store.

    Attributes:
        env: Tag of the logical environment, the first segment of every
            storage key (e.g. ``dev`` or ``prod``).
        upload_root: Local directory prefixed to shard directories.
        revision_file: File holding the deployed git revision hash.
    """
    env: str = DEFAULT_ENV
    upload_root: str = DEFAULT_UPLOAD_ROOT
    revision_file: str = DEFAULT_REVISION_FILE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``SHARDFS_*`` environment variables."""
        if environ is None:
            environ = os.environ
        return cls(
            env=environ.get(ENV_VAR) or DEFAULT_ENV,
            upload_root=environ.get(UPLOAD_ROOT_VAR) or DEFAULT_UPLOAD_ROOT,
            revision_file=environ.get(REVISION_FILE_VAR) or DEFAULT_REVISION_FILE,
        )

    @property
    def is_production(self) -> bool:
        return self.env.lower() in PRODUCTION_ENVS

    def revision(self) -> "Revision":
        """Return a fresh lazily-loaded revision for :attr:`revision_file`."""
        return Revision(self.revision_file)


class Revision(object):
    """Deployed git revision, read from `path` on first use and memoized.

    Instances are owned by whoever builds them; there is no module level
    cache. A missing file yields ``"-1"`` and an unreadable one ``"-2"``.
    """

    def __init__(self, path: str):
        self.path = path
        self._value = None

    def get(self) -> str:
        if self._value is None:
            self._value = self._load()
        return self._value

    def reset(self) -> None:
        """Forget the memoized value so the next :meth:`get` reads again."""
        self._value = None

    def _load(self) -> str:
        if not os.path.exists(self.path):
            logger.error("revision file does not exist: %s", self.path)
            return REVISION_MISSING

        try:
            with open(self.path, "rb") as fileobj:
                data = fileobj.read(REVISION_SIZE)
        except OSError as exc:
            logger.error("can not read revision file %s: %s", self.path, exc)
            return REVISION_UNREADABLE

        return data.decode("utf8", "replace").strip()

    def __str__(self):
        return self.get()
