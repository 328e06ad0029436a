# -*- coding: utf-8 -*-
"""Download remote resources to local files."""

import logging
import os
import tempfile
from typing import Optional

import httpx

from .digest import CHUNK_SIZE
from .errors import FetchError
from .request import DEFAULT_TIMEOUT
from .utils import safe_join

logger = logging.getLogger(__name__)


def fetch(url: str,
          filename_hint: str,
          *,
          directory: Optional[str] = None,
          timeout: float = DEFAULT_TIMEOUT,
          client: Optional[httpx.Client] = None) -> str:
    """GET `url` and stream the body into `directory`/`filename_hint`.

    `directory` defaults to the system temp directory. The downloaded bytes
    are not verified; digest the file if integrity matters.

    Returns:
        str: Path of the written file.

    Raises:
        PathTraversal: If `filename_hint` resolves outside of `directory`.
        FetchError: On transport failure or a non-2xx status.
        IOError: If the local file can't be written.
    """
    directory = directory or tempfile.gettempdir()
    path = safe_join(directory, filename_hint)

    owned = client is None
    if owned:
        client = httpx.Client()

    try:
        with client.stream("GET", url, timeout=timeout,
                           follow_redirects=True) as response:
            if not response.is_success:
                raise FetchError(url, "unexpected status {0} for".format(
                    response.status_code), response.status_code)

            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as fileobj:
                for chunk in response.iter_bytes(CHUNK_SIZE):
                    fileobj.write(chunk)
    except httpx.HTTPError as exc:
        logger.error("get %s failed: %s", url, exc)
        raise FetchError(url, "could not download") from exc
    finally:
        if owned:
            client.close()

    logger.info("fetched %s to %s", url, path)

    return path
