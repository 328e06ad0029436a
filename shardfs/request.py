# -*- coding: utf-8 -*-
"""Minimal HTTP request wrapper.

A request body is one of :class:`JsonBody`, :class:`FormBody`,
:class:`MultipartBody` or :class:`RawBody`. Each kind renders its own request
arguments, so the wrapper never inspects payload types.
"""

import logging
from collections import namedtuple
from typing import Mapping, Optional

import httpx

from .errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Reply(namedtuple("Reply", ["status_code", "content", "headers"])):
    """Status code, raw body and headers of an HTTP response."""


class FilePart(namedtuple("FilePart", ["filename", "fileobj"])):
    """A file field of a multipart body."""

    def rewind(self):
        if getattr(self.fileobj, "seekable", lambda: False)():
            self.fileobj.seek(0)
        return self


class JsonBody(namedtuple("JsonBody", ["data"])):
    """Body serialized as JSON."""

    def request_kwargs(self):
        return {"json": self.data}, {"Content-Type": JSON_CONTENT_TYPE}


class FormBody(namedtuple("FormBody", ["fields"])):
    """``application/x-www-form-urlencoded`` body of string fields."""

    def request_kwargs(self):
        return {"data": dict(self.fields)}, {"Content-Type": FORM_CONTENT_TYPE}


class MultipartBody(namedtuple("MultipartBody", ["fields", "files"])):
    """``multipart/form-data`` body.

    Attributes:
        fields (Mapping[str, str]): Plain form fields.
        files (Mapping[str, FilePart]): File fields. Their file objects are
            rewound but stay open; closing them is up to the caller.

    Plain fields are sent as parts without a filename, so a body holding no
    file is still ``multipart/form-data``.
    """

    def __new__(cls, fields=None, files=None):
        return super().__new__(cls, dict(fields or {}), dict(files or {}))

    def request_kwargs(self):
        parts = [(key, (None, value)) for key, value in self.fields.items()]
        for key, part in self.files.items():
            part = part.rewind()
            parts.append((key, (part.filename or key, part.fileobj)))

        # httpx generates the content type with the boundary.
        return {"files": parts}, {}


class RawBody(namedtuple("RawBody", ["content"])):
    """Bytes or an iterator of bytes, sent as is. Set the content type
    through the request headers.
    """

    def request_kwargs(self):
        return {"content": self.content}, {}


def request(method: str,
            url: str,
            body=None,
            headers: Optional[Mapping[str, str]] = None,
            *,
            timeout: float = DEFAULT_TIMEOUT,
            client: Optional[httpx.Client] = None) -> Reply:
    """Send an HTTP request and return the whole response.

    Args:
        method: HTTP method.
        url: Target URL.
        body: One of the body kinds of this module, or ``None``.
        headers: Extra headers; they override generated ones.
        timeout: Seconds allowed for the exchange.
        client: Client to send with. A temporary one is used when omitted.

    Returns:
        Reply: Any status code is returned, not raised.

    Raises:
        FetchError: If the request could not be completed.
    """
    kwargs, generated = body.request_kwargs() if body is not None else ({}, {})
    merged = httpx.Headers(generated)
    merged.update(headers or {})

    owned = client is None
    if owned:
        client = httpx.Client()

    try:
        response = client.request(method, url, headers=merged,
                                  timeout=timeout, follow_redirects=True,
                                  **kwargs)
    except httpx.HTTPError as exc:
        logger.error("%s %s failed: %s", method, url, exc)
        raise FetchError(url, "could not send http request:") from exc
    finally:
        if owned:
            client.close()

    logger.debug("%s %s -> %d", method, url, response.status_code)

    return Reply(response.status_code, response.content, response.headers)
