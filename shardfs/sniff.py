# -*- coding: utf-8 -*-
"""Classify content by its leading magic bytes.

Detection is delegated to libmagic through ``python-magic``. Only the first
:data:`HEADER_SIZE` bytes are ever looked at.
"""

import mimetypes
from collections import namedtuple

import magic

from .keys import file_ext

HEADER_SIZE = 512

#: MIME values that say nothing about the format.
GENERIC_MIMES = frozenset({
    "",
    "application/octet-stream",
    "application/x-empty",
    "inode/x-empty",
})

#: MIME values whose extension is taken from the uploaded file's name.
AMBIGUOUS_MIMES = frozenset({"application/octet-stream", "application/zip"})

UPLOAD_EXTENSIONS = {
    "image/jpeg": "jpeg",
    "image/png": "png",
    "image/gif": "gif",
    "application/pdf": "pdf",
}

# mimetypes picks the first registered extension, which isn't always the
# conventional one.
PREFERRED_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/tiff": "tif",
    "text/plain": "txt",
}


class FileType(namedtuple("FileType", ["extension", "mime"])):
    """Extension (without dot) and MIME type of a piece of content."""

    @property
    def is_unknown(self):
        return self == UnknownType


#: Result for content no signature matched. It is a value, not an error.
UnknownType = FileType("unknown", "")


def read_header(fileobj, size=HEADER_SIZE):
    """Return up to `size` leading bytes of `fileobj`, restoring its
    position afterwards.
    """
    pos = fileobj.tell()
    try:
        fileobj.seek(0)
        return fileobj.read(size)
    finally:
        fileobj.seek(pos)


def detect_mime(head):
    """Return the MIME type libmagic reports for `head`."""
    return magic.from_buffer(bytes(head[:HEADER_SIZE]), mime=True)


def extension_for_mime(mime):
    """Return the conventional extension for `mime`, or ``""``."""
    if mime in PREFERRED_EXTENSIONS:
        return PREFERRED_EXTENSIONS[mime]
    return (mimetypes.guess_extension(mime, strict=False) or "").lstrip(".")


def detect_bytes(head):
    """Classify `head` (the first bytes of some content).

    Returns:
        FileType: The detected type, or :data:`UnknownType`.
    """
    if not head:
        return UnknownType

    mime = detect_mime(head)
    if mime in GENERIC_MIMES:
        return UnknownType

    extension = extension_for_mime(mime)
    if not extension:
        return UnknownType

    return FileType(extension, mime)


def detect_file(path):
    """Classify the file at `path` from its header."""
    with open(path, "rb") as fileobj:
        return detect_bytes(fileobj.read(HEADER_SIZE))


def upload_extension(head, filename, filename_fallback=True):
    """Return the extension to store an upload named `filename` under.

    Only images (jpeg, png, gif) and pdf are recognized from their content.
    Generic binary and zip content can't be told apart by magic bytes, so
    with `filename_fallback` the suffix of `filename` is trusted instead.
    Callers that must not trust client supplied names should pass
    ``filename_fallback=False`` and reject an empty result.

    Returns:
        str: Extension without dot, ``""`` when undetermined.
    """
    mime = detect_mime(head) if head else "application/x-empty"

    if mime in UPLOAD_EXTENSIONS:
        return UPLOAD_EXTENSIONS[mime]

    if mime in AMBIGUOUS_MIMES and filename_fallback:
        return file_ext(filename)

    return ""
