# -*- coding: utf-8 -*-

import io
import zipfile

import pytest

pytest.importorskip("magic")

from shardfs import sniff  # noqa: E402
from shardfs.sniff import (  # noqa: E402
    HEADER_SIZE,
    FileType,
    UnknownType,
    detect_bytes,
    detect_file,
    read_header,
    upload_extension,
)


PNG = (b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
       b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89")
GIF = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00!\xf9\x04"
JPEG = (b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xdb\x00C\x00")
PDF = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n"


@pytest.fixture
def zipbytes():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("a.txt", b"a")
    return buffer.getvalue()


@pytest.fixture
def octet_stream(monkeypatch):
    monkeypatch.setattr(sniff, "detect_mime",
                        lambda head: "application/octet-stream")


@pytest.mark.parametrize("head,expected", [
    (PNG, FileType("png", "image/png")),
    (GIF, FileType("gif", "image/gif")),
    (JPEG, FileType("jpg", "image/jpeg")),
    (PDF, FileType("pdf", "application/pdf")),
])
def test_detect_bytes(head, expected):
    assert detect_bytes(head) == expected


def test_detect_bytes_zip(zipbytes):
    assert detect_bytes(zipbytes) == FileType("zip", "application/zip")


def test_detect_bytes_only_reads_header():
    assert detect_bytes(PNG + b"\x00" * 10 * HEADER_SIZE).extension == "png"


def test_detect_bytes_empty():
    result = detect_bytes(b"")

    assert result is UnknownType
    assert result.is_unknown


def test_detect_bytes_generic_is_unknown(octet_stream):
    result = detect_bytes(b"\x00\x01\x02\x03")

    assert result == UnknownType
    assert result.extension == "unknown"
    assert result.mime == ""


def test_detect_bytes_unregistered_mime_is_unknown(monkeypatch):
    monkeypatch.setattr(sniff, "detect_mime",
                        lambda head: "application/x-made-up")

    assert detect_bytes(b"whatever") == UnknownType


def test_detect_file(tmp_path):
    path = tmp_path / "image"
    path.write_bytes(PNG + b"\x00" * 2048)

    assert detect_file(str(path)) == FileType("png", "image/png")


def test_detect_file_missing(tmp_path):
    with pytest.raises(IOError):
        detect_file(str(tmp_path / "missing"))


def test_read_header_restores_position():
    fileobj = io.BytesIO(PDF + b"x" * 1024)
    fileobj.seek(10)

    head = read_header(fileobj)

    assert head == (PDF + b"x" * 1024)[:HEADER_SIZE]
    assert fileobj.tell() == 10


@pytest.mark.parametrize("head,expected", [
    (JPEG, "jpeg"),
    (PNG, "png"),
    (GIF, "gif"),
    (PDF, "pdf"),
])
def test_upload_extension_allow_list(head, expected):
    assert upload_extension(head, "upload.bin") == expected


def test_upload_extension_zip_uses_filename(zipbytes):
    assert upload_extension(zipbytes, "report.docx") == "docx"


def test_upload_extension_octet_stream_uses_filename(octet_stream):
    assert upload_extension(b"\x00\x01", "firmware.img") == "img"


def test_upload_extension_without_fallback(zipbytes):
    assert upload_extension(zipbytes, "report.docx",
                            filename_fallback=False) == ""


def test_upload_extension_unlisted_mime():
    assert upload_extension(b"just some plain text\n" * 4, "notes.txt") == ""


def test_upload_extension_empty():
    assert upload_extension(b"", "empty.txt") == ""
