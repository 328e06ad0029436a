# -*- coding: utf-8 -*-

import hashlib

import pytest
from hypothesis import given
from hypothesis import strategies as st

from shardfs.errors import InvalidDigest
from shardfs.keys import (
    StorageKey,
    derive_path,
    file_ext,
    key_for_bytes,
    key_for_file,
    local_dir,
    object_key,
)


def test_derive_path_example():
    key = derive_path("abcdef1234", ".png", "dev")

    assert key == StorageKey("dev/ab/cd", "dev/ab/cd/abcdef1234.png")
    assert key.shard_dir == "dev/ab/cd"
    assert key.file_name == "dev/ab/cd/abcdef1234.png"


@pytest.mark.parametrize("extension", ["png", ".png", "..png"])
def test_derive_path_extension_separator(extension):
    key = derive_path("abcdef1234", extension, "prod")

    assert key.file_name == "prod/ab/cd/abcdef1234.png"


@pytest.mark.parametrize("extension", ["", None])
def test_derive_path_without_extension(extension):
    key = derive_path("abcdef1234", extension, "dev")

    assert key.file_name == "dev/ab/cd/abcdef1234"


def test_derive_path_minimal_digest():
    key = derive_path("abcd", "txt", "dev")

    assert key.shard_dir == "dev/ab/cd"
    assert key.file_name == "dev/ab/cd/abcd.txt"


@pytest.mark.parametrize("digest", ["", "a", "abc", None, "xyz123", "ab/cd"])
def test_derive_path_invalid_digest(digest):
    with pytest.raises(InvalidDigest):
        derive_path(digest, "png", "dev")


def test_invalid_digest_is_value_error():
    with pytest.raises(ValueError):
        derive_path("abc", "png", "dev")


@pytest.mark.parametrize("env", ["", None, "dev/extra"])
def test_derive_path_invalid_env(env):
    with pytest.raises(ValueError):
        derive_path("abcdef1234", "png", env)


@given(
    digest=st.text(alphabet="0123456789abcdef", min_size=4, max_size=64),
    extension=st.text(alphabet="ghijklmnopqrstuvwxyz", min_size=1, max_size=8),
    env=st.sampled_from(["dev", "staging", "prod"]),
)
def test_derive_path_shape(digest, extension, env):
    key = derive_path(digest, extension, env)

    assert key.file_name.endswith("." + extension)
    assert key.file_name.count(digest) == 1
    assert key.shard_dir.split("/") == [env, digest[0:2], digest[2:4]]
    assert key.file_name == key.shard_dir + "/" + digest + "." + extension


def test_local_dir():
    assert local_dir("dev/ab/cd", "/var/upload") == "/var/upload/dev/ab/cd"


@pytest.mark.parametrize("filename,expected", [
    ("photo.jpg", "jpg"),
    ("archive.tar.gz", "gz"),
    ("README", ""),
    ("some.dir/README", ""),
    ("C:\\uploads\\scan.PDF", "PDF"),
])
def test_file_ext(filename, expected):
    assert file_ext(filename) == expected


def test_key_for_file(tmpdir):
    path = tmpdir.join("photo.png")
    path.write(b"foo", mode="wb")
    digest = hashlib.md5(b"foo").hexdigest()

    key, file_digest = key_for_file(str(path), "dev")

    assert file_digest == digest
    assert key.file_name == "dev/{0}/{1}/{2}.png".format(
        digest[:2], digest[2:4], digest)


def test_key_for_bytes():
    digest = hashlib.md5(b"foo").hexdigest()

    key, buffer_digest = key_for_bytes(b"foo", "jpeg", "prod")

    assert buffer_digest == digest
    assert key == derive_path(digest, "jpeg", "prod")


def test_key_for_bytearray():
    digest = hashlib.md5(b"foo").hexdigest()

    key, buffer_digest = key_for_bytes(bytearray(b"foo"), "png", "dev")

    assert buffer_digest == digest
    assert key == derive_path(digest, "png", "dev")


def test_object_key(tmpdir):
    path = tmpdir.join("report.pdf")
    path.write(b"foo", mode="wb")
    digest = hashlib.md5(b"foo").hexdigest()

    assert object_key(str(path), "prod") == derive_path(
        digest, "pdf", "prod").file_name
