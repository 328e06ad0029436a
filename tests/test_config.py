# -*- coding: utf-8 -*-

import logging

import pytest

from shardfs.config import (
    DEFAULT_ENV,
    DEFAULT_REVISION_FILE,
    DEFAULT_UPLOAD_ROOT,
    REVISION_MISSING,
    REVISION_UNREADABLE,
    Revision,
    Settings,
)


def test_settings_defaults():
    settings = Settings.from_env({})

    assert settings == Settings(DEFAULT_ENV, DEFAULT_UPLOAD_ROOT,
                                DEFAULT_REVISION_FILE)
    assert not settings.is_production


def test_settings_from_env():
    settings = Settings.from_env({
        "SHARDFS_ENV": "prod",
        "SHARDFS_UPLOAD_ROOT": "/var/upload",
        "SHARDFS_REVISION_FILE": "/etc/rev",
    })

    assert settings.env == "prod"
    assert settings.upload_root == "/var/upload"
    assert settings.revision_file == "/etc/rev"
    assert settings.is_production


def test_settings_from_process_environment(monkeypatch):
    monkeypatch.setenv("SHARDFS_ENV", "staging")
    monkeypatch.delenv("SHARDFS_UPLOAD_ROOT", raising=False)

    settings = Settings.from_env()

    assert settings.env == "staging"
    assert settings.upload_root == DEFAULT_UPLOAD_ROOT


def test_settings_is_frozen():
    with pytest.raises(AttributeError):
        Settings().env = "prod"


def test_revision_reads_once(tmp_path):
    path = tmp_path / "git-rev-hash"
    path.write_text(u"0123456789abcdef0123456789abcdef\n")
    revision = Revision(str(path))

    assert revision.get() == "0123456789abcdef0123456789abcdef"

    path.write_text(u"changed")

    assert revision.get() == "0123456789abcdef0123456789abcdef"
    assert str(revision) == "0123456789abcdef0123456789abcdef"


def test_revision_reset(tmp_path):
    path = tmp_path / "git-rev-hash"
    path.write_text(u"first")
    revision = Revision(str(path))
    revision.get()
    path.write_text(u"second")

    revision.reset()

    assert revision.get() == "second"


def test_revision_truncates(tmp_path):
    path = tmp_path / "git-rev-hash"
    path.write_text(u"a" * 40)

    assert Revision(str(path)).get() == "a" * 32


def test_revision_missing(tmp_path, caplog):
    caplog.set_level(logging.ERROR)

    revision = Revision(str(tmp_path / "missing"))

    assert revision.get() == REVISION_MISSING
    assert "does not exist" in caplog.text


def test_revision_unreadable(tmp_path, caplog):
    caplog.set_level(logging.ERROR)

    # A directory exists but can't be read as a file.
    assert Revision(str(tmp_path)).get() == REVISION_UNREADABLE
    assert "can not read" in caplog.text


def test_settings_revision_is_independent(tmp_path):
    path = tmp_path / "rev"
    path.write_text(u"abc")
    settings = Settings(revision_file=str(path))

    first = settings.revision()
    second = settings.revision()

    assert first is not second
    assert first.get() == second.get() == "abc"
