"""
Tests for settings module.

Tests settings validation and environment variable loading.
"""
from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from fileblob.settings import (
    DEFAULT_CHUNK_SIZE,
    ColumnConfig,
    Settings,
    create_settings_from_env,
    default_data_dir,
)


class TestSettings:
    """Test Settings dataclass validation."""

    def test_defaults(self):
        settings = Settings()
        assert settings.data_dir is None
        assert settings.location == ""
        assert settings.chunk_size == DEFAULT_CHUNK_SIZE == 4096
        assert settings.atomic_writes is False
        assert settings.verify_digest is False

    def test_non_positive_chunk_size_raises(self):
        with pytest.raises(ValueError, match="chunk_size must be positive"):
            Settings(chunk_size=0)

        with pytest.raises(ValueError, match="chunk_size must be positive"):
            Settings(chunk_size=-4096)

    def test_none_location_raises(self):
        with pytest.raises(ValueError, match="location must be a string"):
            Settings(location=None)  # type: ignore

    def test_verify_requires_atomic(self):
        with pytest.raises(ValueError, match="verify_digest requires atomic_writes"):
            Settings(verify_digest=True)

        Settings(atomic_writes=True, verify_digest=True)

    def test_resolved_data_dir(self, tmp_path):
        assert Settings(data_dir=tmp_path).resolved_data_dir() == tmp_path
        assert Settings().resolved_data_dir() == default_data_dir()

    def test_settings_are_frozen(self):
        settings = Settings()
        with pytest.raises(Exception):
            settings.location = "other"  # type: ignore


class TestDefaultDataDir:

    def test_xdg_data_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        assert default_data_dir() == tmp_path / "FileBlobData"

    def test_home_fallback(self, monkeypatch):
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        assert default_data_dir() == Path.home() / ".local" / "share" / "FileBlobData"

    def test_not_created(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        default_data_dir()
        assert not (tmp_path / "FileBlobData").exists()


class TestCreateSettingsFromEnv:
    """Test creating settings from environment variables."""

    def test_empty_env(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = create_settings_from_env()
        assert settings == Settings()

    def test_full_env(self, tmp_path):
        env = {
            "FILEBLOB_DATA_DIR": str(tmp_path),
            "FILEBLOB_LOCATION": "archive",
            "FILEBLOB_CHUNK_SIZE": "8192",
            "FILEBLOB_ATOMIC_WRITES": "yes",
            "FILEBLOB_VERIFY_DIGEST": "1",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = create_settings_from_env()

        assert settings.data_dir == tmp_path
        assert settings.location == "archive"
        assert settings.chunk_size == 8192
        assert settings.atomic_writes is True
        assert settings.verify_digest is True

    def test_invalid_chunk_size_env(self):
        with patch.dict(os.environ, {"FILEBLOB_CHUNK_SIZE": "0"}, clear=True):
            with pytest.raises(ValueError, match="chunk_size must be positive"):
                create_settings_from_env()

    def test_fresh_instance_each_call(self):
        with patch.dict(os.environ, {}, clear=True):
            assert create_settings_from_env() is not create_settings_from_env()


class TestColumnConfig:
    """Test typed column configuration."""

    def test_default_has_no_location(self):
        assert ColumnConfig().location is None

    def test_from_parameters_reads_location(self):
        assert ColumnConfig.from_parameters({"location": "archive"}).location == "archive"

    def test_from_parameters_ignores_unknown_keys(self):
        config = ColumnConfig.from_parameters({"compression": "zstd"})
        assert config.location is None
