"""
Unit Tests for Configuration Module

Tests configuration loading, validation, environment variable merging,
and error handling.

Author: TwinSync Project
License: MIT
"""

import pytest

from twinsync.config.config_loader import ConfigLoader, load_config
from twinsync.config.schema import Config, AppConfig, SyncConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep host TWINSYNC_* variables and .env files out of the tests."""
    for name in ("CONFIG", "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE",
                 "DEBOUNCE_MS", "HASH_ALGORITHM", "CHUNK_SIZE"):
        monkeypatch.delenv(f"TWINSYNC_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


class TestConfigLoader:
    """Test suite for ConfigLoader class."""

    def test_defaults_without_file(self):
        """Test that loading without a file yields defaults."""
        config = ConfigLoader().load()

        assert isinstance(config, Config)
        assert config.app.log_level == "INFO"
        assert config.app.log_to_file is False
        assert config.sync.debounce_ms == 500
        assert config.sync.hash_algorithm == "crc32"

    def test_load_yaml_file(self, tmp_path):
        """Test values are read from YAML."""
        config_path = tmp_path / "twinsync.yaml"
        config_path.write_text(
            "app:\n"
            "  log_level: debug\n"
            "sync:\n"
            "  debounce_ms: 250\n"
            "  hash_algorithm: sha256\n"
        )

        config = load_config(str(config_path))

        assert config.app.log_level == "DEBUG"
        assert config.sync.debounce_ms == 250
        assert config.sync.hash_algorithm == "sha256"

    def test_missing_explicit_file_raises_error(self, tmp_path):
        """Test that an explicitly named but missing file is an error."""
        with pytest.raises(FileNotFoundError):
            ConfigLoader(str(tmp_path / "missing.yaml")).load()

    def test_invalid_yaml_raises_error(self, tmp_path):
        """Test that malformed YAML is reported as ValueError."""
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("app: [unclosed\n")

        with pytest.raises(ValueError, match="Failed to parse YAML"):
            load_config(str(config_path))

    def test_env_var_override(self, tmp_path, monkeypatch):
        """Test environment variable overrides."""
        config_path = tmp_path / "twinsync.yaml"
        config_path.write_text("sync:\n  debounce_ms: 250\n")

        monkeypatch.setenv("TWINSYNC_DEBOUNCE_MS", "900")
        monkeypatch.setenv("TWINSYNC_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("TWINSYNC_LOG_FILE", str(tmp_path / "logs" / "twinsync.log"))

        config = load_config(str(config_path))

        assert config.sync.debounce_ms == 900
        assert config.app.log_level == "WARNING"
        assert config.app.log_to_file is True

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        """Test TWINSYNC_CONFIG points the loader at a file."""
        config_path = tmp_path / "from-env.yaml"
        config_path.write_text("sync:\n  chunk_size: 4096\n")
        monkeypatch.setenv("TWINSYNC_CONFIG", str(config_path))

        config = ConfigLoader().load()

        assert config.sync.chunk_size == 4096

    def test_overrides_win(self, monkeypatch):
        """Test explicit overrides beat environment variables; None is ignored."""
        monkeypatch.setenv("TWINSYNC_DEBOUNCE_MS", "900")

        config = load_config(overrides={
            "sync": {"debounce_ms": 100, "hash_algorithm": None},
            "app": {"log_format": "json"}
        })

        assert config.sync.debounce_ms == 100
        assert config.sync.hash_algorithm == "crc32"
        assert config.app.log_format == "json"

    def test_unset_overrides_keep_defaults(self):
        """Test a section of only None overrides leaves the defaults alone."""
        config = load_config(overrides={
            "app": {"log_level": None, "log_file_path": None},
            "sync": {"debounce_ms": None}
        })

        assert config.app.log_level == "INFO"
        assert config.sync.debounce_ms == 500


class TestConfigSchema:
    """Test suite for configuration schema models."""

    def test_sync_config_defaults(self):
        """Test SyncConfig default values."""
        config = SyncConfig()

        assert config.debounce_ms == 500
        assert config.chunk_size == 8192
        assert config.sniff_bytes == 1024
        assert config.poll_interval_ms == 100

    def test_non_positive_values_rejected(self):
        """Test that sizes and intervals must be positive."""
        with pytest.raises(ValueError):
            SyncConfig(debounce_ms=0)
        with pytest.raises(ValueError):
            SyncConfig(chunk_size=-1)

    def test_unknown_hash_algorithm_rejected(self):
        """Test that unavailable algorithms are rejected."""
        with pytest.raises(ValueError):
            SyncConfig(hash_algorithm="rot13")

    def test_hash_algorithm_normalized(self):
        """Test algorithm names are lowercased."""
        assert SyncConfig(hash_algorithm="SHA256").hash_algorithm == "sha256"

    def test_log_file_required_for_file_logging(self):
        """Test file logging needs a path."""
        with pytest.raises(ValueError):
            AppConfig(log_to_file=True)

    def test_invalid_log_format_rejected(self):
        """Test only text and json formats are accepted."""
        with pytest.raises(ValueError):
            AppConfig(log_format="xml")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
