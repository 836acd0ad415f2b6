"""Tests for configuration management."""

from pathlib import Path

import pytest

from grocismart.config import DEFAULT_MODEL, ConfigManager


@pytest.fixture
def config_file(tmp_path):
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text("""
[data]
storage_dir = "/custom/data"
backend = "sqlite"

[ai]
model = "openai:gpt-4o-mini"
number_of_people = 4

[pantry]
expiring_within_days = 14
default_unit = "each"

[logging]
level = "DEBUG"
""")
    return config_path


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_load_data_config(self, config_file):
        manager = ConfigManager(config_path=config_file)
        assert manager.data.storage_dir == Path("/custom/data")
        assert manager.data.backend == "sqlite"

    def test_load_ai_config(self, config_file):
        manager = ConfigManager(config_path=config_file)
        assert manager.ai.model == "openai:gpt-4o-mini"
        assert manager.ai.number_of_people == 4

    def test_load_pantry_config(self, config_file):
        manager = ConfigManager(config_path=config_file)
        assert manager.pantry.expiring_within_days == 14
        assert manager.pantry.default_unit == "each"

    def test_load_logging_config(self, config_file):
        manager = ConfigManager(config_path=config_file)
        assert manager.logging.level == "DEBUG"

    def test_missing_file_uses_defaults(self, tmp_path):
        manager = ConfigManager(config_path=tmp_path / "missing.toml")
        assert manager.data.backend == "json"
        assert manager.data.storage_dir == Path.home() / "grocismart" / "data"
        assert manager.ai.model == DEFAULT_MODEL
        assert manager.ai.number_of_people == 2
        assert manager.pantry.expiring_within_days == 30
        assert manager.pantry.default_unit == "pcs"
        assert manager.logging.level == "WARNING"

    def test_partial_file_fills_defaults(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text('[ai]\nnumber_of_people = 3\n')
        manager = ConfigManager(config_path=config_path)
        assert manager.ai.number_of_people == 3
        assert manager.ai.model == DEFAULT_MODEL
        assert manager.data.backend == "json"

    def test_storage_dir_expands_home(self, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text('[data]\nstorage_dir = "~/groceries"\n')
        manager = ConfigManager(config_path=config_path)
        assert manager.data.storage_dir == Path.home() / "groceries"

    def test_get_dot_path(self, config_file):
        manager = ConfigManager(config_path=config_file)
        assert manager.get("pantry.default_unit") == "each"
        assert manager.get("ai.number_of_people") == 4

    def test_get_missing_returns_default(self, config_file):
        manager = ConfigManager(config_path=config_file)
        assert manager.get("nope.missing", "fallback") == "fallback"

    def test_finds_config_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / "config.toml").write_text('[pantry]\ndefault_unit = "box"\n')
        monkeypatch.chdir(tmp_path)
        manager = ConfigManager()
        assert manager.config_path == tmp_path / "config.toml"
        assert manager.pantry.default_unit == "box"
