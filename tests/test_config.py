"""Tests for configuration manager."""

import tempfile
from pathlib import Path

import pytest  # type: ignore[import-not-found]
import yaml  # type: ignore[import-untyped]

from daybook.core.config import ConfigManager


@pytest.fixture
def temp_config_path():
    """Create a temporary config file path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "config.yml"


class TestConfigManager:
    """Test ConfigManager."""

    def test_initialization_creates_default_config(self, temp_config_path: Path) -> None:
        """Test that initialization creates default configuration."""
        assert not temp_config_path.exists()

        config = ConfigManager(temp_config_path)

        assert temp_config_path.exists()
        assert config.get("version") == "1.0"
        assert config.get("general.data_dir") == "~/.daybook/data"
        assert config.get("export.date_format") == "%x"
        assert config.get("notifications.enabled") is False

    def test_merge_with_defaults(self, temp_config_path: Path) -> None:
        """Test that partial config is merged with defaults."""
        with open(temp_config_path, "w") as f:
            yaml.dump({"version": "1.0", "export": {"date_format": "%d/%m/%Y"}}, f)

        config = ConfigManager(temp_config_path)

        assert config.get("export.date_format") == "%d/%m/%Y"
        assert config.get("export.output_dir") == "~/Documents"
        assert config.get("display.recent_entries") == 10

    def test_get_missing_key_returns_default(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "fallback") == "fallback"
        assert config.get("version.nested", "fallback") == "fallback"

    def test_set_persists_value(self, temp_config_path: Path) -> None:
        """Test that set values are saved to disk."""
        config = ConfigManager(temp_config_path)

        config.set("notifications.enabled", True)

        reloaded = ConfigManager(temp_config_path)
        assert reloaded.get("notifications.enabled") is True

    def test_set_invalid_value_rejected(self, temp_config_path: Path) -> None:
        """Test that schema violations are rejected and rolled back."""
        config = ConfigManager(temp_config_path)

        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("advanced.log_level", "LOUD")

        assert config.get("advanced.log_level") == "WARNING"

    def test_invalid_file_backed_up(self, temp_config_path: Path) -> None:
        """Test that an invalid config file is replaced by defaults."""
        with open(temp_config_path, "w") as f:
            yaml.dump({"version": "1.0", "display": {"recent_entries": 0}}, f)

        with pytest.raises(ValueError, match="backed up"):
            ConfigManager(temp_config_path)

        assert temp_config_path.with_suffix(".yml.backup").exists()
        assert ConfigManager(temp_config_path).get("display.recent_entries") == 10

    def test_reset(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)
        config.set("export.date_format", "%Y")

        config.reset()

        assert config.get("export.date_format") == "%x"

    def test_get_all_keys(self, temp_config_path: Path) -> None:
        keys = ConfigManager(temp_config_path).get_all_keys()

        assert "version" in keys
        assert "general.data_dir" in keys
        assert "advanced.backup_on_start" in keys

    def test_paths_expand_home(self, temp_config_path: Path) -> None:
        config = ConfigManager(temp_config_path)

        assert config.data_dir == Path.home() / ".daybook" / "data"
        assert config.export_dir == Path.home() / "Documents"

    def test_unparseable_file_backed_up(self, temp_config_path: Path) -> None:
        temp_config_path.write_text("version: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="backed up"):
            ConfigManager(temp_config_path)

        assert temp_config_path.with_suffix(".yml.backup").exists()
        assert ConfigManager(temp_config_path).get("version") == "1.0"

    def test_notification_types(self, temp_config_path: Path) -> None:
        """Test per-type notification switches."""
        config = ConfigManager(temp_config_path)
        assert config.get("notifications.types") == {"timer": True, "export": True}

        config.set("notifications.types.timer", False)
        assert ConfigManager(temp_config_path).get("notifications.types.timer") is False

        with pytest.raises(ValueError, match="Invalid configuration"):
            config.set("notifications.types.export", "sometimes")
