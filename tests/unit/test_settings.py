"""Tests for SettingsManager and ApplicationSettings."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tripane.core.diff.engine import EngineOptions
from tripane.core.models import BufferRole, Granularity
from tripane.services.settings import ApplicationSettings, SettingsManager, Theme


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    return tmp_path / "config" / "settings.json"


class TestApplicationSettings:
    """Tests for ApplicationSettings defaults and lookups."""

    def test_common_pane_copy_link_disabled_by_default(self) -> None:
        """Test that only the left and right panes copy into common."""
        settings = ApplicationSettings()

        assert settings.left.copy_link_enabled
        assert settings.right.copy_link_enabled
        assert not settings.common.copy_link_enabled

    def test_common_theme_falls_back_to_global(self) -> None:
        """Test that an unset pane theme uses the global theme."""
        settings = ApplicationSettings()
        settings.ui.theme = Theme.DARK

        assert settings.resolve_theme(BufferRole.COMMON) is Theme.DARK

    def test_common_theme_override(self) -> None:
        """Test that the common pane can override the global theme."""
        settings = ApplicationSettings()
        settings.common.theme = Theme.DARK

        assert settings.resolve_theme(BufferRole.COMMON) is Theme.DARK
        assert settings.resolve_theme(BufferRole.LEFT) is Theme.LIGHT

    def test_engine_options(self) -> None:
        """Test converting diff settings to engine options."""
        settings = ApplicationSettings()
        settings.diff.granularity = Granularity.SPECIFIC
        settings.diff.max_diffs = 10

        assert settings.diff.engine_options() == EngineOptions(Granularity.SPECIFIC, 10)

    def test_theme_from_string(self) -> None:
        """Test parsing theme names."""
        assert Theme.from_string("dark") is Theme.DARK
        assert Theme.from_string("LIGHT") is Theme.LIGHT
        assert Theme.from_string("purple") is Theme.SYSTEM


class TestSettingsManager:
    """Tests for SettingsManager."""

    def test_missing_file_gives_defaults(self, settings_path: Path) -> None:
        """Test loading when no settings file exists."""
        manager = SettingsManager(settings_path)

        assert manager.settings == ApplicationSettings()

    def test_save_and_load_roundtrip(self, settings_path: Path) -> None:
        """Test that saved settings load back unchanged."""
        manager = SettingsManager(settings_path)
        settings = manager.settings
        settings.diff.granularity = Granularity.SPECIFIC
        settings.diff.max_diffs = 42
        settings.diff.show_connectors = False
        settings.common.theme = Theme.DARK
        settings.colors.diff_background = "#123456"

        assert manager.save(settings)

        loaded = SettingsManager(settings_path).load()
        assert loaded == settings

    def test_enums_are_stored_by_name(self, settings_path: Path) -> None:
        """Test the JSON representation of enums."""
        manager = SettingsManager(settings_path)
        manager.save(ApplicationSettings())

        data = json.loads(settings_path.read_text(encoding="utf-8"))

        assert data["diff"]["granularity"] == "BROAD"
        assert data["ui"]["theme"] == "LIGHT"
        assert data["common"]["theme"] is None

    def test_unreadable_file_falls_back_to_defaults(self, settings_path: Path) -> None:
        """Test that a corrupt settings file is ignored."""
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text("{not json", encoding="utf-8")

        manager = SettingsManager(settings_path)

        assert manager.settings == ApplicationSettings()

    def test_unknown_enum_value_uses_default(self, settings_path: Path) -> None:
        """Test that bad enum names fall back to defaults."""
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text(
            json.dumps({"diff": {"granularity": "HUGE", "max_diffs": 7}}),
            encoding="utf-8"
        )

        settings = SettingsManager(settings_path).settings

        assert settings.diff.granularity is Granularity.BROAD
        assert settings.diff.max_diffs == 7

    def test_observers_notified_on_save(self, settings_path: Path) -> None:
        """Test that observers see saved settings."""
        manager = SettingsManager(settings_path)
        seen = []
        manager.add_observer(seen.append)

        manager.save(manager.settings)

        assert seen == [manager.settings]

    def test_reset(self, settings_path: Path) -> None:
        """Test resetting to defaults."""
        manager = SettingsManager(settings_path)
        manager.settings.diff.max_diffs = 1
        manager.save()

        settings = manager.reset()

        assert settings == ApplicationSettings()
        assert SettingsManager(settings_path).load() == ApplicationSettings()

    def test_save_window_size_keeps_other_changes_in_memory(self, settings_path: Path) -> None:
        """Test that only the window size reaches the settings file."""
        manager = SettingsManager(settings_path)
        manager.settings.diff.max_diffs = 7
        manager.settings.ui.theme = Theme.DARK

        assert manager.save_window_size(800, 600)

        stored = SettingsManager(settings_path).load()
        assert stored.ui.window_width == 800
        assert stored.ui.window_height == 600
        assert stored.diff.max_diffs == ApplicationSettings().diff.max_diffs
        assert stored.ui.theme is Theme.LIGHT
        assert manager.settings.diff.max_diffs == 7
        assert manager.settings.ui.window_width == 800

    def test_save_window_size_preserves_stored_values(self, settings_path: Path) -> None:
        """Test that values already on disk survive a size update."""
        first = SettingsManager(settings_path)
        first.settings.diff.granularity = Granularity.SPECIFIC
        first.save()

        SettingsManager(settings_path).save_window_size(640, 480)

        stored = SettingsManager(settings_path).load()
        assert stored.diff.granularity is Granularity.SPECIFIC
        assert stored.ui.window_width == 640
