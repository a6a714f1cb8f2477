"""
Application settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from tripane.core.diff.engine import DEFAULT_MAX_DIFFS, EngineOptions
from tripane.core.models import BufferRole, Granularity


logger = logging.getLogger(__name__)


class Theme(Enum):
    """UI theme options."""
    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def from_string(cls, value: str) -> 'Theme':
        """Create from string value."""
        try:
            # Try to match by value
            for theme in cls:
                if theme.value == value.lower():
                    return theme
            # Try to match by name
            return cls[value.upper()]
        except (KeyError, AttributeError):
            return cls.SYSTEM


@dataclass
class PaneSettings:
    """Settings for one of the three panes."""
    editable: bool = True
    copy_link_enabled: bool = True
    theme: Optional[Theme] = None


@dataclass
class DiffSettings:
    """Settings for diff computation and display."""
    granularity: Granularity = Granularity.BROAD
    max_diffs: int = DEFAULT_MAX_DIFFS
    show_diffs: bool = True
    show_connectors: bool = True
    connector_y_offset: int = 0

    def engine_options(self) -> EngineOptions:
        return EngineOptions(granularity=self.granularity, max_diffs=self.max_diffs)


@dataclass
class UISettings:
    """User interface settings."""
    theme: Theme = Theme.LIGHT
    font_family: str = "Consolas"
    font_size: int = 10
    window_width: int = 1200
    window_height: int = 800
    show_line_numbers: bool = True


@dataclass
class ColorSettings:
    """Color settings for diff highlighting."""
    diff_background: str = "#fff5c4"
    diff_marker: str = "#d4a017"
    connector_fill: str = "#fff5c4"
    connector_border: str = "#d4a017"
    arrow_color: str = "#555555"

    # Dark theme overrides
    dark_diff_background: str = "#4a4524"
    dark_diff_marker: str = "#c9a227"
    dark_connector_fill: str = "#4a4524"
    dark_connector_border: str = "#c9a227"
    dark_arrow_color: str = "#cccccc"


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    diff: DiffSettings = field(default_factory=DiffSettings)
    ui: UISettings = field(default_factory=UISettings)
    colors: ColorSettings = field(default_factory=ColorSettings)

    left: PaneSettings = field(default_factory=PaneSettings)
    common: PaneSettings = field(default_factory=lambda: PaneSettings(copy_link_enabled=False))
    right: PaneSettings = field(default_factory=PaneSettings)

    def pane(self, role: BufferRole) -> PaneSettings:
        """Get the settings of one pane."""
        if role is BufferRole.LEFT:
            return self.left
        if role is BufferRole.COMMON:
            return self.common
        return self.right

    def resolve_theme(self, role: BufferRole) -> Theme:
        """Theme for a pane: the common pane may override the global theme."""
        if role is BufferRole.COMMON and self.common.theme is not None:
            return self.common.theme
        return self.ui.theme


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path or self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None
        self._observers: list[Callable[[ApplicationSettings], None]] = []

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'Tripane' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'tripane' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk, falling back to defaults."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return self._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Could not read settings from {self.settings_path}: {e}")
            return ApplicationSettings()

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        if not self._write(settings):
            return False

        self._settings = settings
        self._notify_observers()
        return True

    def save_window_size(self, width: int, height: int) -> bool:
        """
        Persist the window size onto the settings stored on disk.

        Only the size is written. Other in-memory values, such as command
        line overrides, stay out of the settings file.
        """
        stored = self.load()
        stored.ui.window_width = width
        stored.ui.window_height = height
        if not self._write(stored):
            return False

        if self._settings is not None:
            self._settings.ui.window_width = width
            self._settings.ui.window_height = height
        return True

    def reset(self) -> ApplicationSettings:
        """Reset to default settings."""
        self._settings = ApplicationSettings()
        self.save()
        return self._settings

    def _write(self, settings: ApplicationSettings) -> bool:
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            data = self._to_dict(settings)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save settings to {self.settings_path}: {e}")
            return False
        return True

    def add_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        """Add a callback to be notified of settings changes."""
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[ApplicationSettings], None]) -> None:
        """Remove a settings change observer."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        """Notify all observers of settings change."""
        for callback in self._observers:
            callback(self._settings)

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        def convert(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.name
            elif hasattr(obj, '__dataclass_fields__'):
                return {k: convert(getattr(obj, k)) for k in asdict(obj)}
            elif isinstance(obj, list):
                return [convert(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            else:
                return obj

        return convert(settings)

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        def get_enum(enum_class: type, value: Any, default: Any) -> Any:
            if value is None:
                return default
            if isinstance(value, str):
                try:
                    return enum_class[value]
                except KeyError:
                    return default
            return value

        def pane(values: dict, defaults: PaneSettings) -> PaneSettings:
            return PaneSettings(
                editable=values.get('editable', defaults.editable),
                copy_link_enabled=values.get('copy_link_enabled', defaults.copy_link_enabled),
                theme=get_enum(Theme, values.get('theme'), defaults.theme),
            )

        defaults = ApplicationSettings()

        diff_data = data.get('diff', {})
        diff = DiffSettings(
            granularity=get_enum(Granularity, diff_data.get('granularity'), Granularity.BROAD),
            max_diffs=diff_data.get('max_diffs', DEFAULT_MAX_DIFFS),
            show_diffs=diff_data.get('show_diffs', True),
            show_connectors=diff_data.get('show_connectors', True),
            connector_y_offset=diff_data.get('connector_y_offset', 0),
        )

        ui_data = data.get('ui', {})
        ui = UISettings(
            theme=get_enum(Theme, ui_data.get('theme'), Theme.LIGHT),
            font_family=ui_data.get('font_family', 'Consolas'),
            font_size=ui_data.get('font_size', 10),
            window_width=ui_data.get('window_width', 1200),
            window_height=ui_data.get('window_height', 800),
            show_line_numbers=ui_data.get('show_line_numbers', True),
        )

        colors_data = data.get('colors', {})
        colors = ColorSettings(**{
            name: colors_data.get(name, value)
            for name, value in asdict(defaults.colors).items()
        })

        return ApplicationSettings(
            diff=diff,
            ui=ui,
            colors=colors,
            left=pane(data.get('left', {}), defaults.left),
            common=pane(data.get('common', {}), defaults.common),
            right=pane(data.get('right', {}), defaults.right),
        )
