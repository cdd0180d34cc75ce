"""Settings models and YAML loading."""

from schema_diagram.config.loader import SettingsLoader, load_settings
from schema_diagram.config.settings import DiagramSettings, EditorSettings, LayoutSettings

__all__ = [
    "DiagramSettings",
    "EditorSettings",
    "LayoutSettings",
    "SettingsLoader",
    "load_settings",
]
