"""Settings loader for YAML files."""

from pathlib import Path
from typing import Any

import yaml

from schema_diagram.config.settings import DiagramSettings, EditorSettings, LayoutSettings


class SettingsLoader:
    """Loads settings from YAML files."""

    def load_file(self, path: Path | str) -> DiagramSettings:
        """Load settings from a YAML file.

        Args:
            path: Path to the YAML file

        Returns:
            Loaded DiagramSettings instance
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return self._parse_settings(data or {})

    def load_from_string(self, content: str) -> DiagramSettings:
        """Load settings from a YAML string.

        Args:
            content: YAML content as string

        Returns:
            Loaded DiagramSettings instance
        """
        data = yaml.safe_load(content)
        return self._parse_settings(data or {})

    def _parse_settings(self, data: dict[str, Any]) -> DiagramSettings:
        """Parse settings data from YAML structure."""
        if not isinstance(data, dict):
            raise ValueError("Settings must be a YAML mapping")

        layout_data = dict(data.get("layout") or {})
        editor_data = data.get("editor") or {}

        # user options extend the defaults rather than replacing them
        if layout_data.get("layout_options"):
            layout_data["layout_options"] = {
                **LayoutSettings().layout_options,
                **{str(k): str(v) for k, v in layout_data["layout_options"].items()},
            }

        return DiagramSettings(
            layout=LayoutSettings(**layout_data),
            editor=EditorSettings(**editor_data),
            metadata=data.get("metadata", {}),
        )

    def save_file(self, settings: DiagramSettings, path: Path | str) -> None:
        """Save settings to a YAML file.

        Args:
            settings: The settings to save
            path: Path for the output file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(settings.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)


def load_settings(path: Path | str | None = None) -> DiagramSettings:
    """Convenience function to load settings.

    Args:
        path: Path to the YAML file; defaults are returned when omitted

    Returns:
        Loaded DiagramSettings instance
    """
    if path is None:
        return DiagramSettings()
    return SettingsLoader().load_file(path)
