"""
Configuration for the GCP editor.

Defaults can be overridden from a YAML file with a top-level ``gcp_editor``
section:

    gcp_editor:
      import_format: text-whitespace-7field
      export_format: text-whitespace-7field
      store_dir: ~/.gcp_editor
      filename_prefix: gcp_points
      default_policy: inherit
      log_level: INFO
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from gcp_editor.formats import GcpFormat
from gcp_editor.matcher import DefaultCoordinatePolicy

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GCP_EDITOR_CONFIG"
_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EditorConfig:
    """Settings shared by the CLI commands.

    Attributes:
        import_format: Format assumed for imports when none is given.
        export_format: Format used for exports when none is given.
        store_dir: Directory holding the session between commands.
        filename_prefix: Prefix of generated export filenames.
        default_policy: Coordinate policy for newly tagged images.
        log_level: Logging level name.
    """

    import_format: GcpFormat = GcpFormat.CSV_7FIELD
    export_format: GcpFormat = GcpFormat.TEXT_WHITESPACE_7FIELD
    store_dir: Path = Path(".gcp_editor")
    filename_prefix: str = "gcp_points"
    default_policy: DefaultCoordinatePolicy = DefaultCoordinatePolicy.INHERIT_FIRST
    log_level: str = "WARNING"

    @classmethod
    def from_yaml(cls, path: str | Path) -> EditorConfig:
        """Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is empty, malformed, or holds invalid values.
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}\n"
                f"Create one or run without --config to use the defaults"
            )

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML configuration file: {e}") from e

        if not data:
            raise ValueError(f"Configuration file is empty: {path}")

        if not isinstance(data, dict) or "gcp_editor" not in data:
            raise ValueError(
                f"Configuration file missing 'gcp_editor' section: {path}\n"
                f"Expected structure: gcp_editor:\n  import_format: ...\n  ..."
            )

        config = cls.from_dict(data["gcp_editor"] or {})
        logger.debug(f"Loaded configuration from {config_path}")
        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EditorConfig:
        """Create a configuration from a dict, validating every value.

        Unknown keys are ignored with a warning.

        Raises:
            ValueError: If a value is invalid.
        """
        if not isinstance(data, dict):
            raise ValueError(
                f"'gcp_editor' section must be a mapping, got {type(data).__name__}"
            )

        known = {"import_format", "export_format", "store_dir", "filename_prefix",
                 "default_policy", "log_level"}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        defaults = cls()
        log_level = str(data.get("log_level", defaults.log_level)).upper()
        if log_level not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level '{log_level}'. "
                f"Must be one of: {', '.join(_VALID_LOG_LEVELS)}"
            )

        prefix = str(data.get("filename_prefix", defaults.filename_prefix)).strip()
        if not prefix:
            raise ValueError("filename_prefix must not be empty")

        return cls(
            import_format=GcpFormat.parse(data.get("import_format", defaults.import_format)),
            export_format=GcpFormat.parse(data.get("export_format", defaults.export_format)),
            store_dir=Path(data.get("store_dir", defaults.store_dir)).expanduser(),
            filename_prefix=prefix,
            default_policy=DefaultCoordinatePolicy.parse(
                data.get("default_policy", defaults.default_policy)
            ),
            log_level=log_level,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "import_format": self.import_format.value,
            "export_format": self.export_format.value,
            "store_dir": str(self.store_dir),
            "filename_prefix": self.filename_prefix,
            "default_policy": self.default_policy.value,
            "log_level": self.log_level,
        }


def get_default_config() -> EditorConfig:
    """Return the built-in default configuration."""
    return EditorConfig()
