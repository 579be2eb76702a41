"""Tool settings with Pydantic.

Settings tell conftool where the catalog and the config file live and how to
log. They come from an optional YAML settings file, environment variable
overrides and, last, command-line flags.
"""

import os
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger(__name__)

DEFAULT_SPECIFICATION = ".conftool.json"
DEFAULT_CONFIG = ".config"
DEFAULT_SETTINGS_FILE = ".conftool.yaml"

ENV_OVERRIDES = {
    "specification": "CONFTOOL_SPECIFICATION",
    "config": "CONFTOOL_CONFIG",
    "logging_level": "CONFTOOL_LOGGING_LEVEL",
    "json_logs": "CONFTOOL_JSON_LOGS",
}


class ToolSettings(BaseModel):
    """conftool settings.

    Attributes:
        specification: Path to the option catalog
        config: Path to the config file being managed
        logging_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render log events as JSON instead of console text
    """

    specification: Path = Field(
        default=Path(DEFAULT_SPECIFICATION),
        description="Path to the option catalog",
    )
    config: Path = Field(
        default=Path(DEFAULT_CONFIG),
        description="Path to the config file",
    )
    logging_level: str = Field(
        default="WARNING",
        description="Logging level",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log events",
    )

    model_config = {"str_strip_whitespace": True}

    @field_validator("logging_level", mode="before")
    @classmethod
    def normalize_logging_level(cls, v: Any) -> Any:
        """Accept level names in any case."""
        return v.upper() if isinstance(v, str) else v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ToolSettings":
        """Load settings from a YAML file.

        Args:
            path: Path to the YAML settings file

        Returns:
            Parsed and validated ToolSettings instance

        Raises:
            FileNotFoundError: If the settings file doesn't exist
            ValueError: If the settings are invalid or the YAML is malformed
        """
        settings_path = Path(path)

        if not settings_path.exists():
            msg = f"Settings file not found: {settings_path}"
            raise FileNotFoundError(msg)

        logger.info("loading_settings", path=str(settings_path))

        try:
            with settings_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(settings_path))
            msg = f"Invalid YAML in settings file: {e}"
            raise ValueError(msg) from e

        if not isinstance(data, dict):
            msg = f"Settings file {settings_path} must contain a mapping"
            raise ValueError(msg)

        return cls(**cls._apply_env_overrides(data))

    @classmethod
    def _apply_env_overrides(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Apply ``CONFTOOL_*`` environment variable overrides.

        Args:
            data: Settings read from file

        Returns:
            Settings dictionary with environment overrides applied
        """
        for key, env_var in ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value is None:
                continue
            if key == "json_logs":
                data[key] = value.lower() in ("true", "1", "yes")
            elif key == "logging_level":
                data[key] = value.upper()
            else:
                data[key] = value
            logger.debug("env_override_applied", env_var=env_var, setting=key)
        return data


def load_settings(path: str | Path | None = None) -> ToolSettings:
    """Load tool settings.

    Args:
        path: Settings file. If None, ``.conftool.yaml`` in the current
            directory is used when present; otherwise defaults apply.

    Returns:
        ToolSettings with environment overrides applied

    Raises:
        FileNotFoundError: If an explicit settings file doesn't exist
        ValueError: If the settings are invalid
    """
    if path is None:
        default_path = Path(DEFAULT_SETTINGS_FILE)
        if not default_path.exists():
            return ToolSettings(**ToolSettings._apply_env_overrides({}))
        path = default_path

    return ToolSettings.from_yaml(path)


__all__ = ["ToolSettings", "load_settings"]
