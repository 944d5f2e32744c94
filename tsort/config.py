"""Configuration Management with Pydantic.

Settings are optional: tsort runs with defaults when no configuration file is
present. A YAML file and ``TSORT_*`` environment variables can adjust logging
and output, and command-line flags take precedence over both.
"""

import os
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILES = ("tsort.yaml", "tsort.yml")
TRUTHY_VALUES = ("true", "1", "yes", "on")


class LoggingConfig(BaseModel):
    """Logging settings.

    Attributes:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render log entries as JSON instead of console text
    """

    level: str = Field(
        default="WARNING",
        description="Logging level",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class OutputConfig(BaseModel):
    """Output settings.

    Attributes:
        report_cycle: Name the nodes of a detected cycle on stderr
        separator: String written after each node name
    """

    report_cycle: bool = Field(
        default=True,
        description="Print cycle members when a loop is found",
    )
    separator: str = Field(
        default="\n",
        description="Terminator written after each sorted name",
    )

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Reject an empty separator, which would merge names together.

        Raises:
            ValueError: If the separator is empty
        """
        if v == "":
            msg = "Output separator must not be empty"
            raise ValueError(msg)
        return v


class TsortConfig(BaseModel):
    """Main configuration combining all settings.

    Attributes:
        logging: Logging configuration
        output: Output configuration
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TsortConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Parsed and validated TsortConfig instance

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If the file is empty or not valid YAML
        """
        config_path = Path(path)

        if not config_path.exists():
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg)

        logger.info("loading_configuration", path=str(config_path))

        try:
            with config_path.open() as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(config_path))
            msg = f"Invalid YAML in configuration file: {e}"
            raise ValueError(msg) from e

        if not config_data:
            msg = "Configuration file is empty"
            raise ValueError(msg)
        if not isinstance(config_data, dict):
            msg = "Configuration file must contain a mapping"
            raise ValueError(msg)

        config = cls(**cls._apply_env_overrides(config_data))

        logger.info(
            "configuration_loaded",
            logging_level=config.logging.level,
            report_cycle=config.output.report_cycle,
        )

        return config

    @classmethod
    def from_env(cls) -> "TsortConfig":
        """Build a configuration from defaults and environment variables only."""
        return cls(**cls._apply_env_overrides({}))

    @classmethod
    def _apply_env_overrides(cls, config_data: dict) -> dict:
        """Apply environment variable overrides to configuration.

        Recognized variables: TSORT_LOG_LEVEL, TSORT_JSON_LOGS,
        TSORT_REPORT_CYCLE.

        Args:
            config_data: Base configuration dictionary

        Returns:
            Configuration dictionary with environment overrides applied

        Raises:
            ValueError: If a section being overridden is not a mapping
        """
        env_overrides = {
            ("logging", "level"): "TSORT_LOG_LEVEL",
            ("logging", "json_logs"): "TSORT_JSON_LOGS",
            ("output", "report_cycle"): "TSORT_REPORT_CYCLE",
        }

        for path, env_var in env_overrides.items():
            value = os.environ.get(env_var)
            if value is None:
                continue

            current = config_data
            for key in path[:-1]:
                section = current.get(key)
                if section is None:
                    current[key] = section = {}
                elif not isinstance(section, dict):
                    msg = f"Configuration section '{key}' must be a mapping"
                    raise ValueError(msg)
                current = section

            if env_var.endswith(("_LOGS", "_CYCLE")):
                value = value.strip().lower() in TRUTHY_VALUES

            current[path[-1]] = value
            logger.debug(
                "env_override_applied",
                env_var=env_var,
                config_path=".".join(path),
            )

        return config_data


def load_config(config_path: str | Path | None = None) -> TsortConfig:
    """Load configuration from a file, or fall back to defaults.

    Args:
        config_path: Path to a YAML file. If None, looks for tsort.yaml or
            tsort.yml in the current directory and uses defaults when neither
            exists.

    Returns:
        Loaded TsortConfig instance

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        ValueError: If the file is invalid
    """
    if config_path is None:
        for default_name in DEFAULT_CONFIG_FILES:
            default_path = Path(default_name)
            if default_path.exists():
                config_path = default_path
                break
        else:
            logger.debug("no_configuration_file_found")
            return TsortConfig.from_env()

    return TsortConfig.from_yaml(config_path)


__all__ = [
    "LoggingConfig",
    "OutputConfig",
    "TsortConfig",
    "load_config",
]
