"""Configuration loader for cargo-makedocs.

Loads settings from configs/config.yaml (or an explicit file) and
provides typed access to all configuration sections via dataclasses.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "config.yaml"

_DEFAULT_LOG_FORMAT = "%(levelname)s: %(message)s"


@dataclass
class CargoConfig:
    """How to invoke cargo."""

    program: str = "cargo"


@dataclass
class DocConfig:
    """Which packages to document by default."""

    build_dependencies: bool = True
    dev_dependencies: bool = True
    exclude: list[str] = field(default_factory=list)
    include: list[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "WARNING"
    format: str = _DEFAULT_LOG_FORMAT
    file: Optional[str] = None


@dataclass
class AppConfig:
    """Top-level application configuration."""

    cargo: CargoConfig = field(default_factory=CargoConfig)
    doc: DocConfig = field(default_factory=DocConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _section(raw: dict, name: str) -> dict:
    """Return a config section, treating a missing or empty one as {}.

    Raises:
        ValueError: If the section is not a mapping.
    """
    data = raw.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{name} must be a mapping")
    return data


def _string_list(data: dict, key: str) -> list[str]:
    """Read a list of names, accepting a single string as a one-item list.

    Args:
        data: Section dictionary.
        key: Key to read.

    Returns:
        The list of strings, empty if the key is absent.

    Raises:
        ValueError: If the value is neither a string nor a list.
    """
    value = data.get(key) or []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ValueError(f"doc.{key} must be a list of package names")
    return [str(item) for item in value]


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    Reads the YAML config file and constructs a fully typed AppConfig
    object. Falls back to defaults for any missing values. When the
    config file does not set ``cargo.program``, the ``CARGO`` environment
    variable (which cargo sets for its subcommands) is used before
    falling back to plain ``cargo``.

    Args:
        config_path: Path to the YAML config file. If None, uses the
            default path at configs/config.yaml.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        yaml.YAMLError: If the config file contains invalid YAML.
        ValueError: If a section has the wrong shape.
    """
    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH

    if path.exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        logger.debug("Loaded configuration from %s", path)
    else:
        logger.debug("Config file not found at %s, using defaults", path)
        raw = {}

    if not isinstance(raw, dict):
        raise ValueError("top level must be a mapping")

    cargo_data = _section(raw, "cargo")
    cargo_config = CargoConfig(
        program=cargo_data.get("program") or os.getenv("CARGO") or "cargo",
    )

    doc_data = _section(raw, "doc")
    doc_config = DocConfig(
        build_dependencies=doc_data.get("build_dependencies", True),
        dev_dependencies=doc_data.get("dev_dependencies", True),
        exclude=_string_list(doc_data, "exclude"),
        include=_string_list(doc_data, "include"),
    )

    logging_data = _section(raw, "logging")
    logging_config = LoggingConfig(
        level=str(logging_data.get("level", "WARNING")),
        format=logging_data.get("format", _DEFAULT_LOG_FORMAT),
        file=logging_data.get("file"),
    )

    return AppConfig(cargo=cargo_config, doc=doc_config, logging=logging_config)
