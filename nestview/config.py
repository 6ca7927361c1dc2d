"""
nestview Configuration

This module provides configuration management for the view tree.
Includes default configuration, environment-based settings, and validation.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

DOCUMENT_FORMATS = ["yaml", "json"]


def _as_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


@dataclass
class NestViewConfig:
    """Main configuration class for nestview components"""

    # Logging
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Aggregation
    strict_aggregation: bool = False

    # Serialization
    document_format: str = "yaml"


def get_default_config() -> NestViewConfig:
    """Get default nestview configuration"""
    return NestViewConfig()


def load_config_from_file(config_path: Union[str, Path]) -> NestViewConfig:
    """
    Load configuration from a JSON or YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        NestViewConfig instance
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            data = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return _config_from_dict(data or {})


def load_config_from_env() -> NestViewConfig:
    """
    Load configuration from environment variables

    Environment variables are prefixed with NESTVIEW_
    For example: NESTVIEW_DEBUG=true, NESTVIEW_LOG_LEVEL=DEBUG

    Returns:
        NestViewConfig instance
    """
    config = NestViewConfig()

    env_mappings = {
        "NESTVIEW_DEBUG": ("debug", _as_bool),
        "NESTVIEW_LOG_LEVEL": ("log_level", str),
        "NESTVIEW_LOG_FORMAT": ("log_format", str),
        "NESTVIEW_STRICT_AGGREGATION": ("strict_aggregation", _as_bool),
        "NESTVIEW_DOCUMENT_FORMAT": ("document_format", str),
    }

    for env_var, (attr_name, converter) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            try:
                setattr(config, attr_name, converter(value))
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid value for {env_var}: {value}. Error: {e}")

    return config


def validate_config(config: NestViewConfig) -> List[str]:
    """
    Validate configuration and return list of issues

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        issues.append(
            f"Invalid log_level: {config.log_level}. Must be one of {valid_log_levels}"
        )

    if config.document_format not in DOCUMENT_FORMATS:
        issues.append(
            f"Invalid document_format: {config.document_format}. "
            f"Must be one of {DOCUMENT_FORMATS}"
        )

    return issues


def _config_from_dict(data: Dict[str, Any]) -> NestViewConfig:
    """Create NestViewConfig from dictionary"""
    known = NestViewConfig.__dataclass_fields__
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ValueError(f"Unknown configuration keys: {unknown}")
    return NestViewConfig(**data)
