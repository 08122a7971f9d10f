"""
Configuration management for the RPC comparison tool.

Precedence, lowest first: defaults, JSON or YAML config file, ``RPC_COMPARE_*``
environment variables, command-line flags (applied by the CLI).
"""

import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

from ..models.core import RunMode


DEFAULT_CONFIG_FILE = Path("rpc_compare.json")
ENV_PREFIX = "RPC_COMPARE_"


class StragglerPolicy(str, Enum):
    """What to do with in-flight tests once fail-fast has triggered."""
    ABANDON = "abandon"
    DRAIN = "drain"


class ReportFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


class CompareConfig(BaseModel):
    """Settings for one comparison run."""
    sut_address: str = Field(default="/ip4/127.0.0.1/tcp/2345/http")
    reference_address: str = Field(default="/ip4/127.0.0.1/tcp/1234/http")
    n_tipsets: int = Field(default=20, ge=1)
    max_concurrent_requests: int = Field(default=8, ge=1)
    default_timeout_seconds: float = Field(default=60.0, gt=0)
    fail_fast: bool = Field(default=False)
    run_ignored: RunMode = Field(default=RunMode.DEFAULT)
    straggler_policy: StragglerPolicy = Field(default=StragglerPolicy.ABANDON)
    report_format: ReportFormat = Field(default=ReportFormat.MARKDOWN)
    log_level: str = Field(default="INFO")
    json_logging: bool = Field(default=False)


_ENV_FIELDS = {
    "SUT": "sut_address",
    "REFERENCE": "reference_address",
    "N_TIPSETS": "n_tipsets",
    "MAX_CONCURRENT_REQUESTS": "max_concurrent_requests",
    "TIMEOUT": "default_timeout_seconds",
    "FAIL_FAST": "fail_fast",
    "RUN_IGNORED": "run_ignored",
    "STRAGGLER_POLICY": "straggler_policy",
    "FORMAT": "report_format",
    "LOG_LEVEL": "log_level",
    "JSON_LOGGING": "json_logging",
}


def load_config_from_env() -> Dict[str, Any]:
    """
    Collect configuration overrides from environment variables.

    Returns:
        Dict of the fields that were set, unvalidated
    """
    config_data = {}
    for suffix, field_name in _ENV_FIELDS.items():
        value = os.getenv(ENV_PREFIX + suffix)
        if value is None:
            continue
        if field_name in ("fail_fast", "json_logging"):
            config_data[field_name] = value.lower() in ("1", "true", "yes")
        else:
            config_data[field_name] = value
    return config_data


def load_config_from_file(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration overrides from a JSON or YAML file.

    Args:
        config_path: Path to configuration file, defaults to ``rpc_compare.json``

    Returns:
        Dict of configured fields; empty if the file does not exist
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    if not config_path.exists():
        return {}

    with open(config_path, 'r', encoding="utf-8") as f:
        if config_path.suffix in (".yaml", ".yml"):
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"configuration file {config_path} is not valid YAML: {e}") from e
        else:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"configuration file {config_path} must contain a mapping")
    return data


def load_config(config_path: Optional[Path] = None, **overrides: Any) -> CompareConfig:
    """
    Build a configuration from file, environment and explicit overrides.

    Overrides whose value is ``None`` are ignored so that unset CLI flags
    do not mask file or environment values.
    """
    config_data = load_config_from_file(config_path)
    config_data.update(load_config_from_env())
    config_data.update({k: v for k, v in overrides.items() if v is not None})
    return CompareConfig(**config_data)


# Global configuration instance
_config: Optional[CompareConfig] = None


def get_config() -> CompareConfig:
    """
    Get the global configuration instance.

    Returns:
        CompareConfig: Global configuration
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: CompareConfig) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration to set as global
    """
    global _config
    _config = config
