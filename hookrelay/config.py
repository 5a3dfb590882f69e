"""
Configuration loader for the hook engine.

Looks for engine settings in, first match wins:
1. an explicit path passed to ``load_engine_config``
2. the file named by the ``HOOKRELAY_CONFIG`` environment variable
3. ~/.hookrelay/config.json

A missing file means defaults. Both a wrapped ``{"engine": {...}}`` document
and a bare settings object are accepted.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .models import DEFAULT_DOMAIN
from .validator import format_validation_report, validate_engine_config

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "HOOKRELAY_CONFIG"
GLOBAL_CONFIG_FILE = os.path.expanduser("~/.hookrelay/config.json")


@dataclass
class EngineConfig:
    """
    Settings for a HookEngine.

    Attributes:
        default_timeout_ms: Time limit for async handlers that set none
            themselves; None disables timeouts
        log_errors: Log failures captured during ``run``
        default_domain: Domain used when a registration names none
    """

    default_timeout_ms: Optional[int] = None
    log_errors: bool = True
    default_domain: str = DEFAULT_DOMAIN

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_engine_config_from_dict(config_dict: Dict[str, Any]) -> EngineConfig:
    """Build an EngineConfig from a dictionary, defaulting missing keys.

    Values are taken as-is; run ``validate_engine_config`` first when the
    dictionary comes from an untrusted source.
    """
    return EngineConfig(
        default_timeout_ms=config_dict.get("default_timeout_ms"),
        log_errors=config_dict.get("log_errors", True),
        default_domain=config_dict.get("default_domain", DEFAULT_DOMAIN),
    )


def _resolve_config_path(path: Union[str, Path, None]) -> Path:
    if path is not None:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path(GLOBAL_CONFIG_FILE)


def read_engine_config(path: Union[str, Path, None] = None) -> Dict[str, Any]:
    """Read the raw settings dictionary; empty when there is nothing usable."""
    config_path = _resolve_config_path(path)
    if not config_path.exists():
        return {}

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        logger.warning(f"Failed to parse engine config from {config_path}: {exc}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Engine config in {config_path} must be a JSON object, ignoring")
        return {}

    # Handle both wrapped {"engine": {...}} and direct format
    if "engine" in data and isinstance(data["engine"], dict):
        return data["engine"]
    return data


def load_engine_config(path: Union[str, Path, None] = None) -> EngineConfig:
    """Load and validate engine settings; invalid settings log a warning and yield defaults."""
    config_dict = read_engine_config(path)
    is_valid, errors = validate_engine_config(config_dict)
    if not is_valid:
        logger.warning(
            "Engine config has errors, using defaults:\n"
            + format_validation_report(is_valid, errors)
        )
        return EngineConfig()
    return load_engine_config_from_dict(config_dict)
