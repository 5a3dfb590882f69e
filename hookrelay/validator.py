"""
Validation for handler registrations and engine configuration.

Registration checks raise immediately (they are programming errors at the
call site). Configuration checks collect every problem and return them so
callers can render an actionable report.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .models import RESERVED_CONTEXT_KEYS

logger = logging.getLogger(__name__)

VALID_CONFIG_KEYS = ["default_timeout_ms", "log_errors", "default_domain"]


def validate_hook_name(name: Any) -> str:
    if not isinstance(name, str):
        raise TypeError(f"Hook name must be a string, got {type(name).__name__}")
    if not name:
        raise ValueError("Hook name cannot be empty")
    return name


def validate_registration(
    name: Any,
    callback: Any,
    handler_id: Any,
    domain: Any,
    timeout_ms: Any = None,
) -> None:
    """
    Check the arguments of a ``register``/``register_sync`` call.

    ``handler_id`` may be None (an id is generated later).

    Raises:
        TypeError: wrong argument types, non-callable callback
        ValueError: empty name/id/domain, reserved id, bad timeout
    """
    validate_hook_name(name)

    if not callable(callback):
        raise TypeError("Callback must be callable")

    if handler_id is not None:
        if not isinstance(handler_id, str):
            raise TypeError(
                f"Handler id must be a string, got {type(handler_id).__name__}"
            )
        if not handler_id:
            raise ValueError("Handler id cannot be empty")
        if handler_id in RESERVED_CONTEXT_KEYS:
            raise ValueError(
                f"Handler id '{handler_id}' is reserved. "
                f"Reserved ids: {', '.join(RESERVED_CONTEXT_KEYS)}"
            )

    if not isinstance(domain, str):
        raise TypeError(f"Domain must be a string, got {type(domain).__name__}")
    if not domain:
        raise ValueError("Domain cannot be empty")

    if timeout_ms is not None:
        _check_timeout(timeout_ms)


def _check_timeout(timeout_ms: Any) -> None:
    if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, (int, float)):
        raise TypeError(
            f"Handler timeout must be a number of milliseconds, got {type(timeout_ms).__name__}"
        )
    if timeout_ms <= 0:
        raise ValueError(f"Handler timeout must be > 0ms, got: {timeout_ms}")


def validate_engine_config(config: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Validate an engine configuration dictionary.

    Returns:
        Tuple of (is_valid, list_of_error_messages)
    """
    errors: List[str] = []

    if not isinstance(config, dict):
        return False, ["Configuration must be a dictionary"]

    for key, value in config.items():
        if isinstance(key, str) and key.startswith("_"):
            continue  # skip comment keys

        if key not in VALID_CONFIG_KEYS:
            errors.append(
                f"Unknown config key '{key}'. Valid keys: {', '.join(VALID_CONFIG_KEYS)}"
            )
            continue

        if key == "default_timeout_ms" and value is not None:
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or value <= 0
            ):
                errors.append(
                    f"'default_timeout_ms' must be a positive number or null, got: {value!r}"
                )
        elif key == "log_errors" and not isinstance(value, bool):
            errors.append(f"'log_errors' must be true or false, got: {value!r}")
        elif key == "default_domain" and (not isinstance(value, str) or not value):
            errors.append(
                f"'default_domain' must be a non-empty string, got: {value!r}"
            )

    return len(errors) == 0, errors


def format_validation_report(
    is_valid: bool, errors: List[str], suggestions: Optional[List[str]] = None
) -> str:
    lines = []
    if is_valid:
        lines.append("✓ Configuration is valid")
    else:
        lines.append(f"✗ Configuration has {len(errors)} error(s):")
        for error in errors:
            lines.append(f"  • {error}")

    if suggestions:
        lines.append("\nSuggestions:")
        for suggestion in suggestions:
            lines.append(f"  → {suggestion}")

    return "\n".join(lines)


def get_config_suggestions(config: Dict[str, Any], errors: List[str]) -> List[str]:
    suggestions: List[str] = []

    if any("Unknown config key" in e for e in errors):
        suggestions.append("Valid config keys are: " + ", ".join(VALID_CONFIG_KEYS))

    if any(e.startswith("'default_timeout_ms'") for e in errors):
        suggestions.append(
            "Use null to disable timeouts, or a value in milliseconds like 5000"
        )

    return suggestions
