"""Extractor configuration loading.

Reads the optional YAML settings file that tunes hook recognition,
child classification and worker fan-out. Non-strict mode falls back to
defaults with a warning; strict mode raises ``ConfigValidationError``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any

import yaml

logger = logging.getLogger(__name__)

MAX_WORKERS_ENV = "HOOKGRAPH_MAX_WORKERS"


class ConfigValidationError(RuntimeError):
    """Raised when strict configuration validation fails."""


@dataclass(frozen=True)
class ExtractorConfig:
    """Settings for one extractor instance."""

    state_hooks: tuple[str, ...] = ("useState", "useReducer")
    effect_hooks: tuple[str, ...] = ("useEffect", "useLayoutEffect", "useInsertionEffect")
    component_wrappers: tuple[str, ...] = ("memo", "forwardRef")
    # createElement(X, ...) call sites count as nesting rather than a false child
    create_element_is_child: bool = False
    skip_files_with_syntax_errors: bool = False
    max_workers: int = 4


_NAME_LIST_KEYS = ("state_hooks", "effect_hooks", "component_wrappers")
_BOOL_KEYS = ("create_element_is_child", "skip_files_with_syntax_errors")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag("STRICT_CONFIG_VALIDATION", default=default)


def _fail(msg: str, strict: bool) -> None:
    if strict:
        raise ConfigValidationError(msg)
    logger.warning("%s; using default", msg)


def _parse_name_list(key: str, raw: Any, strict: bool) -> tuple[str, ...] | None:
    if not isinstance(raw, list) or not raw:
        _fail(f"'{key}' must be a non-empty list of names", strict)
        return None
    names = [str(item).strip() for item in raw]
    if any(not name for name in names):
        _fail(f"'{key}' contains an empty name", strict)
        return None
    return tuple(names)


def _parse_max_workers(raw: Any, strict: bool) -> int | None:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        _fail(f"'max_workers' must be an integer, got {raw!r}", strict)
        return None
    if value < 1:
        _fail(f"'max_workers' must be >= 1, got {value}", strict)
        return None
    return value


def config_from_dict(payload: dict[str, Any], strict: bool = False) -> ExtractorConfig:
    """Build an ``ExtractorConfig`` from a parsed settings mapping."""
    config = ExtractorConfig()
    overrides: dict[str, Any] = {}

    for key, raw in payload.items():
        if key in _NAME_LIST_KEYS:
            names = _parse_name_list(key, raw, strict)
            if names is not None:
                overrides[key] = names
        elif key in _BOOL_KEYS:
            if isinstance(raw, bool):
                overrides[key] = raw
            else:
                _fail(f"'{key}' must be a boolean, got {raw!r}", strict)
        elif key == "max_workers":
            workers = _parse_max_workers(raw, strict)
            if workers is not None:
                overrides[key] = workers
        else:
            _fail(f"Unknown extractor setting '{key}'", strict)

    return replace(config, **overrides)


def apply_env_overrides(config: ExtractorConfig, strict: bool = False) -> ExtractorConfig:
    """Apply environment overrides (currently ``HOOKGRAPH_MAX_WORKERS``)."""
    raw = os.getenv(MAX_WORKERS_ENV)
    if raw is None:
        return config
    workers = _parse_max_workers(raw, strict)
    if workers is None:
        return config
    return replace(config, max_workers=workers)


def load_extractor_config(
    config_path: str | None,
    strict: bool = False,
) -> ExtractorConfig:
    """Load extractor settings from a YAML file.

    ``None`` means "no file": defaults plus environment overrides.
    In non-strict mode read/parse failures fall back to defaults.
    """
    if config_path is None:
        return apply_env_overrides(ExtractorConfig(), strict=strict)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Extractor config file not found: {config_path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return apply_env_overrides(ExtractorConfig(), strict=strict)
    except yaml.YAMLError as exc:
        msg = f"Failed to parse extractor config YAML at {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return apply_env_overrides(ExtractorConfig(), strict=strict)

    if payload is None:
        logger.info("Extractor config %s is empty; using defaults", config_path)
        payload = {}

    if not isinstance(payload, dict):
        msg = f"Unexpected extractor config payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        payload = {}

    config = config_from_dict(payload, strict=strict)
    logger.debug("Loaded extractor config from %s: %s", config_path, config)
    return apply_env_overrides(config, strict=strict)
