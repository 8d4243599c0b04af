"""Factory helpers for constructing collaborator instances from configuration."""
from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, Mapping, Optional

from .config import ConfigurationError, iter_enabled_collaborator_configs
from .rate_limit import DelayPolicy, RateLimitedCollaborator, RateLimiter

LOGGER = logging.getLogger(__name__)


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid collaborator class path '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import collaborator module '{module_name}'") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def build_collaborator(entry: Dict[str, Any]) -> RateLimitedCollaborator:
    """Instantiate one collaborator entry and wrap it with its throttling policy."""

    class_path = entry.get("class")
    if not class_path:
        raise ConfigurationError("Collaborator configuration missing required 'class' field")

    options = entry.get("options", {}) or {}
    collaborator_cls = _load_class(class_path)
    instance = collaborator_cls(**options)

    delay_seconds = float(entry.get("delay_seconds", 0) or 0)
    calls_per_minute = entry.get("rate_limit_per_minute")
    rate_limiter = RateLimiter(float(calls_per_minute)) if calls_per_minute else RateLimiter(None)

    return RateLimitedCollaborator(
        instance,
        display_name=entry.get("name"),
        delay_policy=DelayPolicy(delay_seconds=delay_seconds),
        rate_limiter=rate_limiter,
    )


def _first_enabled(config: Mapping[str, Any], section: str) -> Optional[RateLimitedCollaborator]:
    entries = list(iter_enabled_collaborator_configs(config, section))
    if not entries:
        return None
    if len(entries) > 1:
        LOGGER.warning("Only the first enabled entry in '%s' is used; ignoring %s more", section, len(entries) - 1)
    return build_collaborator(entries[0])


def build_validator(config: Mapping[str, Any]) -> Optional[RateLimitedCollaborator]:
    return _first_enabled(config, "validators")


def build_enricher(config: Mapping[str, Any]) -> Optional[RateLimitedCollaborator]:
    return _first_enabled(config, "enrichers")


__all__ = ["build_collaborator", "build_enricher", "build_validator"]
