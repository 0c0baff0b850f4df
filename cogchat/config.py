"""Engine configuration and helpers for loading overrides."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

CONFIG_FIELD = "overrides"
ENV_PREFIX = "COGCHAT_"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass
class EngineConfig:
    """Configuration for a cognitive engine."""

    # Similarity thresholds
    similarity_threshold: float = 0.7
    related_threshold: float = 0.6
    ranking_similar_threshold: float = 0.6
    pattern_similar_threshold: float = 0.8

    # Ranking
    min_score: float = 0.0
    use_related_responses: bool = False

    # Learning settings
    learning_threshold: float = 0.7
    interaction_satisfaction: float = 0.8
    learn_from_fallback: bool = False
    history_max_turns: int = 10

    # Knowledge
    seed_hierarchy: bool = True

    # Generative fallback
    fallback_enabled: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Create a config, honouring ``COGCHAT_<FIELD>`` variables."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            value = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if value is not None:
                overrides[f.name] = value
        return cls().with_overrides(overrides)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "EngineConfig":
        """Copy of this config with string or typed overrides applied.

        Raises:
            ValueError: on unknown fields or values that do not parse.
        """
        known = {f.name: f.type for f in fields(self)}
        changes = {}
        for name, value in overrides.items():
            if name not in known:
                raise ValueError(f"Unknown config field: {name}")
            changes[name] = _coerce(name, known[name], value)
        return replace(self, **changes)


def _coerce(name: str, type_name: Any, value: Any) -> Any:
    type_name = getattr(type_name, "__name__", type_name)
    if type_name == "bool":
        if isinstance(value, bool):
            return value
        lowered = str(value).strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise ValueError(f"Config field {name} expects a boolean, got {value!r}")
    try:
        if type_name == "int":
            return int(value)
        if type_name == "float":
            return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Config field {name} expects {type_name}, got {value!r}") from None
    return value


def load_overrides(path: Path) -> Dict[str, Any]:
    """Load a JSON config file and return the overrides mapping.

    Raises:
        FileNotFoundError: if the file is missing.
        ValueError: if the payload does not contain the required fields.
    """

    resolved = Path(path).expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"Config file not found: {resolved}")

    with resolved.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)

    overrides = payload.get(CONFIG_FIELD) if isinstance(payload, dict) else None
    if not isinstance(overrides, dict):
        raise ValueError(f"Config file {resolved} is missing '{CONFIG_FIELD}' dict")

    return dict(overrides)


def load_config(path: Path, base: Optional[EngineConfig] = None) -> EngineConfig:
    """Build an ``EngineConfig`` from a JSON overrides file."""
    return (base or EngineConfig()).with_overrides(load_overrides(path))


def load_labeled_config(path: Path) -> Tuple[str, EngineConfig]:
    """Return the config label (or file stem) and the resulting config."""
    resolved = Path(path).expanduser()
    config = load_config(resolved)
    with resolved.open("r", encoding="utf-8") as fh:
        label = json.load(fh).get("label") or resolved.stem
    return label, config


__all__ = ["EngineConfig", "load_config", "load_labeled_config", "load_overrides"]
