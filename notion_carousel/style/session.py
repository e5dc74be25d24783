"""Session-scoped style configuration."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..models.style import ResolvedStyleSheet, StyleConfig
from .resolver import resolve_style, resolve_style_config

_ALIASES = {field.alias: name for name, field in StyleConfig.model_fields.items() if field.alias}


def _canonical_key(key: str) -> str:
    if key in StyleConfig.model_fields:
        return key
    if key in _ALIASES:
        return _ALIASES[key]
    raise KeyError(f"Unknown style parameter: {key}")


class StyleSession:
    """Holds the user's raw style values for one session.

    Values are stored as given and only clamped when read, so a half-typed
    value never corrupts the session; every render sees a valid config.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = {}
        if initial:
            self.update(initial)

    def replace(self, key: str, value: Any) -> None:
        self._values[_canonical_key(key)] = value

    def update(self, values: Mapping[str, Any]) -> None:
        staged = {_canonical_key(key): value for key, value in values.items()}
        self._values.update(staged)

    def reset(self) -> None:
        self._values = {}

    @property
    def raw(self) -> Dict[str, Any]:
        return dict(self._values)

    @property
    def config(self) -> StyleConfig:
        return resolve_style_config(self._values)

    def style_sheet(self) -> ResolvedStyleSheet:
        return resolve_style(self._values)
