"""Parser keyword configuration.

Alle ankers, terminators en sleutelwoorden voor het tracker-rapport staan
gecentraliseerd in dit bestand zodat een andere rapportlayout mogelijk is
zonder code aan te passen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from pathlib import Path
from typing import Dict, Tuple

KEYWORDS_ENV_VAR = "TRACKER_PARSER_KEYWORDS"


@dataclass(frozen=True)
class LayoutKeywordConfig:
    section_anchor: str = r"Last\s*Week"
    week_anchor: str = r"Last\s+Week"
    section_terminators: Tuple[str, ...] = field(
        default_factory=lambda: (
            r"- YTD\b",  # "...Staff Member - YTD 202547"
            r"^OIS Employee Tracker",  # paginatitel van het volgende blok
        )
    )
    header_anchor: str = r"Staff\s*Member"
    totals_keyword: str = "Total"
    footer_phrases: Tuple[str, ...] = field(
        default_factory=lambda: ("Report will display",)
    )
    store_pattern: str = r"Store\s+(?:is\s+)?(\d{4})"
    spaced_tokens: Tuple[str, ...] = field(default_factory=lambda: ("OIS",))
    y_tolerance: float = 3.0
    totals_policy: str = "continue"
    reconciliation: str = "prefix"
    column_aliases: Dict[str, str] = field(default_factory=dict)


def _load_overrides(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:  # pragma: no cover - config errors runtime
        raise RuntimeError(f"Ongeldige JSON in parser keyword-config: {path}") from exc
    if not isinstance(data, dict):
        raise RuntimeError("Keyword-config moet een JSON-object zijn")
    return data


def _coerce(default: object, value: object) -> object:
    if isinstance(default, tuple):
        if isinstance(value, str):
            return (value,)
        if not isinstance(value, (list, tuple)):
            raise RuntimeError(f"Verwacht een lijst met patronen in keyword-config: {value!r}")
        return tuple(str(v) for v in value if str(v).strip())
    if isinstance(default, dict):
        if not isinstance(value, dict):
            raise RuntimeError("column_aliases moet een JSON-object zijn")
        return {str(k): str(v) for k, v in value.items()}
    if isinstance(default, float):
        try:
            return float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise RuntimeError(f"Ongeldige numerieke waarde in keyword-config: {value!r}") from exc
    return str(value)


def get_keyword_config() -> LayoutKeywordConfig:
    """Return a keyword-config, optionally overridden via env."""

    overrides: dict | None = None
    env_value = os.environ.get(KEYWORDS_ENV_VAR)
    if env_value:
        override_path = Path(env_value)
        if override_path.is_file():
            overrides = _load_overrides(override_path)

    base = LayoutKeywordConfig()
    if not overrides:
        return base

    payload = {}
    for field_name in base.__dataclass_fields__:
        default = getattr(base, field_name)
        value = overrides.get(field_name)
        if value is None or value == "" or value == [] or value == {}:
            payload[field_name] = default
            continue
        payload[field_name] = _coerce(default, value)
    return LayoutKeywordConfig(**payload)


__all__ = ["KEYWORDS_ENV_VAR", "LayoutKeywordConfig", "get_keyword_config"]
