"""Column reconciliation: unify truncated or duplicate header spellings.

Een kolom die over twee pagina's loopt wordt vaak afgekapt op de eerste pagina
("% of OIS Sa") en voluit herhaald op de overflowpagina ("% of OIS Sales").
De reconciler bepaalt welke namen dezelfde kolom zijn en welke naam canoniek
wordt.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from rapidfuzz import fuzz

from .config import LayoutKeywordConfig
from .models import CanonicalMap, HeaderPosition


def _norm(value: str) -> str:
    return re.sub(r"\s+", " ", value.lower()).strip()


def _is_prefix_pair(a: str, b: str) -> bool:
    left, right = _norm(a), _norm(b)
    if not left or not right:
        return False
    return left.startswith(right) or right.startswith(left)


def _longest(names: Sequence[str]) -> str:
    # max() houdt bij gelijke lengte de eerste naam
    return max(names, key=len)


class ColumnReconciler:
    """Strategy deciding which header names denote the same column."""

    name = "base"

    def same_column(self, a: str, b: str) -> bool:
        raise NotImplementedError

    def choose_canonical(self, names: Sequence[str]) -> str:
        return _longest(names)


class PrefixReconciler(ColumnReconciler):
    name = "prefix"

    def same_column(self, a: str, b: str) -> bool:
        return _is_prefix_pair(a, b)


class EditDistanceReconciler(ColumnReconciler):
    name = "edit_distance"

    def __init__(self, threshold: float = 85.0) -> None:
        self.threshold = threshold

    def same_column(self, a: str, b: str) -> bool:
        if _is_prefix_pair(a, b):
            return True
        return fuzz.ratio(_norm(a), _norm(b)) >= self.threshold


class AliasReconciler(ColumnReconciler):
    name = "alias"

    def __init__(self, aliases: Mapping[str, str]) -> None:
        self.aliases = {_norm(key): value for key, value in aliases.items()}

    def _target(self, name: str) -> Optional[str]:
        return self.aliases.get(_norm(name))

    def same_column(self, a: str, b: str) -> bool:
        target = self._target(a)
        return target is not None and target == self._target(b)

    def choose_canonical(self, names: Sequence[str]) -> str:
        for name in names:
            target = self._target(name)
            if target:
                return target
        return _longest(names)


def get_reconciler(config: LayoutKeywordConfig) -> ColumnReconciler:
    strategy = config.reconciliation.strip().lower()
    if strategy == PrefixReconciler.name:
        return PrefixReconciler()
    if strategy == EditDistanceReconciler.name:
        return EditDistanceReconciler()
    if strategy == AliasReconciler.name:
        return AliasReconciler(config.column_aliases)
    raise ValueError(f"Onbekende kolomreconciliatie: {config.reconciliation!r}")


def _spaced_token_pattern(token: str) -> re.Pattern[str]:
    body = r"\s*".join(re.escape(ch) for ch in token)
    return re.compile(rf"\b{body}\b")


def repair_spaced_tokens(value: str, tokens: Iterable[str]) -> str:
    """Undo stray spaces inside short all-caps tokens, e.g. ``O IS`` -> ``OIS``."""

    for token in tokens:
        if token:
            value = _spaced_token_pattern(token).sub(token, value)
    return value


def _group_names(names: List[str], reconciler: ColumnReconciler) -> List[List[str]]:
    # Een naam hoort alleen bij een groep als hij met *elk* lid overeenkomt:
    # "Sales Qty" en "Sales Value" delen de prefix "Sales" maar blijven apart.
    groups: List[List[str]] = []
    for name in names:
        target = next(
            (g for g in groups if all(reconciler.same_column(name, member) for member in g)),
            None,
        )
        if target is None:
            groups.append([name])
        else:
            target.append(name)
    return groups


def build_canonical_name_map(
    headers: Iterable[HeaderPosition],
    reconciler: Optional[ColumnReconciler] = None,
    spaced_tokens: Iterable[str] = ("OIS",),
) -> CanonicalMap:
    """Map every raw header name to the canonical name of its column.

    The map is total over the given headers; names without a match map to
    themselves (after the spaced-token repair).
    """

    reconciler = reconciler or PrefixReconciler()
    tokens = tuple(spaced_tokens)

    names: List[str] = []
    for header in headers:
        if header.name not in names:
            names.append(header.name)

    mapping: Dict[str, str] = {}
    for group in _group_names(names, reconciler):
        canonical = repair_spaced_tokens(reconciler.choose_canonical(group), tokens)
        for name in group:
            mapping[name] = canonical
    return mapping


__all__ = [
    "AliasReconciler",
    "ColumnReconciler",
    "EditDistanceReconciler",
    "PrefixReconciler",
    "build_canonical_name_map",
    "get_reconciler",
    "repair_spaced_tokens",
]
