import pytest

from backend.parsers.config import LayoutKeywordConfig
from backend.parsers.models import HeaderPosition
from backend.parsers.reconcile import (
    AliasReconciler,
    EditDistanceReconciler,
    PrefixReconciler,
    build_canonical_name_map,
    get_reconciler,
    repair_spaced_tokens,
)


def _headers(*names):
    return [HeaderPosition(name, float(idx * 100), 1) for idx, name in enumerate(names)]


def test_prefix_merge_keeps_longer_name_in_any_order() -> None:
    forward = build_canonical_name_map(_headers("Pct A", "Pct Abc"))
    backward = build_canonical_name_map(_headers("Pct Abc", "Pct A"))
    assert forward == backward == {"Pct A": "Pct Abc", "Pct Abc": "Pct Abc"}


def test_merge_is_idempotent_on_canonical_names() -> None:
    first = build_canonical_name_map(_headers("Staff Member", "% of O IS Sa", "Total", "% of O IS Sales"))
    again = build_canonical_name_map(_headers(*sorted(set(first.values()))))
    assert all(key == value for key, value in again.items())


def test_map_is_total_with_identity_for_unmerged_names() -> None:
    mapping = build_canonical_name_map(_headers("Staff Member", "Captured", "Total"))
    assert mapping == {"Staff Member": "Staff Member", "Captured": "Captured", "Total": "Total"}


def test_prefix_comparison_ignores_case_and_spacing() -> None:
    mapping = build_canonical_name_map(_headers("PCT  of", "Pct Of Total"))
    assert mapping["PCT  of"] == "Pct Of Total"


def test_chained_truncations_share_one_canonical_name() -> None:
    mapping = build_canonical_name_map(_headers("Pct", "Pct Of Tot", "Pct Of Total"))
    assert set(mapping.values()) == {"Pct Of Total"}


def test_sibling_extensions_of_a_shared_prefix_stay_apart() -> None:
    mapping = build_canonical_name_map(_headers("Sales", "Sales Qty", "Sales Value"))
    assert mapping == {"Sales": "Sales Qty", "Sales Qty": "Sales Qty", "Sales Value": "Sales Value"}


def test_sibling_extensions_stay_apart_for_edit_distance() -> None:
    mapping = build_canonical_name_map(_headers("Sales Qty", "Sales Value", "Sales"), EditDistanceReconciler())
    assert mapping["Sales Qty"] != mapping["Sales Value"]
    assert mapping["Sales"] == "Sales Qty"


def test_spaced_token_repair_only_touches_canonical_values() -> None:
    mapping = build_canonical_name_map(_headers("% of O IS Sa", "% of O IS Sales"))
    assert set(mapping) == {"% of O IS Sa", "% of O IS Sales"}
    assert set(mapping.values()) == {"% of OIS Sales"}


def test_repair_spaced_tokens_is_narrow() -> None:
    assert repair_spaced_tokens("OIS Sales", ["OIS"]) == "OIS Sales"
    assert repair_spaced_tokens("Who is there", ["OIS"]) == "Who is there"
    assert repair_spaced_tokens("O I S", ["OIS"]) == "OIS"


def test_edit_distance_strategy_merges_misspellings() -> None:
    mapping = build_canonical_name_map(_headers("Capturd", "Captured", "Total"), EditDistanceReconciler())
    assert mapping["Capturd"] == "Captured"
    assert mapping["Total"] == "Total"
    assert not PrefixReconciler().same_column("Capturd", "Captured")


def test_alias_strategy_uses_alias_targets() -> None:
    reconciler = AliasReconciler({"Receipts": "Captured", "captured": "Captured"})
    mapping = build_canonical_name_map(_headers("Receipts", "Captured", "Staff Member"), reconciler)
    assert mapping == {"Receipts": "Captured", "Captured": "Captured", "Staff Member": "Staff Member"}


def test_reconciler_from_config() -> None:
    assert isinstance(get_reconciler(LayoutKeywordConfig()), PrefixReconciler)
    assert isinstance(get_reconciler(LayoutKeywordConfig(reconciliation="edit_distance")), EditDistanceReconciler)
    alias = get_reconciler(LayoutKeywordConfig(reconciliation="alias", column_aliases={"A": "B"}))
    assert isinstance(alias, AliasReconciler)
    with pytest.raises(ValueError):
        get_reconciler(LayoutKeywordConfig(reconciliation="levenshtein"))
