"""Tests for the in-memory catalog store."""

from __future__ import annotations

import json

import pytest

from conftest import mech
from mechcatalog.catalog import INSERTED, REPLACED, CatalogStore, ViewState, records_from_export
from mechcatalog.errors import InvalidFormat, MalformedInput
from mechcatalog.models import Hardpoints


def _names(records) -> list[str]:
    return [m.name for m in records]


def test_upsert_replaces_matching_chassis_in_place(store: CatalogStore) -> None:
    before = len(store)
    updated = mech("Hunchback Prime", "Medium", chassis_id="HBK-4G", total=(0, 3, 0, 0))

    assert store.upsert(updated) == REPLACED
    assert len(store) == before
    assert store.records[2] == updated


def test_upsert_appends_new_chassis(store: CatalogStore) -> None:
    before = len(store)

    assert store.upsert(mech("Commando", "Light", chassis_id="COM-2D")) == INSERTED
    assert len(store) == before + 1
    assert store.records[-1].name == "Commando"


def test_upsert_without_chassis_always_appends(store: CatalogStore) -> None:
    before = len(store)
    store.upsert(mech("Nameless"))
    store.upsert(mech("Nameless"))

    assert len(store) == before + 2


def test_remove_where_scoped_to_uploaded() -> None:
    store = CatalogStore(
        [
            mech("A", source="catalog"),
            mech("B", source="uploaded"),
            mech("C", source="catalog"),
            mech("D", source="uploaded"),
            mech("E", source="catalog"),
        ]
    )

    removed = store.remove_where(lambda m: m.source == "uploaded")

    assert removed == 2
    assert len(store) == 3
    assert all(m.source == "catalog" for m in store.records)
    assert _names(store.records) == ["A", "C", "E"]


def test_search_is_case_insensitive_substring(store: CatalogStore) -> None:
    rows = store.view(search="atlas")

    assert _names(rows) == ["Atlas", "Atlas II"]
    assert all("atlas" in m.name.lower() for m in rows)
    assert _names(store.view(search="ATL")) == ["Atlas", "Atlas II"]


def test_empty_search_matches_everything(store: CatalogStore) -> None:
    assert len(store.view(search="")) == len(store)


def test_class_filter_all_is_no_filter(store: CatalogStore) -> None:
    assert store.view(class_filter="all") == store.view()
    assert _names(store.view(class_filter="Assault")) == ["Atlas", "Atlas II"]
    assert store.view(class_filter="Light")[0].name == "Locust"


def test_filters_combine(store: CatalogStore) -> None:
    assert _names(store.view(search="a", class_filter="Heavy")) == ["Catapult"]
    assert store.view(search="zzz") == []


def test_sort_by_total_reverses_without_ties() -> None:
    store = CatalogStore(
        [
            mech("A", total=(1, 0, 0, 0)),
            mech("B", total=(3, 0, 0, 0)),
            mech("C", total=(2, 0, 0, 0)),
        ]
    )

    asc = store.view(sort_field="total", sort_direction="asc")
    desc = store.view(sort_field="total", sort_direction="desc")

    assert _names(asc) == ["A", "C", "B"]
    assert desc == list(reversed(asc))


def test_sort_is_stable_for_ties() -> None:
    store = CatalogStore(
        [
            mech("First", total=(1, 0, 0, 0)),
            mech("Big", total=(5, 0, 0, 0)),
            mech("Second", total=(0, 1, 0, 0)),
            mech("Third", total=(0, 0, 1, 0)),
        ]
    )

    asc = store.view(sort_field="total", sort_direction="asc")
    desc = store.view(sort_field="total", sort_direction="desc")

    assert _names(asc) == ["First", "Second", "Third", "Big"]
    assert _names(desc) == ["Big", "First", "Second", "Third"]


def test_repeated_sort_is_idempotent(store: CatalogStore) -> None:
    once = store.view(sort_field="cost", sort_direction="desc")
    twice = CatalogStore(once).view(sort_field="cost", sort_direction="desc")

    assert once == twice


@pytest.mark.parametrize(
    ("field", "expected_first"),
    [
        ("name", "Atlas"),
        ("weightClass", "Atlas"),
        ("class", "Atlas"),
        ("tonnage", "Locust"),
        ("cost", "Atlas II"),
        ("energy", "Hunchback"),
        ("ballistic", "Locust"),
        ("missile", "Locust"),
        ("support", "Atlas"),
        ("total", "Locust"),
    ],
)
def test_sortable_fields(store: CatalogStore, field: str, expected_first: str) -> None:
    assert store.view(sort_field=field)[0].name == expected_first


def test_name_sort_ignores_case() -> None:
    store = CatalogStore([mech("banshee"), mech("Atlas"), mech("catapult")])

    assert _names(store.view(sort_field="name")) == ["Atlas", "banshee", "catapult"]


def test_unknown_sort_field_is_rejected(store: CatalogStore) -> None:
    with pytest.raises(ValueError):
        store.view(sort_field="armor")


def test_view_for_uses_view_state(store: CatalogStore) -> None:
    state = ViewState(search="a", class_filter="Assault", sort_field="total", sort_direction="desc")

    assert _names(store.view_for(state)) == ["Atlas II", "Atlas"]


def test_stats_counts_only_known_classes(store: CatalogStore) -> None:
    records = [*store.records, mech("Ghost", "Superheavy")]

    counts = CatalogStore.stats(records)

    assert counts == {"Light": 1, "Medium": 1, "Heavy": 1, "Assault": 2}


def test_export_round_trip(store: CatalogStore) -> None:
    text = store.export_document()

    copy = CatalogStore()
    copy.load_bulk(records_from_export(text))

    assert copy.records == store.records


def test_export_is_pretty_and_includes_total(store: CatalogStore) -> None:
    text = store.export_document()
    doc = json.loads(text)

    assert "\n  " in text
    assert doc[0]["total"] == 5
    assert doc[0]["hardpoints"] == {"energy": 2, "ballistic": 2, "missile": 1, "support": 0}


def test_export_ignores_current_view(store: CatalogStore) -> None:
    store.view(search="atlas")

    assert len(json.loads(store.export_document())) == len(store)


def test_imported_total_is_recomputed() -> None:
    text = json.dumps([{"name": "A", "weightClass": "Light", "tonnage": 20, "hardpoints": {"energy": 2}, "total": 40}])

    (record,) = records_from_export(text)

    assert record.hardpoints == Hardpoints(energy=2)
    assert record.total == 2


def test_records_from_export_errors() -> None:
    with pytest.raises(MalformedInput):
        records_from_export("{not json")
    with pytest.raises(InvalidFormat):
        records_from_export('{"foo": 1}')


def test_export_import_tolerates_out_of_range_counts() -> None:
    text = '[{"name": "Atlas", "weightClass": "Assault", "tonnage": 1e400, "hardpoints": {"energy": 1e400, "ballistic": 2}}]'

    (atlas,) = records_from_export(text)

    assert atlas.hardpoints == Hardpoints(ballistic=2)
    assert atlas.tonnage == 0
