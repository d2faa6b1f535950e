from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import InvalidFormat
from .models import WEIGHT_CLASSES, Mech
from .sources import parse_json_text
from . import utils

log = logging.getLogger(__name__)

ALL_CLASSES = "all"
ASC = "asc"
DESC = "desc"

INSERTED = "inserted"
REPLACED = "replaced"

_SORT_KEYS: dict[str, Callable[[Mech], Any]] = {
    "name": lambda m: m.name.casefold(),
    "weightClass": lambda m: m.weight_class.casefold(),
    "tonnage": lambda m: m.tonnage,
    "cost": lambda m: m.cost,
    "energy": lambda m: m.hardpoints.energy,
    "ballistic": lambda m: m.hardpoints.ballistic,
    "missile": lambda m: m.hardpoints.missile,
    "support": lambda m: m.hardpoints.support,
    "total": lambda m: m.total,
}
_SORT_ALIASES = {"class": "weightClass"}
SORT_FIELDS = tuple(_SORT_KEYS)


def resolve_sort_field(field: str) -> str:
    key = _SORT_ALIASES.get(field, field)
    if key not in _SORT_KEYS:
        raise ValueError(f"Unsupported sort field: {field}")
    return key


@dataclass
class ViewState:
    search: str = ""
    class_filter: str = ALL_CLASSES
    sort_field: str = "name"
    sort_direction: str = ASC


class CatalogStore:
    """In-memory collection of canonical mechs, in insertion order."""

    def __init__(self, records: Iterable[Mech] = ()):
        self._records: list[Mech] = list(records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[Mech, ...]:
        return tuple(self._records)

    def load_bulk(self, records: Iterable[Mech]) -> None:
        self._records = list(records)
        log.debug("Catalog loaded with %s records", len(self._records))

    def upsert(self, record: Mech) -> str:
        if record.chassis_id:
            for i, existing in enumerate(self._records):
                if existing.chassis_id == record.chassis_id:
                    self._records[i] = record
                    return REPLACED
        self._records.append(record)
        return INSERTED

    def remove_where(self, predicate: Callable[[Mech], bool]) -> int:
        kept = [m for m in self._records if not predicate(m)]
        removed = len(self._records) - len(kept)
        self._records = kept
        return removed

    def view(
        self,
        *,
        search: str = "",
        class_filter: str = ALL_CLASSES,
        sort_field: str = "name",
        sort_direction: str = ASC,
    ) -> list[Mech]:
        key = _SORT_KEYS[resolve_sort_field(sort_field)]
        needle = utils.norm_text(search)
        rows = [
            m for m in self._records
            if (not needle or needle in utils.norm_text(m.name))
            and (class_filter == ALL_CLASSES or m.weight_class == class_filter)
        ]
        # sorted() is stable in both directions, so ties keep their prior order.
        return sorted(rows, key=key, reverse=sort_direction == DESC)

    def view_for(self, state: ViewState) -> list[Mech]:
        return self.view(
            search=state.search,
            class_filter=state.class_filter,
            sort_field=state.sort_field,
            sort_direction=state.sort_direction,
        )

    @staticmethod
    def stats(records: Sequence[Mech]) -> dict[str, int]:
        counts = dict.fromkeys(WEIGHT_CLASSES, 0)
        for m in records:
            if m.weight_class in counts:
                counts[m.weight_class] += 1
        return counts

    def export_document(self) -> str:
        return json.dumps([m.to_dict() for m in self._records], ensure_ascii=False, indent=2)


def records_from_export(text: str) -> list[Mech]:
    doc = parse_json_text(text)
    if isinstance(doc, dict):
        doc = doc.get("mechs")
    if not isinstance(doc, list):
        raise InvalidFormat("Export document must be a list of mechs", field="mechs")
    out: list[Mech] = []
    for i, row in enumerate(doc):
        if not isinstance(row, dict):
            raise InvalidFormat(f"Export entry {i} is not an object")
        out.append(Mech.from_dict(row))
    return out
