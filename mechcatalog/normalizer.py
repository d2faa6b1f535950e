"""Turns raw mech JSON of any known shape into canonical ``Mech`` records.

Two shapes are recognised and resolved once, here:

* ``RawExport``: the legacy game export (``ChassisID`` + ``Description``
  object, optional ``inventory``, ``MechTags`` and ``HardpointUsage``).
* ``CanonicalRecord``: already-flattened records (``name``, ``weightClass``
  or ``class``, ``hardpoints``), as found in the partially- and
  fully-enhanced datasets.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .errors import InvalidFormat
from .models import (
    DEFAULT_NAME,
    DEFAULT_TONNAGE,
    MEDIUM,
    WEIGHT_CLASSES,
    Hardpoints,
    Mech,
    weight_class_for_tonnage,
)

ENERGY_KEYWORDS = ("laser", "ppc", "flamer", "plasma", "pulse")
BALLISTIC_KEYWORDS = ("ac", "gauss", "machinegun", "lbx", "ultra")
MISSILE_KEYWORDS = ("lrm", "srm", "mr", "narc", "streak", "atm")
# Upgrades containing any of these do not occupy a support hardpoint.
NON_HARDPOINT_UPGRADES = ("CASE", "Artemis", "HeatSink", "Engine")

_TONNAGE_TAG_RE = re.compile(r"unit_tonnage_(\d+)")
_CLASS_BY_NORM = {c.lower(): c for c in WEIGHT_CLASSES}
# Enhanced datasets name the support hardpoint "AntiPersonnel".
_HARDPOINT_ALIASES = {
    "energy": "energy",
    "ballistic": "ballistic",
    "missile": "missile",
    "support": "support",
    "antipersonnel": "support",
}


@dataclass(frozen=True)
class RawExport:
    doc: dict[str, Any]


@dataclass(frozen=True)
class CanonicalRecord:
    doc: dict[str, Any]


SourceShape = RawExport | CanonicalRecord
ALL_SHAPES: tuple[type, ...] = (RawExport, CanonicalRecord)


def classify(raw: object) -> SourceShape:
    if not isinstance(raw, dict):
        raise InvalidFormat(f"Expected a JSON object, got {type(raw).__name__}")

    has_chassis = bool(raw.get("ChassisID"))
    has_description = isinstance(raw.get("Description"), dict)
    if has_chassis and has_description:
        return RawExport(raw)

    has_name = bool(raw.get("name"))
    has_class = bool(raw.get("weightClass") or raw.get("class"))
    has_hardpoints = isinstance(raw.get("hardpoints"), dict)
    if has_name and has_class and has_hardpoints:
        return CanonicalRecord(raw)

    if has_chassis:
        raise InvalidFormat("Mech export is missing its Description object", field="Description")
    if has_description:
        raise InvalidFormat("Mech export is missing ChassisID", field="ChassisID")
    if has_name or has_class or has_hardpoints:
        for key, present in (("name", has_name), ("weightClass", has_class), ("hardpoints", has_hardpoints)):
            if not present:
                raise InvalidFormat(f"Mech record is missing {key}", field=key)
    raise InvalidFormat("Not a mech record: neither ChassisID nor name/weightClass/hardpoints present")


def _to_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        try:
            return int(float(str(value)))
        except (TypeError, ValueError, OverflowError):
            return None


def _non_negative(value: object) -> int:
    n = _to_int(value)
    return n if n is not None and n > 0 else 0


def _hardpoints_from_block(block: dict[str, Any]) -> Hardpoints:
    counts = dict.fromkeys(("energy", "ballistic", "missile", "support"), 0)
    for key, value in block.items():
        kind = _HARDPOINT_ALIASES.get(str(key).strip().lower())
        if kind is None:
            continue
        counts[kind] += _non_negative(value)
    return Hardpoints(**counts)


def _classify_weapon(component_id: str) -> str | None:
    cid = component_id.lower()
    if any(k in cid for k in ENERGY_KEYWORDS):
        return "energy"
    if any(k in cid for k in BALLISTIC_KEYWORDS):
        return "ballistic"
    if any(k in cid for k in MISSILE_KEYWORDS):
        return "missile"
    return None


def hardpoints_from_inventory(inventory: Iterable[object]) -> Hardpoints:
    counts = dict.fromkeys(("energy", "ballistic", "missile", "support"), 0)
    for item in inventory:
        if not isinstance(item, dict):
            continue
        def_type = str(item.get("ComponentDefType") or "")
        def_id = str(item.get("ComponentDefID") or "")
        if def_type == "Weapon":
            kind = _classify_weapon(def_id)
            if kind:
                counts[kind] += 1
        elif def_type == "Upgrade":
            if not any(k in def_id for k in NON_HARDPOINT_UPGRADES):
                counts["support"] += 1
    return Hardpoints(**counts)


def _derive_hardpoints(usage: object, inventory: object) -> Hardpoints:
    if isinstance(usage, dict):
        return _hardpoints_from_block(usage)
    if isinstance(inventory, list):
        return hardpoints_from_inventory(inventory)
    return Hardpoints()


def _tonnage_from_tags(tags: object) -> int | None:
    items = tags.get("items") if isinstance(tags, dict) else tags
    if not isinstance(items, list):
        return None
    for tag in items:
        m = _TONNAGE_TAG_RE.search(str(tag))
        if m:
            return int(m.group(1))
    return None


def _derive_weight(doc: dict[str, Any]) -> tuple[str, int]:
    explicit = _CLASS_BY_NORM.get(str(doc.get("weightClass") or doc.get("class") or "").strip().lower())

    tonnage = None
    for key in ("tonnage", "weight", "Tonnage"):
        tonnage = _to_int(doc.get(key))
        if tonnage is not None and tonnage > 0:
            break
        tonnage = None
    if tonnage is None:
        tonnage = _tonnage_from_tags(doc.get("MechTags"))

    if explicit:
        return explicit, tonnage if tonnage is not None else DEFAULT_TONNAGE
    if tonnage is not None:
        return weight_class_for_tonnage(tonnage), tonnage
    return MEDIUM, DEFAULT_TONNAGE


def _from_raw_export(doc: dict[str, Any], source: str) -> Mech:
    desc = doc["Description"]
    weight_class, tonnage = _derive_weight(doc)
    usage = doc.get("HardpointUsage", doc.get("hardpointUsage"))
    return Mech(
        name=str(desc.get("UIName") or desc.get("Name") or DEFAULT_NAME),
        chassis_id=str(doc.get("ChassisID") or ""),
        model=str(desc.get("Model") or doc.get("model") or ""),
        weight_class=weight_class,
        tonnage=tonnage,
        cost=_non_negative(desc.get("Cost")),
        hardpoints=_derive_hardpoints(usage, doc.get("inventory")),
        details=str(desc.get("Details") or ""),
        source=source,
    )


def _from_canonical(doc: dict[str, Any], source: str) -> Mech:
    weight_class, tonnage = _derive_weight(doc)
    chassis = doc.get("chassisId") or doc.get("chassis") or doc.get("id") or ""
    return Mech(
        name=str(doc.get("name") or DEFAULT_NAME),
        chassis_id=str(chassis),
        model=str(doc.get("model") or ""),
        weight_class=weight_class,
        tonnage=tonnage,
        cost=_non_negative(doc.get("cost")),
        hardpoints=_derive_hardpoints(doc.get("hardpoints"), doc.get("inventory")),
        details=str(doc.get("details") or ""),
        source=source,
    )


def normalize(raw: object, *, source: str, shapes: tuple[type, ...] | None = None) -> Mech:
    """Build a canonical record from ``raw``.

    ``source`` always wins over whatever the document itself says.
    ``shapes`` restricts which shapes are accepted; anything else raises
    ``InvalidFormat`` as if its identifying fields were missing.
    """
    shape = classify(raw)
    allowed = shapes or ALL_SHAPES
    if not isinstance(shape, allowed):
        if isinstance(shape, CanonicalRecord):
            raise InvalidFormat("Expected a raw mech export (ChassisID + Description)", field="ChassisID")
        raise InvalidFormat("Raw mech exports are not accepted here", field="name")
    if isinstance(shape, RawExport):
        return _from_raw_export(shape.doc, source)
    return _from_canonical(shape.doc, source)
