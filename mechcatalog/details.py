"""Read-only detail view over the enhanced dataset."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from . import utils
from .errors import NotFound
from .models import DEFAULT_NAME, weight_class_for_tonnage
from .sources import extract_records, fetch_document

LOCATIONS = (
    ("head", "Head"),
    ("leftarm", "Left Arm"),
    ("rightarm", "Right Arm"),
    ("lefttorso", "Left Torso"),
    ("righttorso", "Right Torso"),
    ("centertorso", "Center Torso"),
    ("leftleg", "Left Leg"),
    ("rightleg", "Right Leg"),
)
_LOCATION_KEYS = {key for key, _label in LOCATIONS}


def _int(value: object, default: int = 0) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return default


@dataclass(frozen=True)
class TechSpecs:
    walk: int = 0
    run: int = 0
    jump: int = 0
    armor_type: str = "Standard"
    armor_max: int = 0
    structure: str = "Standard"
    engine_rating: int = 0
    engine_type: str = "Fusion"
    heat_sinks: int = 0

    @property
    def movement(self) -> str:
        return f"{self.walk}/{self.run}/{self.jump}"

    @property
    def engine(self) -> str:
        return f"{self.engine_rating} {self.engine_type}"


@dataclass(frozen=True)
class ArmorLocation:
    armor: int = 0
    rear_armor: int | None = None

    def describe(self) -> str:
        if self.rear_armor:
            return f"{self.armor} (+{self.rear_armor} rear)"
        return str(self.armor)


@dataclass(frozen=True)
class MechDetails:
    id: str
    name: str
    model: str = ""
    weight: int | None = None
    weight_class: str = ""
    battle_value: int | None = None
    year: int | None = None
    cost: int = 0
    manufacturer: str = ""
    source: str = ""
    hardpoints: dict[str, int] = field(default_factory=dict)
    tech_specs: TechSpecs | None = None
    locations: dict[str, ArmorLocation] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return f"{self.name} {self.model}".strip()


def mech_id(raw: dict[str, Any]) -> str:
    explicit = str(raw.get("id") or "").strip()
    if explicit:
        return explicit
    return utils.slugify(str(raw.get("name") or ""), str(raw.get("model") or ""))


def _location_key(name: object) -> str:
    return "".join(ch for ch in str(name).lower() if ch.isalnum())


def _parse_tech_specs(specs: object) -> TechSpecs | None:
    if not isinstance(specs, dict):
        return None
    movement = specs.get("movement") if isinstance(specs.get("movement"), dict) else {}
    armor = specs.get("armor") if isinstance(specs.get("armor"), dict) else {}
    engine = specs.get("engine") if isinstance(specs.get("engine"), dict) else {}
    return TechSpecs(
        walk=_int(movement.get("walk")),
        run=_int(movement.get("run")),
        jump=_int(movement.get("jump")),
        armor_type=str(armor.get("type") or "Standard"),
        armor_max=_int(armor.get("max")),
        structure=str(specs.get("structure") or "Standard"),
        engine_rating=_int(engine.get("rating")),
        engine_type=str(engine.get("type") or "Fusion"),
        heat_sinks=_int(specs.get("heatSinks")),
    )


def _parse_locations(locations: object) -> dict[str, ArmorLocation]:
    if not isinstance(locations, dict):
        return {}
    found: dict[str, ArmorLocation] = {}
    for name, data in locations.items():
        key = _location_key(name)
        if key not in _LOCATION_KEYS or not isinstance(data, dict):
            continue
        rear = data.get("rearArmor")
        found[key] = ArmorLocation(
            armor=_int(data.get("armor")),
            rear_armor=_int(rear) if rear is not None else None,
        )
    # keep the fixed head-to-legs display order
    return {key: found[key] for key, _label in LOCATIONS if key in found}


def parse_details(raw: dict[str, Any]) -> MechDetails:
    weight = _int(raw.get("weight", raw.get("tonnage")), default=0) or None
    weight_class = str(raw.get("weightClass") or raw.get("class") or "")
    if not weight_class and weight:
        weight_class = weight_class_for_tonnage(weight)
    hardpoints = raw.get("hardpoints") if isinstance(raw.get("hardpoints"), dict) else {}
    return MechDetails(
        id=mech_id(raw),
        name=str(raw.get("name") or DEFAULT_NAME),
        model=str(raw.get("model") or ""),
        weight=weight,
        weight_class=weight_class,
        battle_value=_int(raw.get("battleValue")) or None,
        year=_int(raw.get("year")) or None,
        cost=max(0, _int(raw.get("cost"))),
        manufacturer=str(raw.get("manufacturer") or ""),
        source=str(raw.get("source") or ""),
        hardpoints={str(k): max(0, _int(v)) for k, v in hardpoints.items()},
        tech_specs=_parse_tech_specs(raw.get("techSpecs")),
        locations=_parse_locations(raw.get("locations")),
    )


def find_details(records: Iterable[object], wanted_id: str) -> MechDetails:
    wanted = str(wanted_id or "").strip()
    for raw in records:
        if isinstance(raw, dict) and mech_id(raw) == wanted:
            return parse_details(raw)
    raise NotFound(wanted)


async def load_details(location: str, wanted_id: str) -> MechDetails:
    records = extract_records(await fetch_document(location))
    return find_details(records, wanted_id)
