from __future__ import annotations

from dataclasses import dataclass, field

LIGHT = "Light"
MEDIUM = "Medium"
HEAVY = "Heavy"
ASSAULT = "Assault"
WEIGHT_CLASSES = (LIGHT, MEDIUM, HEAVY, ASSAULT)

SOURCE_CATALOG = "catalog"
SOURCE_UPLOADED = "uploaded"

HARDPOINT_KINDS = ("energy", "ballistic", "missile", "support")

DEFAULT_NAME = "Unknown Mech"
DEFAULT_TONNAGE = 50


def weight_class_for_tonnage(tonnage: int) -> str:
    if tonnage <= 35:
        return LIGHT
    if tonnage <= 55:
        return MEDIUM
    if tonnage <= 75:
        return HEAVY
    return ASSAULT


def _count(value: object) -> int:
    try:
        n = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, n)


@dataclass(frozen=True)
class Hardpoints:
    energy: int = 0
    ballistic: int = 0
    missile: int = 0
    support: int = 0

    @property
    def total(self) -> int:
        return self.energy + self.ballistic + self.missile + self.support

    def to_dict(self) -> dict[str, int]:
        return {kind: getattr(self, kind) for kind in HARDPOINT_KINDS}

    @classmethod
    def from_dict(cls, data: object) -> Hardpoints:
        if not isinstance(data, dict):
            return cls()
        return cls(**{kind: _count(data.get(kind)) for kind in HARDPOINT_KINDS})


@dataclass(frozen=True)
class Mech:
    """One canonical catalog entry.

    ``total`` is derived from ``hardpoints`` on every read; it is written to
    the wire form for convenience but never read back.
    """

    name: str
    weight_class: str
    tonnage: int
    chassis_id: str = ""
    model: str = ""
    cost: int = 0
    hardpoints: Hardpoints = field(default_factory=Hardpoints)
    details: str = ""
    source: str = SOURCE_CATALOG

    @property
    def total(self) -> int:
        return self.hardpoints.total

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "chassisId": self.chassis_id,
            "model": self.model,
            "weightClass": self.weight_class,
            "tonnage": self.tonnage,
            "cost": self.cost,
            "hardpoints": self.hardpoints.to_dict(),
            "total": self.total,
            "details": self.details,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Mech:
        tonnage = _count(data.get("tonnage", DEFAULT_TONNAGE))
        return cls(
            name=str(data.get("name") or DEFAULT_NAME),
            chassis_id=str(data.get("chassisId") or ""),
            model=str(data.get("model") or ""),
            weight_class=str(data.get("weightClass") or weight_class_for_tonnage(tonnage)),
            tonnage=tonnage,
            cost=_count(data.get("cost")),
            hardpoints=Hardpoints.from_dict(data.get("hardpoints")),
            details=str(data.get("details") or ""),
            source=str(data.get("source") or SOURCE_CATALOG),
        )
