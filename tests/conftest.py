"""Shared pytest fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mechcatalog.catalog import CatalogStore
from mechcatalog.models import SOURCE_CATALOG, SOURCE_UPLOADED, Hardpoints, Mech


def raw_export(
    chassis_id: str,
    name: str,
    *,
    tonnage: int | None = None,
    cost: int = 0,
    inventory: list[dict] | None = None,
) -> dict:
    doc: dict = {
        "ChassisID": chassis_id,
        "Description": {"UIName": name, "Cost": cost},
    }
    if tonnage is not None:
        doc["MechTags"] = {"items": ["unit_mech", f"unit_tonnage_{tonnage}"]}
    if inventory is not None:
        doc["inventory"] = inventory
    return doc


def mech(name: str, weight_class: str = "Medium", *, total: tuple[int, int, int, int] = (0, 0, 0, 0), **kw) -> Mech:
    return Mech(
        name=name,
        weight_class=weight_class,
        tonnage=kw.pop("tonnage", 50),
        hardpoints=Hardpoints(*total),
        **kw,
    )


@pytest.fixture
def atlas_export() -> dict:
    return {
        "ChassisID": "AS7-D",
        "Description": {"UIName": "Atlas", "Cost": 9000000},
        "inventory": [{"ComponentDefType": "Weapon", "ComponentDefID": "Gauss Rifle"}],
        "MechTags": {"items": ["unit_tonnage_100"]},
    }


@pytest.fixture
def store() -> CatalogStore:
    return CatalogStore(
        [
            mech("Atlas", "Assault", chassis_id="AS7-D", tonnage=100, cost=9_000_000, total=(2, 2, 1, 0)),
            mech("Locust", "Light", chassis_id="LCT-1V", tonnage=20, cost=1_500_000, total=(3, 0, 0, 0)),
            mech("Hunchback", "Medium", chassis_id="HBK-4G", tonnage=50, cost=3_500_000, total=(1, 1, 0, 1)),
            mech("Catapult", "Heavy", chassis_id="CPLT-C1", tonnage=65, cost=5_000_000, total=(2, 0, 2, 0)),
            mech("Atlas II", "Assault", chassis_id="AS7-D-DC", tonnage=100, source=SOURCE_UPLOADED, total=(4, 2, 2, 0)),
        ]
    )


@pytest.fixture
def dataset_dir(tmp_path: Path, atlas_export: dict) -> Path:
    enhanced = [
        {
            "id": "atlas-as7-d",
            "name": "Atlas",
            "model": "AS7-D",
            "weight": 100,
            "weightClass": "Assault",
            "cost": 9626000,
            "hardpoints": {"Ballistic": 1, "Energy": 4, "Missile": 1, "AntiPersonnel": 0},
            "techSpecs": {
                "movement": {"walk": 3, "run": 5, "jump": 0},
                "armor": {"type": "Standard", "max": 304},
                "engine": {"rating": 300, "type": "Fusion"},
                "heatSinks": 20,
            },
            "locations": {
                "head": {"armor": 9},
                "centertorso": {"armor": 47, "rearArmor": 14},
                "leftarm": {"armor": 34},
            },
        },
        {
            "name": "Locust",
            "model": "LCT-1V",
            "weight": 20,
            "class": "Light",
            "hardpoints": {"energy": 3},
        },
    ]
    (tmp_path / "enhanced.json").write_text(json.dumps(enhanced), encoding="utf-8")
    (tmp_path / "plain.json").write_text(json.dumps({"mechs": [atlas_export]}), encoding="utf-8")
    return tmp_path
