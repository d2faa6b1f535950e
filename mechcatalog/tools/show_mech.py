import argparse
import asyncio
import sys

from .. import config, logging_setup, utils
from ..details import LOCATIONS, MechDetails, load_details
from ..errors import NotFound


def _print_details(d: MechDetails):
    print(d.title)
    print(f"  Tonnage:      {d.weight or '—'}")
    print(f"  Class:        {d.weight_class or '—'}")
    print(f"  Battle Value: {d.battle_value or '—'}")
    print(f"  Year:         {d.year or '—'}")
    print(f"  Cost:         {utils.format_cost(d.cost)} C-Bills")
    print(f"  Manufacturer: {d.manufacturer or '—'}")
    if d.hardpoints:
        print("  Hardpoints:   " + ", ".join(f"{k}={v}" for k, v in d.hardpoints.items()))
    specs = d.tech_specs
    if specs is not None:
        print(f"  Movement:     {specs.movement}")
        print(f"  Armor:        {specs.armor_max} {specs.armor_type}")
        print(f"  Structure:    {specs.structure}")
        print(f"  Engine:       {specs.engine}")
        print(f"  Heat sinks:   {specs.heat_sinks}")
    labels = dict(LOCATIONS)
    for key, loc in d.locations.items():
        print(f"  {labels[key] + ':':<14}{loc.describe()}")


async def _run(*, mech_id: str, source: str) -> int:
    try:
        details = await load_details(source, mech_id)
    except NotFound as exc:
        print(f"record not found: {exc}", file=sys.stderr)
        return 2
    _print_details(details)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Show one mech from the enhanced dataset.")
    parser.add_argument("mech_id", help="Mech id (explicit id, or slug of name and model).")
    parser.add_argument("--source", default=config.MECH_DATA_ENHANCED, help="Enhanced dataset (URL or path).")
    args = parser.parse_args()
    logging_setup.setup_logging()
    try:
        return asyncio.run(_run(mech_id=str(args.mech_id), source=str(args.source)))
    except Exception as exc:
        print(f"show_mech failed: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
