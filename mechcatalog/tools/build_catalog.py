import argparse
import asyncio
import sys

from .. import config, logging_setup, presenter, sources, static_site
from ..catalog import ALL_CLASSES, ASC, DESC, SORT_FIELDS, resolve_sort_field
from ..errors import CatalogError
from ..models import WEIGHT_CLASSES
from ..storage import BlobStore


async def _enhanced_records(location: str) -> list:
    try:
        return sources.extract_records(await sources.fetch_document(location))
    except CatalogError as exc:
        print(f"detail pages skipped: {exc}", file=sys.stderr)
        return []


async def _run(args: argparse.Namespace) -> int:
    cache = None
    if config.CACHE_ENABLED and not args.no_cache:
        cache = BlobStore(args.cache_db)
    session = presenter.CatalogSession(target=presenter.ConsoleRenderTarget(), cache=cache)

    session.state.search = args.search
    session.state.class_filter = args.weight_class
    session.state.sort_field = resolve_sort_field(args.sort)
    session.state.sort_direction = DESC if args.desc else ASC

    loaded = await session.load(args.enhanced, args.plain or None)

    if args.upload:
        report = await session.upload(args.upload)
        for name, message in report.errors:
            print(f"  {name}: {message}", file=sys.stderr)

    if args.reset:
        admin = presenter.admin_enabled(args.query)
        removed = await session.reset(confirmed=bool(args.yes), admin=admin)
        if admin and not args.yes:
            print("reset skipped: pass --yes to confirm")
        elif admin:
            print(f"reset: removed={removed}")

    if args.export:
        session.export(args.export)

    if args.output_dir:
        enhanced = await _enhanced_records(args.enhanced) if loaded else []
        result = static_site.generate_static_site(
            session,
            output_dir=args.output_dir,
            enhanced=enhanced,
        )
        print(
            "static generated: "
            f"dir={result.get('output_dir')} "
            f"mechs={result.get('mech_count', 0)} "
            f"details={result.get('detail_count', 0)}"
        )
    problems = logging_setup.recent_problems()
    if problems:
        print(f"problems: {len(problems)}", file=sys.stderr)
        for level, name, message in problems:
            print(f"  {level} {name}: {message}", file=sys.stderr)
    return 0 if loaded else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Load the mech dataset, apply uploads and render the catalog.")
    parser.add_argument("--enhanced", default=config.MECH_DATA_ENHANCED, help="Preferred dataset (URL or path).")
    parser.add_argument("--plain", default=config.MECH_DATA_PLAIN, help="Fallback dataset (URL or path).")
    parser.add_argument("--upload", nargs="+", metavar="FILE", help="Raw mech JSON files to import.")
    parser.add_argument("--search", default="", help="Case-insensitive name filter.")
    parser.add_argument(
        "--class",
        dest="weight_class",
        default=ALL_CLASSES,
        choices=[ALL_CLASSES, *WEIGHT_CLASSES],
        help="Weight class filter (default: all).",
    )
    parser.add_argument("--sort", default="name", choices=[*SORT_FIELDS, "class"], help="Sort field.")
    parser.add_argument("--desc", action="store_true", help="Sort descending.")
    parser.add_argument("--export", metavar="PATH", help=f"Write the whole collection as JSON (e.g. {config.EXPORT_FILENAME}).")
    parser.add_argument("--reset", action="store_true", help="Remove uploaded mechs (needs --query admin and --yes).")
    parser.add_argument("--yes", action="store_true", help="Confirm destructive actions.")
    parser.add_argument("--query", default="", help="Page query string, e.g. 'admin' or '?admin=1'.")
    parser.add_argument("--output-dir", default="", help="Write the static site to this directory.")
    parser.add_argument("--cache-db", default=config.CACHE_DB_PATH, help="SQLite cache for uploaded mechs.")
    parser.add_argument("--no-cache", action="store_true", help="Do not read or write the upload cache.")
    args = parser.parse_args()
    logging_setup.setup_logging()
    logging_setup.clear_problems()
    try:
        return asyncio.run(_run(args))
    except Exception as exc:
        print(f"build_catalog failed: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
