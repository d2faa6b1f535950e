from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol, TextIO
from urllib.parse import parse_qs, urlsplit

import aiosqlite

from . import config, sources, uploads, utils
from .catalog import ALL_CLASSES, ASC, DESC, CatalogStore, ViewState, records_from_export, resolve_sort_field
from .errors import CatalogError
from .models import SOURCE_UPLOADED, WEIGHT_CLASSES, Mech
from .storage import BlobStore

log = logging.getLogger(__name__)

EMPTY_MESSAGE = "No mechs match the current filters"


class RenderTarget(Protocol):
    def render(self, visible: Sequence[Mech], stats: dict[str, int]) -> None: ...

    def notify(self, message: str, kind: str = "info") -> None: ...


def admin_enabled(url_or_query: str | None, flag: str | None = None) -> bool:
    """Presence check for the admin flag (``?admin``); cosmetic, not access control."""
    raw = str(url_or_query or "").strip()
    if not raw:
        return False
    query = urlsplit(raw).query if "?" in raw or "://" in raw else raw
    params = parse_qs(query, keep_blank_values=True)
    return (flag or config.ADMIN_QUERY_FLAG) in params


class CatalogSession:
    """
    Application context: the store, the current view state, the optional
    cache and the render target. Every event handler makes one store or
    normalizer call and re-renders.
    """

    def __init__(
        self,
        store: CatalogStore | None = None,
        *,
        target: RenderTarget,
        cache: BlobStore | None = None,
        cache_key: str | None = None,
    ):
        self.store = store if store is not None else CatalogStore()
        self.state = ViewState()
        self.target = target
        self.cache = cache
        self.cache_key = cache_key or config.CACHE_KEY
        self.error: str | None = None

    def visible(self) -> list[Mech]:
        if self.error:
            return []
        return self.store.view_for(self.state)

    def stats(self) -> dict[str, int]:
        records = self.store.records
        counts = self.store.stats(records)
        counts["total"] = len(records)
        return counts

    def refresh(self) -> list[Mech]:
        visible = self.visible()
        self.target.render(visible, self.stats())
        return visible

    async def load(self, primary: str, fallback: str | None = None) -> bool:
        try:
            mechs = await sources.load_catalog(primary, fallback)
        except CatalogError as exc:
            log.error("Catalog load failed: %s", exc)
            self.store.load_bulk([])
            self.error = str(exc)
            self.target.notify(f"Failed to load data: {exc}", "error")
            self.refresh()
            return False

        cached = await self._read_cache()
        self.store.load_bulk(mechs)
        for mech in cached:
            self.store.upsert(mech)
        self.error = None
        self.refresh()
        return True

    def set_search(self, text: str) -> list[Mech]:
        self.state.search = str(text or "")
        return self.refresh()

    def set_class_filter(self, value: str) -> list[Mech]:
        value = str(value or ALL_CLASSES)
        if value != ALL_CLASSES and value not in WEIGHT_CLASSES:
            raise ValueError(f"Unknown weight class: {value}")
        self.state.class_filter = value
        return self.refresh()

    def set_sort_field(self, field: str, direction: str | None = None) -> list[Mech]:
        self.state.sort_field = resolve_sort_field(field)
        if direction is not None:
            if direction not in (ASC, DESC):
                raise ValueError(f"Unknown sort direction: {direction}")
            self.state.sort_direction = direction
        return self.refresh()

    def toggle_header(self, field: str) -> list[Mech]:
        key = resolve_sort_field(field)
        if self.state.sort_field == key:
            self.state.sort_direction = DESC if self.state.sort_direction == ASC else ASC
        else:
            self.state.sort_field = key
            self.state.sort_direction = ASC
        return self.refresh()

    async def upload(self, paths: Iterable[str | Path]) -> uploads.UploadReport:
        report = await uploads.import_files(self.store, paths)
        if report.loaded:
            await self._write_cache()
        self.target.notify(report.summary(), "error" if report.errors else "success")
        self.refresh()
        return report

    def export(self, path: str | Path | None = None) -> str:
        text = self.store.export_document()
        if path is not None:
            out = Path(path)
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(text, encoding="utf-8")
            self.target.notify(f"Data exported to {out}", "success")
        return text

    async def reset(self, *, confirmed: bool, admin: bool) -> int:
        if not admin:
            self.target.notify("Reset is only available in admin mode", "error")
            return 0
        if not confirmed:
            return 0
        removed = self.store.remove_where(lambda m: m.source == SOURCE_UPLOADED)
        await self._clear_cache()
        log.info("Reset removed %s uploaded mechs", removed)
        self.target.notify(f"Data reset: removed {removed} uploaded mechs", "success")
        self.refresh()
        return removed

    async def _read_cache(self) -> list[Mech]:
        if self.cache is None:
            return []
        try:
            text = await self.cache.get(self.cache_key)
            if not text:
                return []
            return [m for m in records_from_export(text) if m.source == SOURCE_UPLOADED]
        except (aiosqlite.Error, OSError, CatalogError) as exc:
            log.warning("Could not restore cached uploads: %s", exc)
            return []

    async def _write_cache(self):
        if self.cache is None:
            return
        uploaded = [m.to_dict() for m in self.store.records if m.source == SOURCE_UPLOADED]
        try:
            await self.cache.put(self.cache_key, json.dumps(uploaded, ensure_ascii=False))
        except (aiosqlite.Error, OSError) as exc:
            log.warning("Could not cache uploaded mechs: %s", exc)

    async def _clear_cache(self):
        if self.cache is None:
            return
        try:
            await self.cache.delete(self.cache_key)
        except (aiosqlite.Error, OSError) as exc:
            log.warning("Could not clear cached uploads: %s", exc)


class ConsoleRenderTarget:
    HEADER = ["Name", "Class", "Tons", "E", "B", "M", "S", "Total"]

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stdout

    def _print(self, text: str = ""):
        print(text, file=self.stream)

    def render(self, visible: Sequence[Mech], stats: dict[str, int]) -> None:
        if not visible:
            self._print(EMPTY_MESSAGE)
        else:
            rows = [self.HEADER]
            for m in visible:
                hp = m.hardpoints
                rows.append(
                    [
                        utils.clip(m.name, 32),
                        m.weight_class,
                        str(m.tonnage),
                        str(hp.energy),
                        str(hp.ballistic),
                        str(hp.missile),
                        str(hp.support),
                        str(m.total),
                    ]
                )
            widths = [max(len(r[i]) for r in rows) for i in range(len(self.HEADER))]
            self._print(utils.fmt_table(rows, widths, right_from=2))
        counters = " ".join(f"{c}={stats.get(c, 0)}" for c in reversed(WEIGHT_CLASSES))
        self._print(f"total={stats.get('total', 0)} {counters}")

    def notify(self, message: str, kind: str = "info") -> None:
        self._print(f"[{kind}] {message}")
