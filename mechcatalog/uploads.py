from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .catalog import INSERTED, CatalogStore
from .errors import CatalogError
from .models import SOURCE_UPLOADED, Mech
from .normalizer import RawExport, normalize
from .sources import fetch_text, parse_json_text

log = logging.getLogger(__name__)


@dataclass
class UploadReport:
    inserted: int = 0
    replaced: int = 0
    mechs: list[Mech] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)

    @property
    def loaded(self) -> int:
        return self.inserted + self.replaced

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        if self.errors:
            return f"Loaded {self.loaded} mechs. Errors: {len(self.errors)}"
        return f"Successfully loaded {self.loaded} mechs"


def parse_upload(text: str) -> Mech:
    return normalize(parse_json_text(text), source=SOURCE_UPLOADED, shapes=(RawExport,))


async def import_files(store: CatalogStore, paths: Iterable[str | Path]) -> UploadReport:
    """
    Read, normalize and upsert each file in turn.
    A failing file is recorded and the batch continues.
    """
    report = UploadReport()
    for path in paths:
        name = Path(path).name
        try:
            mech = parse_upload(await fetch_text(str(path)))
        except CatalogError as exc:
            log.warning("Upload %s rejected: %s", name, exc)
            report.errors.append((name, str(exc)))
            continue
        if store.upsert(mech) == INSERTED:
            report.inserted += 1
        else:
            report.replaced += 1
        report.mechs.append(mech)
    log.info(
        "Upload batch done: inserted=%s replaced=%s errors=%s",
        report.inserted,
        report.replaced,
        len(report.errors),
    )
    return report
