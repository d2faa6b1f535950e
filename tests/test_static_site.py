"""Tests for static catalog site generation."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from mechcatalog.models import Hardpoints, Mech
from mechcatalog.presenter import EMPTY_MESSAGE, CatalogSession
from mechcatalog.static_site import HtmlRenderTarget, generate_static_site


def _loaded_session(dataset_dir: Path) -> CatalogSession:
    session = CatalogSession(target=HtmlRenderTarget())
    asyncio.run(session.load(str(dataset_dir / "enhanced.json")))
    return session


def test_html_target_renders_rows_and_counters() -> None:
    target = HtmlRenderTarget()
    mech = Mech(name="<Atlas>", weight_class="Assault", tonnage=100, hardpoints=Hardpoints(1, 2, 3, 0))

    target.render([mech], {"Assault": 1, "total": 1})

    assert "&lt;Atlas&gt;" in target.table_body
    assert "class-assault" in target.table_body
    assert "<strong>6</strong>" in target.table_body
    assert "empty-row hidden" in target.table_body
    assert target.counters == {"Assault": 1, "total": 1}


def test_html_target_renders_empty_state() -> None:
    target = HtmlRenderTarget()

    target.render([], {"total": 0})

    assert "data-row" not in target.table_body
    assert EMPTY_MESSAGE in target.table_body
    assert "empty-row hidden" not in target.table_body


def test_generate_static_site(dataset_dir: Path, tmp_path: Path) -> None:
    session = _loaded_session(dataset_dir)
    enhanced = json.loads((dataset_dir / "enhanced.json").read_text(encoding="utf-8"))
    out = tmp_path / "site"

    result = generate_static_site(session, output_dir=str(out), enhanced=enhanced, page_title="Mechs")

    assert result["mech_count"] == 2
    assert result["detail_count"] == 2
    for name in ("index.html", "styles.css", "app.js", "mechs.json"):
        assert (out / name).exists()
    index = (out / "index.html").read_text(encoding="utf-8")
    assert "<title>Mechs</title>" in index
    assert 'href="mech/atlas-as7-d.html"' in index
    assert 'id="assaultCount">1<' in index
    detail = (out / "mech" / "atlas-as7-d.html").read_text(encoding="utf-8")
    assert "Atlas AS7-D" in detail
    assert "47 (+14 rear)" in detail
    assert "9,626,000 C-Bills" in detail
    assert len(json.loads((out / "mechs.json").read_text(encoding="utf-8"))) == 2


def test_generate_static_site_after_failed_load(tmp_path: Path) -> None:
    session = CatalogSession(target=HtmlRenderTarget())
    asyncio.run(session.load(str(tmp_path / "missing.json")))

    generate_static_site(session, output_dir=str(tmp_path / "site"))

    index = (tmp_path / "site" / "index.html").read_text(encoding="utf-8")
    assert "Failed to load data" in index
    assert EMPTY_MESSAGE in index
