"""Tests for the command-line tools."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from conftest import raw_export
from mechcatalog.tools import build_catalog, show_mech


@pytest.fixture(autouse=True)
def _isolated_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_PATH", str(tmp_path / "test.log"))


def _argv(monkeypatch: pytest.MonkeyPatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["prog", *args])


def test_build_catalog_renders_and_writes_site(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], dataset_dir: Path
) -> None:
    site = dataset_dir / "site"
    _argv(
        monkeypatch,
        "--enhanced", str(dataset_dir / "enhanced.json"),
        "--plain", "",
        "--no-cache",
        "--search", "atl",
        "--output-dir", str(site),
    )

    assert build_catalog.main() == 0

    out = capsys.readouterr().out
    assert "Atlas" in out
    assert "Locust" not in out
    assert "static generated:" in out
    assert (site / "mech" / "atlas-as7-d.html").exists()


def test_build_catalog_upload_export_and_reset(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], dataset_dir: Path
) -> None:
    upload = dataset_dir / "commando.json"
    upload.write_text(json.dumps(raw_export("COM-2D", "Commando", tonnage=25)), encoding="utf-8")
    export = dataset_dir / "export.json"
    cache = str(dataset_dir / "cache.db")
    enhanced = str(dataset_dir / "enhanced.json")

    _argv(monkeypatch, "--enhanced", enhanced, "--cache-db", cache, "--upload", str(upload), "--export", str(export))
    assert build_catalog.main() == 0
    assert [row["name"] for row in json.loads(export.read_text(encoding="utf-8"))] == ["Atlas", "Locust", "Commando"]

    _argv(monkeypatch, "--enhanced", enhanced, "--cache-db", cache, "--reset", "--query", "?admin", "--yes")
    assert build_catalog.main() == 0
    assert "reset: removed=1" in capsys.readouterr().out


def test_build_catalog_reports_unavailable_dataset(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _argv(monkeypatch, "--enhanced", str(tmp_path / "x.json"), "--plain", str(tmp_path / "y.json"), "--no-cache")

    assert build_catalog.main() == 1


def test_show_mech(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], dataset_dir: Path) -> None:
    _argv(monkeypatch, "atlas-as7-d", "--source", str(dataset_dir / "enhanced.json"))

    assert show_mech.main() == 0

    out = capsys.readouterr().out
    assert out.splitlines()[0] == "Atlas AS7-D"
    assert "Center Torso:" in out
    assert "47 (+14 rear)" in out


def test_show_mech_not_found(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], dataset_dir: Path) -> None:
    _argv(monkeypatch, "nope", "--source", str(dataset_dir / "enhanced.json"))

    assert show_mech.main() == 2
    assert "record not found" in capsys.readouterr().err


def test_build_catalog_lists_rejected_uploads(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], dataset_dir: Path
) -> None:
    bad = dataset_dir / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    _argv(monkeypatch, "--enhanced", str(dataset_dir / "enhanced.json"), "--no-cache", "--upload", str(bad))

    assert build_catalog.main() == 0

    err = capsys.readouterr().err
    assert "bad.json" in err
    assert "problems: 1" in err
