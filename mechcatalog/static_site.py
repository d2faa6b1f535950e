from __future__ import annotations

from collections.abc import Iterable, Sequence
from html import escape
from pathlib import Path

from . import config, utils
from .details import LOCATIONS, MechDetails, parse_details
from .models import HARDPOINT_KINDS, WEIGHT_CLASSES, Mech
from .presenter import EMPTY_MESSAGE, CatalogSession

_COLUMNS = (
    ("name", "Name"),
    ("weightClass", "Class"),
    ("energy", "Energy"),
    ("ballistic", "Ballistic"),
    ("missile", "Missile"),
    ("support", "Support"),
    ("total", "Total"),
)


def _safe_web_text(value: object, *, fallback: str = "—", quote: bool = False) -> str:
    raw = str(value) if value is not None else fallback
    if not raw:
        raw = fallback
    cleaned = "".join(ch for ch in raw if ch == "\n" or ord(ch) >= 32)
    return escape(cleaned, quote=quote)


def _detail_href(details_id: str) -> str:
    return f"mech/{utils.slugify(details_id) or 'mech'}.html"


class HtmlRenderTarget:
    """Keeps the last rendered table body, counters and notifications as HTML."""

    def __init__(self, *, detail_ids: dict[str, str] | None = None):
        # slug(name, model) -> detail page id
        self.detail_ids = detail_ids or {}
        self.table_body = ""
        self.counters: dict[str, int] = {}
        self.messages: list[tuple[str, str]] = []

    def _name_cell(self, mech: Mech) -> str:
        name = _safe_web_text(mech.name, fallback="Unknown Mech")
        details_id = self.detail_ids.get(utils.slugify(mech.name, mech.model))
        if not details_id:
            return name
        href = _safe_web_text(_detail_href(details_id), quote=True)
        return f"<a class=\"mech-link\" href=\"{href}\">{name}</a>"

    def _row(self, mech: Mech) -> str:
        hp = mech.hardpoints
        cls = _safe_web_text(mech.weight_class)
        attrs = (
            f" data-name=\"{_safe_web_text(utils.norm_text(mech.name), quote=True, fallback='')}\""
            f" data-weight-class=\"{_safe_web_text(mech.weight_class, quote=True)}\""
            f" data-tonnage=\"{mech.tonnage}\" data-cost=\"{mech.cost}\""
            + "".join(f" data-{kind}=\"{getattr(hp, kind)}\"" for kind in HARDPOINT_KINDS)
            + f" data-total=\"{mech.total}\""
        )
        cells = "".join(
            f"<td><span class=\"hardpoint-cell hardpoint-{kind}\">{getattr(hp, kind)}</span></td>"
            for kind in HARDPOINT_KINDS
        )
        return (
            f"<tr class=\"data-row\"{attrs}>"
            f"<td class=\"mech-name\">{self._name_cell(mech)}</td>"
            f"<td><span class=\"class-badge class-{cls.lower()}\">{cls}</span></td>"
            f"{cells}"
            f"<td><strong>{mech.total}</strong></td>"
            "</tr>"
        )

    def render(self, visible: Sequence[Mech], stats: dict[str, int]) -> None:
        empty_hidden = " hidden" if visible else ""
        self.table_body = "".join(self._row(m) for m in visible) + (
            f"<tr class=\"empty-row{empty_hidden}\"><td colspan=\"{len(_COLUMNS)}\">"
            f"{escape(EMPTY_MESSAGE)}</td></tr>"
        )
        self.counters = dict(stats)

    def notify(self, message: str, kind: str = "info") -> None:
        self.messages.append((kind, message))


def _index_html(*, page_title: str, target: HtmlRenderTarget) -> str:
    safe_title = _safe_web_text(page_title)
    class_options = "".join(
        f"<option value=\"{c}\">{c}</option>" for c in WEIGHT_CLASSES
    )
    headers = "".join(
        f"<th data-sort=\"{key}\">{label}</th>" for key, label in _COLUMNS
    )
    counters = "".join(
        f"<div class=\"stat\"><span class=\"stat-value\" id=\"{c.lower()}Count\">"
        f"{target.counters.get(c, 0)}</span><span class=\"stat-label\">{c}</span></div>"
        for c in reversed(WEIGHT_CLASSES)
    )
    notes = "".join(
        f"<p class=\"notification {_safe_web_text(kind, quote=True)}\">{_safe_web_text(msg)}</p>"
        for kind, msg in target.messages
    )
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{safe_title}</title>
  <link rel="stylesheet" href="./styles.css">
</head>
<body>
  <main class="wrap">
    <section class="hero">
      <h1>{safe_title}</h1>
      <div class="stats">
        <div class="stat"><span class="stat-value" id="totalMechs">{target.counters.get("total", 0)}</span><span class="stat-label">Total</span></div>
        {counters}
      </div>
    </section>
    {notes}
    <div class="view-controls">
      <div class="filter-item filter-search">
        <label for="searchInput">Search</label>
        <input id="searchInput" type="search" placeholder="Search mech name">
      </div>
      <div class="filter-item">
        <label for="classFilter">Class</label>
        <select id="classFilter">
          <option value="all">All classes</option>
          {class_options}
        </select>
      </div>
      <a class="export-link" href="./mechs.json" download="{_safe_web_text(config.EXPORT_FILENAME, quote=True)}">Export JSON</a>
      <span id="resultCount" class="view-label"></span>
    </div>
    <table class="mech-table">
      <thead><tr>{headers}</tr></thead>
      <tbody id="tableBody">{target.table_body}</tbody>
    </table>
  </main>
  <script src="./app.js"></script>
</body>
</html>
"""


def _detail_html(details: MechDetails) -> str:
    title = _safe_web_text(details.title)
    basic = [
        ("Model", details.model or "—"),
        ("Tonnage", f"{details.weight} tons" if details.weight else "—"),
        ("Class", details.weight_class or "—"),
        ("Battle Value", details.battle_value or "—"),
        ("Year", details.year or "—"),
        ("Cost", f"{utils.format_cost(details.cost)} C-Bills" if details.cost else "—"),
        ("Manufacturer", details.manufacturer or "—"),
        ("Source", details.source or "—"),
    ]
    basic_html = "".join(
        f"<div class=\"info-item\"><span class=\"info-label\">{label}</span>"
        f"<span class=\"info-value\">{_safe_web_text(value)}</span></div>"
        for label, value in basic
    )
    if details.hardpoints:
        hardpoints_html = "".join(
            f"<div class=\"info-item\"><span class=\"info-label\">{_safe_web_text(kind)}</span>"
            f"<span class=\"info-value\">{count}</span></div>"
            for kind, count in details.hardpoints.items()
        )
    else:
        hardpoints_html = "<p>No hardpoint data</p>"
    specs = details.tech_specs
    if specs is not None:
        spec_rows = [
            ("Movement (Walk/Run/Jump)", specs.movement),
            ("Max armor", specs.armor_max),
            ("Armor type", specs.armor_type),
            ("Structure", specs.structure),
            ("Engine", specs.engine),
            ("Heat sinks", specs.heat_sinks),
        ]
        specs_html = "".join(
            f"<div class=\"info-item\"><span class=\"info-label\">{label}</span>"
            f"<span class=\"info-value\">{_safe_web_text(value)}</span></div>"
            for label, value in spec_rows
        )
    else:
        specs_html = "<p>No technical specifications</p>"
    labels = dict(LOCATIONS)
    if details.locations:
        armor_html = "".join(
            f"<div class=\"info-item\"><span class=\"info-label\">{labels[key]}</span>"
            f"<span class=\"info-value\">{_safe_web_text(loc.describe())}</span></div>"
            for key, loc in details.locations.items()
        )
    else:
        armor_html = "<p>No armor data</p>"
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{title}</title>
  <link rel="stylesheet" href="../styles.css">
</head>
<body>
  <main class="wrap mech-details">
    <p><a href="../index.html">&larr; Back to catalog</a></p>
    <h1>{title}</h1>
    <section><h2>Basic info</h2><div class="info-grid">{basic_html}</div></section>
    <section><h2>Hardpoints</h2><div class="info-grid">{hardpoints_html}</div></section>
    <section><h2>Technical specs</h2><div class="info-grid">{specs_html}</div></section>
    <section><h2>Armor</h2><div class="info-grid">{armor_html}</div></section>
  </main>
</body>
</html>
"""


def _styles_css() -> str:
    return """:root {
  --bg-0: #0b1221;
  --bg-1: #131f37;
  --line: #2c3c5f;
  --text: #ecf1ff;
  --muted: #adc0ea;
  --accent: #6ee7ff;
  --energy: #6ef0b6;
  --ballistic: #f0c36e;
  --missile: #f07a6e;
  --support: #b58cff;
}
*, *::before, *::after {
  box-sizing: border-box;
}
body {
  margin: 0;
  color: var(--text);
  font-family: "IBM Plex Sans", "Segoe UI", sans-serif;
  background: linear-gradient(180deg, var(--bg-0), var(--bg-1));
  min-height: 100vh;
}
a { color: var(--accent); }
.wrap {
  width: min(1200px, 94vw);
  margin: 28px auto 64px;
}
.hero {
  border: 1px solid var(--line);
  border-radius: 22px;
  padding: 22px 24px;
  background: linear-gradient(135deg, #122746ee, #1b3f70cc);
  text-align: center;
}
h1 {
  margin: 0 0 12px;
  font-size: clamp(1.5rem, 4vw, 2.6rem);
}
.stats {
  display: flex;
  justify-content: center;
  gap: 18px;
  flex-wrap: wrap;
}
.stat { display: flex; flex-direction: column; min-width: 72px; }
.stat-value { font-size: 1.6rem; font-weight: 700; }
.stat-label { color: var(--muted); font-size: 0.85rem; }
.notification { padding: 8px 12px; border-radius: 10px; border: 1px solid var(--line); }
.notification.error { border-color: var(--missile); }
.notification.success { border-color: var(--energy); }
.view-controls {
  display: flex;
  align-items: end;
  gap: 14px;
  flex-wrap: wrap;
  margin: 22px 0 14px;
}
.filter-item { display: flex; flex-direction: column; gap: 4px; }
.filter-item label { color: var(--muted); font-size: 0.85rem; }
input, select {
  background: #0f1729;
  color: var(--text);
  border: 1px solid var(--line);
  border-radius: 8px;
  padding: 6px 10px;
}
.view-label { margin-left: auto; color: var(--muted); }
.mech-table { width: 100%; border-collapse: collapse; }
.mech-table th, .mech-table td {
  padding: 8px 10px;
  border-bottom: 1px solid var(--line);
  text-align: left;
}
.mech-table th[data-sort] { cursor: pointer; user-select: none; }
.mech-table th.sort-asc::after { content: " \\25B2"; }
.mech-table th.sort-desc::after { content: " \\25BC"; }
.hidden { display: none; }
.empty-row td { text-align: center; color: var(--muted); padding: 24px; }
.class-badge { padding: 2px 8px; border-radius: 999px; border: 1px solid var(--line); }
.class-light { color: var(--energy); }
.class-medium { color: var(--accent); }
.class-heavy { color: var(--ballistic); }
.class-assault { color: var(--missile); }
.hardpoint-energy { color: var(--energy); }
.hardpoint-ballistic { color: var(--ballistic); }
.hardpoint-missile { color: var(--missile); }
.hardpoint-support { color: var(--support); }
.info-grid {
  display: grid;
  grid-template-columns: repeat(auto-fill, minmax(220px, 1fr));
  gap: 10px;
}
.info-item {
  display: flex;
  justify-content: space-between;
  border: 1px solid var(--line);
  border-radius: 10px;
  padding: 8px 12px;
}
.info-label { color: var(--muted); }
"""


def _app_js() -> str:
    return """const searchInput = document.getElementById("searchInput");
const classFilter = document.getElementById("classFilter");
const tableBody = document.getElementById("tableBody");
const resultCount = document.getElementById("resultCount");
const headers = Array.from(document.querySelectorAll("th[data-sort]"));
const rows = Array.from(tableBody.querySelectorAll("tr.data-row"));
const emptyRow = tableBody.querySelector("tr.empty-row");
const NUMERIC = new Set(["tonnage", "cost", "energy", "ballistic", "missile", "support", "total"]);

const state = { field: "name", direction: "asc" };

function sortValue(row, field) {
  const attr = field === "weightClass" ? "weight-class" : field;
  const raw = row.getAttribute(`data-${attr}`) || "";
  return NUMERIC.has(field) ? Number(raw) : raw.toLowerCase();
}

function applyView() {
  const needle = searchInput.value.trim().toLowerCase();
  const cls = classFilter.value;
  const visible = rows.filter((row) => {
    const matchesSearch = !needle || (row.getAttribute("data-name") || "").includes(needle);
    const matchesClass = cls === "all" || row.getAttribute("data-weight-class") === cls;
    return matchesSearch && matchesClass;
  });
  const sign = state.direction === "asc" ? 1 : -1;
  visible.sort((a, b) => {
    const av = sortValue(a, state.field);
    const bv = sortValue(b, state.field);
    if (av < bv) return -sign;
    if (av > bv) return sign;
    return 0;
  });
  rows.forEach((row) => row.classList.add("hidden"));
  visible.forEach((row) => {
    row.classList.remove("hidden");
    tableBody.insertBefore(row, emptyRow);
  });
  emptyRow.classList.toggle("hidden", visible.length > 0);
  resultCount.textContent = `${visible.length} mechs`;
  headers.forEach((th) => {
    th.classList.remove("sort-asc", "sort-desc");
    if (th.dataset.sort === state.field) th.classList.add(`sort-${state.direction}`);
  });
}

headers.forEach((th) => {
  th.addEventListener("click", () => {
    if (state.field === th.dataset.sort) {
      state.direction = state.direction === "asc" ? "desc" : "asc";
    } else {
      state.field = th.dataset.sort;
      state.direction = "asc";
    }
    applyView();
  });
});

searchInput.addEventListener("input", applyView);
classFilter.addEventListener("change", applyView);

const params = new URLSearchParams(window.location.search);
const q = params.get("q") || "";
if (q) searchInput.value = q;
applyView();
"""


def generate_static_site(
    session: CatalogSession,
    *,
    output_dir: str | None = None,
    enhanced: Iterable[object] = (),
    page_title: str | None = None,
) -> dict[str, object]:
    output_base = Path(output_dir or config.WEB_OUTPUT_DIR)
    detail_pages = [parse_details(raw) for raw in enhanced if isinstance(raw, dict)]
    detail_ids = {utils.slugify(d.name, d.model): d.id for d in detail_pages}

    target = HtmlRenderTarget(detail_ids=detail_ids)
    target.render(session.visible(), session.stats())
    if session.error:
        target.notify(f"Failed to load data: {session.error}", "error")

    output_base.mkdir(parents=True, exist_ok=True)
    index_path = output_base / "index.html"
    index_path.write_text(
        _index_html(page_title=page_title or config.WEB_PAGE_TITLE, target=target),
        encoding="utf-8",
    )
    (output_base / "styles.css").write_text(_styles_css(), encoding="utf-8")
    (output_base / "app.js").write_text(_app_js(), encoding="utf-8")
    (output_base / "mechs.json").write_text(session.export(), encoding="utf-8")

    if detail_pages:
        (output_base / "mech").mkdir(exist_ok=True)
    for details in detail_pages:
        (output_base / _detail_href(details.id)).write_text(_detail_html(details), encoding="utf-8")

    return {
        "output_dir": str(output_base),
        "output_html": str(index_path),
        "mech_count": len(session.store),
        "detail_count": len(detail_pages),
    }
