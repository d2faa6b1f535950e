import datetime as dt
import re
import unicodedata

_WS_RE = re.compile(r"\s+")

def norm_text(value: str) -> str:
    """Mech names and search terms compare on NFKC, casefolded, single-spaced text."""
    if value is None:
        return ""
    s = unicodedata.normalize("NFKC", str(value))
    s = s.replace("\u00a0", " ")     # non-breaking spaces
    s = s.strip().casefold()
    s = _WS_RE.sub(" ", s)
    return s

def slugify(*parts: str) -> str:
    """
    Detail-page id from name/model parts: `("Atlas", "AS7-D")` -> `atlas-as7-d`.
    Accents are stripped and any run of other characters becomes one dash.
    """
    raw = " ".join(str(p) for p in parts if p)
    raw = unicodedata.normalize("NFKD", raw)
    raw = "".join(ch for ch in raw if not unicodedata.combining(ch))
    raw = raw.casefold()
    return re.sub(r"[^a-z0-9]+", "-", raw).strip("-")

def utc_now_z() -> str:
    return dt.datetime.now(dt.timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"

def format_cost(cost: int | None) -> str:
    if not cost:
        return "0"
    return f"{int(cost):,}"

def clip(s: str | None, n: int) -> str:
    s = (s or "").strip()
    return s if len(s) <= n else s[: n - 1] + "…"

def fmt_table(rows: list[list[str]], widths: list[int], *, right_from: int | None = None) -> str:
    out = []
    for r in rows:
        cells = []
        for i, cell in enumerate(r):
            w = widths[i]
            s = (cell or "")
            # right-align the numeric columns
            if right_from is not None and i >= right_from:
                cells.append(s.rjust(w))
            else:
                cells.append(s.ljust(w))
        out.append("  ".join(cells).rstrip())
    return "\n".join(out)
