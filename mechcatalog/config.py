import os
from dotenv import load_dotenv

load_dotenv()

def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key, str(default))
    try:
        return int((raw or "").strip())
    except Exception:
        return int(default)


def _bool_env(key: str, default: str) -> bool:
    return os.getenv(key, default).strip().lower() in {"1", "true", "yes", "on"}


# Dataset documents (URL or local path). The enhanced one is tried first.
MECH_DATA_ENHANCED = os.getenv("MECH_DATA_ENHANCED", "mechs-data-enhanced.json").strip()
MECH_DATA_PLAIN = os.getenv("MECH_DATA_PLAIN", "mechs-data.json").strip()

# Key-value cache for uploaded records
CACHE_DB_PATH = os.getenv("CACHE_DB_PATH", "mechcatalog.db")
CACHE_ENABLED = _bool_env("CACHE_ENABLED", "1")
CACHE_KEY = os.getenv("CACHE_KEY", "mechCatalogData").strip() or "mechCatalogData"

# Static catalog webpage
WEB_OUTPUT_DIR = os.getenv("WEB_OUTPUT_DIR", "web")
WEB_PAGE_TITLE = os.getenv("WEB_PAGE_TITLE", "Mech Catalog").strip() or "Mech Catalog"
EXPORT_FILENAME = os.getenv("EXPORT_FILENAME", "mech-catalog-data.json").strip() or "mech-catalog-data.json"

# Cosmetic admin gate for reset (?admin in the page URL)
ADMIN_QUERY_FLAG = os.getenv("ADMIN_QUERY_FLAG", "admin").strip() or "admin"

# Dataset fetching
HTTP_TIMEOUT_SECONDS = max(5, min(60, _int_env("HTTP_TIMEOUT_SECONDS", 15)))
HTTP_MAX_RETRIES = max(1, min(6, _int_env("HTTP_MAX_RETRIES", 3)))
