import asyncio
import json
import logging
from pathlib import Path

import aiohttp

from . import config
from .errors import CatalogError, InvalidFormat, MalformedInput, SourceUnavailable
from .models import SOURCE_CATALOG, Mech
from .normalizer import normalize

log = logging.getLogger(__name__)

_RETRYABLE_HTTP_CODES = {429, 500, 502, 503, 504}
_RETRY_BASE_DELAY_SECONDS = 1.0


class _RetryableRequestError(RuntimeError):
    pass


def is_url(location: str) -> bool:
    return str(location or "").strip().lower().startswith(("http://", "https://"))


def parse_json_text(text: str) -> object:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise MalformedInput(f"Invalid JSON: {exc}") from exc


def extract_records(document: object) -> list:
    if isinstance(document, list):
        return document
    if isinstance(document, dict) and isinstance(document.get("mechs"), list):
        return document["mechs"]
    raise InvalidFormat("Dataset must be a list of mechs or an object with a 'mechs' list", field="mechs")


async def _request_text_with_retries(
    session: aiohttp.ClientSession,
    *,
    url: str,
    max_retries: int,
) -> str:
    delay_seconds = _RETRY_BASE_DELAY_SECONDS
    for attempt in range(1, max_retries + 1):
        try:
            async with session.get(url) as response:
                body_text = await response.text()
                if response.status != 200:
                    message = f"HTTP {response.status} for {url}: {body_text[:200]}"
                    if response.status in _RETRYABLE_HTTP_CODES:
                        raise _RetryableRequestError(message)
                    raise SourceUnavailable(message, location=url)
                return body_text
        except UnicodeDecodeError as exc:
            raise MalformedInput(f"{url} returned undecodable text: {exc}") from exc
        except (aiohttp.ClientError, asyncio.TimeoutError, _RetryableRequestError) as exc:
            if attempt >= max_retries:
                raise SourceUnavailable(
                    f"Request failed after {max_retries} attempts: {exc}", location=url
                ) from exc
            log.debug("Fetch attempt %s for %s failed: %s", attempt, url, exc)
            await asyncio.sleep(delay_seconds)
            delay_seconds *= 2.0

    raise SourceUnavailable("Request retry loop ended unexpectedly", location=url)


async def fetch_text(location: str, *, session: aiohttp.ClientSession | None = None) -> str:
    """Read a document from an http(s) URL or a local path."""
    if not is_url(location):
        path = Path(location)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SourceUnavailable(f"Cannot read {path}: {exc}", location=str(location)) from exc
        except UnicodeDecodeError as exc:
            raise MalformedInput(f"{path} is not UTF-8 text: {exc}") from exc

    max_retries = int(config.HTTP_MAX_RETRIES)
    if session is not None:
        return await _request_text_with_retries(session, url=location, max_retries=max_retries)
    timeout = aiohttp.ClientTimeout(total=int(config.HTTP_TIMEOUT_SECONDS))
    async with aiohttp.ClientSession(timeout=timeout) as own_session:
        return await _request_text_with_retries(own_session, url=location, max_retries=max_retries)


async def fetch_document(location: str, *, session: aiohttp.ClientSession | None = None) -> object:
    return parse_json_text(await fetch_text(location, session=session))


async def load_dataset(primary: str, fallback: str | None = None) -> tuple[str, list]:
    """
    Fetch the preferred dataset, falling back to the secondary one.
    Returns (location actually used, raw record list).
    """
    locations = [loc for loc in (primary, fallback) if loc]
    if not locations:
        raise SourceUnavailable("No dataset location configured")
    errors: list[str] = []
    for location in locations:
        try:
            document = await fetch_document(location)
            return location, extract_records(document)
        except CatalogError as exc:
            log.warning("Dataset %s unavailable: %s", location, exc)
            errors.append(f"{location}: {exc}")
    raise SourceUnavailable("No dataset could be loaded (" + "; ".join(errors) + ")", location=locations[0])


async def load_catalog(primary: str, fallback: str | None = None) -> list[Mech]:
    location, rows = await load_dataset(primary, fallback)
    mechs: list[Mech] = []
    skipped = 0
    for i, row in enumerate(rows):
        try:
            mechs.append(normalize(row, source=SOURCE_CATALOG))
        except InvalidFormat as exc:
            skipped += 1
            log.warning("Skipping dataset entry %s from %s: %s", i, location, exc)
    log.info("Catalog dataset loaded: source=%s mechs=%s skipped=%s", location, len(mechs), skipped)
    return mechs
