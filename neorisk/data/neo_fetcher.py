"""
NeoWs / JPL Horizons fetcher (network primary, disk cache, static-file fallback).

 - NeoWs lookup documents  -> JSON dict (asteroid metadata)
 - Horizons vector tables  -> raw text with $$SOE/$$EOE markers
 - Cache only SUCCESS payloads, keyed by request, with a TTL
 - On network failure: stale cache entry, then an optional local file
 - Single attempt per call; no retries
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from neorisk.config.settings import (
    EPHEMERIS_START_MARKER,
    FETCH_CACHE_FILE,
    FETCH_CACHE_TTL_HOURS,
    HORIZONS_URL,
    HTTP_TIMEOUT_SEC,
    NEOWS_BASE_URL,
    output_path,
)
from neorisk.errors import FetchError

# -----------------------
# Logging
# -----------------------
logger = logging.getLogger(__name__)
if not logger.handlers:
    h = logging.StreamHandler()
    h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(h)
logger.setLevel(logging.INFO)

# -----------------------
# Config
# -----------------------
CACHE_TTL = timedelta(hours=FETCH_CACHE_TTL_HOURS)
USER_AGENT = "neorisk-engine/0.1"


def _api_key() -> str:
    return os.environ.get("NASA_API_KEY") or "DEMO_KEY"


def _cache_file() -> Path:
    return Path(output_path(FETCH_CACHE_FILE))

# -----------------------
# Cache helpers
# -----------------------
def _load_cache() -> dict:
    path = _cache_file()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Fetch cache file unreadable or corrupt, starting fresh.")
        return {}
    if isinstance(data, dict):
        return data
    logger.warning("Fetch cache content not a dict; starting fresh.")
    return {}


def _save_cache(cache: dict) -> None:
    path = _cache_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(cache, indent=2), encoding="utf-8")
    except OSError as e:
        logger.warning("Failed to write fetch cache: %s", e)


def _cache_get(cache: dict, key: str, now: datetime, allow_stale: bool = False) -> Optional[Any]:
    entry = cache.get(key)
    if not isinstance(entry, dict):
        return None
    try:
        ts = datetime.fromisoformat(entry["timestamp"])
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        if not allow_stale and now - ts >= CACHE_TTL:
            return None
    except (KeyError, TypeError, ValueError):
        return None
    logger.info("Fetch cache %s for %s", "hit" if not allow_stale else "stale hit", key)
    return entry.get("payload")


def _cache_put_success(cache: dict, key: str, now: datetime, payload: Any, source: str) -> None:
    cache[key] = {
        "timestamp": now.isoformat(),
        "payload": payload,
        "source": source,
        "status": "ok",
    }
    _save_cache(cache)

# -----------------------
# Small helpers
# -----------------------
def _looks_like_html(text: str) -> bool:
    t = (text or "").lower()
    return ("<html" in t) or ("<!doctype html" in t) or ("</html>" in t)


def _get(url: str, params: Optional[Dict[str, str]] = None) -> requests.Response:
    try:
        resp = requests.get(
            url,
            params=params,
            headers={"User-Agent": USER_AGENT},
            timeout=HTTP_TIMEOUT_SEC,
        )
    except requests.RequestException as e:
        raise FetchError(f"GET {url} failed: {e}") from e
    if resp.status_code != 200:
        raise FetchError(f"GET {url} HTTP error: {resp.status_code}")
    return resp


def _read_fallback(path: Optional[str]) -> Optional[str]:
    if not path or not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _fetch_cached(key: str, fetch, fallback_path: Optional[str], decode):
    """
    Shared flow: fresh cache -> network -> stale cache -> fallback file.
    `fetch()` returns the payload; `decode(text)` turns fallback text into one.
    """
    now = datetime.now(timezone.utc)
    cache = _load_cache()

    cached = _cache_get(cache, key, now)
    if cached is not None:
        return cached

    try:
        payload = fetch()
        _cache_put_success(cache, key, now, payload, source="network")
        return payload
    except FetchError as e:
        logger.warning("%s", e)
        last_exc = e

    stale = _cache_get(cache, key, now, allow_stale=True)
    if stale is not None:
        return stale

    text = _read_fallback(fallback_path)
    if text is not None:
        logger.info("Using fallback file %s for %s", fallback_path, key)
        try:
            return decode(text)
        except ValueError as e:
            raise FetchError(f"Fallback file {fallback_path} unreadable for {key}") from e

    raise FetchError(f"No data available for {key}") from last_exc

# -----------------------
# Public API
# -----------------------
def fetch_neo_lookup(asteroid_id: str, fallback_path: Optional[str] = None) -> Dict[str, Any]:
    """NeoWs /neo/{id} document (JSON dict)."""
    key = f"neows:{asteroid_id}"

    def _fetch():
        resp = _get(f"{NEOWS_BASE_URL}/neo/{asteroid_id}", params={"api_key": _api_key()})
        try:
            doc = resp.json()
        except ValueError as e:
            raise FetchError(f"NeoWs returned non-JSON for {asteroid_id}") from e
        if not isinstance(doc, dict) or "name" not in doc:
            raise FetchError(f"NeoWs returned an unexpected document for {asteroid_id}")
        return doc

    return _fetch_cached(key, _fetch, fallback_path, json.loads)


def fetch_horizons_vectors(
    command: str,
    start_time: str,
    stop_time: str,
    step_size: str = "1d",
    center: str = "500@10",
    fallback_path: Optional[str] = None,
) -> str:
    """
    Horizons VECTORS table as CSV text (Sun-centred, ecliptic, km and km/s).
    """
    key = f"horizons:{command}:{start_time}:{stop_time}:{step_size}:{center}"
    params = {
        "format": "text",
        "COMMAND": f"'{command}'",
        "OBJ_DATA": "NO",
        "MAKE_EPHEM": "YES",
        "EPHEM_TYPE": "VECTORS",
        "CENTER": f"'{center}'",
        "REF_PLANE": "ECLIPTIC",
        "START_TIME": f"'{start_time}'",
        "STOP_TIME": f"'{stop_time}'",
        "STEP_SIZE": f"'{step_size}'",
        "VEC_TABLE": "2",
        "OUT_UNITS": "KM-S",
        "CSV_FORMAT": "YES",
    }

    def _fetch():
        text = _get(HORIZONS_URL, params=params).text or ""
        if _looks_like_html(text) or EPHEMERIS_START_MARKER not in text:
            raise FetchError(f"Horizons returned no vector table for {command}")
        return text

    return _fetch_cached(key, _fetch, fallback_path, lambda t: t)
