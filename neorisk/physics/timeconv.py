# neorisk/physics/timeconv.py
"""
Time conversions between Julian dates, Unix milliseconds and datetimes.
All instants handled by the engine are Unix-epoch milliseconds (UTC).
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sgp4.api import jday

from neorisk.config.settings import JD_UNIX_EPOCH, MS_PER_DAY

# NeoWs close_approach_date_full uses "2029-Apr-13 21:46"
_DATE_FORMATS = (
    "%Y-%b-%d %H:%M",
    "%Y-%b-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


def jd_to_unix_ms(jd: float) -> float:
    return (float(jd) - JD_UNIX_EPOCH) * MS_PER_DAY


def unix_ms_to_jd(ms: float) -> float:
    return float(ms) / MS_PER_DAY + JD_UNIX_EPOCH


def _as_utc(dt: datetime) -> datetime:
    # accept naive -> treat as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def datetime_to_jd(dt: datetime) -> float:
    dt = _as_utc(dt)
    jd, fr = jday(
        dt.year, dt.month, dt.day,
        dt.hour, dt.minute, dt.second + dt.microsecond * 1e-6,
    )
    return jd + fr


def datetime_to_unix_ms(dt: datetime) -> float:
    return _as_utc(dt).timestamp() * 1000.0


def unix_ms_to_datetime(ms: float) -> datetime:
    return datetime.fromtimestamp(float(ms) / 1000.0, tz=timezone.utc)


def jd_to_datetime(jd: float) -> datetime:
    return unix_ms_to_datetime(jd_to_unix_ms(jd))


def parse_date(text: Optional[str]) -> Optional[datetime]:
    """
    Parse the date strings found in NeoWs documents and CLI input.
    Returns a UTC datetime, or None if nothing matches.
    """
    if not text:
        return None
    text = str(text).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        return None
