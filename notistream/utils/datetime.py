"""Clock helpers shared by the store, the stream cursors and the frames.

``DATETIME`` columns hold naive UTC values, so the stored order is the
instant order even across DST transitions of the application timezone.
Values are converted with :func:`to_storage_datetime` on the way in and with
:func:`from_storage_datetime` on the way out; the application timezone is
only used for presentation.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notistream.config import get_settings

_FALLBACK_ZONE: Final[str] = "UTC"
_UTC_OFFSET: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)([+-])(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Resolve ``APP_TIMEZONE`` once; unknown names fall back to UTC."""

    name = (get_settings().app_timezone or "").strip() or _FALLBACK_ZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return _fixed_offset(name) or timezone.utc


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def to_app_timezone(value: datetime | None) -> datetime | None:
    """Attach or convert ``value`` to the application timezone.

    Naive values are taken to be stored wall-clock time in that zone.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def to_storage_datetime(value: datetime | None) -> datetime | None:
    """Return the naive UTC form written to ``DATETIME`` columns."""

    aware = to_app_timezone(value)
    if aware is None:
        return None
    return aware.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage_datetime(value: datetime | None) -> datetime | None:
    """Read a naive UTC column value back as an app-timezone datetime."""

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(get_app_timezone())


def storage_now() -> datetime:
    """Column default for ``created_at``."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_or_none(value: datetime | None) -> str | None:
    aware = to_app_timezone(value)
    return aware.isoformat() if aware is not None else None


def _fixed_offset(name: str) -> tzinfo | None:
    match = _UTC_OFFSET.match(name)
    if match is None:
        return None
    sign, hours, minutes = match.groups()
    offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
    return timezone(-offset if sign == "-" else offset)
