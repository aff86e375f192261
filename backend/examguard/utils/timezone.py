"""
Time helpers.

Everything is stored and compared as naive UTC; the configured display
timezone is only used for response headers.
"""
from datetime import datetime
import pytz

from ..core.config import settings


def get_display_tz():
    return pytz.timezone(settings.default_timezone)


def utc_now() -> datetime:
    """Current time as naive UTC"""
    return datetime.now(pytz.UTC).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    """Normalize an aware or naive datetime to naive UTC (naive input is assumed UTC)"""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(pytz.UTC).replace(tzinfo=None)


def get_timezone_info() -> dict:
    now = datetime.now(get_display_tz())
    return {
        "timezone": settings.default_timezone,
        "offset": now.strftime("%z"),
        "server_time_utc": utc_now().isoformat() + "Z"
    }
