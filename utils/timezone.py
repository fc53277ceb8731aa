"""Timezone helpers. Datetimes are stored as naive UTC."""
from datetime import datetime, date, time, timezone
import zoneinfo
from typing import Optional
from config import settings


def get_local_now() -> datetime:
    """Current time in the configured timezone"""
    return datetime.now(settings.timezone)


def get_local_today() -> date:
    return get_local_now().date()


def get_utc_now() -> datetime:
    """Current UTC time, naive"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_to_local(utc_dt: datetime) -> datetime:
    """Convert UTC time to an aware local datetime"""
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=zoneinfo.ZoneInfo("UTC"))
    return utc_dt.astimezone(settings.timezone)


def format_event_date(event_date: Optional[date], format_str: str = "%a, %b %d, %Y") -> str:
    if event_date is None:
        return "TBA"
    return event_date.strftime(format_str)


def format_event_time(event_time: Optional[time], format_str: str = "%H:%M") -> str:
    if event_time is None:
        return "TBA"
    return event_time.strftime(format_str)


def format_utc_datetime(utc_dt: Optional[datetime], format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format a stored UTC datetime in local time for display"""
    if utc_dt is None:
        return ""
    return utc_to_local(utc_dt).strftime(format_str)
