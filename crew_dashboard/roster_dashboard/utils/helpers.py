# roster_dashboard/utils/helpers.py
import pandas as pd
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional
import logging
from dateutil import parser

from roster_dashboard.utils.constants import PRIORITY_SEVERITY, QUALIFICATION_TONE, RANK_BADGES, DEFAULT_BADGE

logger = logging.getLogger(__name__)


def parse_datetime_from_string(datetime_str) -> Optional[datetime]:
    """
    Parse a timestamp into a naive datetime.
    Timezone-aware values are converted to UTC first so that
    mixed inputs can still be subtracted.
    """
    if datetime_str is None:
        return None

    if isinstance(datetime_str, pd.Timestamp):
        parsed = datetime_str.to_pydatetime()
    elif isinstance(datetime_str, datetime):
        parsed = datetime_str
    elif isinstance(datetime_str, str):
        if not datetime_str.strip():
            return None
        try:
            # Try ISO format first
            parsed = datetime.fromisoformat(datetime_str.replace('Z', '+00:00'))
        except ValueError:
            try:
                parsed = parser.parse(datetime_str)
            except (ValueError, OverflowError):
                return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def calculate_duty_hours(start_time, end_time) -> Optional[float]:
    """
    Hours between two timestamps, rounded to 2 decimals.
    Returns None when either side cannot be parsed. The result is
    negative when the end precedes the start.
    """
    start_dt = parse_datetime_from_string(start_time)
    end_dt = parse_datetime_from_string(end_time)

    if not start_dt or not end_dt:
        logger.debug(f"Could not parse duty window: start={start_time}, end={end_time}")
        return None

    duration = end_dt - start_dt
    return round(duration.total_seconds() / 3600.0, 2)


def parse_duration(duration_str: str) -> timedelta:
    """
    Parse duration string (H:MM) to timedelta
    """
    if duration_str is None:
        return timedelta(0)

    try:
        if isinstance(duration_str, str) and ':' in duration_str:
            hours, minutes = map(int, duration_str.split(':')[:2])
            return timedelta(hours=hours, minutes=minutes)
        elif isinstance(duration_str, (int, float)):
            return timedelta(hours=duration_str)
        else:
            return timedelta(0)
    except (ValueError, TypeError) as e:
        logger.warning(f"Could not parse duration: {duration_str}, error: {e}")
        return timedelta(0)


def format_time(time_str: Optional[str]) -> str:
    """HH:MM:SS -> HH:MM"""
    if not time_str:
        return ""
    return time_str[:5]


def split_licenses(licenses: Optional[str]) -> List[str]:
    if not licenses:
        return []
    return [item.strip() for item in licenses.split(',') if item.strip()]


def is_on_leave(crew: Any) -> bool:
    # Either bound being set counts as on leave
    return bool(getattr(crew, 'Leave_Start', None) or getattr(crew, 'Leave_End', None))


def priority_severity(priority: Optional[str]) -> str:
    return PRIORITY_SEVERITY.get((priority or '').lower(), DEFAULT_BADGE)


def qualification_tone(qualification: Optional[str]) -> str:
    return QUALIFICATION_TONE.get((qualification or '').lower(), DEFAULT_BADGE)


def rank_badge(rank: Optional[str]) -> str:
    return RANK_BADGES.get((rank or '').lower(), DEFAULT_BADGE)


def date_range_days(start: Optional[str], end: Optional[str]) -> int:
    """Inclusive number of days between two dates, 0 if either is missing"""
    start_dt = parse_datetime_from_string(start)
    end_dt = parse_datetime_from_string(end)
    if not start_dt or not end_dt:
        return 0
    return (end_dt.date() - start_dt.date()).days + 1


def unique_values(items: List[Any], field: str) -> List[str]:
    """Sorted distinct non-empty values of a field"""
    values = {getattr(item, field, None) for item in items}
    return sorted(str(value) for value in values if value)
