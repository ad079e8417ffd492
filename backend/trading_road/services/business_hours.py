"""
Business hours - decides whether a supplier or store is open right now.

All wall-clock values are "HH:MM" strings in business time (UTC+8 by default).
Closed days are stored as comma separated weekday numbers with 0 = Sunday.
"""

from datetime import datetime, time, timedelta, timezone
from typing import List, Optional

from trading_road.core.config import settings


def now_in_business_tz() -> datetime:
    return datetime.now(timezone(timedelta(hours=settings.BUSINESS_UTC_OFFSET_HOURS)))


def parse_hhmm(value: Optional[str]) -> Optional[time]:
    """Parse "HH:MM"; blank input gives None, anything else malformed raises ValueError"""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return datetime.strptime(value, "%H:%M").time()


def parse_closed_days(value: Optional[str]) -> List[int]:
    """Lenient parse for stored values; unknown parts are skipped"""
    days = []
    for part in (value or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            days.append(int(part))
        except ValueError:
            continue
    return days


def validate_closed_days(value: Optional[str]) -> Optional[str]:
    """Strict check used on input; returns a normalized "0,6" string"""
    if value is None:
        return None
    days = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not 0 <= int(part) <= 6:
            raise ValueError("closed_days_of_week must be comma separated numbers from 0 (Sunday) to 6")
        if int(part) not in days:
            days.append(int(part))
    return ",".join(str(d) for d in sorted(days))


def weekday_number(moment: datetime) -> int:
    """0 = Sunday ... 6 = Saturday"""
    return moment.isoweekday() % 7


def is_closed_today(closed_days: Optional[str], now: datetime) -> bool:
    return weekday_number(now) in parse_closed_days(closed_days)


def parse_time_today(value: Optional[str], now: datetime) -> Optional[datetime]:
    try:
        parsed = parse_hhmm(value)
    except ValueError:
        return None
    if parsed is None:
        return None
    return now.replace(hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0)


def is_open_now(user, now: Optional[datetime] = None) -> bool:
    """Closed days win, then the configured window, then the manual is_open switch.

    A window whose closing time is not after its opening time runs past midnight,
    so yesterday's window can still be open early in the morning.
    """
    if now is None:
        now = now_in_business_tz()

    if is_closed_today(user.closed_days_of_week, now):
        return False

    opening = parse_time_today(user.opening_time, now)
    closing = parse_time_today(user.closing_time, now)

    if opening is not None and closing is not None:
        if closing <= opening:
            closing += timedelta(days=1)
        if opening <= now < closing:
            return True
        day = timedelta(days=1)
        if opening - day <= now < closing - day:
            return True
        return False

    return bool(user.is_open)
