import calendar
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo

from config import get_settings
from errors import ValidationError


@dataclass(frozen=True)
class MonthPeriod:
    year: int
    month: int
    start: datetime
    end: datetime

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def server_today() -> date:
    settings = get_settings()
    return datetime.now(ZoneInfo(settings.timezone)).date()


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    last_day = calendar.monthrange(year, month)[1]
    start = datetime.combine(date(year, month, 1), time.min)
    end = datetime.combine(date(year, month, last_day), time.max)
    return start, end


def _check_part(value: object, name: str, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name.capitalize()} must be an integer")
    if not low <= value <= high:
        raise ValidationError(f"{name.capitalize()} must be between {low} and {high}")
    return value


def resolve_month(
    year: Optional[int],
    month: Optional[int],
    *,
    today: Optional[date] = None,
) -> MonthPeriod:
    """Pick the month window for a query, defaulting to the server's today."""
    if year is not None:
        _check_part(year, "year", 1, 9999)
    if month is not None:
        _check_part(month, "month", 1, 12)
    if year is None or month is None:
        today = today or server_today()
        year = today.year if year is None else year
        month = today.month if month is None else month
    start, end = month_bounds(year, month)
    return MonthPeriod(year, month, start, end)
