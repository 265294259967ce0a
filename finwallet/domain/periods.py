"""
Calendar-month windows.

A YearMonth covers the half-open interval [first day 00:00, first day of
next month 00:00) so that intra-day timestamps on the last day are included.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from finwallet.domain.errors import ValidationError

# Locale-independent labels ("05 Mar"), same as the report charts expect
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True, order=True)
class YearMonth:
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Некорректный месяц: {self.month}")

    @classmethod
    def of(cls, d: date) -> "YearMonth":
        return cls(d.year, d.month)

    @classmethod
    def current(cls, tz: str | None = None) -> "YearMonth":
        """Current month in the configured timezone."""
        return cls.of(today(tz))

    @classmethod
    def resolve(cls, month: int | None, year: int | None, tz: str | None = None) -> "YearMonth":
        """Explicit (month, year) only when both are given, otherwise current month."""
        if month is not None and year is not None:
            return cls(year, month)
        return cls.current(tz)

    def plus_months(self, n: int) -> "YearMonth":
        idx = self.year * 12 + (self.month - 1) + n
        return YearMonth(idx // 12, idx % 12 + 1)

    @property
    def previous(self) -> "YearMonth":
        return self.plus_months(-1)

    @property
    def next(self) -> "YearMonth":
        return self.plus_months(1)

    @property
    def start(self) -> datetime:
        return datetime(self.year, self.month, 1)

    @property
    def end(self) -> datetime:
        """Exclusive upper bound (first instant of the next month)."""
        return self.next.start

    def contains(self, moment) -> bool:
        if isinstance(moment, datetime):
            return self.start <= moment < self.end
        return (moment.year, moment.month) == (self.year, self.month)

    def days(self) -> list[date]:
        first = date(self.year, self.month, 1)
        count = calendar.monthrange(self.year, self.month)[1]
        return [first + timedelta(days=i) for i in range(count)]

    @property
    def label(self) -> str:
        """ "March 2026" """
        return f"{calendar.month_name[self.month]} {self.year}"

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def day_label(d: date) -> str:
    """05 Mar"""
    return f"{d.day:02d} {_MONTH_ABBR[d.month - 1]}"


def today(tz: str | None = None) -> date:
    if tz is None:
        from finwallet.config import get_settings
        tz = get_settings().TIMEZONE
    return datetime.now(ZoneInfo(tz)).date()


def now(tz: str | None = None) -> datetime:
    """Naive local wall-clock time in the configured timezone."""
    if tz is None:
        from finwallet.config import get_settings
        tz = get_settings().TIMEZONE
    return datetime.now(ZoneInfo(tz)).replace(tzinfo=None)
