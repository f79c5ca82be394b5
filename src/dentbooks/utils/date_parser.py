"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "01/15/2024", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if date_str is None or not str(date_str).strip():
        raise ValueError("Empty date string")

    date_str = str(date_str).strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def month_range(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of a calendar month.

    Raises:
        ValueError: If month is outside 1..12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    start = date(year, month, 1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end


def quarter_range(year: int, quarter: int) -> tuple[date, date]:
    """Return the first and last day of a calendar quarter.

    Raises:
        ValueError: If quarter is outside 1..4
    """
    if not 1 <= quarter <= 4:
        raise ValueError(f"Quarter must be between 1 and 4, got {quarter}")
    start = date(year, 3 * (quarter - 1) + 1, 1)
    end = start + relativedelta(months=3) - timedelta(days=1)
    return start, end


def year_range(year: int) -> tuple[date, date]:
    """Return January 1 and December 31 of a year."""
    return date(year, 1, 1), date(year, 12, 31)


def quarter_of(day: date) -> int:
    """Return the calendar quarter (1..4) a date falls in."""
    return (day.month - 1) // 3 + 1


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: Period string (this-month, this-year, this-quarter,
            last-month, last-year, last-quarter)

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return (today.replace(day=1), today)

    elif period == "this-year":
        return (today.replace(month=1, day=1), today)

    elif period == "this-quarter":
        start, _ = quarter_range(today.year, quarter_of(today))
        return (start, today)

    elif period == "last-month":
        last = today - relativedelta(months=1)
        return month_range(last.year, last.month)

    elif period == "last-year":
        return year_range(today.year - 1)

    elif period == "last-quarter":
        last = today - relativedelta(months=3)
        return quarter_range(last.year, quarter_of(last))

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-month, this-year, "
            "this-quarter, last-month, last-year, last-quarter"
        )
