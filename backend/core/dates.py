"""
Calendar helpers shared by the membership and dashboard code.
"""
from datetime import date, datetime, timedelta


def add_months(start: datetime, months: int) -> datetime:
    """
    Add calendar months while keeping the day in range
    (e.g. Jan 31 + 1 month => Feb 28/29). Time of day and tzinfo are kept.
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    # last day of target month
    if m == 12:
        next_month = date(y + 1, 1, 1)
    else:
        next_month = date(y, m + 1, 1)
    last_day = next_month - timedelta(days=1)
    day = min(start.day, last_day.day)
    return start.replace(year=y, month=m, day=day)


def month_bounds(moment: datetime):
    """Return [start, end) datetimes of the calendar month containing `moment`."""
    start = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return start, add_months(start, 1)
