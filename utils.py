import math
import re
from datetime import date, datetime

AVERAGE_DAYS_PER_MONTH = 30.44

ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_iso_date(value, field: str = "date") -> date:
    """Accepts a date or a YYYY-MM-DD string. Raises ValueError on anything else."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE.fullmatch(value.strip()):
        raise ValueError(f"{field} must be an ISO-8601 date (YYYY-MM-DD), got {value!r}")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"{field} must be an ISO-8601 date (YYYY-MM-DD), got {value!r}")


def age_in_months(dob: date, today: date) -> int:
    # Average month length; drifts by about a day per month
    return math.floor((today - dob).days / AVERAGE_DAYS_PER_MONTH)


def days_between(start: date, end: date) -> int:
    return (end - start).days
