from datetime import datetime, time
from typing import Optional

import pytz

IST = pytz.timezone("Asia/Kolkata")


def now_ist() -> datetime:
    """Current time in IST."""
    return datetime.now(IST)


def to_ist(value: datetime) -> datetime:
    """
    Convert a datetime to IST. Naive datetimes are assumed to already be IST.
    """
    if value.tzinfo is None:
        return IST.localize(value)
    return value.astimezone(IST)


def parse_time_of_day(value: Optional[str]) -> Optional[time]:
    """
    Parse a daily cutoff such as "14:30:00" or "14:30".

    Missing parts default to 0. Returns None for empty input and raises
    ValueError for anything that is not a valid time of day.
    """
    if value is None or str(value).strip() == "":
        return None

    parts = str(value).strip().split(":")
    if len(parts) > 3:
        raise ValueError(f"Invalid time format: {value}")

    numbers = [int(part) for part in parts] + [0] * (3 - len(parts))
    hour, minute, second = numbers
    return time(hour, minute, second)
