"""Shared validation utilities"""

import re
from typing import Optional

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_time_of_day(value: Optional[str]) -> Optional[str]:
    """
    Validate a wall-clock time and normalize it to zero-padded HH:MM.

    Accepts "9:30" as well as "09:30". Empty strings are treated as unset.

    Raises:
        ValueError: If the value is not a valid 24h time
    """
    if value is None or value == "":
        return None

    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("Time must use the format HH:MM (e.g., 09:30)")

    hours, minutes = int(match.group(1)), int(match.group(2))
    return f"{hours:02d}:{minutes:02d}"


def minutes_since_midnight(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def validate_weekdays(days: list[str]) -> list[str]:
    """
    Validate a list of weekday abbreviations (Mon..Sun).

    Returns the days deduplicated and in calendar order.

    Raises:
        ValueError: If a day is unknown or the list is empty
    """
    if not days:
        raise ValueError("At least one day is required")

    unknown = [d for d in days if d not in WEEKDAYS]
    if unknown:
        raise ValueError(f"Unknown day(s): {', '.join(unknown)}. Use {', '.join(WEEKDAYS)}")

    return [d for d in WEEKDAYS if d in set(days)]
