import re
from datetime import date, datetime

TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def time_to_minutes(time_str: str) -> int:
    """Parses a time string in HH:MM format to minutes since midnight."""
    hours, minutes = time_str.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Converts minutes since midnight to HH:MM format."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_valid_time_format(time_str: str) -> bool:
    """Checks that a time string is H:MM or HH:MM within 00:00-23:59."""
    return isinstance(time_str, str) and bool(TIME_PATTERN.match(time_str))


def normalize_time(time_str: str) -> str:
    """Normalizes a time string to zero-padded HH:MM."""
    return minutes_to_time(time_to_minutes(time_str))


def time_ranges_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Checks if two half-open ranges [start_a, end_a) and [start_b, end_b) overlap."""
    return time_to_minutes(start_a) < time_to_minutes(end_b) and time_to_minutes(start_b) < time_to_minutes(end_a)


def parse_date(value: date | datetime | str) -> date:
    """Accepts a date, a datetime or an ISO YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def day_of_week(value: date | datetime | str) -> int:
    """Returns the weekday as 0-6 with Sunday = 0."""
    return (parse_date(value).weekday() + 1) % 7
