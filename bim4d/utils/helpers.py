"""General utility helper functions."""
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Iterable

SECONDS_PER_DAY = 86400.0


def to_naive_utc(moment: datetime) -> datetime:
    """
    Normalize a datetime for comparison with task dates.

    Aware values are converted to UTC and stripped of tzinfo; naive values
    are taken as UTC already and returned unchanged.
    """
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def parse_moment(value: str) -> datetime:
    """Parse an ISO date/datetime string (a trailing Z included) to naive UTC."""
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    return to_naive_utc(datetime.fromisoformat(text))


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


def days_between(start: datetime, end: datetime) -> float:
    """
    Fractional days from start to end.

    Negative when end precedes start.
    """
    return (end - start).total_seconds() / SECONDS_PER_DAY


def add_days(moment: datetime, days: float) -> datetime:
    """Shift a datetime by a (possibly fractional) number of days."""
    return moment + timedelta(days=days)


def clamp_date(moment: datetime, lower: datetime, upper: datetime) -> datetime:
    """Clamp a datetime to [lower, upper]."""
    if moment < lower:
        return lower
    if moment > upper:
        return upper
    return moment


def task_list_fingerprint(tasks: Iterable) -> str:
    """
    Stable SHA-256 key for a task list.

    Order matters: the same tasks in a different order hash differently,
    because iteration order drives element coloring.

    Args:
        tasks: Task models (anything with model_dump_json)

    Returns:
        Hex digest prefixed with the algorithm name
    """
    digest = hashlib.sha256()
    for task in tasks:
        digest.update(task.model_dump_json(by_alias=False).encode('utf-8'))
        digest.update(b'\n')
    return f'sha256:{digest.hexdigest()}'
