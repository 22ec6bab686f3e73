from .helpers import clamp, clamp_date, days_between, add_days, parse_moment, task_list_fingerprint, to_naive_utc
from .logger import configure_logging

__all__ = [
    'clamp',
    'clamp_date',
    'days_between',
    'add_days',
    'task_list_fingerprint',
    'parse_moment',
    'to_naive_utc',
    'configure_logging',
]
