"""
Reporting windows and period-over-period comparison.

A current window runs from `start` to the end of today inclusive. The
previous window is [prev_start, prev_end) with prev_end equal to `start`.
"""
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.utils import timezone

PRESET_TODAY = 'today'
PRESET_WEEKLY = 'weekly'
PRESET_MONTHLY = 'monthly'
PRESET_YEARLY = 'yearly'

PRESETS = [PRESET_TODAY, PRESET_WEEKLY, PRESET_MONTHLY, PRESET_YEARLY]
DEFAULT_PRESET = PRESET_WEEKLY


def _start_of(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def _end_of(day):
    return timezone.make_aware(datetime.combine(day, time.max))


def get_period(preset, today=None):
    """
    Return a dict with start, end, prev_start and prev_end datetimes for a
    preset. Raises ValueError for unknown presets.
    """
    today = today or timezone.localdate()

    if preset == PRESET_TODAY:
        start_day = today
        prev_start_day = today - timedelta(days=1)
    elif preset == PRESET_WEEKLY:
        start_day = today - timedelta(days=6)
        prev_start_day = start_day - timedelta(days=7)
    elif preset == PRESET_MONTHLY:
        start_day = today.replace(day=1)
        prev_start_day = (start_day - timedelta(days=1)).replace(day=1)
    elif preset == PRESET_YEARLY:
        start_day = today.replace(month=1, day=1)
        prev_start_day = start_day.replace(year=start_day.year - 1)
    else:
        raise ValueError(f"Unknown period preset: {preset}")

    start = _start_of(start_day)
    return {
        'preset': preset,
        'start': start,
        'end': _end_of(today),
        'prev_start': _start_of(prev_start_day),
        'prev_end': start,
    }


def pct_change(current, previous):
    """Percentage change, 100 when growing from nothing and 0 when both are 0"""
    current = Decimal(current or 0)
    previous = Decimal(previous or 0)
    if previous == 0:
        return 0.0 if current == 0 else 100.0
    return round(float((current - previous) / previous * 100), 2)


def days_between(start, end):
    """Every local date from start to end inclusive"""
    day = timezone.localtime(start).date()
    last = timezone.localtime(end).date()
    days = []
    while day <= last:
        days.append(day)
        day += timedelta(days=1)
    return days
