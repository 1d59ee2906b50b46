"""Calendar-day arithmetic for alert thresholds."""
from datetime import date, datetime, timedelta


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the models store."""
    return datetime.utcnow()


def days_until(target_date: date, today: date | None = None) -> int:
    """Whole calendar days from today to target_date.

    Both sides are dates, so the result is the same at 00:01 and at 23:59.
    A datetime target is truncated to its date. Past dates give negative values.
    """
    if today is None:
        today = utcnow().date()
    if isinstance(target_date, datetime):
        target_date = target_date.date()
    return (target_date - today).days


def is_threshold_day(target_date: date | None, alert_days, today: date | None = None) -> int | None:
    """Return the day count when it exactly matches a configured threshold.

    Thresholds fire on one specific day only: 8 days out does not match a
    threshold of 7. Negative counts never match.
    """
    if target_date is None:
        return None
    remaining = days_until(target_date, today)
    if remaining < 0:
        return None
    if remaining in set(alert_days):
        return remaining
    return None


def dedup_cutoff(now: datetime, window_hours: int) -> datetime:
    """Oldest creation time that still counts as a recent duplicate."""
    return now - timedelta(hours=window_hours)
