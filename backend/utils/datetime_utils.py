from datetime import datetime, date, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def parse_entry_date(value: str) -> date:
    """Parse a calendar day in ``YYYY-MM-DD`` form."""
    text = (value or "").strip()
    if len(text) != 10:
        raise ValueError("date must be formatted YYYY-MM-DD")
    return date.fromisoformat(text)


def last_n_dates(n: int, now: datetime | None = None) -> list[str]:
    """Return the last ``n`` UTC calendar days as ISO strings, oldest first, today included."""
    today = (now or utcnow()).astimezone(timezone.utc).date()
    return [(today - timedelta(days=i)).isoformat() for i in range(n - 1, -1, -1)]


def start_of_day_utc(value: str) -> datetime | None:
    """UTC midnight of an ISO day string, or None when it does not parse."""
    try:
        d = parse_entry_date(value)
    except (TypeError, ValueError):
        return None
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
