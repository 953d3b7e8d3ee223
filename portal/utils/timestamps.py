import datetime


def utcnow() -> datetime.datetime:
    """Naive UTC, matching the DateTime columns."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def isoformat_or_none(value):
    return value.isoformat() if value else None
