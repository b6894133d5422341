from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the format stored in DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
