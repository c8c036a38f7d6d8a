from datetime import datetime, timezone


def to_utc_naive(value: datetime) -> datetime:
    """Store every timestamp as a naive UTC instant."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
