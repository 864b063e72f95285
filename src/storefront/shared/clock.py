from datetime import UTC, datetime


def utcnow():
    return datetime.now(UTC)


def as_utc(value):
    """Treat naive datetimes (as some providers return them) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
