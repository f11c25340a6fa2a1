from datetime import datetime, timezone


def utcnow():
    return datetime.now(timezone.utc)


def parse_datetime(value):
    """Parse an ISO-8601 string (a trailing ``Z`` is accepted) into an aware UTC datetime.

    Naive values are assumed to already be UTC. Raises ``ValueError`` on
    anything that is not a parseable string.
    """
    if not isinstance(value, str):
        raise ValueError("Expected an ISO-8601 date string")
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def isoformat(value):
    return value.isoformat() if value else None
