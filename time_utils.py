from datetime import datetime, timezone


def utcnow():
    """Naive UTC timestamp, matching the DateTime columns (no tz info stored)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
