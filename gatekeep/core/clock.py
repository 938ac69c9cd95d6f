"""Time source for the service layer; tests inject their own callable."""

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Naive UTC now; every persisted timestamp uses this representation."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
