"""Wall-clock helpers.

Stores take a ``Clock`` callable instead of calling ``datetime.now`` directly
so freshness thresholds can be exercised with a controllable clock in tests.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(tz=timezone.utc)  # noqa: UP017
