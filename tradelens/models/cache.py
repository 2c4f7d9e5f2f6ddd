"""Cache policy and diagnostic models shared by the stores and coordinator."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class FreshnessPolicy(BaseModel):
    """Per-store freshness rules.

    ``cache_window`` is the age after which a read schedules a refresh.
    ``stale_warning_threshold`` is the age after which data is unacceptable
    for display regardless of whether a refresh was attempted; ``None``
    disables the warning, so only never-fetched keys count as stale.

    Durations accept ``timedelta`` or a number of seconds.
    """

    model_config = ConfigDict(frozen=True)

    cache_window: timedelta
    stale_warning_threshold: timedelta | None = None

    @model_validator(mode="after")
    def _threshold_not_below_window(self) -> FreshnessPolicy:
        if self.cache_window < timedelta(0):
            raise ValueError("cache_window must not be negative")
        if (
            self.stale_warning_threshold is not None
            and self.stale_warning_threshold < self.cache_window
        ):
            raise ValueError("stale_warning_threshold must be >= cache_window")
        return self


class WarningKind(str, Enum):  # noqa: UP042 (StrEnum needs 3.11)
    PRICE_MISMATCH = "PRICE_MISMATCH"
    SNAPSHOT_STALE = "SNAPSHOT_STALE"
    HISTORY_STALE = "HISTORY_STALE"


class ConsistencyWarning(BaseModel):
    """One finding from a cross-store consistency check."""

    model_config = ConfigDict(frozen=True)

    kind: WarningKind
    symbol: str
    message: str
