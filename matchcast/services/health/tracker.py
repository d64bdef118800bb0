"""Source health tracking.

Keeps one health record per external data source and moves it through an
explicit state machine as sync outcomes are reported by the collaborators
that fetch the data.

State policy:
- Any successful sync -> HEALTHY, consecutive failures reset to 0
- 1 to 4 consecutive failures -> DEGRADED (no grace period: the first
  failure is visible immediately)
- 5 or more consecutive failures -> FAILED
- Manual disable -> DISABLED from any state; sync outcomes are still
  recorded but the state stays DISABLED until a manual enable
- Manual enable -> UNKNOWN; the next real sync decides health

Writers are serialised per source. Different sources update independently.
"""

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Optional

import structlog

from matchcast.config import get_settings

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]

DEFAULT_STALE_THRESHOLD = timedelta(hours=48)

# Consecutive failure count -> state, checked top down
FAILURE_THRESHOLDS = (
    (5, "failed"),
    (1, "degraded"),
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HealthState(str, Enum):
    """Health state of a data source."""
    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    FAILED = "failed"
    DISABLED = "disabled"


class HealthEvent(str, Enum):
    """Events that drive the health state machine."""
    SUCCESS = "success"
    FAILURE = "failure"
    DISABLE = "disable"
    ENABLE = "enable"


# Sentinel: the next state is decided by the consecutive failure count
BY_FAILURE_COUNT = "by_failure_count"

_AUTOMATIC_STATES = (
    HealthState.UNKNOWN,
    HealthState.HEALTHY,
    HealthState.DEGRADED,
    HealthState.FAILED,
)

TRANSITIONS: dict[tuple[HealthState, HealthEvent], Any] = {
    **{(s, HealthEvent.SUCCESS): HealthState.HEALTHY for s in _AUTOMATIC_STATES},
    **{(s, HealthEvent.FAILURE): BY_FAILURE_COUNT for s in _AUTOMATIC_STATES},
    **{(s, HealthEvent.DISABLE): HealthState.DISABLED for s in HealthState},
    **{(s, HealthEvent.ENABLE): HealthState.UNKNOWN for s in HealthState},
    (HealthState.DISABLED, HealthEvent.SUCCESS): HealthState.DISABLED,
    (HealthState.DISABLED, HealthEvent.FAILURE): HealthState.DISABLED,
}


def state_for_failures(consecutive_failures: int) -> HealthState:
    """Map a consecutive failure count to a health state."""
    for threshold, state in FAILURE_THRESHOLDS:
        if consecutive_failures >= threshold:
            return HealthState(state)
    return HealthState.UNKNOWN


def next_state(
    current: HealthState,
    event: HealthEvent,
    consecutive_failures: int = 0,
) -> HealthState:
    """Look up the transition table for (current state, event)."""
    target = TRANSITIONS[(current, event)]
    if target == BY_FAILURE_COUNT:
        return state_for_failures(consecutive_failures)
    return target


@dataclass
class SourceHealth:
    """Health record for one external source."""

    source: str
    stale_threshold: timedelta
    created_at: datetime
    updated_at: datetime

    state: HealthState = HealthState.UNKNOWN

    last_success_at: Optional[datetime] = None
    last_attempt_at: Optional[datetime] = None
    last_failure_at: Optional[datetime] = None

    consecutive_failures: int = 0
    successes_24h: int = 0
    failures_24h: int = 0
    last_error: Optional[str] = None
    last_error_details: Optional[str] = None

    data_fresh_as_of: Optional[datetime] = None
    average_sync_duration: Optional[timedelta] = None

    manually_disabled: bool = False
    disabled_reason: Optional[str] = None
    disabled_by: Optional[str] = None
    disabled_at: Optional[datetime] = None

    @property
    def success_rate_24h(self) -> float:
        """Percentage of successful syncs in the current daily window."""
        total = self.successes_24h + self.failures_24h
        if total == 0:
            return 0.0
        return self.successes_24h / total * 100

    def is_data_stale(self, now: datetime) -> bool:
        """True when data is missing or older than the staleness threshold."""
        if self.data_fresh_as_of is None:
            return True
        return now - self.data_fresh_as_of > self.stale_threshold

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for the operational API."""
        return {
            "source": self.source,
            "state": self.state.value,
            "last_success_at": self.last_success_at,
            "last_attempt_at": self.last_attempt_at,
            "last_failure_at": self.last_failure_at,
            "consecutive_failures": self.consecutive_failures,
            "successes_24h": self.successes_24h,
            "failures_24h": self.failures_24h,
            "success_rate_24h": round(self.success_rate_24h, 2),
            "last_error": self.last_error,
            "last_error_details": self.last_error_details,
            "data_fresh_as_of": self.data_fresh_as_of,
            "stale_threshold_hours": self.stale_threshold.total_seconds() / 3600,
            "average_sync_seconds": (
                self.average_sync_duration.total_seconds()
                if self.average_sync_duration is not None
                else None
            ),
            "manually_disabled": self.manually_disabled,
            "disabled_reason": self.disabled_reason,
            "disabled_by": self.disabled_by,
            "disabled_at": self.disabled_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def load_stale_thresholds(
    defaults: Optional[dict[str, Any]] = None,
) -> tuple[dict[str, timedelta], timedelta]:
    """Read per-source staleness thresholds from defaults.yaml."""
    if defaults is None:
        defaults = get_settings().load_defaults_config()
    sources = defaults.get("sources", {})
    default_hours = sources.get("default_stale_hours")
    default = (
        timedelta(hours=default_hours)
        if default_hours is not None
        else DEFAULT_STALE_THRESHOLD
    )
    thresholds = {
        name: timedelta(hours=hours)
        for name, hours in (sources.get("stale_hours") or {}).items()
    }
    return thresholds, default


class SourceHealthTracker:
    """
    Owns the health record of every external source.

    Records are created lazily the first time a source is queried or
    updated, and are never deleted (a manual reset overwrites them).
    """

    def __init__(
        self,
        stale_thresholds: Optional[dict[str, timedelta]] = None,
        default_stale_threshold: Optional[timedelta] = None,
        clock: Clock = utc_now,
    ):
        """
        Initialize the tracker.

        Args:
            stale_thresholds: Per-source staleness thresholds. If not
                provided, loads from defaults.yaml
            default_stale_threshold: Threshold for sources not listed
            clock: Callable returning the current UTC time
        """
        if stale_thresholds is None:
            loaded, loaded_default = load_stale_thresholds()
            stale_thresholds = loaded
            if default_stale_threshold is None:
                default_stale_threshold = loaded_default

        self.stale_thresholds = dict(stale_thresholds)
        self.default_stale_threshold = default_stale_threshold or DEFAULT_STALE_THRESHOLD
        self.clock = clock

        self._records: dict[str, SourceHealth] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    @property
    def known_sources(self) -> list[str]:
        return sorted(self.stale_thresholds)

    def _new_record(self, source: str) -> SourceHealth:
        now = self.clock()
        return SourceHealth(
            source=source,
            stale_threshold=self.stale_thresholds.get(
                source, self.default_stale_threshold
            ),
            created_at=now,
            updated_at=now,
        )

    def _lock(self, source: str) -> threading.Lock:
        """Get the writer lock for a source, creating its record lazily."""
        with self._registry_lock:
            if source not in self._records:
                self._records[source] = self._new_record(source)
                self._locks[source] = threading.Lock()
            return self._locks[source]

    def get(self, source: str) -> SourceHealth:
        """Get a snapshot copy of a source's health record."""
        with self._lock(source):
            return replace(self._records[source])

    def get_all(self) -> list[SourceHealth]:
        """Snapshot of every record, ensuring known sources exist."""
        for source in self.known_sources:
            self._lock(source)
        with self._registry_lock:
            names = sorted(self._records)
        return [self.get(name) for name in names]

    def record_success(self, source: str, duration: timedelta) -> SourceHealth:
        """Record a successful sync of `source` that took `duration`."""
        lock = self._lock(source)
        with lock:
            record = self._records[source]
            now = self.clock()
            record.last_success_at = now
            record.last_attempt_at = now
            record.data_fresh_as_of = now
            record.consecutive_failures = 0
            record.successes_24h += 1
            record.last_error = None
            record.last_error_details = None
            if record.average_sync_duration is None:
                record.average_sync_duration = duration
            else:
                record.average_sync_duration = (record.average_sync_duration + duration) / 2
            record.state = next_state(record.state, HealthEvent.SUCCESS)
            record.updated_at = now
            snapshot = replace(record)

        logger.info(
            "source_sync_succeeded",
            source=source,
            duration_seconds=duration.total_seconds(),
            state=snapshot.state.value,
        )
        return snapshot

    def record_failure(
        self,
        source: str,
        message: str,
        details: Optional[str] = None,
    ) -> SourceHealth:
        """Record a failed sync of `source`."""
        lock = self._lock(source)
        with lock:
            record = self._records[source]
            now = self.clock()
            record.last_attempt_at = now
            record.last_failure_at = now
            record.consecutive_failures += 1
            record.failures_24h += 1
            record.last_error = message
            record.last_error_details = details
            record.state = next_state(
                record.state, HealthEvent.FAILURE, record.consecutive_failures
            )
            record.updated_at = now
            snapshot = replace(record)

        logger.warning(
            "source_sync_failed",
            source=source,
            consecutive_failures=snapshot.consecutive_failures,
            state=snapshot.state.value,
            error=message,
        )
        return snapshot

    def disable(self, source: str, reason: str, actor: str) -> SourceHealth:
        """Manually take a source out of service."""
        lock = self._lock(source)
        with lock:
            record = self._records[source]
            now = self.clock()
            record.manually_disabled = True
            record.disabled_reason = reason
            record.disabled_by = actor
            record.disabled_at = now
            record.state = next_state(record.state, HealthEvent.DISABLE)
            record.updated_at = now
            snapshot = replace(record)

        logger.warning("source_disabled", source=source, disabled_by=actor, reason=reason)
        return snapshot

    def enable(self, source: str) -> SourceHealth:
        """Clear a manual disable. Health restarts from UNKNOWN."""
        lock = self._lock(source)
        with lock:
            record = self._records[source]
            record.manually_disabled = False
            record.disabled_reason = None
            record.disabled_by = None
            record.disabled_at = None
            record.state = next_state(record.state, HealthEvent.ENABLE)
            record.updated_at = self.clock()
            snapshot = replace(record)

        logger.info("source_enabled", source=source)
        return snapshot

    def reset(self, source: str) -> SourceHealth:
        """Overwrite a source's record with a fresh UNKNOWN one."""
        lock = self._lock(source)
        with lock:
            record = self._new_record(source)
            with self._registry_lock:
                self._records[source] = record
            snapshot = replace(record)

        logger.info("source_health_reset", source=source)
        return snapshot

    def reset_daily_counters(self, source: str) -> SourceHealth:
        """Zero the rolling 24h counters. Safe to call repeatedly."""
        lock = self._lock(source)
        with lock:
            record = self._records[source]
            record.successes_24h = 0
            record.failures_24h = 0
            record.updated_at = self.clock()
            return replace(record)

    def is_operational(self, source: str) -> bool:
        """Healthy or degraded, and not manually disabled."""
        record = self.get(source)
        return (
            record.state in (HealthState.HEALTHY, HealthState.DEGRADED)
            and not record.manually_disabled
        )

    def is_fresh(self, source: str) -> bool:
        """Operational and synced within the source's staleness threshold."""
        if not self.is_operational(source):
            return False
        return not self.get(source).is_data_stale(self.clock())


@lru_cache
def get_tracker() -> SourceHealthTracker:
    """Process-wide source health tracker."""
    return SourceHealthTracker()
