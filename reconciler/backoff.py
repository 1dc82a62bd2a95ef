"""
Rebalance backoff tracking.

Two rolling-window trackers guard against the reconciler thrashing the cluster:

- ClusterBackoffTracker: 3+ rebalances of the cluster as a whole within 2 hours
- NodeBackoffTracker: 2+ rebalances for the same hostname within 2 hours

A tracker is inert until the first rebalance arms its window. When the window
expires the counts reset and a fresh window starts. When a limit is reached the
tracker reports PENALIZED, clears its window and zeroes the offending count; the
control loop then pauses for the penalty duration.

The window is a fixed period with a hard reset, not a sliding window.
"""

import enum
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class BackoffDecision(str, enum.Enum):
    INERT = "inert"  # Window never started (or cleared by a penalty)
    ACCUMULATING = "accumulating"  # Window open, below limit
    ROLLED = "rolled"  # Window expired and restarted
    PENALIZED = "penalized"  # Limit reached, caller must pause


class BackoffTracker:
    """Shared window bookkeeping for both tracker kinds."""

    # Configuration constants
    WINDOW_DURATION = timedelta(hours=2)
    PENALTY_DURATION = timedelta(hours=4)
    LIMIT = 1

    name = "backoff"

    def __init__(
        self,
        limit: Optional[int] = None,
        window_duration: Optional[timedelta] = None,
        penalty_duration: Optional[timedelta] = None,
    ):
        self.limit = self.LIMIT if limit is None else limit
        self.window_duration = window_duration or self.WINDOW_DURATION
        self.penalty_duration = penalty_duration or self.PENALTY_DURATION
        if self.limit < 1:
            raise ValueError("limit must be at least 1")

        self.window_start: Optional[datetime] = None

    @property
    def is_armed(self) -> bool:
        return self.window_start is not None

    def arm(self, now: datetime) -> None:
        """Start the window at now unless it is already running."""
        if not self.is_armed:
            self.window_start = now
            logger.debug(f"{self.name} backoff window started at {now.isoformat()}")

    def window_expired(self, now: datetime) -> bool:
        return self.is_armed and now - self.window_start >= self.window_duration

    def check_and_maybe_penalize(self, now: datetime) -> BackoffDecision:
        if not self.is_armed:
            return BackoffDecision.INERT

        if self.window_expired(now):
            self._roll(now)
            return BackoffDecision.ROLLED

        if self._over_limit():
            self._penalize()
            self.window_start = None
            return BackoffDecision.PENALIZED

        return BackoffDecision.ACCUMULATING

    def reset(self) -> None:
        self.window_start = None
        self._clear_counts()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "tracker": self.name,
            "window_start": self.window_start.isoformat() if self.window_start else None,
            "limit": self.limit,
            "window_seconds": int(self.window_duration.total_seconds()),
            "penalty_seconds": int(self.penalty_duration.total_seconds()),
        }

    def _roll(self, now: datetime) -> None:
        raise NotImplementedError

    def _over_limit(self) -> bool:
        raise NotImplementedError

    def _penalize(self) -> None:
        raise NotImplementedError

    def _clear_counts(self) -> None:
        raise NotImplementedError


class ClusterBackoffTracker(BackoffTracker):
    """Counts rebalances of the cluster as a whole."""

    LIMIT = 3

    name = "cluster"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.attempt_count = 0

    def record_attempt(self, now: datetime) -> int:
        self.attempt_count += 1
        self.arm(now)
        return self.attempt_count

    def _roll(self, now: datetime) -> None:
        self.attempt_count = 0
        self.window_start = now
        logger.info(f"Resetting timer for cluster rebalance count as we have passed the {self.window_duration} mark")

    def _over_limit(self) -> bool:
        return self.attempt_count >= self.limit

    def _penalize(self) -> None:
        logger.warning(
            f"Too many CLUSTER rebalance attempts ({self.attempt_count} within {self.window_duration}), "
            f"backing off for {self.penalty_duration}"
        )
        self.attempt_count = 0

    def _clear_counts(self) -> None:
        self.attempt_count = 0

    def snapshot(self) -> Dict[str, Any]:
        state = super().snapshot()
        state["attempt_count"] = self.attempt_count
        return state


class NodeBackoffTracker(BackoffTracker):
    """
    Counts rebalances per failed hostname.

    All hostnames share one window; each keeps its own count. A penalty only
    zeroes the hostnames that hit the limit.
    """

    LIMIT = 2

    name = "node"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.attempt_counts: Dict[str, int] = {}

    def count_for(self, hostname: str) -> int:
        return self.attempt_counts.get(hostname, 0)

    def record_attempt(self, hostname: str, now: datetime) -> int:
        self.attempt_counts[hostname] = self.count_for(hostname) + 1
        self.arm(now)
        return self.attempt_counts[hostname]

    def offending_hostnames(self):
        return [hostname for hostname, count in self.attempt_counts.items() if count >= self.limit]

    def _roll(self, now: datetime) -> None:
        self.attempt_counts = {}
        self.window_start = now
        logger.info("Clearing node rebalance count map and resetting timer")

    def _over_limit(self) -> bool:
        return bool(self.offending_hostnames())

    def _penalize(self) -> None:
        for hostname in self.offending_hostnames():
            logger.warning(
                f"{hostname} has been rebalanced {self.attempt_counts[hostname]} times "
                f"(limit {self.limit} within {self.window_duration})"
            )
            self.attempt_counts[hostname] = 0
        logger.warning(f"Too many SINGLE NODE rebalance attempts, backing off for {self.penalty_duration}")

    def _clear_counts(self) -> None:
        self.attempt_counts = {}

    def snapshot(self) -> Dict[str, Any]:
        state = super().snapshot()
        state["attempt_counts"] = dict(self.attempt_counts)
        return state
