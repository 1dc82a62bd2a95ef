"""
Reconciler control loop.

Single-threaded poll loop:
1. Evaluate both backoff trackers (a penalty pauses the loop for 4 hours)
2. Fetch the cluster snapshot (any failure here is fatal)
3. Detect a single failed node
4. Recover + rebalance it
5. Sleep for the poll interval

The loop runs until stop() is called or a fatal error propagates. Sleeps wait on a
threading.Event, so stop() from a signal handler ends them early.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from reconciler.backoff import BackoffDecision, BackoffTracker, ClusterBackoffTracker, NodeBackoffTracker
from reconciler.cluster_client import ClusterClient
from reconciler.config import ReconcilerConfig
from reconciler.failure_detector import Detection, FailureDetector
from reconciler.orchestrator import CycleOutcome, RecoveryOrchestrator, utc_now

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """What a single loop iteration did."""
    cluster_backoff: BackoffDecision = BackoffDecision.INERT
    node_backoff: BackoffDecision = BackoffDecision.INERT
    detection: Optional[Detection] = None
    outcome: Optional[CycleOutcome] = None
    paused_seconds: List[float] = field(default_factory=list)


class ReconcileLoop:
    """
    Ties the trackers, snapshot provider, detector and orchestrator together.
    """

    POLL_INTERVAL_SEC = 60

    def __init__(
        self,
        client: ClusterClient,
        dry_run: bool = False,
        cluster_tracker: Optional[ClusterBackoffTracker] = None,
        node_tracker: Optional[NodeBackoffTracker] = None,
        detector: Optional[FailureDetector] = None,
        poll_interval_seconds: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Optional[Callable[[float], object]] = None,
    ):
        """
        Initialize the loop.

        Args:
            client: Snapshot provider and mutation collaborator
            dry_run: Log recover/rebalance intent instead of sending it
            cluster_tracker: Cluster-wide tracker (default limits: 3 per 2h)
            node_tracker: Per-hostname tracker (default limits: 2 per 2h)
            detector: Failure detector
            poll_interval_seconds: Pause between iterations (default 60s)
            clock: Current-time source shared with the orchestrator
            sleep: Blocking sleep used for poll and penalty pauses (default: stop-aware wait)
        """
        self.client = client
        self.dry_run = dry_run
        self.cluster_tracker = cluster_tracker or ClusterBackoffTracker()
        self.node_tracker = node_tracker or NodeBackoffTracker()
        self.detector = detector or FailureDetector()
        self.poll_interval = self.POLL_INTERVAL_SEC if poll_interval_seconds is None else poll_interval_seconds
        self.clock = clock or utc_now

        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait

        self.orchestrator = RecoveryOrchestrator(
            client=client,
            cluster_tracker=self.cluster_tracker,
            node_tracker=self.node_tracker,
            dry_run=dry_run,
            clock=self.clock,
        )
        self.iterations = 0

    @classmethod
    def from_config(cls, config: ReconcilerConfig, **kwargs) -> "ReconcileLoop":
        return cls(client=ClusterClient(config), dry_run=config.dry_run, **kwargs)

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self):
        """Ask the loop to exit at the next sleep boundary."""
        if not self.stopped:
            logger.info("Reconciler stop requested")
        self._stop_event.set()

    def _apply_backoff(self, tracker: BackoffTracker, report: TickReport) -> BackoffDecision:
        decision = tracker.check_and_maybe_penalize(self.clock())
        if decision == BackoffDecision.PENALIZED:
            pause = tracker.penalty_duration.total_seconds()
            logger.warning(f"Backoff penalty from {tracker.name} tracker, pausing reconciler for {pause:.0f}s: {tracker.snapshot()}")
            self._sleep(pause)
            report.paused_seconds.append(pause)
            logger.info(f"Backoff penalty from {tracker.name} tracker finished, resuming")
        return decision

    def run_once(self) -> TickReport:
        """
        Run one iteration without the trailing poll sleep.

        Raises:
            SnapshotError: If the cluster snapshot cannot be fetched or parsed
        """
        self.iterations += 1
        report = TickReport()

        report.cluster_backoff = self._apply_backoff(self.cluster_tracker, report)
        if self.stopped:
            return report
        report.node_backoff = self._apply_backoff(self.node_tracker, report)
        if self.stopped:
            return report

        snapshot = self.client.fetch_cluster_snapshot()
        logger.debug(f"Fetched snapshot of {snapshot.name or 'cluster'} with {len(snapshot.nodes)} nodes")

        report.detection = self.detector.detect(snapshot)
        if report.detection.actionable:
            report.outcome = self.orchestrator.handle_failure(report.detection.member, snapshot)

        return report

    def run_forever(self):
        """Poll until stop() is called. Fatal errors propagate to the caller."""
        logger.info(f"Reconciler started: dry_run={self.dry_run}, poll_interval={self.poll_interval}s")
        while not self.stopped:
            self.run_once()
            if self.stopped:
                break
            self._sleep(self.poll_interval)
        logger.info("Reconciler stopped")
