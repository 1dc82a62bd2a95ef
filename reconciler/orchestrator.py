"""
Recovery orchestration for a single failed node.

Steps for a detected failed node:
1. Require the node to report healthy, otherwise try again next poll
2. Set recovery type to full (skipped with a log line under dry-run)
3. Rebalance across the complete node list (skipped with a log line under dry-run)
4. Count the attempt against both backoff trackers

A failed recovery stops the cycle before the rebalance and counts nothing. A failed
rebalance is logged but still counts, since the cluster may have been partly changed.
"""

import enum
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from reconciler.backoff import ClusterBackoffTracker, NodeBackoffTracker
from reconciler.cluster_client import ClusterClient
from reconciler.exceptions import RebalanceError, RecoveryError
from reconciler.models import ClusterSnapshot, MemberInfo

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CycleOutcome(str, enum.Enum):
    NOT_HEALTHY = "not_healthy"
    RECOVERY_FAILED = "recovery_failed"
    REBALANCED = "rebalanced"
    REBALANCE_FAILED = "rebalance_failed"

    @property
    def counted(self) -> bool:
        return self in (CycleOutcome.REBALANCED, CycleOutcome.REBALANCE_FAILED)


class RecoveryOrchestrator:
    """
    Sequences recovery + rebalance for one failed node and updates the trackers.
    """

    def __init__(
        self,
        client: ClusterClient,
        cluster_tracker: ClusterBackoffTracker,
        node_tracker: NodeBackoffTracker,
        dry_run: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            client: Management API client (anything with request_node_recovery/request_rebalance)
            cluster_tracker: Cluster-wide backoff tracker
            node_tracker: Per-hostname backoff tracker
            dry_run: Log intended mutations instead of sending them
            clock: Returns the current time (default: timezone-aware UTC now)
        """
        self.client = client
        self.cluster_tracker = cluster_tracker
        self.node_tracker = node_tracker
        self.dry_run = dry_run
        self.clock = clock or utc_now

    def recover_node(self, member: MemberInfo) -> None:
        if self.dry_run:
            logger.info(f"Would have recovered node: {member.hostname}")
            return
        self.client.request_node_recovery(member)

    def rebalance_cluster(self, node_ids) -> None:
        if self.dry_run:
            logger.info(f"List of nodes we would pass for rebalance: {node_ids}")
            logger.info("Would have rebalanced the cluster")
            return
        self.client.request_rebalance(node_ids)

    def handle_failure(self, member: MemberInfo, snapshot: ClusterSnapshot) -> CycleOutcome:
        """
        Run one recovery + rebalance cycle for member.

        Args:
            member: The single failed node picked by the failure detector
            snapshot: Snapshot the member came from; its full node list is rebalanced

        Returns:
            CycleOutcome describing how far the cycle got
        """
        if not member.is_healthy:
            logger.info(f"{member.hostname} isn't healthy (status={member.health_status!r}), trying again later")
            return CycleOutcome.NOT_HEALTHY

        try:
            self.recover_node(member)
        except RecoveryError as e:
            logger.warning(f"Unable to recover node {member.hostname} back into cluster, skipping rebalance: {e}")
            return CycleOutcome.RECOVERY_FAILED

        outcome = CycleOutcome.REBALANCED
        try:
            self.rebalance_cluster(snapshot.node_ids())
        except RebalanceError as e:
            logger.error(f"Failed to rebalance cluster: {e}")
            outcome = CycleOutcome.REBALANCE_FAILED

        self._record_attempt(member)
        return outcome

    def _record_attempt(self, member: MemberInfo) -> None:
        # Both windows arm at the same instant
        now = self.clock()
        node_count = self.node_tracker.record_attempt(member.hostname, now)
        cluster_count = self.cluster_tracker.record_attempt(now)
        logger.info(
            f"Rebalance attempts: {member.hostname}={node_count}/{self.node_tracker.limit}, "
            f"cluster={cluster_count}/{self.cluster_tracker.limit}"
        )
