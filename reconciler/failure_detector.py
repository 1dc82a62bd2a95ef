"""
Failure detection over a cluster snapshot.

Only a single failed node is ever acted on. With several nodes out of the active
membership the situation is treated as a cascade and left for a human.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from reconciler.models import ClusterSnapshot, MemberInfo

logger = logging.getLogger(__name__)


class DetectionOutcome(str, enum.Enum):
    HEALTHY = "healthy"
    SINGLE_FAILURE = "single_failure"
    MULTIPLE_FAILURES = "multiple_failures"


@dataclass(frozen=True)
class Detection:
    outcome: DetectionOutcome
    failed_count: int
    member: Optional[MemberInfo] = None

    @property
    def actionable(self) -> bool:
        return self.member is not None


class FailureDetector:
    def detect(self, snapshot: ClusterSnapshot) -> Detection:
        """Classify the snapshot; only SINGLE_FAILURE carries a member."""
        failed = snapshot.failed_members()

        if len(failed) > 1:
            names = ", ".join(node.hostname for node in failed)
            logger.info(f"Too many failed nodes ({len(failed)}: {names}), taking no action")
            return Detection(DetectionOutcome.MULTIPLE_FAILURES, len(failed))

        if not failed:
            logger.info("Cluster in a healthy state, nothing to do")
            return Detection(DetectionOutcome.HEALTHY, 0)

        member = failed[0]
        if not member.hostname:
            logger.warning(f"Failed node {member.cluster_node_id or '<unknown>'} reports no hostname, taking no action")
            return Detection(DetectionOutcome.SINGLE_FAILURE, 1)

        logger.info(f"Detected failed node {member.hostname} (membership={member.membership_state}, status={member.health_status})")
        return Detection(DetectionOutcome.SINGLE_FAILURE, 1, member)

    def find_failed_member(self, snapshot: ClusterSnapshot) -> Optional[MemberInfo]:
        return self.detect(snapshot).member
