"""
Cluster snapshot models.

Parsed from the management API node listing (GET /pools/default). Only the fields the
reconciler needs are modelled; everything else in the payload is ignored.
"""

from __future__ import annotations

import enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# ENUM DEFINITIONS
# ============================================================================

class MembershipState(str, enum.Enum):
    """Cluster membership values reported in clusterMembership"""
    ACTIVE = "active"
    INACTIVE_FAILED_OVER = "inactiveFailedOver"  # Failed over, pending recovery/removal
    INACTIVE_ADDED = "inactiveAdded"  # Added or recovered, waiting for rebalance


class HealthStatus(str, enum.Enum):
    """Node liveness values reported in status"""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    WARMUP = "warmup"


class RecoveryType(str, enum.Enum):
    """Recovery mode passed to /controller/setRecoveryType"""
    FULL = "full"  # Rejoin with full data re-sync
    DELTA = "delta"


# ============================================================================
# SNAPSHOT MODELS
# ============================================================================

class MemberInfo(BaseModel):
    """One node entry from the cluster node listing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    hostname: str = ""
    membership_state: str = Field(default="", alias="clusterMembership")
    health_status: str = Field(default="", alias="status")
    cluster_node_id: str = Field(default="", alias="otpNode")
    recovery_type: str = Field(default="", alias="recoveryType")
    services: List[str] = Field(default_factory=list)

    @field_validator("hostname", "membership_state", "health_status", "cluster_node_id", "recovery_type", mode="before")
    @classmethod
    def _null_as_empty_string(cls, value):
        return "" if value is None else value

    @field_validator("services", mode="before")
    @classmethod
    def _null_as_no_services(cls, value):
        return [] if value is None else value

    @property
    def is_active(self) -> bool:
        return self.membership_state == MembershipState.ACTIVE.value

    @property
    def is_healthy(self) -> bool:
        return self.health_status == HealthStatus.HEALTHY.value


class ClusterSnapshot(BaseModel):
    """Point-in-time view of the cluster membership."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = ""
    nodes: List[MemberInfo] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _null_name(cls, value):
        return "" if value is None else value

    @field_validator("nodes", mode="before")
    @classmethod
    def _null_nodes(cls, value):
        return [] if value is None else value

    def node_ids(self) -> List[str]:
        """Every member's node ID, in listing order. This is the knownNodes set for a rebalance."""
        return [node.cluster_node_id for node in self.nodes]

    def failed_members(self) -> List[MemberInfo]:
        return [node for node in self.nodes if not node.is_active]
