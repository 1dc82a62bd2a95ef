"""
Reconciler exception hierarchy.

Fatal errors (ConfigError, SnapshotError) propagate to the launcher and end the
process. RecoveryError skips the current cycle; RebalanceError is logged and the
attempt still counts against the backoff budget.
"""

from typing import Optional


class ReconcilerError(RuntimeError):
    pass


class ConfigError(ReconcilerError):
    """Missing or invalid startup configuration."""


class ClusterAPIError(ReconcilerError):
    """A management API call failed at the transport or HTTP level."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SnapshotError(ClusterAPIError):
    """The node listing could not be fetched or parsed."""


class RecoveryError(ClusterAPIError):
    """setRecoveryType was refused or could not be sent."""


class RebalanceError(ClusterAPIError):
    """The rebalance request was refused or could not be sent."""
