"""
Rebalance Reconciler - Pytest Configuration
Shared fixtures for all tests.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from reconciler.cluster_client import ClusterClient
from reconciler.config import ReconcilerConfig
from reconciler.models import ClusterSnapshot, MemberInfo


class FakeClock:
    """Manually advanced clock; also usable as the loop's sleep callable."""

    def __init__(self, start: datetime):
        self.now = start
        self.sleeps = []

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now = self.now + timedelta(seconds=seconds)


def make_member(
    index: int,
    membership: str = "active",
    status: str = "healthy",
) -> MemberInfo:
    return MemberInfo(
        hostname=f"cb-{index}.example.internal:8091",
        membership_state=membership,
        health_status=status,
        cluster_node_id=f"ns_1@cb-{index}.example.internal",
        recovery_type="none",
        services=["kv", "index"],
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def config() -> ReconcilerConfig:
    return ReconcilerConfig(
        cluster_url="http://cb.example.internal:8091",
        username="Administrator",
        password="secret",
    )


@pytest.fixture
def healthy_snapshot() -> ClusterSnapshot:
    return ClusterSnapshot(name="default", nodes=[make_member(1), make_member(2), make_member(3)])


@pytest.fixture
def one_failed_snapshot() -> ClusterSnapshot:
    """Three nodes, node 2 failed over but healthy."""
    return ClusterSnapshot(
        name="default",
        nodes=[
            make_member(1),
            make_member(2, membership="inactiveFailedOver"),
            make_member(3),
        ],
    )


@pytest.fixture
def mock_client(one_failed_snapshot):
    """ClusterClient mocked for tests."""
    client = Mock(spec=ClusterClient)
    client.fetch_cluster_snapshot.return_value = one_failed_snapshot
    client.request_node_recovery.return_value = ""
    client.request_rebalance.return_value = ""
    return client
