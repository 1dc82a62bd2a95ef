"""
Unit tests for snapshot parsing
"""
from reconciler.models import ClusterSnapshot, MemberInfo


POOLS_DEFAULT_PAYLOAD = {
    "name": "default",
    "balanced": False,
    "nodes": [
        {
            "clusterMembership": "active",
            "recoveryType": "none",
            "status": "healthy",
            "hostname": "10.0.0.1:8091",
            "otpNode": "ns_1@10.0.0.1",
            "services": ["kv", "n1ql"],
            "version": "7.2.0",
        },
        {
            "clusterMembership": "inactiveFailedOver",
            "recoveryType": "none",
            "status": "healthy",
            "hostname": "10.0.0.2:8091",
            "otpNode": "ns_1@10.0.0.2",
            "services": ["kv"],
        },
    ],
}


class TestClusterSnapshot:

    def test_parses_node_listing(self):
        snapshot = ClusterSnapshot.model_validate(POOLS_DEFAULT_PAYLOAD)

        assert snapshot.name == "default"
        assert len(snapshot.nodes) == 2
        failed = snapshot.nodes[1]
        assert failed.membership_state == "inactiveFailedOver"
        assert failed.health_status == "healthy"
        assert failed.cluster_node_id == "ns_1@10.0.0.2"
        assert failed.services == ["kv"]
        assert not failed.is_active
        assert failed.is_healthy

    def test_node_ids_in_listing_order(self):
        snapshot = ClusterSnapshot.model_validate(POOLS_DEFAULT_PAYLOAD)
        assert snapshot.node_ids() == ["ns_1@10.0.0.1", "ns_1@10.0.0.2"]

    def test_failed_members(self):
        snapshot = ClusterSnapshot.model_validate(POOLS_DEFAULT_PAYLOAD)
        assert [m.hostname for m in snapshot.failed_members()] == ["10.0.0.2:8091"]

    def test_missing_fields_default_to_empty(self):
        member = MemberInfo.model_validate({"hostname": "10.0.0.3:8091"})

        assert member.membership_state == ""
        assert member.services == []
        assert not member.is_active
        assert not member.is_healthy

    def test_missing_nodes_key(self):
        assert ClusterSnapshot.model_validate({"name": "default"}).nodes == []

    def test_null_fields_decode_as_empty(self):
        snapshot = ClusterSnapshot.model_validate({
            "name": None,
            "nodes": [{
                "clusterMembership": "inactiveFailedOver",
                "recoveryType": None,
                "status": "healthy",
                "hostname": "10.0.0.2:8091",
                "otpNode": "ns_1@10.0.0.2",
                "services": None,
            }],
        })

        member = snapshot.nodes[0]
        assert snapshot.name == ""
        assert member.services == []
        assert member.recovery_type == ""
        assert member.is_healthy

    def test_null_nodes(self):
        assert ClusterSnapshot.model_validate({"name": "default", "nodes": None}).nodes == []
