"""
Cluster Management API Client

Thin wrapper around the Couchbase management REST API used by the reconciler:
- GET  /pools/default               -> cluster snapshot (node membership + health)
- POST /controller/setRecoveryType  -> mark a failed-over node for full recovery
- POST /controller/rebalance        -> rebalance across the complete known node list

All requests carry basic-auth credentials from ReconcilerConfig. There are no
retries here; callers decide whether a failure is fatal or skips a cycle.
"""

import logging
from typing import List, Optional

import requests
from pydantic import ValidationError

from reconciler.config import ReconcilerConfig
from reconciler.exceptions import RebalanceError, RecoveryError, SnapshotError
from reconciler.models import ClusterSnapshot, MemberInfo, RecoveryType

logger = logging.getLogger(__name__)


class ClusterClient:
    """
    Client for the cluster management API.

    Usage:
        client = ClusterClient(config)
        snapshot = client.fetch_cluster_snapshot()
        client.request_node_recovery(snapshot.nodes[1])
        client.request_rebalance(snapshot.node_ids())
    """

    SNAPSHOT_PATH = "/pools/default"
    RECOVERY_PATH = "/controller/setRecoveryType"
    REBALANCE_PATH = "/controller/rebalance"

    def __init__(self, config: ReconcilerConfig, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            config: Validated reconciler configuration (base URL, credentials, timeout)
            session: Optional pre-built requests session (tests inject a mock here)
        """
        self.base_url = config.cluster_url.rstrip("/")
        self.timeout = config.request_timeout
        self._session = session or requests.Session()
        self._session.auth = (config.username, config.password)

    def close(self):
        self._session.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _post_form(self, path: str, form: dict, error_cls) -> requests.Response:
        url = self._url(path)
        try:
            # requests form-encodes a dict body and sets the Content-Type header
            response = self._session.post(url, data=form, timeout=self.timeout)
        except requests.RequestException as e:
            raise error_cls(f"POST {path} failed: {e}") from e

        if response.status_code != 200:
            raise error_cls(
                f"HTTP request failed with status: {response.status_code} and body {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    def fetch_cluster_snapshot(self) -> ClusterSnapshot:
        """
        Fetch the current cluster node listing.

        Returns:
            ClusterSnapshot with every node and its membership/health status

        Raises:
            SnapshotError: On transport errors, non-200 responses or an unparsable body
        """
        url = self._url(self.SNAPSHOT_PATH)
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise SnapshotError(f"GET {self.SNAPSHOT_PATH} failed: {e}") from e

        if response.status_code != 200:
            raise SnapshotError(
                f"GET {self.SNAPSHOT_PATH} failed with HTTP {response.status_code}: {response.text[:300]}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Cannot unmarshal JSON from {self.SNAPSHOT_PATH}")
            raise SnapshotError(
                f"GET {self.SNAPSHOT_PATH} returned non-JSON body: {response.text[:300]}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        try:
            return ClusterSnapshot.model_validate(payload)
        except ValidationError as e:
            raise SnapshotError(
                f"GET {self.SNAPSHOT_PATH} returned an unexpected node listing: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def request_node_recovery(self, member: MemberInfo) -> str:
        """
        Mark a failed-over node for full recovery. Must happen before the rebalance,
        otherwise the rebalance ejects the node.

        Returns:
            Response body text

        Raises:
            RecoveryError: On transport errors or non-200 responses
        """
        logger.info(f"Recovering node {member.hostname} ({member.cluster_node_id})")
        form = {
            "otpNode": member.cluster_node_id,
            "recoveryType": RecoveryType.FULL.value,
        }
        response = self._post_form(self.RECOVERY_PATH, form, RecoveryError)
        return response.text

    def request_rebalance(self, node_ids: List[str]) -> str:
        """
        Rebalance the cluster across node_ids.

        node_ids must be the complete membership: any node left out of knownNodes
        is removed from the cluster by the server.

        Returns:
            Response body text

        Raises:
            RebalanceError: On an empty node list, transport errors or non-200 responses
        """
        if not node_ids:
            raise RebalanceError("no nodes provided for rebalance")

        logger.info(f"List of nodes we are passing for rebalance: {node_ids}")
        form = {"knownNodes": ",".join(node_ids)}
        response = self._post_form(self.REBALANCE_PATH, form, RebalanceError)
        return response.text
