"""
Rebalance Reconciler: autonomous recovery for a Couchbase cluster.

Watches cluster membership through the management API and, when exactly one
member has failed over, recovers it (full recovery) and rebalances the cluster.
Responsibilities:
- Poll /pools/default for node membership and health
- Detect a single actionable failed node
- Recover + rebalance, or only log intent under DRY_RUN
- Back off for 4 hours when the cluster or a single node is rebalanced too often
"""
