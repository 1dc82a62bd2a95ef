"""
Reconciler Service Launcher

Starts the Couchbase rebalance reconciler in the foreground.

The reconciler polls the cluster every minute. When exactly one node has been
failed over and reports healthy, it sets the node to full recovery and rebalances
the cluster. Too many rebalances within two hours (3 for the cluster, 2 for one
node) pause it for four hours.

Usage:
    python scripts/run_reconciler_service.py

Environment Variables (a .env file in the working directory is also read):
    CB_URL: Cluster management API base URL (required)
    CB_USERNAME / CB_PASSWORD: Basic-auth credentials (required)
    DRY_RUN: Log recover/rebalance intent without sending it (default: false)
    CB_REQUEST_TIMEOUT: HTTP timeout in seconds (default: none)
    LOG_LEVEL: Logging level (default: INFO)
    LOG_FILE: Optional log file path
"""
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from reconciler.service import main


if __name__ == "__main__":
    sys.exit(main())
