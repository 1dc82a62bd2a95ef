"""
Reconciler Service Entrypoint

Loads configuration from the environment, configures logging and runs the
reconcile loop in the foreground. Meant to run under a supervisor (systemd,
Kubernetes, ...) that restarts it after a fatal error.

Exit codes:
    0: stopped by SIGINT/SIGTERM
    1: fatal configuration or cluster API error
"""

import logging
import signal

from reconciler.config import load_config
from reconciler.control_loop import ReconcileLoop
from reconciler.exceptions import ConfigError, SnapshotError
from shared.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _install_signal_handlers(loop: ReconcileLoop):
    def _handle(signum, frame):
        logger.info(f"Received signal {signal.Signals(signum).name}, shutting down")
        loop.stop()

    signal.signal(signal.SIGTERM, _handle)
    signal.signal(signal.SIGINT, _handle)


def main() -> int:
    # INFO until the configured level and log file are known
    setup_logging("reconciler")
    try:
        config = load_config()
    except ConfigError as e:
        logger.critical(f"Invalid configuration: {e}")
        return 1

    setup_logging("reconciler", level=config.log_level, log_file=config.log_file)
    logger.info(f"Cluster API: {config.cluster_url}")
    logger.info(f"isDryRun is currently set to: {config.dry_run}")

    loop = ReconcileLoop.from_config(config)
    _install_signal_handlers(loop)

    try:
        loop.run_forever()
    except SnapshotError as e:
        logger.critical(f"Unable to read cluster state, exiting: {e}")
        return 1
    finally:
        loop.client.close()

    return 0
