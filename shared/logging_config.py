"""
Logging configuration for the rebalance reconciler.

Provides consistent logging setup for the reconciler service and its launcher scripts.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


def resolve_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """Translate a level name (e.g. 'debug') or number into a logging level."""
    if level is None or level == "":
        return default
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else default


def setup_logging(
    component_name: str,
    level: Union[int, str, None] = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
):
    """
    Configure logging for a reconciler component.
    
    Args:
        component_name: Component identifier (e.g., 'reconciler')
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL) or its name
        log_file: Optional file path for log output
        format_string: Custom format string (default provided)
    """
    level = resolve_level(level)
    if format_string is None:
        format_string = f'[%(asctime)s] [{component_name.upper()}] %(levelname)s - %(message)s'
    
    # Configure root logger
    logging.basicConfig(
        level=level,
        format=format_string,
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    # basicConfig is a no-op once handlers exist; the level still applies
    logging.getLogger().setLevel(level)

    # Add file handler if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(format_string, datefmt='%Y-%m-%d %H:%M:%S'))
        logging.getLogger().addHandler(file_handler)
    
    logger = logging.getLogger(component_name)
    logger.info(f"{component_name.upper()} logging initialized (level={logging.getLevelName(level)})")
    
    return logger
