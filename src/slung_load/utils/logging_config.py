"""Logging setup for planner runs.

Planner modules log through ``logging.getLogger(__name__)``; this module
only decides where those records go and how noisy the QP backend may be.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FILE_NAME = "slung_load.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# cvxpy reports every compile and solve on this logger
SOLVER_LOGGER = "__cvxpy__"


def _handlers(log_file: Optional[Path]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))
    return handlers


def setup_logging(
    log_dir: Optional[Path] = None,
    log_level: int = logging.INFO,
    solver_log_level: int = logging.WARNING,
) -> Optional[Path]:
    """Route planner logs to the console and optionally to a run log file.

    Calling this again replaces the handlers of a previous call.

    Args:
        log_dir: Directory for ``slung_load.log``; created if missing
        log_level: Level for planner records (default: INFO)
        solver_log_level: Lowest level let through from the QP backend;
            never below ``log_level``

    Returns:
        Path of the log file, or None when logging only to the console
    """
    log_file = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / LOG_FILE_NAME

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=_handlers(log_file),
        force=True,
    )
    logging.getLogger(SOLVER_LOGGER).setLevel(max(log_level, solver_log_level))

    return log_file
