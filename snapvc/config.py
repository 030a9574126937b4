"""Constants and environment-driven settings."""

import logging
import os
from pathlib import Path

CONTROL_DIR = ".snapvc"
DEFAULT_BRANCH = "master"
INITIAL_MESSAGE = "initial commit"

VERSIONS_DIR = "versions"
STAGE_PREFIX = "stage/"
STATE_DIR = "state"
STATE_KEY = "repository"

DIR_ENV = "SNAPVC_DIR"
LOG_LEVEL_ENV = "SNAPVC_LOG_LEVEL"


def control_dir(root: str | Path) -> Path:
    """The control directory for a working directory.

    ``SNAPVC_DIR`` overrides the directory name (not its location).
    """
    return Path(root) / os.environ.get(DIR_ENV, CONTROL_DIR)


def log_level() -> int:
    """Log level from ``SNAPVC_LOG_LEVEL``.

    Unset or unrecognized names give ``WARNING``.
    """
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        return logging.WARNING
    return level
