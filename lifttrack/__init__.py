"""Shared constants and defaults for the LiftTrack workout engine."""

from __future__ import annotations

from pathlib import Path

# Default values used when building exercises and sets
DEFAULT_SETS_PER_EXERCISE = 3
DEFAULT_REPS = 10

# Default rest duration after completing a set, in seconds
DEFAULT_REST_DURATION = 90

# Key under which the in-progress workout is snapshotted locally
SNAPSHOT_KEY = "lifttrack-workout"

# Local data folder holding the SQLite store, settings and recovery files
DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_DB_PATH = DATA_DIR / "lifttrack.db"

__all__ = [
    "DEFAULT_SETS_PER_EXERCISE",
    "DEFAULT_REPS",
    "DEFAULT_REST_DURATION",
    "SNAPSHOT_KEY",
    "DATA_DIR",
    "DEFAULT_DB_PATH",
]
