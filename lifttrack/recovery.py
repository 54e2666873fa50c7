"""Durable local snapshot of the workout in progress.

The active workout is written to two JSON files after every change so an
interrupted workout can be resumed after the app restarts.  If the primary
file is damaged the backup is used.  The rest timer is never saved.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from pydantic import ValidationError

from lifttrack import DATA_DIR, SNAPSHOT_KEY
from lifttrack.models import ActiveWorkout

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from lifttrack.workout_store import WorkoutStore


class RecoverySnapshot:
    """Primary and backup snapshot files named after ``key``."""

    def __init__(self, directory: Path = DATA_DIR, key: str = SNAPSHOT_KEY):
        self.directory = Path(directory)
        self.key = key
        self._unsubscribe: Callable[[], None] | None = None
        self._last_saved: ActiveWorkout | None = None

    @property
    def paths(self) -> tuple[Path, Path]:
        return (
            self.directory / f"{self.key}_1.json",
            self.directory / f"{self.key}_2.json",
        )

    def save(self, workout: ActiveWorkout) -> None:
        """Write ``workout`` to both snapshot files."""

        payload = workout.model_dump_json()
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            for path in self.paths:
                path.write_text(payload, encoding="utf-8")
        except OSError:
            logging.exception("Could not write workout snapshot")

    def load(self) -> ActiveWorkout | None:
        """Return the saved workout, or ``None`` if no readable snapshot exists."""

        for path in self.paths:
            try:
                if not path.exists():
                    continue
                text = path.read_text(encoding="utf-8").strip()
                if not text:
                    continue
                return ActiveWorkout.model_validate_json(text)
            except (OSError, ValidationError):
                logging.exception("Skipping unreadable workout snapshot %s", path)
                continue
        return None

    def clear(self) -> None:
        """Remove any existing snapshot files."""

        for path in self.paths:
            try:
                path.unlink()
            except FileNotFoundError:
                pass

    def attach(self, store: "WorkoutStore") -> None:
        """Keep the snapshot in sync with ``store``.

        A saved workout is restored into an idle store first.  Afterwards
        every change is written out, and the files are removed once the
        store goes idle.
        """

        if not store.is_active:
            saved = self.load()
            if saved is not None and store.restore(saved):
                logging.info("Resumed workout %s from snapshot", saved.id)
        self._unsubscribe = store.subscribe(self._on_change)
        self._on_change(store)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, store: "WorkoutStore") -> None:
        workout = store.active_workout
        # rest timer ticks notify without touching the workout
        if workout is not None and workout is self._last_saved:
            return
        self._last_saved = workout
        if workout is None:
            self.clear()
        else:
            self.save(workout)
