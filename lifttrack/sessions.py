"""Turning a finished workout into a stored session and its summary.

Finishing happens in two phases.  The workout is first frozen locally into a
:class:`FinalizedWorkoutSession`; nothing can fail there.  It is then handed
to the session store.  The active workout is only cleared once the store
confirms, so a failed save leaves everything in place for :meth:`retry`.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from lifttrack.calculations import (
    flag_personal_records,
    workout_duration,
    workout_volume,
)
from lifttrack.exceptions import PersistenceError
from lifttrack.models import (
    ActiveWorkout,
    ExerciseResult,
    FinalizedWorkoutSession,
    WorkoutSummary,
)

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from lifttrack.ports import SessionPort
    from lifttrack.workout_store import WorkoutStore

# Sessions of exercise history compared against when flagging records
RECORD_HISTORY_LIMIT = 10


def assemble_session(
    snapshot: ActiveWorkout,
    completed_at: datetime | None = None,
    notes: str | None = None,
    template_id: str | None = None,
) -> FinalizedWorkoutSession:
    """Freeze ``snapshot`` into a session with its duration and total volume."""

    completed_at = completed_at or datetime.now(timezone.utc)
    return FinalizedWorkoutSession(
        id=snapshot.id,
        split_type=snapshot.split_type,
        name=snapshot.name,
        started_at=snapshot.started_at,
        exercises=snapshot.exercises,
        duration=workout_duration(snapshot.started_at, completed_at),
        total_volume=workout_volume(snapshot.exercises),
        template_id=template_id,
        notes=notes,
    )


def summarize(session: FinalizedWorkoutSession) -> WorkoutSummary:
    """Return the figures shown once a workout has been saved."""

    results = []
    for ex in session.exercises:
        results.append(
            ExerciseResult(
                exercise_name=ex.exercise_name,
                completed_sets=sum(1 for s in ex.sets if s.completed),
                volume_total=ex.volume_total,
                has_pr=any(s.is_pr for s in ex.sets),
            )
        )
    return WorkoutSummary(
        name=session.name,
        duration=session.duration,
        total_volume=workout_volume(session.exercises),
        completed_sets=session.completed_sets,
        total_sets=session.total_sets,
        personal_records=sum(
            1 for ex in session.exercises for s in ex.sets if s.is_pr
        ),
        exercises=tuple(results),
    )


class SessionAssembler:
    """Finish the store's workout and save it through ``sessions``.

    ``pending`` holds the finalized session until the store confirms it and
    ``last_error`` the most recent save failure for display.  The store is
    only cleared when the workout still matches the value that was saved, so
    sets logged while a save is failing or in flight stay in place.
    """

    def __init__(
        self,
        store: "WorkoutStore",
        sessions: "SessionPort",
        history_limit: int = RECORD_HISTORY_LIMIT,
    ):
        self.store = store
        self.sessions = sessions
        self.history_limit = history_limit
        self.pending: FinalizedWorkoutSession | None = None
        self.pending_user_id: str | None = None
        self.last_error: PersistenceError | None = None
        self.last_saved: FinalizedWorkoutSession | None = None
        self._snapshot: ActiveWorkout | None = None
        self._notes: str | None = None
        self._detect_records = True

    async def finish(
        self,
        user_id: str,
        notes: str | None = None,
        detect_records: bool = True,
    ) -> tuple[str, WorkoutSummary] | None:
        """Save the active workout and return ``(session_id, summary)``.

        Returns ``None`` when no workout is active.  Raises
        :class:`PersistenceError` if the store rejects the session; the
        workout then stays active.
        """

        snapshot = self.store.snapshot()
        if snapshot is None:
            return None
        self.pending_user_id = user_id
        self._notes = notes
        self._detect_records = detect_records
        await self._prepare(snapshot)
        return await self._submit()

    async def retry(self) -> tuple[str, WorkoutSummary] | None:
        """Resubmit the session whose save failed.

        If the same workout is still active and was edited since, the
        session is rebuilt from its current state first.
        """

        if self.pending is None:
            return None
        current = self.store.snapshot()
        if (
            current is not None
            and current.id == self.pending.id
            and current is not self._snapshot
        ):
            await self._prepare(current)
        return await self._submit()

    async def _prepare(self, snapshot: ActiveWorkout) -> None:
        session = assemble_session(snapshot, notes=self._notes)
        if self._detect_records:
            session = await self._flag_records(self.pending_user_id, session)
        self._snapshot = snapshot
        self.pending = session

    async def _flag_records(
        self, user_id: str, session: FinalizedWorkoutSession
    ) -> FinalizedWorkoutSession:
        exercises = []
        for ex in session.exercises:
            try:
                history = await self.sessions.get_exercise_history(
                    user_id, ex.exercise_id, self.history_limit
                )
            except PersistenceError:
                logging.warning(
                    "Skipping record detection for %s", ex.exercise_id, exc_info=True
                )
                exercises.append(ex)
                continue
            exercises.append(
                ex.model_copy(update={"sets": flag_personal_records(ex.sets, history)})
            )
        return session.model_copy(update={"exercises": tuple(exercises)})

    async def _submit(self) -> tuple[str, WorkoutSummary]:
        # shielded so leaving the view does not abort a save in flight
        return await asyncio.shield(
            self._save_and_commit(self.pending_user_id, self.pending, self._snapshot)
        )

    async def _save_and_commit(
        self,
        user_id: str,
        session: FinalizedWorkoutSession,
        snapshot: ActiveWorkout,
    ) -> tuple[str, WorkoutSummary]:
        try:
            session_id = await self.sessions.save_session(user_id, session)
        except Exception as exc:
            error = exc if isinstance(exc, PersistenceError) else PersistenceError(str(exc))
            self.last_error = error
            logging.warning("Saving workout %s failed; keeping it active", session.id)
            if error is exc:
                raise
            raise error from exc

        current = self.store.active_workout
        if current is snapshot:
            self.store.end()
        elif current is not None and current.id == session.id:
            logging.warning(
                "Workout %s changed while saving; keeping it active", session.id
            )
        saved = session.model_copy(update={"session_id": session_id})
        if self.pending is session:
            self.pending = None
            self.pending_user_id = None
            self._snapshot = None
        self.last_error = None
        self.last_saved = saved
        logging.info("Workout %s saved as session %s", session.id, session_id)
        return session_id, summarize(saved)
