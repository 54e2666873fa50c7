"""SQLite-backed storage for finished workouts and custom exercises.

Sessions are stored as JSON documents per user, the way a remote document
store would hold them, with a few indexed columns for ordering and
filtering.  Rows are soft deleted.  All public methods are coroutines; the
blocking SQLite work runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path

from lifttrack import DEFAULT_DB_PATH
from lifttrack.exceptions import PersistenceError
from lifttrack.models import (
    Exercise,
    ExerciseHistoryEntry,
    FinalizedWorkoutSession,
    SessionSummary,
    SplitType,
)
from lifttrack.ports import CustomExercisePort, SessionPort

# Number of recent sessions scanned when filtering by split type or
# collecting exercise history.  Older sessions are not searched.
TYPE_SCAN_WINDOW = 50
HISTORY_SCAN_WINDOW = 100

SCHEMA = """
CREATE TABLE IF NOT EXISTS session_sessions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    split_type TEXT NOT NULL,
    name TEXT NOT NULL,
    completed_at REAL NOT NULL,
    document_json TEXT NOT NULL,
    deleted INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_session_sessions_user
    ON session_sessions (user_id, completed_at);
CREATE TABLE IF NOT EXISTS library_custom_exercises (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    created_at REAL NOT NULL,
    document_json TEXT NOT NULL,
    deleted INTEGER NOT NULL DEFAULT 0
);
"""


def _server_time() -> float:
    return time.time()


def _summary(session: FinalizedWorkoutSession) -> SessionSummary:
    return SessionSummary(
        session_id=session.session_id or "",
        name=session.name,
        split_type=session.split_type,
        started_at=session.started_at,
        completed_at=session.completed_at,
        duration=session.duration,
        total_volume=session.total_volume,
        completed_sets=session.completed_sets,
        total_sets=session.total_sets,
    )


class SQLiteSessionStore(SessionPort, CustomExercisePort):
    """Local implementation of the session and custom exercise ports."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.executescript(SCHEMA)

    async def _run(self, action: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except (sqlite3.Error, OSError, ValueError) as exc:
            logging.exception("Session store failed to %s", action)
            raise PersistenceError(f"Could not {action}: {exc}") from exc

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    def _save_session(self, user_id: str, session: FinalizedWorkoutSession) -> str:
        session_id = uuid.uuid4().hex
        completed = _server_time()
        stored = session.model_copy(
            update={
                "session_id": session_id,
                "completed_at": datetime.fromtimestamp(completed, timezone.utc),
            }
        )
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(
                """
                INSERT INTO session_sessions
                    (id, user_id, split_type, name, completed_at, document_json)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    session_id,
                    user_id,
                    stored.split_type.value,
                    stored.name,
                    completed,
                    stored.model_dump_json(),
                ),
            )
        logging.info("Saved session %s for user %s", session_id, user_id)
        return session_id

    def _recent_sessions(self, user_id: str, limit: int) -> list[FinalizedWorkoutSession]:
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT document_json FROM session_sessions
                WHERE user_id = ? AND deleted = 0
                ORDER BY completed_at DESC, rowid DESC
                LIMIT ?
                """,
                (user_id, limit),
            )
            rows = cursor.fetchall()
        return [FinalizedWorkoutSession.model_validate_json(doc) for (doc,) in rows]

    def _get_session(self, user_id: str, session_id: str) -> FinalizedWorkoutSession | None:
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT document_json FROM session_sessions
                WHERE id = ? AND user_id = ? AND deleted = 0
                """,
                (session_id, user_id),
            )
            row = cursor.fetchone()
        if row is None:
            return None
        return FinalizedWorkoutSession.model_validate_json(row[0])

    def _last_by_type(self, user_id: str, split_type: str) -> FinalizedWorkoutSession | None:
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT document_json FROM session_sessions
                WHERE user_id = ? AND split_type = ? AND deleted = 0
                ORDER BY completed_at DESC, rowid DESC
                LIMIT 1
                """,
                (user_id, split_type),
            )
            row = cursor.fetchone()
        if row is None:
            return None
        return FinalizedWorkoutSession.model_validate_json(row[0])

    def _delete_session(self, user_id: str, session_id: str) -> None:
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(
                "UPDATE session_sessions SET deleted = 1 WHERE id = ? AND user_id = ?",
                (session_id, user_id),
            )

    async def save_session(self, user_id: str, session: FinalizedWorkoutSession) -> str:
        return await self._run("save session", self._save_session, user_id, session)

    async def list_sessions(self, user_id: str, limit: int = 50) -> list[SessionSummary]:
        sessions = await self._run("list sessions", self._recent_sessions, user_id, limit)
        return [_summary(s) for s in sessions]

    async def get_session(
        self, user_id: str, session_id: str
    ) -> FinalizedWorkoutSession | None:
        return await self._run("load session", self._get_session, user_id, session_id)

    async def list_sessions_by_type(
        self, user_id: str, split_type: SplitType | str, limit: int = 10
    ) -> list[FinalizedWorkoutSession]:
        split_type = SplitType(split_type)
        sessions = await self._run(
            "list sessions", self._recent_sessions, user_id, TYPE_SCAN_WINDOW
        )
        return [s for s in sessions if s.split_type == split_type][:limit]

    async def get_last_session_by_type(
        self, user_id: str, split_type: SplitType | str
    ) -> FinalizedWorkoutSession | None:
        return await self._run(
            "load session", self._last_by_type, user_id, SplitType(split_type).value
        )

    async def get_exercise_history(
        self, user_id: str, exercise_id: str, limit: int = 20
    ) -> list[ExerciseHistoryEntry]:
        sessions = await self._run(
            "load exercise history", self._recent_sessions, user_id, HISTORY_SCAN_WINDOW
        )
        history: list[ExerciseHistoryEntry] = []
        for session in sessions:
            exercise = next(
                (ex for ex in session.exercises if ex.exercise_id == exercise_id),
                None,
            )
            if exercise is not None and session.completed_at is not None:
                history.append(
                    ExerciseHistoryEntry(
                        date=session.completed_at,
                        sets=exercise.sets,
                        volume_total=exercise.volume_total,
                    )
                )
            if len(history) >= limit:
                break
        return history

    async def delete_session(self, user_id: str, session_id: str) -> None:
        await self._run("delete session", self._delete_session, user_id, session_id)

    # ------------------------------------------------------------------
    # Custom exercises
    # ------------------------------------------------------------------
    def _save_custom_exercise(self, user_id: str, exercise: Exercise) -> str:
        exercise_id = f"custom-{uuid.uuid4().hex}"
        stored = exercise.model_copy(
            update={"id": exercise_id, "is_custom": True, "created_by": user_id}
        )
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(
                """
                INSERT INTO library_custom_exercises (id, user_id, created_at, document_json)
                VALUES (?, ?, ?, ?)
                """,
                (exercise_id, user_id, _server_time(), stored.model_dump_json()),
            )
        return exercise_id

    def _list_custom_exercises(self, user_id: str) -> list[Exercise]:
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT document_json FROM library_custom_exercises
                WHERE user_id = ? AND deleted = 0
                ORDER BY created_at, rowid
                """,
                (user_id,),
            )
            rows = cursor.fetchall()
        return [Exercise.model_validate(json.loads(doc)) for (doc,) in rows]

    def _delete_custom_exercise(self, user_id: str, exercise_id: str) -> None:
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(
                "UPDATE library_custom_exercises SET deleted = 1 WHERE id = ? AND user_id = ?",
                (exercise_id, user_id),
            )

    async def save_custom_exercise(self, user_id: str, exercise: Exercise) -> str:
        return await self._run(
            "save custom exercise", self._save_custom_exercise, user_id, exercise
        )

    async def list_custom_exercises(self, user_id: str) -> list[Exercise]:
        return await self._run(
            "list custom exercises", self._list_custom_exercises, user_id
        )

    async def delete_custom_exercise(self, user_id: str, exercise_id: str) -> None:
        await self._run(
            "delete custom exercise", self._delete_custom_exercise, user_id, exercise_id
        )
