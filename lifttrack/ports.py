"""Interfaces the workout engine consumes from its environment.

``SessionPort`` and ``CustomExercisePort`` are asynchronous because they may
sit in front of a remote store; ``ProfilePort`` is read synchronously when
building defaults.  :mod:`lifttrack.session_store` and
:mod:`lifttrack.settings` provide the local implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lifttrack.models import (
    Exercise,
    ExerciseHistoryEntry,
    FinalizedWorkoutSession,
    SessionSummary,
    SplitType,
    User,
    UserProfile,
)


class ProfilePort(ABC):
    @abstractmethod
    def current_user(self) -> User | None:
        """Return the signed-in user or ``None``."""

    @abstractmethod
    def user_profile(self) -> UserProfile | None:
        """Return unit and rest preferences for the current user."""

    @abstractmethod
    def update_profile(self, **fields) -> UserProfile:
        """Persist ``fields`` and return the updated profile."""


class SessionPort(ABC):
    @abstractmethod
    async def save_session(self, user_id: str, session: FinalizedWorkoutSession) -> str:
        """Store ``session`` and return its new id.

        The store stamps the completion time.
        """

    @abstractmethod
    async def list_sessions(self, user_id: str, limit: int = 50) -> list[SessionSummary]:
        """Return up to ``limit`` sessions, most recent first."""

    @abstractmethod
    async def get_session(
        self, user_id: str, session_id: str
    ) -> FinalizedWorkoutSession | None:
        """Return one session or ``None`` if it does not exist."""

    @abstractmethod
    async def list_sessions_by_type(
        self, user_id: str, split_type: SplitType | str, limit: int = 10
    ) -> list[FinalizedWorkoutSession]:
        """Return recent sessions of ``split_type``, most recent first."""

    @abstractmethod
    async def get_exercise_history(
        self, user_id: str, exercise_id: str, limit: int = 20
    ) -> list[ExerciseHistoryEntry]:
        """Return recent performances of ``exercise_id``, most recent first."""

    @abstractmethod
    async def delete_session(self, user_id: str, session_id: str) -> None:
        """Delete a stored session.  Unknown ids are ignored."""


class CustomExercisePort(ABC):
    @abstractmethod
    async def save_custom_exercise(self, user_id: str, exercise: Exercise) -> str:
        """Store a user-authored exercise and return its id."""

    @abstractmethod
    async def list_custom_exercises(self, user_id: str) -> list[Exercise]:
        """Return all custom exercises of ``user_id``."""

    @abstractmethod
    async def delete_custom_exercise(self, user_id: str, exercise_id: str) -> None:
        """Delete a custom exercise.  Unknown ids are ignored."""
