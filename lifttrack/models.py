"""LiftTrack data models.

Workout values are frozen: every state change builds a new value with
``model_copy`` so observers never see a half-updated workout.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from lifttrack import DEFAULT_REPS, DEFAULT_REST_DURATION, DEFAULT_SETS_PER_EXERCISE


class SplitType(str, Enum):
    """Muscle-group focus of a workout."""

    CHEST = "chest"
    BACK = "back"
    LEGS = "legs"
    CUSTOM = "custom"


class MuscleGroup(str, Enum):
    CHEST = "chest"
    UPPER_BACK = "upper_back"
    LATS = "lats"
    TRAPS = "traps"
    FRONT_DELTS = "front_delts"
    SIDE_DELTS = "side_delts"
    REAR_DELTS = "rear_delts"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    FOREARMS = "forearms"
    QUADS = "quads"
    HAMSTRINGS = "hamstrings"
    GLUTES = "glutes"
    CALVES = "calves"
    ABS = "abs"
    OBLIQUES = "obliques"
    LOWER_BACK = "lower_back"


class Equipment(str, Enum):
    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    CABLE = "cable"
    MACHINE = "machine"
    BODYWEIGHT = "bodyweight"
    KETTLEBELL = "kettlebell"
    BANDS = "bands"
    OTHER = "other"


class ExerciseCategory(str, Enum):
    COMPOUND = "compound"
    ISOLATION = "isolation"
    CARDIO = "cardio"
    STRETCH = "stretch"


class WorkoutSet(BaseModel):
    """A single planned or performed set."""

    model_config = ConfigDict(frozen=True)

    set_number: int
    weight: float = Field(0, ge=0)
    reps: int = Field(0, ge=0)
    rpe: float | None = Field(None, ge=0, le=10)
    is_warmup: bool = False
    is_dropset: bool = False
    is_pr: bool = False
    completed: bool = False
    completed_at: datetime | None = None

    @property
    def volume(self) -> float:
        return (self.weight or 0) * (self.reps or 0)


class WorkoutExercise(BaseModel):
    """One exercise performed within a workout.

    ``exercise_name`` is copied from the catalog when the exercise is added
    and is never refreshed, so renaming a catalog entry leaves recorded
    workouts untouched.
    """

    model_config = ConfigDict(frozen=True)

    exercise_id: str
    exercise_name: str
    order: int
    sets: tuple[WorkoutSet, ...] = ()
    volume_total: float = 0


class ActiveWorkout(BaseModel):
    """The workout currently in progress.

    ``current_exercise_index`` is ``-1`` when the exercise list is empty.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    split_type: SplitType
    name: str
    started_at: datetime
    exercises: tuple[WorkoutExercise, ...] = ()
    current_exercise_index: int = 0


class ExerciseSeed(BaseModel):
    """Exercise to create when a workout starts."""

    model_config = ConfigDict(frozen=True)

    exercise_id: str
    exercise_name: str
    default_sets: int = DEFAULT_SETS_PER_EXERCISE
    default_reps: int = DEFAULT_REPS
    last_sets: tuple[WorkoutSet, ...] | None = None


class FinalizedWorkoutSession(BaseModel):
    """Immutable record of a finished workout."""

    model_config = ConfigDict(frozen=True)

    id: str
    split_type: SplitType
    name: str
    started_at: datetime
    exercises: tuple[WorkoutExercise, ...] = ()
    duration: int = 0
    total_volume: float = 0
    completed_at: datetime | None = None
    session_id: str | None = None
    template_id: str | None = None
    notes: str | None = None
    ai_commentary: str | None = None

    @property
    def completed_sets(self) -> int:
        return sum(1 for ex in self.exercises for s in ex.sets if s.completed)

    @property
    def total_sets(self) -> int:
        return sum(len(ex.sets) for ex in self.exercises)


class SessionSummary(BaseModel):
    """Listing projection of a stored session."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    name: str
    split_type: SplitType
    started_at: datetime
    completed_at: datetime | None = None
    duration: int = 0
    total_volume: float = 0
    completed_sets: int = 0
    total_sets: int = 0


class ExerciseHistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime
    sets: tuple[WorkoutSet, ...] = ()
    volume_total: float = 0


class ExerciseResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    exercise_name: str
    completed_sets: int
    volume_total: float
    has_pr: bool = False


class WorkoutSummary(BaseModel):
    """Figures shown on the summary view after a workout is saved."""

    model_config = ConfigDict(frozen=True)

    name: str
    duration: int
    total_volume: float
    completed_sets: int
    total_sets: int
    personal_records: int
    exercises: tuple[ExerciseResult, ...] = ()


class RestTimerState(BaseModel):
    model_config = ConfigDict(frozen=True)

    running: bool
    seconds: int
    duration: int


class Exercise(BaseModel):
    """An entry in the exercise catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    aliases: tuple[str, ...] = ()
    primary_muscles: tuple[MuscleGroup, ...] = ()
    secondary_muscles: tuple[MuscleGroup, ...] = ()
    equipment: Equipment = Equipment.OTHER
    category: ExerciseCategory = ExerciseCategory.ISOLATION
    instructions: str | None = None
    is_custom: bool = False
    created_by: str | None = None


class TemplateExercise(BaseModel):
    model_config = ConfigDict(frozen=True)

    exercise_id: str
    exercise_name: str
    order: int
    default_sets: int = DEFAULT_SETS_PER_EXERCISE
    default_reps: int = DEFAULT_REPS
    notes: str | None = None


class WorkoutTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    split_type: SplitType
    exercises: tuple[TemplateExercise, ...] = ()


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    email: str = ""


class UserProfile(BaseModel):
    """Per-user preferences read by the engine for display and defaults."""

    model_config = ConfigDict(frozen=True)

    display_name: str = "Lifter"
    email: str = ""
    units: Literal["lb", "kg"] = "lb"
    default_rest_timer: int = DEFAULT_REST_DURATION
