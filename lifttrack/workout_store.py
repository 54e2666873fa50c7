"""In-memory state machine for the workout in progress.

A :class:`WorkoutStore` holds at most one :class:`ActiveWorkout` and the rest
timer.  Every operation replaces the whole workout value and then dispatches
``on_change`` so views can re-render.  Operations aimed at an index that no
longer exists are ignored rather than raising.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable

from kivy.event import EventDispatcher

from lifttrack import DEFAULT_REPS, DEFAULT_SETS_PER_EXERCISE
from lifttrack.calculations import exercise_volume
from lifttrack.models import (
    ActiveWorkout,
    ExerciseSeed,
    SplitType,
    WorkoutExercise,
    WorkoutSet,
)
from lifttrack.rest_timer import RestTimer

# Set fields callers may change through ``update_set``. ``set_number`` and
# ``completed`` are managed by the store itself.
UPDATABLE_SET_FIELDS = ("weight", "reps", "rpe", "is_warmup", "is_dropset", "is_pr")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def build_default_sets(
    count: int,
    default_reps: int = DEFAULT_REPS,
    prior_sets: Iterable[WorkoutSet] | None = None,
) -> tuple[WorkoutSet, ...]:
    """Return ``count`` fresh sets numbered from 1.

    Weight and reps are pre-filled from the set at the same position in
    ``prior_sets`` when one exists, otherwise ``0`` and ``default_reps``.
    The sets are never marked completed.
    """

    prior = list(prior_sets or ())
    sets = []
    for i in range(max(0, count)):
        previous = prior[i] if i < len(prior) else None
        weight = previous.weight if previous is not None else None
        reps = previous.reps if previous is not None else None
        sets.append(
            WorkoutSet(
                set_number=i + 1,
                weight=weight if weight is not None else 0,
                reps=reps if reps is not None else default_reps,
            )
        )
    return tuple(sets)


def _renumber_sets(sets: Iterable[WorkoutSet]) -> tuple[WorkoutSet, ...]:
    return tuple(
        s if s.set_number == i else s.model_copy(update={"set_number": i})
        for i, s in enumerate(sets, 1)
    )


def _renumber_exercises(exercises: Iterable[WorkoutExercise]) -> tuple[WorkoutExercise, ...]:
    return tuple(
        ex if ex.order == i else ex.model_copy(update={"order": i})
        for i, ex in enumerate(exercises)
    )


def _with_sets(exercise: WorkoutExercise, sets: tuple[WorkoutSet, ...]) -> WorkoutExercise:
    return exercise.model_copy(
        update={"sets": sets, "volume_total": exercise_volume(sets)}
    )


class WorkoutStore(EventDispatcher):
    """Owner of the active workout and its rest timer.

    Bind to changes with :meth:`subscribe`; the callback receives the store.
    """

    __events__ = ("on_change",)

    def __init__(self, workout: ActiveWorkout | None = None, **kwargs):
        super().__init__(**kwargs)
        self.active_workout: ActiveWorkout | None = workout
        self.rest_timer = RestTimer()

    def on_change(self, *args):
        pass

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    def subscribe(self, callback: Callable[["WorkoutStore"], object]) -> Callable[[], None]:
        """Call ``callback`` after every change; return a function that unbinds it.

        Kivy stops dispatching once a handler returns a true value, so the
        callback is wrapped and its return value dropped.
        """

        def handler(store, *args) -> None:
            callback(store)

        self.fbind("on_change", handler)

        def unsubscribe() -> None:
            self.funbind("on_change", handler)

        return unsubscribe

    def _notify(self) -> None:
        self.dispatch("on_change")

    def _replace(self, workout: ActiveWorkout | None) -> None:
        self.active_workout = workout
        self._notify()

    @property
    def is_active(self) -> bool:
        return self.active_workout is not None

    @property
    def current_exercise(self) -> WorkoutExercise | None:
        workout = self.active_workout
        if workout is None:
            return None
        idx = workout.current_exercise_index
        if 0 <= idx < len(workout.exercises):
            return workout.exercises[idx]
        return None

    def completed_set_count(self) -> int:
        if self.active_workout is None:
            return 0
        return sum(
            1 for ex in self.active_workout.exercises for s in ex.sets if s.completed
        )

    def total_set_count(self) -> int:
        if self.active_workout is None:
            return 0
        return sum(len(ex.sets) for ex in self.active_workout.exercises)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(
        self,
        split_type: SplitType | str,
        name: str,
        seeds: Iterable[ExerciseSeed | dict] = (),
    ) -> ActiveWorkout:
        """Begin a new workout built from ``seeds``.

        When a workout is already in progress it is returned untouched.
        """

        if self.active_workout is not None:
            logging.debug(
                "Ignoring start of '%s': workout %s already in progress",
                name,
                self.active_workout.id,
            )
            return self.active_workout

        exercises = []
        for order, seed in enumerate(seeds):
            if not isinstance(seed, ExerciseSeed):
                seed = ExerciseSeed.model_validate(seed)
            exercises.append(
                WorkoutExercise(
                    exercise_id=seed.exercise_id,
                    exercise_name=seed.exercise_name,
                    order=order,
                    sets=build_default_sets(
                        seed.default_sets, seed.default_reps, seed.last_sets
                    ),
                    volume_total=0,
                )
            )
        workout = ActiveWorkout(
            id=uuid.uuid4().hex,
            split_type=SplitType(split_type),
            name=name,
            started_at=_now(),
            exercises=tuple(exercises),
            current_exercise_index=0 if exercises else -1,
        )
        logging.info("Started workout '%s' (%s)", name, workout.id)
        self._replace(workout)
        return workout

    def snapshot(self) -> ActiveWorkout | None:
        """Return the current workout without changing state."""

        return self.active_workout

    def end(self) -> ActiveWorkout | None:
        """Finish the workout and return its final state.

        Duration, totals and persistence are handled by
        :mod:`lifttrack.sessions` on the returned snapshot.
        """

        workout = self.active_workout
        if workout is None:
            return None
        self.rest_timer.stop()
        logging.info("Ended workout '%s' (%s)", workout.name, workout.id)
        self._replace(None)
        return workout

    def discard(self) -> None:
        """Drop the workout and rest timer without saving anything."""

        if self.active_workout is not None:
            logging.info("Discarded workout %s", self.active_workout.id)
        self.rest_timer.stop()
        self._replace(None)

    def restore(self, workout: ActiveWorkout) -> bool:
        """Resume ``workout`` (e.g. from a recovery snapshot) when idle."""

        if self.active_workout is not None:
            return False
        self._replace(workout)
        return True

    # ------------------------------------------------------------------
    # Exercise list
    # ------------------------------------------------------------------
    def set_current_exercise_index(self, index: int) -> None:
        workout = self.active_workout
        if workout is None:
            return
        if not workout.exercises:
            index = -1
        else:
            index = min(max(index, 0), len(workout.exercises) - 1)
        if index != workout.current_exercise_index:
            self._replace(workout.model_copy(update={"current_exercise_index": index}))

    def add_exercise(
        self,
        exercise_id: str,
        exercise_name: str,
        default_sets: int = DEFAULT_SETS_PER_EXERCISE,
        default_reps: int = DEFAULT_REPS,
    ) -> None:
        """Append an exercise and make it the current one."""

        workout = self.active_workout
        if workout is None:
            return
        exercise = WorkoutExercise(
            exercise_id=exercise_id,
            exercise_name=exercise_name,
            order=len(workout.exercises),
            sets=build_default_sets(default_sets, default_reps),
            volume_total=0,
        )
        self._replace(
            workout.model_copy(
                update={
                    "exercises": workout.exercises + (exercise,),
                    "current_exercise_index": len(workout.exercises),
                }
            )
        )

    def remove_exercise(self, index: int) -> None:
        """Remove the exercise at ``index``.

        Removing the last remaining exercise leaves an empty list with
        ``current_exercise_index == -1``.
        """

        workout = self.active_workout
        if workout is None or not 0 <= index < len(workout.exercises):
            logging.debug("Ignoring removal of exercise %s", index)
            return
        exercises = _renumber_exercises(
            ex for i, ex in enumerate(workout.exercises) if i != index
        )
        current = min(workout.current_exercise_index, len(exercises) - 1)
        self._replace(
            workout.model_copy(
                update={"exercises": exercises, "current_exercise_index": current}
            )
        )

    def reorder_exercise(self, from_index: int, to_index: int) -> None:
        """Move an exercise using remove-then-insert semantics."""

        workout = self.active_workout
        if workout is None or not 0 <= from_index < len(workout.exercises):
            logging.debug("Ignoring reorder from %s", from_index)
            return
        exercises = list(workout.exercises)
        moved = exercises.pop(from_index)
        to_index = min(max(to_index, 0), len(exercises))
        exercises.insert(to_index, moved)
        self._replace(
            workout.model_copy(update={"exercises": _renumber_exercises(exercises)})
        )

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------
    def _update_exercise(
        self,
        exercise_index: int,
        build: Callable[[WorkoutExercise], WorkoutExercise | None],
    ) -> None:
        workout = self.active_workout
        if workout is None or not 0 <= exercise_index < len(workout.exercises):
            logging.debug("Ignoring change to exercise %s", exercise_index)
            return
        updated = build(workout.exercises[exercise_index])
        if updated is None:
            return
        exercises = list(workout.exercises)
        exercises[exercise_index] = updated
        self._replace(workout.model_copy(update={"exercises": tuple(exercises)}))

    def update_set(self, exercise_index: int, set_index: int, **fields) -> None:
        """Apply ``fields`` to one set and recompute the exercise volume.

        Values are validated and coerced like any other set field, so
        ``reps="8"`` is stored as ``8``.  Invalid values such as a negative
        weight raise :class:`pydantic.ValidationError` and leave the workout
        unchanged.  Callers must not edit a completed set; the store does not
        check.
        """

        for name in fields:
            if name not in UPDATABLE_SET_FIELDS:
                raise KeyError(f"Unknown set field '{name}'")

        def build(exercise: WorkoutExercise) -> WorkoutExercise | None:
            if not 0 <= set_index < len(exercise.sets):
                return None
            sets = list(exercise.sets)
            sets[set_index] = WorkoutSet.model_validate(
                {**sets[set_index].model_dump(), **fields}
            )
            return _with_sets(exercise, tuple(sets))

        self._update_exercise(exercise_index, build)

    def complete_set(self, exercise_index: int, set_index: int) -> None:
        """Mark a set completed.  Completing an already completed set does nothing.

        Starting the rest timer afterwards is left to the caller.
        """

        def build(exercise: WorkoutExercise) -> WorkoutExercise | None:
            if not 0 <= set_index < len(exercise.sets):
                return None
            target = exercise.sets[set_index]
            if target.completed:
                return None
            sets = list(exercise.sets)
            sets[set_index] = target.model_copy(
                update={"completed": True, "completed_at": _now()}
            )
            return _with_sets(exercise, tuple(sets))

        self._update_exercise(exercise_index, build)

    def add_set(self, exercise_index: int) -> None:
        """Append a set copying the weight and reps of the previous one."""

        def build(exercise: WorkoutExercise) -> WorkoutExercise:
            last = exercise.sets[-1] if exercise.sets else None
            new_set = WorkoutSet(
                set_number=len(exercise.sets) + 1,
                weight=last.weight if last is not None else 0,
                reps=last.reps if last is not None else DEFAULT_REPS,
            )
            return _with_sets(exercise, exercise.sets + (new_set,))

        self._update_exercise(exercise_index, build)

    def remove_set(self, exercise_index: int, set_index: int) -> None:
        def build(exercise: WorkoutExercise) -> WorkoutExercise | None:
            if not 0 <= set_index < len(exercise.sets):
                return None
            sets = _renumber_sets(
                s for i, s in enumerate(exercise.sets) if i != set_index
            )
            return _with_sets(exercise, sets)

        self._update_exercise(exercise_index, build)

    # ------------------------------------------------------------------
    # Rest timer
    # ------------------------------------------------------------------
    def start_rest_timer(self, duration: int) -> None:
        self.rest_timer.start(duration)
        self._notify()

    def stop_rest_timer(self) -> None:
        if self.rest_timer.state is not None:
            self.rest_timer.stop()
            self._notify()

    def tick_rest_timer(self) -> None:
        if self.rest_timer.tick():
            self._notify()
