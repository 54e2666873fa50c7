"""Built-in exercise catalog, default templates and workout seeds.

User-authored exercises from the custom exercise store are merged with the
built-in list for lookup and search.  Nothing here is edited at runtime.
"""

from __future__ import annotations

from typing import Iterable

from lifttrack import DEFAULT_REPS
from lifttrack.models import (
    Equipment,
    Exercise,
    ExerciseCategory,
    ExerciseSeed,
    FinalizedWorkoutSession,
    MuscleGroup,
    SplitType,
    TemplateExercise,
    WorkoutTemplate,
)

M = MuscleGroup
E = Equipment
COMPOUND = ExerciseCategory.COMPOUND
ISOLATION = ExerciseCategory.ISOLATION


def _exercise(id, name, primary, secondary=(), equipment=E.BARBELL, category=COMPOUND, aliases=()):
    return Exercise(
        id=id,
        name=name,
        aliases=tuple(aliases),
        primary_muscles=tuple(primary),
        secondary_muscles=tuple(secondary),
        equipment=equipment,
        category=category,
    )


BUILTIN_EXERCISES: tuple[Exercise, ...] = (
    _exercise("flat-barbell-bench-press", "Flat Barbell Bench Press", [M.CHEST],
              [M.TRICEPS, M.FRONT_DELTS], aliases=["Bench Press", "Bench"]),
    _exercise("incline-dumbbell-press", "Incline Dumbbell Press", [M.CHEST],
              [M.FRONT_DELTS, M.TRICEPS], E.DUMBBELL, aliases=["Incline DB Press"]),
    _exercise("cable-flyes", "Cable Flyes", [M.CHEST], [M.FRONT_DELTS], E.CABLE,
              ISOLATION, aliases=["Cable Fly", "Cable Crossover"]),
    _exercise("dips", "Dips", [M.CHEST, M.TRICEPS], [M.FRONT_DELTS], E.BODYWEIGHT,
              aliases=["Chest Dips"]),
    _exercise("pec-deck", "Pec Deck", [M.CHEST], [], E.MACHINE, ISOLATION,
              aliases=["Machine Fly"]),
    _exercise("barbell-row", "Barbell Row", [M.UPPER_BACK, M.LATS],
              [M.BICEPS, M.REAR_DELTS], aliases=["Bent Over Row"]),
    _exercise("pull-ups", "Pull-ups", [M.LATS], [M.BICEPS, M.UPPER_BACK],
              E.BODYWEIGHT, aliases=["Pull Up", "Chin Up"]),
    _exercise("seated-cable-row", "Seated Cable Row", [M.UPPER_BACK],
              [M.LATS, M.BICEPS], E.CABLE, aliases=["Cable Row"]),
    _exercise("lat-pulldown", "Lat Pulldown", [M.LATS], [M.BICEPS], E.CABLE,
              aliases=["Pulldown"]),
    _exercise("face-pulls", "Face Pulls", [M.REAR_DELTS], [M.TRAPS], E.CABLE,
              ISOLATION, aliases=["Face Pull"]),
    _exercise("barbell-squat", "Barbell Squat", [M.QUADS, M.GLUTES],
              [M.HAMSTRINGS, M.LOWER_BACK], aliases=["Back Squat", "Squat"]),
    _exercise("romanian-deadlift", "Romanian Deadlift", [M.HAMSTRINGS],
              [M.GLUTES, M.LOWER_BACK], aliases=["RDL"]),
    _exercise("leg-press", "Leg Press", [M.QUADS], [M.GLUTES], E.MACHINE),
    _exercise("leg-curl", "Leg Curl", [M.HAMSTRINGS], [], E.MACHINE, ISOLATION,
              aliases=["Hamstring Curl"]),
    _exercise("calf-raises", "Calf Raises", [M.CALVES], [], E.MACHINE, ISOLATION,
              aliases=["Calf Raise"]),
)


def _template(name, split_type, rows) -> WorkoutTemplate:
    return WorkoutTemplate(
        name=name,
        split_type=split_type,
        exercises=tuple(
            TemplateExercise(
                exercise_id=ex_id,
                exercise_name=ex_name,
                order=i,
                default_sets=sets,
                default_reps=reps,
            )
            for i, (ex_id, ex_name, sets, reps) in enumerate(rows)
        ),
    )


DEFAULT_TEMPLATES: tuple[WorkoutTemplate, ...] = (
    _template("Chest Day", SplitType.CHEST, [
        ("flat-barbell-bench-press", "Flat Barbell Bench Press", 4, 8),
        ("incline-dumbbell-press", "Incline Dumbbell Press", 3, 10),
        ("cable-flyes", "Cable Flyes", 3, 12),
        ("dips", "Dips", 3, 10),
        ("pec-deck", "Pec Deck", 3, 12),
    ]),
    _template("Back Day", SplitType.BACK, [
        ("barbell-row", "Barbell Row", 4, 8),
        ("pull-ups", "Pull-ups", 3, 8),
        ("seated-cable-row", "Seated Cable Row", 3, 10),
        ("lat-pulldown", "Lat Pulldown", 3, 10),
        ("face-pulls", "Face Pulls", 3, 15),
    ]),
    _template("Leg Day", SplitType.LEGS, [
        ("barbell-squat", "Barbell Squat", 4, 8),
        ("romanian-deadlift", "Romanian Deadlift", 3, 10),
        ("leg-press", "Leg Press", 3, 12),
        ("leg-curl", "Leg Curl", 3, 12),
        ("calf-raises", "Calf Raises", 4, 15),
    ]),
)


def template_for(split_type: SplitType | str) -> WorkoutTemplate | None:
    """Return the default template for ``split_type`` if one ships."""

    split_type = SplitType(split_type)
    for template in DEFAULT_TEMPLATES:
        if template.split_type == split_type:
            return template
    return None


def merge_catalog(custom: Iterable[Exercise] = ()) -> list[Exercise]:
    """Return built-in exercises followed by ``custom`` ones."""

    return list(BUILTIN_EXERCISES) + list(custom)


def get_exercise(exercise_id: str, catalog: Iterable[Exercise] | None = None) -> Exercise | None:
    for exercise in catalog if catalog is not None else BUILTIN_EXERCISES:
        if exercise.id == exercise_id:
            return exercise
    return None


def search_exercises(
    query: str = "",
    muscle: MuscleGroup | str | None = None,
    equipment: Equipment | str | None = None,
    catalog: Iterable[Exercise] | None = None,
) -> list[Exercise]:
    """Filter the catalog by name/alias text, muscle group and equipment.

    Text matching is case-insensitive on the name and every alias.  A muscle
    matches either primary or secondary muscles.
    """

    results = list(catalog if catalog is not None else BUILTIN_EXERCISES)
    text = query.strip().lower()
    if text:
        results = [
            ex
            for ex in results
            if text in ex.name.lower() or any(text in a.lower() for a in ex.aliases)
        ]
    if muscle:
        muscle = MuscleGroup(muscle)
        results = [
            ex
            for ex in results
            if muscle in ex.primary_muscles or muscle in ex.secondary_muscles
        ]
    if equipment:
        equipment = Equipment(equipment)
        results = [ex for ex in results if ex.equipment == equipment]
    return results


def new_custom_exercise(
    name: str,
    primary_muscle: MuscleGroup | str,
    equipment: Equipment | str,
) -> Exercise:
    """Build a custom exercise ready for the custom exercise store.

    The store assigns the final id.
    """

    return Exercise(
        id="",
        name=name,
        primary_muscles=(MuscleGroup(primary_muscle),),
        equipment=Equipment(equipment),
        category=ISOLATION,
        is_custom=True,
    )


def seeds_from_template(template: WorkoutTemplate) -> list[ExerciseSeed]:
    return [
        ExerciseSeed(
            exercise_id=ex.exercise_id,
            exercise_name=ex.exercise_name,
            default_sets=ex.default_sets,
            default_reps=ex.default_reps,
        )
        for ex in sorted(template.exercises, key=lambda e: e.order)
    ]


def seeds_from_session(session: FinalizedWorkoutSession) -> list[ExerciseSeed]:
    """Seeds that repeat ``session`` with its weights and reps pre-filled."""

    return [
        ExerciseSeed(
            exercise_id=ex.exercise_id,
            exercise_name=ex.exercise_name,
            default_sets=len(ex.sets),
            default_reps=(ex.sets[0].reps if ex.sets else 0) or DEFAULT_REPS,
            last_sets=ex.sets,
        )
        for ex in session.exercises
    ]
