"""Volume, one-rep-max and personal-record calculations.

Every function here is pure.  Inputs may be model instances or plain
mappings (as loaded from JSON); missing or ``None`` numeric fields count as
zero.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

WEEK = timedelta(days=7)


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def _number(item: Any, name: str) -> float:
    value = _field(item, name)
    return value if value is not None else 0


def set_volume(workout_set) -> float:
    """Return ``weight * reps`` for a single set regardless of its flags."""

    return _number(workout_set, "weight") * _number(workout_set, "reps")


def exercise_volume(sets: Iterable) -> float:
    """Return the volume of completed working sets.

    Warmup sets and sets that have not been completed contribute nothing.
    """

    return sum(
        set_volume(s)
        for s in sets
        if _field(s, "completed", False) and not _field(s, "is_warmup", False)
    )


def workout_volume(exercises: Iterable) -> float:
    """Sum the precomputed ``volume_total`` of every exercise."""

    return sum(_number(ex, "volume_total") for ex in exercises)


def estimated_one_rep_max(weight, reps) -> float:
    """Estimate a one-rep max with the Epley formula.

    Results are rounded half-up to a whole number, except for single reps
    where the lifted weight is returned unchanged.
    """

    weight = weight or 0
    reps = reps or 0
    if weight <= 0 or reps <= 0:
        return 0
    if reps == 1:
        return weight
    return math.floor(weight * (1 + reps / 30) + 0.5)


def is_personal_record(weight, reps, history: Iterable) -> bool:
    """Return ``True`` when ``weight`` x ``reps`` beats every completed set in ``history``.

    ``history`` is a sequence of sessions, each exposing a ``sets`` list.  A
    tie with a previous best is not a record.
    """

    candidate = estimated_one_rep_max(weight, reps)
    if candidate == 0:
        return False
    for entry in history:
        for s in _field(entry, "sets", None) or ():
            if not _field(s, "completed", False):
                continue
            best = estimated_one_rep_max(_number(s, "weight"), _number(s, "reps"))
            if best >= candidate:
                return False
    return True


def flag_personal_records(sets: Iterable, history: Iterable) -> tuple:
    """Return ``sets`` with ``is_pr`` recomputed against ``history``.

    Earlier sets of the same exercise count as history for later ones so only
    a set that beats everything before it is flagged.
    """

    prior = list(history)
    earlier: list = []
    flagged = []
    for s in sets:
        is_pr = (
            bool(s.completed)
            and not s.is_warmup
            and is_personal_record(s.weight, s.reps, prior + [{"sets": earlier}])
        )
        updated = s.model_copy(update={"is_pr": is_pr})
        flagged.append(updated)
        earlier.append(updated)
    return tuple(flagged)


def workout_duration(started_at: datetime, completed_at: datetime | None = None) -> int:
    """Return whole seconds elapsed between ``started_at`` and ``completed_at``.

    ``completed_at`` defaults to the current time.  The result is never
    negative.
    """

    end = completed_at or datetime.now(started_at.tzinfo)
    return max(0, math.floor((end - started_at).total_seconds()))


def _recent(sessions: Iterable, now: datetime | None) -> list:
    now = now or datetime.now(timezone.utc)
    cutoff = now - WEEK
    return [
        s
        for s in sessions
        if _field(s, "completed_at") is not None and _field(s, "completed_at") > cutoff
    ]


def weekly_volume(sessions: Iterable, now: datetime | None = None) -> float:
    """Total volume of sessions completed within the last seven days."""

    return sum(_number(s, "total_volume") for s in _recent(sessions, now))


def weekly_session_count(sessions: Iterable, now: datetime | None = None) -> int:
    """Number of sessions completed within the last seven days."""

    return len(_recent(sessions, now))
