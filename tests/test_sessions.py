from datetime import timedelta

import pytest

from helpers import run
from lifttrack.exceptions import PersistenceError
from lifttrack.session_store import SQLiteSessionStore
from lifttrack.sessions import SessionAssembler, assemble_session, summarize


class FlakySessionStore(SQLiteSessionStore):
    """Session store whose saves fail until ``failures`` runs out."""

    def __init__(self, db_path, failures=1, error=None):
        super().__init__(db_path)
        self.failures = failures
        self.error = error or PersistenceError("network unavailable")
        self.attempts = 0

    async def save_session(self, user_id, session):
        self.attempts += 1
        if self.failures > 0:
            self.failures -= 1
            raise self.error
        return await super().save_session(user_id, session)


def _log_bench(store, weight=100, reps=8, sets=(0, 1)):
    for idx in sets:
        store.update_set(0, idx, weight=weight, reps=reps)
        store.complete_set(0, idx)


def test_assemble_session_totals_match_snapshot(chest_day):
    _log_bench(chest_day)
    snapshot = chest_day.snapshot()
    session = assemble_session(
        snapshot, completed_at=snapshot.started_at + timedelta(minutes=45, seconds=30)
    )
    assert session.id == snapshot.id
    assert session.duration == 2730
    assert session.total_volume == 1600
    assert session.exercises == snapshot.exercises
    assert chest_day.active_workout is snapshot


def test_summarize_counts_sets_and_records(chest_day):
    _log_bench(chest_day)
    summary = summarize(assemble_session(chest_day.snapshot()))
    assert summary.name == "Chest Day"
    assert summary.total_volume == 1600
    assert (summary.completed_sets, summary.total_sets) == (2, 5)
    assert summary.personal_records == 0
    assert [e.exercise_name for e in summary.exercises] == ["Bench Press", "Barbell Row"]
    assert summary.exercises[0].completed_sets == 2


def test_finish_saves_and_clears_workout(chest_day, session_store):
    _log_bench(chest_day)
    workout_id = chest_day.active_workout.id
    assembler = SessionAssembler(chest_day, session_store)
    session_id, summary = run(assembler.finish("u1", notes="felt strong"))
    assert chest_day.active_workout is None
    assert summary.total_volume == 1600
    saved = run(session_store.get_session("u1", session_id))
    assert saved.id == workout_id
    assert saved.notes == "felt strong"
    assert saved.completed_at is not None
    assert assembler.pending is None
    assert assembler.last_saved.session_id == session_id


def test_finish_without_workout_returns_none(store, session_store):
    assembler = SessionAssembler(store, session_store)
    assert run(assembler.finish("u1")) is None
    assert run(assembler.retry()) is None


def test_failed_save_keeps_workout_for_retry(chest_day, sample_db):
    flaky = FlakySessionStore(sample_db)
    _log_bench(chest_day)
    workout = chest_day.active_workout
    assembler = SessionAssembler(chest_day, flaky)

    with pytest.raises(PersistenceError):
        run(assembler.finish("u1"))
    assert chest_day.active_workout is workout
    assert assembler.pending is not None
    assert assembler.last_error is flaky.error

    session_id, summary = run(assembler.retry())
    assert flaky.attempts == 2
    assert chest_day.active_workout is None
    assert assembler.pending is None
    assert assembler.last_error is None
    assert summary.total_volume == 1600
    assert run(flaky.get_session("u1", session_id)).id == workout.id


def test_unexpected_save_errors_are_wrapped(chest_day, sample_db):
    flaky = FlakySessionStore(sample_db, error=RuntimeError("boom"))
    assembler = SessionAssembler(chest_day, flaky)
    with pytest.raises(PersistenceError) as info:
        run(assembler.finish("u1"))
    assert isinstance(info.value.__cause__, RuntimeError)
    assert chest_day.is_active


def test_retry_does_not_end_a_newer_workout(chest_day, sample_db):
    flaky = FlakySessionStore(sample_db)
    assembler = SessionAssembler(chest_day, flaky)
    with pytest.raises(PersistenceError):
        run(assembler.finish("u1"))
    chest_day.discard()
    newer = chest_day.start("legs", "Leg Day", [])
    run(assembler.retry())
    assert chest_day.active_workout is newer


def test_finish_flags_personal_records(chest_day, session_store):
    _log_bench(chest_day, weight=100, reps=5)
    run(SessionAssembler(chest_day, session_store).finish("u1"))

    chest_day.start("chest", "Chest Day", [
        {"exercise_id": "bench", "exercise_name": "Bench Press", "default_sets": 2},
    ])
    _log_bench(chest_day, weight=110, reps=5)
    session_id, summary = run(SessionAssembler(chest_day, session_store).finish("u1"))
    assert summary.personal_records == 1
    assert summary.exercises[0].has_pr
    saved = run(session_store.get_session("u1", session_id))
    assert [s.is_pr for s in saved.exercises[0].sets] == [True, False]


def test_record_detection_can_be_skipped(chest_day, session_store):
    _log_bench(chest_day)
    _, summary = run(SessionAssembler(chest_day, session_store).finish("u1", detect_records=False))
    assert summary.personal_records == 0


def test_history_failure_does_not_block_finish(chest_day, session_store, monkeypatch):
    async def broken_history(*args, **kwargs):
        raise PersistenceError("history offline")

    monkeypatch.setattr(session_store, "get_exercise_history", broken_history)
    _log_bench(chest_day)
    session_id, summary = run(SessionAssembler(chest_day, session_store).finish("u1"))
    assert session_id
    assert summary.personal_records == 0
    assert chest_day.active_workout is None


def test_retry_includes_sets_logged_after_failure(chest_day, sample_db):
    flaky = FlakySessionStore(sample_db)
    _log_bench(chest_day, sets=(0,))
    assembler = SessionAssembler(chest_day, flaky)
    with pytest.raises(PersistenceError):
        run(assembler.finish("u1", notes="second try"))

    _log_bench(chest_day, sets=(1,))
    session_id, summary = run(assembler.retry())
    assert chest_day.active_workout is None
    assert summary.total_volume == 1600
    saved = run(flaky.get_session("u1", session_id))
    assert saved.total_volume == 1600
    assert saved.notes == "second try"
    assert [s.completed for s in saved.exercises[0].sets] == [True, True, False]


class EditDuringSaveStore(SQLiteSessionStore):
    """Session store that runs ``on_save`` while a save is in flight."""

    def __init__(self, db_path, on_save):
        super().__init__(db_path)
        self.on_save = on_save

    async def save_session(self, user_id, session):
        self.on_save()
        return await super().save_session(user_id, session)


def test_edits_during_save_keep_workout_active(chest_day, sample_db):
    _log_bench(chest_day, sets=(0,))
    sessions = EditDuringSaveStore(sample_db, lambda: _log_bench(chest_day, sets=(1,)))
    session_id, summary = run(SessionAssembler(chest_day, sessions).finish("u1"))
    assert summary.total_volume == 800
    workout = chest_day.active_workout
    assert workout is not None
    assert workout.exercises[0].volume_total == 1600
    assert run(sessions.get_session("u1", session_id)).total_volume == 800
