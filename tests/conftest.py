import os
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

# Keep Kivy from parsing pytest's arguments or writing logs during tests
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")
os.environ.setdefault("KIVY_UNITTEST", "1")

from lifttrack import settings  # noqa: E402
from lifttrack.session_store import SQLiteSessionStore  # noqa: E402
from lifttrack.workout_store import WorkoutStore  # noqa: E402
from helpers import BENCH, ROW, FakeClock  # noqa: E402


@pytest.fixture
def store() -> WorkoutStore:
    return WorkoutStore()


@pytest.fixture
def chest_day(store: WorkoutStore) -> WorkoutStore:
    """Store with a 'Chest Day' workout of bench press and rows."""
    store.start("chest", "Chest Day", [BENCH, ROW])
    return store


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_db(tmp_path: Path) -> Path:
    return tmp_path / "lifttrack.db"


@pytest.fixture
def session_store(sample_db: Path) -> SQLiteSessionStore:
    return SQLiteSessionStore(sample_db)


@pytest.fixture
def settings_path(tmp_path: Path):
    path = tmp_path / "settings.json"
    settings.clear_cache()
    yield path
    settings.clear_cache()
