"""Shared test doubles and sample data."""

import asyncio


class FakeEvent:
    def __init__(self, callback, interval):
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeClock:
    """Stand-in for :data:`kivy.clock.Clock` advanced by hand."""

    def __init__(self):
        self.events = []

    def schedule_interval(self, callback, interval):
        event = FakeEvent(callback, interval)
        self.events.append(event)
        return event

    @property
    def active(self):
        return [e for e in self.events if not e.cancelled]

    def advance(self, seconds):
        for _ in range(seconds):
            for event in self.active:
                if not event.cancelled:
                    event.callback(1.0)


BENCH = {
    "exercise_id": "bench",
    "exercise_name": "Bench Press",
    "default_sets": 3,
    "default_reps": 8,
}
ROW = {
    "exercise_id": "row",
    "exercise_name": "Barbell Row",
    "default_sets": 2,
    "default_reps": 10,
}


def run(coro):
    return asyncio.run(coro)
