from datetime import timedelta

from lifttrack.rest_timer import ElapsedTimeDriver, RestTimer, RestTimerDriver, Ticker


def test_start_and_tick_counts_down():
    timer = RestTimer()
    timer.start(90)
    for _ in range(3):
        timer.tick()
    assert timer.seconds == 87
    assert timer.is_running
    assert timer.duration == 90


def test_expiry_is_visible_until_stopped():
    timer = RestTimer()
    timer.start(2)
    timer.tick()
    timer.tick()
    assert not timer.is_running
    assert timer.is_complete
    assert timer.seconds == 0
    assert not timer.tick()
    timer.stop()
    assert timer.state is None
    assert not timer.is_complete


def test_tick_without_timer_is_noop():
    timer = RestTimer()
    assert not timer.tick()
    assert timer.state is None


def test_new_start_replaces_running_timer():
    timer = RestTimer()
    timer.start(90)
    timer.tick()
    timer.start(60)
    assert (timer.seconds, timer.duration, timer.is_running) == (60, 60, True)
    assert timer.generation == 2


def test_ticker_schedules_and_cancels(fake_clock):
    calls = []
    ticker = Ticker(lambda: calls.append(1), clock=fake_clock)
    ticker.start()
    fake_clock.advance(3)
    ticker.stop()
    fake_clock.advance(2)
    assert len(calls) == 3
    assert not ticker.is_running
    assert fake_clock.events[0].interval == 1.0


def test_driver_ticks_store_timer(chest_day, fake_clock):
    chest_day.update_set(0, 0, weight=100, reps=8)
    chest_day.complete_set(0, 0)
    driver = RestTimerDriver(chest_day, clock=fake_clock)
    chest_day.start_rest_timer(90)
    fake_clock.advance(3)
    assert chest_day.active_workout.exercises[0].volume_total == 800
    assert chest_day.rest_timer.seconds == 87
    assert chest_day.rest_timer.is_running
    driver.detach()


def test_driver_stops_cadence_on_expiry_and_signals_once(chest_day, fake_clock):
    expired = []
    driver = RestTimerDriver(chest_day, on_expire=lambda: expired.append(1), clock=fake_clock)
    chest_day.start_rest_timer(2)
    fake_clock.advance(5)
    assert chest_day.rest_timer.is_complete
    assert fake_clock.active == []
    assert expired == [1]
    chest_day.stop_rest_timer()
    assert expired == [1]
    driver.detach()


def test_driver_restarts_cadence_on_new_start(chest_day, fake_clock):
    driver = RestTimerDriver(chest_day, clock=fake_clock)
    chest_day.start_rest_timer(90)
    fake_clock.advance(10)
    chest_day.start_rest_timer(60)
    assert len(fake_clock.active) == 1
    fake_clock.advance(1)
    assert chest_day.rest_timer.seconds == 59
    driver.detach()


def test_detached_driver_stops_ticking(chest_day, fake_clock):
    driver = RestTimerDriver(chest_day, clock=fake_clock)
    chest_day.start_rest_timer(30)
    driver.detach()
    fake_clock.advance(5)
    assert chest_day.rest_timer.seconds == 30


def test_ending_workout_stops_cadence(chest_day, fake_clock):
    driver = RestTimerDriver(chest_day, clock=fake_clock)
    chest_day.start_rest_timer(30)
    chest_day.end()
    assert fake_clock.active == []
    driver.detach()


def test_elapsed_driver_reports_seconds_while_active(chest_day, fake_clock):
    started = chest_day.active_workout.started_at
    offset = [0]
    seen = []
    driver = ElapsedTimeDriver(
        chest_day,
        seen.append,
        clock=fake_clock,
        now=lambda: started + timedelta(seconds=offset[0]),
    )
    offset[0] = 65.7
    fake_clock.advance(1)
    chest_day.start_rest_timer(90)
    assert seen == [0, 65]
    assert len(fake_clock.active) == 1
    chest_day.end()
    assert fake_clock.active == []
    driver.detach()


def test_elapsed_driver_waits_for_a_workout(store, fake_clock):
    seen = []
    driver = ElapsedTimeDriver(store, seen.append, clock=fake_clock)
    assert fake_clock.active == []
    store.start("chest", "Chest Day", [])
    assert len(seen) == 1
    assert len(fake_clock.active) == 1
    driver.detach()
    assert fake_clock.active == []
