"""Tests for the bounded backoff poller."""

from wpstack.utils.retry import wait_for_condition


class FakeClock:
    """Clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_returns_immediately_when_condition_holds():
    clock = FakeClock()

    assert wait_for_condition(lambda: True, timeout=5, sleep=clock.sleep, clock=clock)
    assert clock.sleeps == []


def test_backoff_doubles_and_is_capped():
    clock = FakeClock()
    answers = iter([False] * 5 + [True])

    ok = wait_for_condition(
        lambda: next(answers),
        timeout=30,
        initial_delay=0.25,
        max_delay=1.0,
        sleep=clock.sleep,
        clock=clock,
    )

    assert ok
    assert clock.sleeps == [0.25, 0.5, 1.0, 1.0, 1.0]


def test_times_out_without_overshooting_deadline():
    clock = FakeClock()

    ok = wait_for_condition(
        lambda: False,
        timeout=3,
        initial_delay=1.0,
        max_delay=2.0,
        sleep=clock.sleep,
        clock=clock,
    )

    assert not ok
    assert clock.now == 3
    assert clock.sleeps == [1.0, 2.0]


def test_abort_stops_polling():
    clock = FakeClock()
    calls = []

    def check() -> bool:
        calls.append(1)
        return False

    ok = wait_for_condition(
        check,
        timeout=60,
        abort=lambda: len(calls) >= 2,
        sleep=clock.sleep,
        clock=clock,
    )

    assert not ok
    assert len(calls) == 2
    assert len(clock.sleeps) == 1
