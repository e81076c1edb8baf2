import pytest

from conftest import FakeClock, FakeStore
from models.timing import TimingStat
from utils.timing import SLOW_ANSWER_SECONDS, TimingHeuristic


def _answer(timing: TimingHeuristic, clock: FakeClock, card_id: str, seconds: float) -> float:
    timing.start_timer(card_id)
    clock.advance(seconds)
    return timing.end_timer(card_id)


def test_end_without_start_returns_zero_and_records_nothing():
    timing = TimingHeuristic(clock=FakeClock())
    assert timing.end_timer("a") == 0.0
    assert timing.stat_for("a") is None
    assert timing.average_for("a") == 0.0


def test_running_average_and_threshold():
    clock = FakeClock()
    timing = TimingHeuristic(clock=clock)
    for seconds in (2, 3, 10):
        _answer(timing, clock, "a", seconds)
    assert timing.average_for("a") == pytest.approx(5.0)
    assert timing.should_appear_more_frequently("a") is False

    _answer(timing, clock, "a", 1)
    assert timing.average_for("a") == pytest.approx(4.0)
    assert timing.stat_for("a").sample_count == 4


def test_slow_card_is_flagged():
    clock = FakeClock()
    timing = TimingHeuristic(clock=clock)
    assert _answer(timing, clock, "a", SLOW_ANSWER_SECONDS + 1) == pytest.approx(6.0)
    assert timing.should_appear_more_frequently("a") is True


def test_restarting_timer_overwrites_previous_start():
    clock = FakeClock()
    timing = TimingHeuristic(clock=clock)
    timing.start_timer("a")
    clock.advance(30)
    timing.start_timer("a")
    clock.advance(2)
    assert timing.end_timer("a") == pytest.approx(2.0)
    # Timer is cleared after it is stopped
    assert timing.end_timer("a") == 0.0
    assert timing.stat_for("a").sample_count == 1


def test_stats_are_loaded_from_and_written_to_store():
    store = FakeStore()
    store.timing["a"] = TimingStat(average_answer_seconds=8.0, sample_count=2)
    clock = FakeClock()
    timing = TimingHeuristic(clock=clock, store=store)
    assert timing.should_appear_more_frequently("a") is True

    _answer(timing, clock, "a", 2)
    assert store.timing["a"].sample_count == 3
    assert store.timing["a"].average_answer_seconds == pytest.approx(6.0)


def test_save_failure_keeps_in_memory_average():
    clock = FakeClock()
    timing = TimingHeuristic(clock=clock, store=FakeStore(fail=True))
    _answer(timing, clock, "a", 3)
    assert timing.average_for("a") == pytest.approx(3.0)


def test_forget_drops_stats_and_pending_timer():
    store = FakeStore()
    clock = FakeClock()
    timing = TimingHeuristic(clock=clock, store=store)
    _answer(timing, clock, "a", 9)
    timing.start_timer("a")
    timing.forget("a")
    assert timing.average_for("a") == 0.0
    assert timing.end_timer("a") == 0.0
    assert "a" not in store.timing
