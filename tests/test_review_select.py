from conftest import FakeClock, make_card
from utils.review import select_review_cards
from utils.timing import TimingHeuristic


def _timing_with_averages(averages: dict) -> TimingHeuristic:
    clock = FakeClock()
    timing = TimingHeuristic(clock=clock)
    for card_id, seconds in averages.items():
        timing.start_timer(card_id)
        clock.advance(seconds)
        timing.end_timer(card_id)
    return timing


def test_selects_flagged_and_slow_cards():
    a = make_card("a", needs_review=True)
    b = make_card("b")
    c = make_card("c")
    timing = _timing_with_averages({"a": 1, "b": 6, "c": 2})
    selected = select_review_cards([a, b, c], timing)
    assert {card.id for card in selected} == {"a", "b"}


def test_card_matching_both_rules_is_selected_once():
    a = make_card("a", needs_review=True)
    timing = _timing_with_averages({"a": 12})
    assert [card.id for card in select_review_cards([a, a], timing)] == ["a"]


def test_without_timing_only_flagged_cards_are_selected():
    cards = [make_card("a", needs_review=True), make_card("b", streak=2)]
    assert [card.id for card in select_review_cards(cards)] == ["a"]


def test_nothing_selected_from_clean_deck():
    assert select_review_cards([make_card("a"), make_card("b")], _timing_with_averages({})) == []
