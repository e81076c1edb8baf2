from typing import Iterable, List, Optional

from models.card import Card
from utils.timing import TimingHeuristic

def select_review_cards(cards: Iterable[Card], timing: Optional[TimingHeuristic] = None) -> List[Card]:
    """Cards flagged for review or slow to answer, each at most once. Order is not meaningful."""
    selected: List[Card] = []
    seen = set()
    for card in cards:
        if card.id in seen:
            continue
        slow = timing is not None and timing.should_appear_more_frequently(card.id)
        if card.needs_review or slow:
            seen.add(card.id)
            selected.append(card)
    return selected
