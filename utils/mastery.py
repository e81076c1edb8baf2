import logging
from typing import Iterable

from db.store import PersistenceError
from models.card import Card
from models.deck import Deck

logger = logging.getLogger(__name__)

# Consecutive correct answers a card needs before it counts as mastered
MASTERY_STREAK = 3

def card_is_mastered(card: Card) -> bool:
    return not card.needs_review and card.correct_streak >= MASTERY_STREAK

def is_mastered(cards: Iterable[Card]) -> bool:
    """True when the set is non-empty and every card is mastered."""
    cards = list(cards)
    if not cards:
        return False
    return all(card_is_mastered(card) for card in cards)

def refresh_deck_mastery(deck: Deck, store) -> bool:
    """Recompute deck.is_mastered from its cards; persist and return True only if it changed."""
    mastered = is_mastered(deck.cards)
    if mastered == deck.is_mastered:
        return False
    deck.is_mastered = mastered
    try:
        store.save_deck_mastery(deck)
    except PersistenceError:
        logger.exception("Failed to persist mastery flag for deck %s", deck.id)
    return True

def mastery_percent(mastered: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round((mastered / total) * 100, 1)
