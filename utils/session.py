from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from db.store import PersistenceError
from models.card import Card
from models.deck import Deck
from models.session import SessionState, StudyMode
from utils.mastery import MASTERY_STREAK, is_mastered
from utils.review import select_review_cards
from utils.timing import TimingHeuristic

logger = logging.getLogger(__name__)


class SessionError(RuntimeError):
    """Raised when a session operation is called in the wrong state."""


@dataclass(frozen=True)
class OutcomeResult:
    card: Card
    correct: bool
    elapsed_seconds: float
    saved: bool


class StudySession:
    """Walks a shuffled list of cards, applying correct/incorrect outcomes.

    A plain session that ends with missed cards pauses in
    ``AWAITING_REVIEW_DECISION``; the caller then either starts a review of
    exactly those cards (``start_review``) or stops (``finish``). Every outcome
    is written through to the store before moving on, so abandoning a session
    at any point leaves the decks in their last saved state.
    """

    def __init__(
        self,
        store,
        timing: TimingHeuristic,
        shuffle: Callable[[list], None] = random.shuffle,
    ):
        self.store = store
        self.timing = timing
        self._shuffle = shuffle
        self.state = SessionState.IDLE
        self.mode: Optional[StudyMode] = None
        self.decks: List[Deck] = []
        self.cards: List[Card] = []
        self.index = 0
        self.showing_back = False
        self.reviewing_leftovers = False
        self.leftover_cards: List[Card] = []
        self.nothing_to_review = False
        self.mastered_deck_ids: List[str] = []
        self.last_result: Optional[OutcomeResult] = None

    @property
    def current_card(self) -> Optional[Card]:
        if self.state != SessionState.IN_PROGRESS:
            return None
        return self.cards[self.index]

    def start(
        self,
        decks: Union[Deck, Sequence[Deck]],
        mode: StudyMode = StudyMode.PLAIN,
        cards: Optional[Sequence[Card]] = None,
    ) -> SessionState:
        if self.state != SessionState.IDLE:
            raise SessionError("Session already started")
        decks = [decks] if isinstance(decks, Deck) else list(decks)
        if mode in (StudyMode.PLAIN, StudyMode.REVIEW) and len(decks) != 1:
            raise ValueError(f"{mode.value} sessions study exactly one deck")
        self.mode = mode
        self.decks = decks

        if mode == StudyMode.PLAIN:
            working = list(decks[0].cards)
        elif mode == StudyMode.REVIEW:
            if cards is not None:
                working = list(cards)
            else:
                working = select_review_cards(decks[0].cards, self.timing)
        else:
            working = []
            seen = set()
            for deck in decks:
                for card in deck.cards:
                    if card.id not in seen:
                        seen.add(card.id)
                        working.append(card)

        if not working:
            self.nothing_to_review = True
            self.state = SessionState.COMPLETED
            logger.info("Nothing to study for %s session", mode.value)
            return self.state

        self._begin(working)
        return self.state

    def _begin(self, cards: List[Card]) -> None:
        self._shuffle(cards)
        self.cards = cards
        self.index = 0
        self.showing_back = False
        self.state = SessionState.IN_PROGRESS
        self.timing.start_timer(cards[0].id)

    def flip(self) -> bool:
        if self.state != SessionState.IN_PROGRESS:
            raise SessionError("No card is being shown")
        self.showing_back = not self.showing_back
        return self.showing_back

    def record_outcome(self, correct: bool) -> OutcomeResult:
        if self.state != SessionState.IN_PROGRESS:
            raise SessionError("No card is awaiting an answer")
        card = self.cards[self.index]
        elapsed = self.timing.end_timer(card.id)

        if correct:
            card.correct_streak += 1
            clears_review = self.mode == StudyMode.REVIEW or self.reviewing_leftovers
            if clears_review and card.correct_streak >= MASTERY_STREAK:
                card.needs_review = False
        else:
            card.needs_review = True
            card.correct_streak = 0

        saved = True
        try:
            self.store.save_card_progress(card)
        except PersistenceError:
            logger.exception("Failed to save progress for card %s", card.id)
            saved = False

        self.last_result = OutcomeResult(card=card, correct=correct, elapsed_seconds=elapsed, saved=saved)
        self._advance()
        return self.last_result

    def _advance(self) -> None:
        if self.index < len(self.cards) - 1:
            self.index += 1
            self.showing_back = False
            self.timing.start_timer(self.cards[self.index].id)
            return
        self._complete()

    def _complete(self) -> None:
        if self.mode == StudyMode.PLAIN and not self.reviewing_leftovers:
            self.leftover_cards = [card for card in self.decks[0].cards if card.needs_review]
            if self.leftover_cards:
                self.state = SessionState.AWAITING_REVIEW_DECISION
                return
        self._check_mastery()

    def start_review(self) -> SessionState:
        """Study the cards missed in this session."""
        if self.state != SessionState.AWAITING_REVIEW_DECISION:
            raise SessionError("There are no leftover cards to review")
        self.reviewing_leftovers = True
        self._begin(list(self.leftover_cards))
        return self.state

    def finish(self) -> SessionState:
        """Decline reviewing leftover cards."""
        if self.state != SessionState.AWAITING_REVIEW_DECISION:
            raise SessionError("Session is not waiting for a review decision")
        self._check_mastery()
        return self.state

    def abandon(self) -> None:
        if self.state == SessionState.IN_PROGRESS:
            self.timing.cancel_timer(self.cards[self.index].id)
        self.state = SessionState.COMPLETED

    def _check_mastery(self) -> None:
        for deck in self.decks:
            if deck.is_mastered or not is_mastered(deck.cards):
                continue
            deck.is_mastered = True
            try:
                self.store.save_deck_mastery(deck)
            except PersistenceError:
                # In-memory flag stands; no mastered event until it is stored
                logger.exception("Failed to save mastery for deck %s", deck.id)
                continue
            self.mastered_deck_ids.append(deck.id)
            logger.info("Deck %s mastered", deck.id)
        self.state = SessionState.COMPLETED
