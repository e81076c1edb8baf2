from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional, Sequence

from db.store import PersistenceError
from models.card import Card
from models.deck import Deck
from models.quiz import QuizQuestion, QuizState

logger = logging.getLogger(__name__)

OPTION_COUNT = 4
FILLER_TEMPLATE = "Answer {}"


class QuizError(RuntimeError):
    """Raised when a quiz operation is called in the wrong state."""


def card_prompt(card: Card) -> str:
    parts = [card.front_primary.strip(), card.front_secondary.strip()]
    return "\n".join(part for part in parts if part)


def build_question(
    card: Card,
    other_cards: Sequence[Card],
    shuffle: Callable[[list], None] = random.shuffle,
) -> QuizQuestion:
    """Multiple-choice question for ``card`` with distractors drawn from ``other_cards``.

    Always yields ``OPTION_COUNT`` options; missing distractors are padded with
    "Answer N" fillers.
    """
    correct = card.back_primary.strip()
    pool: List[str] = []
    for other in other_cards:
        if other.id == card.id:
            continue
        text = (other.back_primary or "").strip()
        if text and text != correct and text not in pool:
            pool.append(text)
    shuffle(pool)
    options = [correct] + pool[:OPTION_COUNT - 1]
    n = 1
    while len(options) < OPTION_COUNT:
        filler = FILLER_TEMPLATE.format(n)
        n += 1
        if filler not in options:
            options.append(filler)
    shuffle(options)
    return QuizQuestion(
        card_id=card.id,
        prompt=card_prompt(card),
        options=options,
        correct_index=options.index(correct),
    )


class Quiz:
    """Multiple-choice pass over a deck. Only ``deck.last_quiz_score`` is written."""

    def __init__(self, store, shuffle: Callable[[list], None] = random.shuffle):
        self.store = store
        self._shuffle = shuffle
        self.state = QuizState.NOT_STARTED
        self.deck: Optional[Deck] = None
        self.cards: List[Card] = []
        self.index = 0
        self.score = 0
        self.question: Optional[QuizQuestion] = None
        self.final_score_percent: Optional[float] = None

    @property
    def total(self) -> int:
        return len(self.cards)

    def setup(self, deck: Deck) -> QuizState:
        if self.state != QuizState.NOT_STARTED:
            raise QuizError("Quiz already started")
        self.deck = deck
        self.cards = list(deck.cards)
        self._shuffle(self.cards)
        self.score = 0
        self.index = 0
        if not self.cards:
            # Nothing to ask; last_quiz_score keeps meaning "never quizzed"
            self.state = QuizState.FINISHED
            return self.state
        self.state = QuizState.QUESTION
        self.question = build_question(self.cards[0], self.deck.cards, self._shuffle)
        return self.state

    def submit_answer(self, selected_index: int) -> bool:
        """Lock in an answer for the current question; later submissions are ignored."""
        if self.state != QuizState.QUESTION:
            raise QuizError("No question to answer")
        if not 0 <= selected_index < OPTION_COUNT:
            raise ValueError(f"selected_index must be between 0 and {OPTION_COUNT - 1}")
        question = self.question
        if question.answered:
            return question.selected_index == question.correct_index
        question.selected_index = selected_index
        is_correct = selected_index == question.correct_index
        if is_correct:
            self.score += 1
        return is_correct

    def advance(self) -> QuizState:
        if self.state != QuizState.QUESTION:
            raise QuizError("Quiz is not in progress")
        if self.index < len(self.cards) - 1:
            self.index += 1
            self.question = build_question(self.cards[self.index], self.deck.cards, self._shuffle)
            return self.state
        self._finish()
        return self.state

    def _finish(self) -> None:
        self.final_score_percent = round(self.score / len(self.cards) * 100, 2)
        self.deck.last_quiz_score = self.final_score_percent
        try:
            self.store.save_quiz_score(self.deck)
        except PersistenceError:
            logger.exception("Failed to save quiz score for deck %s", self.deck.id)
        self.question = None
        self.state = QuizState.FINISHED
        logger.info(
            "Quiz finished for deck %s: %d/%d (%.2f%%)",
            self.deck.id, self.score, len(self.cards), self.final_score_percent,
        )
