"""Per-card answer latency.

Tracks how long it takes to answer each card, from the moment it is shown
until an outcome is recorded. Cards whose running average is slow are
promoted into the review set alongside cards that were answered wrong.
The average is cumulative with no decay, so it adapts slowly.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from db.store import PersistenceError
from models.timing import TimingStat

logger = logging.getLogger(__name__)

# Average answer time above which a card is shown more often
SLOW_ANSWER_SECONDS = 5.0


class TimingHeuristic:
    """Running answer-time averages keyed by card id.

    ``clock`` must return seconds with sub-second resolution; ``store``, when
    given, provides ``load_timing_stats``/``save_timing_stat``/``delete_timing_stat``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, store=None):
        self._clock = clock
        self._store = store
        self._started: Dict[str, float] = {}
        self._stats: Dict[str, TimingStat] = {}
        if store is not None:
            try:
                self._stats = store.load_timing_stats()
            except PersistenceError:
                logger.exception("Failed to load timing stats, starting empty")

    def start_timer(self, card_id: str) -> None:
        self._started[card_id] = self._clock()

    def cancel_timer(self, card_id: str) -> None:
        self._started.pop(card_id, None)

    def end_timer(self, card_id: str) -> float:
        """Stop the card's timer, fold the elapsed time into its average and return it."""
        started = self._started.pop(card_id, None)
        if started is None:
            return 0.0
        elapsed = max(0.0, self._clock() - started)
        stat = self._stats.setdefault(card_id, TimingStat())
        count = stat.sample_count
        stat.average_answer_seconds = (stat.average_answer_seconds * count + elapsed) / (count + 1)
        stat.sample_count = count + 1
        if self._store is not None:
            try:
                self._store.save_timing_stat(card_id, stat)
            except PersistenceError:
                logger.exception("Failed to persist timing for card %s", card_id)
        return elapsed

    def stat_for(self, card_id: str) -> Optional[TimingStat]:
        return self._stats.get(card_id)

    def average_for(self, card_id: str) -> float:
        stat = self._stats.get(card_id)
        return stat.average_answer_seconds if stat else 0.0

    def should_appear_more_frequently(self, card_id: str) -> bool:
        return self.average_for(card_id) > SLOW_ANSWER_SECONDS

    def forget(self, card_id: str) -> None:
        """Drop all timing state for a deleted card."""
        self._started.pop(card_id, None)
        self._stats.pop(card_id, None)
        if self._store is not None:
            try:
                self._store.delete_timing_stat(card_id)
            except PersistenceError:
                logger.exception("Failed to delete timing for card %s", card_id)
