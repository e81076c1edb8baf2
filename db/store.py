from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from models.card import Card, CardCreate
from models.deck import Deck
from models.timing import TimingStat
from .database import get_conn

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when a save, delete or fetch against the database fails."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _card_from_row(row) -> Card:
    return Card(
        id=row["id"],
        deck_id=row["deck_id"],
        front_primary=row["front_primary"],
        front_secondary=row["front_secondary"] or "",
        back_primary=row["back_primary"] or "",
        back_secondary=row["back_secondary"] or "",
        created_at=row["created_at"],
        correct_streak=int(row["correct_streak"]),
        needs_review=bool(row["needs_review"]),
    )


def _deck_from_row(row, cards: List[Card]) -> Deck:
    return Deck(
        id=row["id"],
        name=row["name"],
        created_at=row["created_at"],
        is_mastered=bool(row["is_mastered"]),
        last_quiz_score=float(row["last_quiz_score"]),
        cards=cards,
    )


class StudyStore:
    """Card/deck persistence backed by SQLite.

    Each call opens its own connection and commits before returning, so a
    single instance can be held by sessions that outlive a request.
    """

    def create_deck(self, name: str) -> Deck:
        deck = Deck(id=uuid.uuid4().hex, name=name, created_at=_now_iso())
        try:
            with get_conn() as conn:
                conn.execute(
                    "INSERT INTO decks (id, name, created_at, is_mastered, last_quiz_score) VALUES (?, ?, ?, 0, 0)",
                    (deck.id, deck.name, deck.created_at),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not create deck {name!r}: {e}") from e
        logger.info("Created deck %s (%s)", deck.id, deck.name)
        return deck

    def create_card(self, deck_id: str, data: CardCreate) -> Card:
        card = Card(
            id=uuid.uuid4().hex,
            deck_id=deck_id,
            created_at=_now_iso(),
            **data.model_dump(),
        )
        try:
            with get_conn() as conn:
                conn.execute(
                    """
                    INSERT INTO cards (
                        id, deck_id, front_primary, front_secondary,
                        back_primary, back_secondary, created_at,
                        correct_streak, needs_review
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, 0, 0)
                    """,
                    (
                        card.id,
                        card.deck_id,
                        card.front_primary,
                        card.front_secondary,
                        card.back_primary,
                        card.back_secondary,
                        card.created_at,
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not create card in deck {deck_id}: {e}") from e
        return card

    def fetch_cards(self, deck_id: str) -> List[Card]:
        """Return a deck's cards ordered by creation time."""
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT * FROM cards
                    WHERE deck_id = ?
                    ORDER BY created_at ASC, rowid ASC
                    """,
                    (deck_id,),
                )
                return [_card_from_row(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not load cards for deck {deck_id}: {e}") from e

    def get_card(self, card_id: str) -> Optional[Card]:
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT * FROM cards WHERE id = ?", (card_id,))
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not load card {card_id}: {e}") from e
        return _card_from_row(row) if row else None

    def get_deck(self, deck_id: str) -> Optional[Deck]:
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT * FROM decks WHERE id = ?", (deck_id,))
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not load deck {deck_id}: {e}") from e
        if not row:
            return None
        return _deck_from_row(row, self.fetch_cards(deck_id))

    def list_decks(self) -> List[Deck]:
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT * FROM decks ORDER BY created_at ASC, rowid ASC")
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not list decks: {e}") from e
        return [_deck_from_row(row, self.fetch_cards(row["id"])) for row in rows]

    def save_card(self, card: Card) -> None:
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    UPDATE cards
                    SET front_primary = ?, front_secondary = ?, back_primary = ?, back_secondary = ?,
                        correct_streak = ?, needs_review = ?
                    WHERE id = ?
                    """,
                    (
                        card.front_primary,
                        card.front_secondary,
                        card.back_primary,
                        card.back_secondary,
                        card.correct_streak,
                        int(card.needs_review),
                        card.id,
                    ),
                )
                if cursor.rowcount == 0:
                    raise PersistenceError(f"Card {card.id} no longer exists")
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not save card {card.id}: {e}") from e

    def save_deck(self, deck: Deck) -> None:
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "UPDATE decks SET name = ?, is_mastered = ?, last_quiz_score = ? WHERE id = ?",
                    (deck.name, int(deck.is_mastered), deck.last_quiz_score, deck.id),
                )
                if cursor.rowcount == 0:
                    raise PersistenceError(f"Deck {deck.id} no longer exists")
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not save deck {deck.id}: {e}") from e

    def save_card_progress(self, card: Card) -> None:
        """Write only the study state, leaving text edited elsewhere untouched."""
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "UPDATE cards SET correct_streak = ?, needs_review = ? WHERE id = ?",
                    (card.correct_streak, int(card.needs_review), card.id),
                )
                if cursor.rowcount == 0:
                    raise PersistenceError(f"Card {card.id} no longer exists")
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not save progress for card {card.id}: {e}") from e

    def save_deck_mastery(self, deck: Deck) -> None:
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "UPDATE decks SET is_mastered = ? WHERE id = ?",
                    (int(deck.is_mastered), deck.id),
                )
                if cursor.rowcount == 0:
                    raise PersistenceError(f"Deck {deck.id} no longer exists")
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not save mastery for deck {deck.id}: {e}") from e

    def save_quiz_score(self, deck: Deck) -> None:
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "UPDATE decks SET last_quiz_score = ? WHERE id = ?",
                    (deck.last_quiz_score, deck.id),
                )
                if cursor.rowcount == 0:
                    raise PersistenceError(f"Deck {deck.id} no longer exists")
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not save quiz score for deck {deck.id}: {e}") from e

    def delete_card(self, card: Card) -> None:
        try:
            with get_conn() as conn:
                conn.execute("DELETE FROM timing_stats WHERE card_id = ?", (card.id,))
                conn.execute("DELETE FROM cards WHERE id = ?", (card.id,))
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not delete card {card.id}: {e}") from e

    def delete_deck(self, deck: Deck) -> None:
        try:
            with get_conn() as conn:
                conn.execute(
                    "DELETE FROM timing_stats WHERE card_id IN (SELECT id FROM cards WHERE deck_id = ?)",
                    (deck.id,),
                )
                conn.execute("DELETE FROM cards WHERE deck_id = ?", (deck.id,))
                conn.execute("DELETE FROM decks WHERE id = ?", (deck.id,))
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not delete deck {deck.id}: {e}") from e
        logger.info("Deleted deck %s with %d cards", deck.id, len(deck.cards))

    def load_timing_stats(self) -> Dict[str, TimingStat]:
        try:
            with get_conn() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT card_id, average_answer_seconds, sample_count FROM timing_stats")
                return {
                    row["card_id"]: TimingStat(
                        average_answer_seconds=float(row["average_answer_seconds"]),
                        sample_count=int(row["sample_count"]),
                    )
                    for row in cursor.fetchall()
                }
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not load timing stats: {e}") from e

    def save_timing_stat(self, card_id: str, stat: TimingStat) -> None:
        try:
            with get_conn() as conn:
                conn.execute(
                    """
                    INSERT INTO timing_stats (card_id, average_answer_seconds, sample_count)
                    VALUES (?, ?, ?)
                    ON CONFLICT(card_id) DO UPDATE SET
                        average_answer_seconds = excluded.average_answer_seconds,
                        sample_count = excluded.sample_count
                    """,
                    (card_id, stat.average_answer_seconds, stat.sample_count),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not save timing for card {card_id}: {e}") from e

    def delete_timing_stat(self, card_id: str) -> None:
        try:
            with get_conn() as conn:
                conn.execute("DELETE FROM timing_stats WHERE card_id = ?", (card_id,))
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not delete timing for card {card_id}: {e}") from e
