from pathlib import Path
from typing import List, Optional

import pytest

import config
from db import database
from db.store import PersistenceError
from models.card import Card
from models.deck import Deck


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStore:
    """In-memory stand-in for StudyStore that records writes.

    ``fail`` breaks every write; ``fail_decks`` breaks deck writes only.
    """

    def __init__(self, fail: bool = False, fail_decks: bool = False):
        self.fail = fail
        self.fail_decks = fail_decks
        self.saved_cards: List[Card] = []
        self.saved_decks: List[Deck] = []
        self.writes: List[str] = []
        self.timing = {}

    def _card_write(self, kind: str, card: Card) -> None:
        if self.fail:
            raise PersistenceError("disk full")
        self.writes.append(kind)
        self.saved_cards.append(card.model_copy())

    def _deck_write(self, kind: str, deck: Deck) -> None:
        if self.fail or self.fail_decks:
            raise PersistenceError("disk full")
        self.writes.append(kind)
        self.saved_decks.append(deck.model_copy())

    def save_card(self, card: Card) -> None:
        self._card_write("card", card)

    def save_card_progress(self, card: Card) -> None:
        self._card_write("card_progress", card)

    def save_deck(self, deck: Deck) -> None:
        self._deck_write("deck", deck)

    def save_deck_mastery(self, deck: Deck) -> None:
        self._deck_write("deck_mastery", deck)

    def save_quiz_score(self, deck: Deck) -> None:
        self._deck_write("quiz_score", deck)

    def load_timing_stats(self):
        return dict(self.timing)

    def save_timing_stat(self, card_id, stat):
        if self.fail:
            raise PersistenceError("disk full")
        self.timing[card_id] = stat.model_copy()

    def delete_timing_stat(self, card_id):
        self.timing.pop(card_id, None)


def make_card(
    card_id: str,
    back: str = "",
    streak: int = 0,
    needs_review: bool = False,
    deck_id: str = "deck",
    front: Optional[str] = None,
) -> Card:
    return Card(
        id=card_id,
        deck_id=deck_id,
        front_primary=front or f"front {card_id}",
        back_primary=back,
        created_at=f"2026-01-01T00:00:0{len(card_id) % 10}+00:00",
        correct_streak=streak,
        needs_review=needs_review,
    )


def make_deck(cards: List[Card], deck_id: str = "deck", is_mastered: bool = False) -> Deck:
    return Deck(id=deck_id, name=f"Deck {deck_id}", created_at="2026-01-01T00:00:00+00:00",
                is_mastered=is_mastered, cards=cards)


def _write_test_config(config_path: Path, media_dir: Path) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[server]",
                "host = \"127.0.0.1\"",
                "port = 8000",
                "",
                "[media]",
                f"directory = \"{media_dir.as_posix()}\"",
                "",
                "[logging]",
                "level = \"DEBUG\"",
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point config and database at a throwaway directory and initialize it."""
    config_dir = tmp_path / ".flashstudy"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    _write_test_config(config_path, config_dir / "media")

    for name in ("FLASHSTUDY_HOST", "FLASHSTUDY_PORT", "FLASHSTUDY_MEDIA_DIR", "FLASHSTUDY_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "flashstudy.db")

    database.init_db()
    return config_dir
