import sqlite3

import pytest

from db import database
from db.store import PersistenceError, StudyStore
from models.card import CardCreate
from models.timing import TimingStat


def test_schema_version_is_recorded(temp_db):
    with database.get_conn() as conn:
        assert database.get_schema_version(conn) == 1


def test_cards_round_trip_in_creation_order(temp_db):
    store = StudyStore()
    deck = store.create_deck("French")
    first = store.create_card(deck.id, CardCreate(front_primary="chat", back_primary="cat"))
    second = store.create_card(
        deck.id,
        CardCreate(front_primary="chien", front_secondary="noun", back_primary="dog"),
    )

    loaded = store.get_deck(deck.id)
    assert [card.id for card in loaded.cards] == [first.id, second.id]
    assert loaded.cards[1].front_secondary == "noun"
    assert loaded.is_mastered is False
    assert loaded.last_quiz_score == 0.0


def test_save_card_and_deck_persist_study_state(temp_db):
    store = StudyStore()
    deck = store.create_deck("Maths")
    card = store.create_card(deck.id, CardCreate(front_primary="2+2", back_primary="4"))
    card.correct_streak = 0
    card.needs_review = True
    store.save_card(card)
    deck.is_mastered = True
    deck.last_quiz_score = 66.67
    store.save_deck(deck)

    reloaded = store.get_deck(deck.id)
    assert reloaded.cards[0].needs_review is True
    assert reloaded.is_mastered is True
    assert reloaded.last_quiz_score == pytest.approx(66.67)


def test_saving_deleted_card_raises(temp_db):
    store = StudyStore()
    deck = store.create_deck("Temp")
    card = store.create_card(deck.id, CardCreate(front_primary="q", back_primary="a"))
    store.delete_card(card)
    with pytest.raises(PersistenceError):
        store.save_card(card)
    assert store.get_card(card.id) is None


def test_deleting_deck_cascades_to_cards_and_timing(temp_db):
    store = StudyStore()
    deck = store.create_deck("Gone")
    card = store.create_card(deck.id, CardCreate(front_primary="q", back_primary="a"))
    store.save_timing_stat(card.id, TimingStat(average_answer_seconds=7.5, sample_count=2))
    assert store.load_timing_stats()[card.id].sample_count == 2

    store.delete_deck(store.get_deck(deck.id))
    assert store.get_deck(deck.id) is None
    assert store.get_card(card.id) is None
    assert store.load_timing_stats() == {}


def test_timing_stat_upsert(temp_db):
    store = StudyStore()
    store.save_timing_stat("c1", TimingStat(average_answer_seconds=2.0, sample_count=1))
    store.save_timing_stat("c1", TimingStat(average_answer_seconds=3.0, sample_count=2))
    stats = store.load_timing_stats()
    assert stats["c1"].average_answer_seconds == 3.0
    assert stats["c1"].sample_count == 2
    store.delete_timing_stat("c1")
    assert store.load_timing_stats() == {}


def test_database_errors_become_persistence_errors(temp_db, monkeypatch):
    def broken_connect(*args, **kwargs):
        raise sqlite3.OperationalError("unable to open database file")

    monkeypatch.setattr(database.sqlite3, "connect", broken_connect)
    with pytest.raises(PersistenceError):
        StudyStore().list_decks()


def test_progress_write_keeps_text_edited_elsewhere(temp_db):
    store = StudyStore()
    deck = store.create_deck("Edits")
    stale = store.create_card(deck.id, CardCreate(front_primary="q", back_primary="old"))
    edited = store.get_card(stale.id)
    edited.back_primary = "new"
    store.save_card(edited)

    stale.correct_streak = 1
    store.save_card_progress(stale)

    reloaded = store.get_card(stale.id)
    assert reloaded.back_primary == "new"
    assert reloaded.correct_streak == 1


def test_quiz_score_write_keeps_mastery_flag(temp_db):
    store = StudyStore()
    deck = store.create_deck("Flags")
    snapshot = store.get_deck(deck.id)
    deck.is_mastered = True
    store.save_deck_mastery(deck)

    snapshot.last_quiz_score = 75.0
    store.save_quiz_score(snapshot)

    reloaded = store.get_deck(deck.id)
    assert reloaded.is_mastered is True
    assert reloaded.last_quiz_score == 75.0


def test_narrow_writes_to_missing_rows_raise(temp_db):
    store = StudyStore()
    deck = store.create_deck("Short lived")
    card = store.create_card(deck.id, CardCreate(front_primary="q", back_primary="a"))
    store.delete_deck(store.get_deck(deck.id))
    with pytest.raises(PersistenceError):
        store.save_card_progress(card)
    with pytest.raises(PersistenceError):
        store.save_quiz_score(deck)
