# SQL schema for flashstudy database

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Decks
CREATE TABLE IF NOT EXISTS decks (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL,
    is_mastered INTEGER NOT NULL DEFAULT 0,
    last_quiz_score REAL NOT NULL DEFAULT 0 CHECK(last_quiz_score >= 0 AND last_quiz_score <= 100)
);

-- Cards (study state lives on the card)
CREATE TABLE IF NOT EXISTS cards (
    id TEXT PRIMARY KEY,
    deck_id TEXT NOT NULL,
    front_primary TEXT NOT NULL,
    front_secondary TEXT NOT NULL DEFAULT '',
    back_primary TEXT NOT NULL DEFAULT '',
    back_secondary TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    correct_streak INTEGER NOT NULL DEFAULT 0 CHECK(correct_streak >= 0),
    needs_review INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (deck_id) REFERENCES decks (id) ON DELETE CASCADE
);

-- Per-card answer latency
CREATE TABLE IF NOT EXISTS timing_stats (
    card_id TEXT PRIMARY KEY,
    average_answer_seconds REAL NOT NULL DEFAULT 0,
    sample_count INTEGER NOT NULL DEFAULT 0 CHECK(sample_count >= 0)
);
"""

# Indexes for performance
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_cards_deck ON cards (deck_id);
CREATE INDEX IF NOT EXISTS idx_cards_deck_created ON cards (deck_id, created_at);
CREATE INDEX IF NOT EXISTS idx_cards_review ON cards (needs_review);
CREATE INDEX IF NOT EXISTS idx_decks_created ON decks (created_at);
"""
