from pydantic import BaseModel, validator
from typing import List

from .card import Card

class DeckBase(BaseModel):
    name: str

class DeckCreate(DeckBase):

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

class Deck(DeckBase):
    id: str
    created_at: str  # ISO datetime
    is_mastered: bool = False
    last_quiz_score: float = 0.0
    cards: List[Card] = []

    class Config:
        from_attributes = True

class DeckSummary(DeckBase):
    id: str
    is_mastered: bool
    last_quiz_score: float
    card_count: int
    review_count: int
    mastery_percent: float
