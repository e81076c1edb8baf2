from pydantic import BaseModel
from typing import List, Optional
from enum import Enum

from .card import Card

class StudyMode(str, Enum):
    PLAIN = "plain"
    REVIEW = "review"
    STUDY_ALL = "study_all"

class SessionState(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    AWAITING_REVIEW_DECISION = "awaiting_review_decision"
    COMPLETED = "completed"

class SessionStart(BaseModel):
    deck_id: str
    mode: StudyMode = StudyMode.PLAIN
    card_ids: Optional[List[str]] = None

class StudyAllStart(BaseModel):
    deck_ids: Optional[List[str]] = None

class OutcomeSubmit(BaseModel):
    correct: bool

class SessionView(BaseModel):
    id: str
    mode: StudyMode
    state: SessionState
    index: int
    total: int
    showing_back: bool
    reviewing_leftovers: bool
    current_card: Optional[Card] = None
    review_count: int = 0
    nothing_to_review: bool = False
    mastered_deck_ids: List[str] = []
    last_saved: Optional[bool] = None
