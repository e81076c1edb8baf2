from pydantic import BaseModel
from typing import List, Optional
from enum import Enum

class QuizState(str, Enum):
    NOT_STARTED = "not_started"
    QUESTION = "question"
    FINISHED = "finished"

class QuizQuestion(BaseModel):
    card_id: str
    prompt: str
    options: List[str]
    correct_index: int
    selected_index: Optional[int] = None

    @property
    def answered(self) -> bool:
        return self.selected_index is not None

class AnswerSubmit(BaseModel):
    selected_index: int

class QuestionView(BaseModel):
    card_id: str
    prompt: str
    options: List[str]
    answered: bool
    selected_index: Optional[int] = None
    correct_index: Optional[int] = None  # Revealed once answered

class QuizView(BaseModel):
    id: str
    deck_id: str
    state: QuizState
    index: int
    total: int
    score: int
    question: Optional[QuestionView] = None
    final_score_percent: Optional[float] = None
