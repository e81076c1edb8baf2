from pydantic import BaseModel, validator
from typing import Optional

class CardBase(BaseModel):
    front_primary: str
    front_secondary: str = ""
    back_primary: str
    back_secondary: str = ""

class CardCreate(CardBase):

    @validator('front_primary')
    def validate_front(cls, v):
        if not v or not v.strip():
            raise ValueError("Front text is required")
        return v.strip()

class CardUpdate(BaseModel):
    front_primary: Optional[str] = None
    front_secondary: Optional[str] = None
    back_primary: Optional[str] = None
    back_secondary: Optional[str] = None

class Card(CardBase):
    id: str
    deck_id: str
    created_at: str  # ISO datetime
    correct_streak: int = 0
    needs_review: bool = False

    class Config:
        from_attributes = True
