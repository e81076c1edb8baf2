from pydantic import BaseModel

class TimingStat(BaseModel):
    average_answer_seconds: float = 0.0
    sample_count: int = 0
