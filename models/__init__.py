from .card import Card, CardCreate, CardUpdate
from .deck import Deck, DeckCreate, DeckSummary
from .timing import TimingStat
from .session import StudyMode, SessionState
from .quiz import QuizState, QuizQuestion

__all__ = [
    'Card', 'CardCreate', 'CardUpdate', 'Deck', 'DeckCreate', 'DeckSummary',
    'TimingStat', 'StudyMode', 'SessionState', 'QuizState', 'QuizQuestion',
]
