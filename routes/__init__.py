# Routes package __init__.py - re-exports routers for main.py convenience
from .decks import router as decks_router
from .cards import router as cards_router
from .study import router as study_router
from .quiz import router as quiz_router

__all__ = ['decks_router', 'cards_router', 'study_router', 'quiz_router']
