from fastapi import HTTPException, Request

from db.store import PersistenceError, StudyStore
from models.deck import Deck
from utils.media import MediaStore
from utils.timing import TimingHeuristic

def get_store(request: Request) -> StudyStore:
    return request.app.state.store

def get_timing(request: Request) -> TimingHeuristic:
    return request.app.state.timing

def get_media(request: Request) -> MediaStore:
    return request.app.state.media

def load_deck(store: StudyStore, deck_id: str) -> Deck:
    """Fetch a deck with its cards or raise 404/503."""
    try:
        deck = store.get_deck(deck_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    return deck
