
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from db.store import PersistenceError, StudyStore
from models.card import Card
from models.deck import Deck, DeckCreate, DeckSummary
from routes.deps import get_media, get_store, get_timing, load_deck
from utils.mastery import card_is_mastered, mastery_percent, refresh_deck_mastery
from utils.media import MediaStore
from utils.timing import TimingHeuristic

router = APIRouter()

def summarize(deck: Deck) -> DeckSummary:
    mastered = sum(1 for card in deck.cards if card_is_mastered(card))
    return DeckSummary(
        id=deck.id,
        name=deck.name,
        is_mastered=deck.is_mastered,
        last_quiz_score=deck.last_quiz_score,
        card_count=len(deck.cards),
        review_count=sum(1 for card in deck.cards if card.needs_review),
        mastery_percent=mastery_percent(mastered, len(deck.cards)),
    )

@router.post("", response_model=Deck, status_code=status.HTTP_201_CREATED)
async def create_deck(data: DeckCreate, store: StudyStore = Depends(get_store)):
    """Create new deck."""
    try:
        return store.create_deck(data.name)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

@router.get("", response_model=List[DeckSummary])
async def list_decks(store: StudyStore = Depends(get_store)):
    """List all decks, refreshing their mastery flags."""
    try:
        decks = store.list_decks()
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    for deck in decks:
        refresh_deck_mastery(deck, store)
    return [summarize(deck) for deck in decks]

@router.get("/{deck_id}")
async def deck_detail(deck_id: str, store: StudyStore = Depends(get_store)):
    deck = load_deck(store, deck_id)
    refresh_deck_mastery(deck, store)
    needs_review: List[Card] = [card for card in deck.cards if card.needs_review]
    return {
        "deck": deck,
        "summary": summarize(deck),
        "needs_review": needs_review,
    }

@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(
    deck_id: str,
    store: StudyStore = Depends(get_store),
    timing: TimingHeuristic = Depends(get_timing),
    media: MediaStore = Depends(get_media),
):
    """Delete a deck together with its cards, their timing stats and media."""
    deck = load_deck(store, deck_id)
    try:
        store.delete_deck(deck)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    for card in deck.cards:
        timing.forget(card.id)
        media.delete_all_media(card.id)
