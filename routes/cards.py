from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from db.store import PersistenceError, StudyStore
from models.card import Card, CardCreate, CardUpdate
from routes.deps import get_media, get_store, get_timing, load_deck
from utils.mastery import refresh_deck_mastery
from utils.media import MEDIA_EXTENSIONS, SIDES, MediaStore
from utils.timing import TimingHeuristic

router = APIRouter()

def load_card(store: StudyStore, deck_id: str, card_id: str) -> Card:
    try:
        card = store.get_card(card_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if not card or card.deck_id != deck_id:
        raise HTTPException(status_code=404, detail="Card not found")
    return card

def check_media_target(side: str, kind: str) -> None:
    if side not in SIDES or kind not in MEDIA_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Unknown media side or kind")

@router.post("/{deck_id}/cards", response_model=Card, status_code=status.HTTP_201_CREATED)
async def create_card(deck_id: str, data: CardCreate, store: StudyStore = Depends(get_store)):
    """Add a card; a mastered deck stops being mastered once it has a fresh card."""
    deck = load_deck(store, deck_id)
    try:
        card = store.create_card(deck_id, data)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    deck.cards.append(card)
    refresh_deck_mastery(deck, store)
    return card

@router.get("/{deck_id}/cards/{card_id}")
async def card_detail(
    deck_id: str,
    card_id: str,
    store: StudyStore = Depends(get_store),
    timing: TimingHeuristic = Depends(get_timing),
    media: MediaStore = Depends(get_media),
):
    card = load_card(store, deck_id, card_id)
    stat = timing.stat_for(card_id)
    return {
        "card": card,
        "media": media.presence(card_id),
        "average_answer_seconds": timing.average_for(card_id),
        "answer_count": stat.sample_count if stat else 0,
        "shown_more_often": timing.should_appear_more_frequently(card_id),
    }

@router.put("/{deck_id}/cards/{card_id}", response_model=Card)
async def update_card(deck_id: str, card_id: str, data: CardUpdate, store: StudyStore = Depends(get_store)):
    """Edit card text. Study progress is left untouched."""
    card = load_card(store, deck_id, card_id)
    for field, value in data.model_dump(exclude_none=True).items():
        setattr(card, field, value.strip())
    if not card.front_primary:
        raise HTTPException(status_code=400, detail="Front text is required")
    try:
        store.save_card(card)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return card

@router.delete("/{deck_id}/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    deck_id: str,
    card_id: str,
    store: StudyStore = Depends(get_store),
    timing: TimingHeuristic = Depends(get_timing),
    media: MediaStore = Depends(get_media),
):
    card = load_card(store, deck_id, card_id)
    try:
        store.delete_card(card)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    timing.forget(card_id)
    media.delete_all_media(card_id)
    refresh_deck_mastery(load_deck(store, deck_id), store)

@router.put("/{deck_id}/cards/{card_id}/media/{side}/{kind}", status_code=status.HTTP_204_NO_CONTENT)
async def upload_media(
    deck_id: str,
    card_id: str,
    side: str,
    kind: str,
    file: UploadFile = File(...),
    store: StudyStore = Depends(get_store),
    media: MediaStore = Depends(get_media),
):
    """Attach an audio recording or photo to one side of a card, replacing any existing one."""
    check_media_target(side, kind)
    load_card(store, deck_id, card_id)
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty upload")
    media.save_media(card_id, side, kind, data)

@router.delete("/{deck_id}/cards/{card_id}/media/{side}/{kind}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_media(
    deck_id: str,
    card_id: str,
    side: str,
    kind: str,
    store: StudyStore = Depends(get_store),
    media: MediaStore = Depends(get_media),
):
    check_media_target(side, kind)
    load_card(store, deck_id, card_id)
    if not media.delete_media(card_id, side, kind):
        raise HTTPException(status_code=404, detail="No media attached")
