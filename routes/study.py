import uuid
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status

from db.store import PersistenceError, StudyStore
from models.session import (
    OutcomeSubmit,
    SessionStart,
    SessionState,
    SessionView,
    StudyAllStart,
    StudyMode,
)
from routes.deps import get_store, get_timing, load_deck
from utils.session import SessionError, StudySession
from utils.timing import TimingHeuristic

router = APIRouter()

def get_sessions(request: Request) -> Dict[str, StudySession]:
    return request.app.state.sessions

def session_view(session_id: str, session: StudySession) -> SessionView:
    return SessionView(
        id=session_id,
        mode=session.mode,
        state=session.state,
        index=session.index,
        total=len(session.cards),
        showing_back=session.showing_back,
        reviewing_leftovers=session.reviewing_leftovers,
        current_card=session.current_card,
        review_count=len(session.leftover_cards),
        nothing_to_review=session.nothing_to_review,
        mastered_deck_ids=session.mastered_deck_ids,
        last_saved=session.last_result.saved if session.last_result else None,
    )

def respond(sessions: Dict[str, StudySession], session_id: str, session: StudySession) -> SessionView:
    """Build the view, then drop the session once it has nothing left to do."""
    view = session_view(session_id, session)
    if session.state == SessionState.COMPLETED:
        sessions.pop(session_id, None)
    return view

def lookup(sessions: Dict[str, StudySession], session_id: str) -> StudySession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session

@router.post("/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def start_session(
    data: SessionStart,
    store: StudyStore = Depends(get_store),
    timing: TimingHeuristic = Depends(get_timing),
    sessions: Dict[str, StudySession] = Depends(get_sessions),
):
    """Start a plain or review session over one deck."""
    if data.mode == StudyMode.STUDY_ALL:
        raise HTTPException(status_code=400, detail="Use /study/sessions/all to study every deck")
    if data.card_ids is not None and data.mode != StudyMode.REVIEW:
        raise HTTPException(status_code=400, detail="card_ids can only be given for review sessions")
    deck = load_deck(store, data.deck_id)
    cards = None
    if data.card_ids is not None:
        by_id = {card.id: card for card in deck.cards}
        missing = [card_id for card_id in data.card_ids if card_id not in by_id]
        if missing:
            raise HTTPException(status_code=400, detail=f"Cards not in deck: {', '.join(missing)}")
        cards = [by_id[card_id] for card_id in dict.fromkeys(data.card_ids)]
    session = StudySession(store, timing)
    session.start(deck, data.mode, cards)
    session_id = uuid.uuid4().hex
    sessions[session_id] = session
    return respond(sessions, session_id, session)

@router.post("/sessions/all", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def start_study_all(
    data: StudyAllStart,
    store: StudyStore = Depends(get_store),
    timing: TimingHeuristic = Depends(get_timing),
    sessions: Dict[str, StudySession] = Depends(get_sessions),
):
    """Study the cards of several decks (all decks by default) mixed together."""
    if data.deck_ids is None:
        try:
            decks = store.list_decks()
        except PersistenceError as e:
            raise HTTPException(status_code=503, detail=str(e))
    else:
        decks = [load_deck(store, deck_id) for deck_id in dict.fromkeys(data.deck_ids)]
    session = StudySession(store, timing)
    session.start(decks, StudyMode.STUDY_ALL)
    session_id = uuid.uuid4().hex
    sessions[session_id] = session
    return respond(sessions, session_id, session)

@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(session_id: str, sessions: Dict[str, StudySession] = Depends(get_sessions)):
    return session_view(session_id, lookup(sessions, session_id))

@router.post("/sessions/{session_id}/flip", response_model=SessionView)
async def flip_card(session_id: str, sessions: Dict[str, StudySession] = Depends(get_sessions)):
    session = lookup(sessions, session_id)
    try:
        session.flip()
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return respond(sessions, session_id, session)

@router.post("/sessions/{session_id}/outcome", response_model=SessionView)
async def record_outcome(
    session_id: str,
    data: OutcomeSubmit,
    sessions: Dict[str, StudySession] = Depends(get_sessions),
):
    """Mark the current card correct or incorrect and move on."""
    session = lookup(sessions, session_id)
    try:
        session.record_outcome(data.correct)
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return respond(sessions, session_id, session)

@router.post("/sessions/{session_id}/review", response_model=SessionView)
async def review_leftovers(session_id: str, sessions: Dict[str, StudySession] = Depends(get_sessions)):
    session = lookup(sessions, session_id)
    try:
        session.start_review()
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return respond(sessions, session_id, session)

@router.post("/sessions/{session_id}/finish", response_model=SessionView)
async def finish_session(session_id: str, sessions: Dict[str, StudySession] = Depends(get_sessions)):
    session = lookup(sessions, session_id)
    try:
        session.finish()
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return respond(sessions, session_id, session)

@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def abandon_session(session_id: str, sessions: Dict[str, StudySession] = Depends(get_sessions)):
    session = lookup(sessions, session_id)
    session.abandon()
    del sessions[session_id]
