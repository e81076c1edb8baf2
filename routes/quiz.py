import uuid
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status

from db.store import StudyStore
from models.quiz import AnswerSubmit, QuestionView, QuizState, QuizView
from routes.deps import get_store, load_deck
from utils.quiz import Quiz, QuizError

router = APIRouter()

def get_quizzes(request: Request) -> Dict[str, Quiz]:
    return request.app.state.quizzes

def quiz_view(quiz_id: str, quiz: Quiz) -> QuizView:
    question = None
    if quiz.question is not None:
        q = quiz.question
        question = QuestionView(
            card_id=q.card_id,
            prompt=q.prompt,
            options=q.options,
            answered=q.answered,
            selected_index=q.selected_index,
            correct_index=q.correct_index if q.answered else None,
        )
    return QuizView(
        id=quiz_id,
        deck_id=quiz.deck.id,
        state=quiz.state,
        index=quiz.index,
        total=quiz.total,
        score=quiz.score,
        question=question,
        final_score_percent=quiz.final_score_percent,
    )

def respond(quizzes: Dict[str, Quiz], quiz_id: str, quiz: Quiz) -> QuizView:
    """Build the view, then drop the quiz once it is finished."""
    view = quiz_view(quiz_id, quiz)
    if quiz.state == QuizState.FINISHED:
        quizzes.pop(quiz_id, None)
    return view

def lookup(quizzes: Dict[str, Quiz], quiz_id: str) -> Quiz:
    quiz = quizzes.get(quiz_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz

@router.post("/{deck_id}", response_model=QuizView, status_code=status.HTTP_201_CREATED)
async def start_quiz(
    deck_id: str,
    store: StudyStore = Depends(get_store),
    quizzes: Dict[str, Quiz] = Depends(get_quizzes),
):
    deck = load_deck(store, deck_id)
    quiz = Quiz(store)
    quiz.setup(deck)
    quiz_id = uuid.uuid4().hex
    quizzes[quiz_id] = quiz
    return respond(quizzes, quiz_id, quiz)

@router.post("/{quiz_id}/answer", response_model=QuizView)
async def answer_question(
    quiz_id: str,
    data: AnswerSubmit,
    quizzes: Dict[str, Quiz] = Depends(get_quizzes),
):
    quiz = lookup(quizzes, quiz_id)
    try:
        quiz.submit_answer(data.selected_index)
    except QuizError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return respond(quizzes, quiz_id, quiz)

@router.post("/{quiz_id}/next", response_model=QuizView)
async def next_question(quiz_id: str, quizzes: Dict[str, Quiz] = Depends(get_quizzes)):
    quiz = lookup(quizzes, quiz_id)
    try:
        quiz.advance()
    except QuizError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return respond(quizzes, quiz_id, quiz)

@router.delete("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
async def abandon_quiz(quiz_id: str, quizzes: Dict[str, Quiz] = Depends(get_quizzes)):
    """Discard an unfinished quiz; the deck keeps its previous score."""
    lookup(quizzes, quiz_id)
    del quizzes[quiz_id]
