"""
Quiz management and submission API endpoints
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.api.deps import get_current_user_id
from app.database import get_db
from app.schemas.quiz import QuizCreate, QuizUpdate, QuestionsReplace, QuizSummary, QuizDetail
from app.schemas.attempt import AttemptSubmission, AttemptResponse, SubmissionResponse
from app.services.quiz_service import quiz_service
from app.services.attempt_service import attempt_service
from app.services.scoring_service import scoring_service


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.post("", response_model=QuizDetail, status_code=201)
async def create_quiz(
    request: QuizCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Create a quiz with its questions

    - The caller becomes the creator
    - total_questions is set from the submitted questions
    """
    quiz = quiz_service.create_quiz(db, user_id, request)
    return QuizDetail(**quiz_service.serialize_quiz(db, quiz, user_id, include_questions=True))


@router.get("", response_model=List[QuizSummary])
async def list_quizzes(
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """List published quizzes, newest first, optionally filtered by category or search text"""
    quizzes = quiz_service.list_published(db, category=category, search=search)
    names = quiz_service.creator_names(db, [q.created_by for q in quizzes])

    return [
        QuizSummary.model_validate(quiz).model_copy(update={"creator_name": names.get(quiz.created_by)})
        for quiz in quizzes
    ]


@router.get("/mine", response_model=List[QuizSummary])
async def list_my_quizzes(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the caller's quizzes, drafts included"""
    return [QuizSummary.model_validate(quiz) for quiz in quiz_service.list_for_creator(db, user_id)]


@router.get("/{quiz_id}", response_model=QuizDetail)
async def get_quiz(
    quiz_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Get a quiz with its questions

    Correct answers and explanations are only returned to the creator.
    """
    quiz = quiz_service.get_readable_quiz(db, quiz_id, user_id)
    return QuizDetail(**quiz_service.serialize_quiz(db, quiz, user_id, include_questions=True))


@router.patch("/{quiz_id}", response_model=QuizSummary)
async def update_quiz(
    quiz_id: UUID,
    request: QuizUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Update quiz metadata or publish state (creator only)"""
    quiz = quiz_service.update_quiz(db, quiz_id, user_id, request)
    return QuizSummary(**quiz_service.serialize_quiz(db, quiz, user_id))


@router.put("/{quiz_id}/questions", response_model=QuizDetail)
async def replace_questions(
    quiz_id: UUID,
    request: QuestionsReplace,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Replace every question of a quiz (creator only)"""
    quiz = quiz_service.replace_questions(db, quiz_id, user_id, request.questions)
    return QuizDetail(**quiz_service.serialize_quiz(db, quiz, user_id, include_questions=True))


@router.delete("/{quiz_id}", status_code=204)
async def delete_quiz(
    quiz_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete a quiz with its questions and attempts (creator only)"""
    quiz_service.delete_quiz(db, quiz_id, user_id)
    return Response(status_code=204)


@router.post("/{quiz_id}/attempts", response_model=SubmissionResponse, status_code=201)
async def submit_attempt(
    quiz_id: UUID,
    submission: AttemptSubmission,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Submit and score a quiz attempt

    - Answers are compared with each question's correct option
    - The attempt is always stored as the caller
    - Quiz statistics are refreshed afterwards; if that fails the attempt
      still stands and stats_warning explains why
    """
    quiz_service.get_readable_quiz(db, quiz_id, user_id)
    questions = quiz_service.get_questions(db, quiz_id)

    logger.info(f"Scoring quiz {quiz_id} for user {user_id}")

    attempt, stats_warning = attempt_service.record_attempt(
        db,
        quiz_id=quiz_id,
        user_id=user_id,
        questions=questions,
        answers=submission.answers,
        time_taken=submission.time_taken,
    )

    return SubmissionResponse(
        attempt=AttemptResponse.model_validate(attempt),
        correct_answers=scoring_service.count_correct(questions, submission.answers),
        badge=scoring_service.badge(attempt.score),
        stats_warning=stats_warning,
    )
