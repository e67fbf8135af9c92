"""
Quiz results API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from app.api.deps import get_current_user_id
from app.database import get_db
from app.exceptions import NotFoundError, PermissionDeniedError
from app.models import QuizAttempt
from app.schemas.attempt import AttemptResponse, AttemptResult, QuizBrief, QuestionReview
from app.services.quiz_service import quiz_service
from app.services.scoring_service import scoring_service

router = APIRouter(prefix="/api", tags=["attempts"])
logger = logging.getLogger(__name__)


@router.get("/attempts/{attempt_id}", response_model=AttemptResult)
async def get_attempt_result(
    attempt_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Get a scored attempt with a per-question review

    Visible to the user who made the attempt and to the quiz creator.
    """
    attempt = db.query(QuizAttempt).filter(QuizAttempt.id == attempt_id).first()
    if not attempt:
        raise NotFoundError("Attempt", attempt_id)

    quiz = quiz_service.get_quiz(db, attempt.quiz_id)
    if user_id not in (attempt.user_id, quiz.created_by):
        raise PermissionDeniedError("You can only view your own results")

    questions = quiz_service.get_questions(db, quiz.id)
    by_id = {str(question.id): question for question in questions}

    items = scoring_service.review(questions, attempt.answers or {}) if questions else []

    review = []
    for item in items:
        question = by_id[item["question_id"]]
        review.append(QuestionReview(
            question_id=question.id,
            question_text=question.question_text,
            options=list(question.options),
            user_answer=item["user_answer"],
            correct_answer=item["correct_answer"],
            is_correct=item["is_correct"],
            explanation=question.explanation,
        ))

    return AttemptResult(
        attempt=AttemptResponse.model_validate(attempt),
        quiz=QuizBrief.model_validate(quiz),
        correct_answers=sum(1 for item in review if item.is_correct),
        badge=scoring_service.badge(attempt.score),
        review=review,
    )


@router.get("/users/me/attempts", response_model=List[AttemptResponse])
async def list_my_attempts(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """The caller's attempt history, newest first"""
    attempts = (
        db.query(QuizAttempt)
        .filter(QuizAttempt.user_id == user_id)
        .order_by(QuizAttempt.completed_at.desc())
        .all()
    )
    return [AttemptResponse.model_validate(attempt) for attempt in attempts]
