"""
Leaderboard API endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from app.config import settings
from app.database import get_db
from app.schemas.leaderboard import LeaderboardEntry, LeaderboardResponse, TopQuizzesResponse
from app.schemas.quiz import QuizSummary
from app.services.leaderboard_service import leaderboard_service
from app.services.quiz_service import quiz_service

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])
logger = logging.getLogger(__name__)


@router.get("", response_model=LeaderboardResponse)
async def get_user_leaderboard(
    time_filter: str = Query("all", description="all, month or week"),
    db: Session = Depends(get_db),
):
    """
    Rank users by total score

    - Window: all time, current calendar month or current week
    - Equal totals share a rank; the next total takes the next rank
    """
    entries = leaderboard_service.compute_leaderboard(db, time_filter)

    return LeaderboardResponse(
        time_filter=time_filter,
        entries=[LeaderboardEntry(**entry) for entry in entries],
    )


@router.get("/quizzes", response_model=TopQuizzesResponse)
async def get_top_quizzes(
    limit: int = Query(settings.TOP_QUIZZES_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
):
    """Published quizzes with the most attempts"""
    quizzes = leaderboard_service.top_quizzes(db, limit=limit)
    names = quiz_service.creator_names(db, [q.created_by for q in quizzes])

    return TopQuizzesResponse(quizzes=[
        QuizSummary.model_validate(quiz).model_copy(update={"creator_name": names.get(quiz.created_by)})
        for quiz in quizzes
    ])
