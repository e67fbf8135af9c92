"""
Pydantic schemas for leaderboard endpoints
"""
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID

from app.schemas.quiz import QuizSummary


class LeaderboardEntry(BaseModel):
    """Ranked totals for one user"""
    user_id: UUID
    full_name: Optional[str] = None
    total_score: int
    quiz_count: int
    average_score: float
    rank: int


class LeaderboardResponse(BaseModel):
    """User leaderboard for a time window"""
    time_filter: str
    entries: List[LeaderboardEntry]


class TopQuizzesResponse(BaseModel):
    """Most attempted published quizzes"""
    quizzes: List[QuizSummary]
