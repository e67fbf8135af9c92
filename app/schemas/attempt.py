"""
Pydantic schemas for quiz attempts and results
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Optional
from uuid import UUID
from datetime import datetime


class AttemptSubmission(BaseModel):
    """Schema for submitting a quiz attempt"""
    answers: Dict[str, int] = Field(default_factory=dict, description="{question_id: option_index}")
    time_taken: int = Field(0, ge=0, description="Time taken in seconds")


class AttemptResponse(BaseModel):
    """Stored attempt"""
    id: UUID
    quiz_id: UUID
    user_id: UUID
    score: int
    total_questions: int
    time_taken: int
    answers: Dict[str, int]
    completed_at: datetime

    class Config:
        from_attributes = True


class SubmissionResponse(BaseModel):
    """Response after an attempt is recorded"""
    attempt: AttemptResponse
    correct_answers: int
    badge: str
    stats_warning: Optional[str] = None


class QuestionReview(BaseModel):
    """Result details for a single question"""
    question_id: UUID
    question_text: str
    options: List[str]
    user_answer: Optional[int] = None
    correct_answer: int
    is_correct: bool
    explanation: Optional[str] = None


class QuizBrief(BaseModel):
    """Quiz fields shown on the results page"""
    id: UUID
    title: str
    description: str
    category: str

    class Config:
        from_attributes = True


class AttemptResult(BaseModel):
    """Scored attempt with a per-question review"""
    attempt: AttemptResponse
    quiz: QuizBrief
    correct_answers: int
    badge: str
    review: List[QuestionReview]
