"""
Pydantic schemas for quiz-related requests and responses
"""
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class QuestionCreate(BaseModel):
    """Multiple-choice question as submitted by the quiz creator"""
    question_text: str = Field(..., min_length=1, description="Question text")
    options: List[str] = Field(..., min_length=2, description="Answer options, in display order")
    correct_answer: int = Field(..., ge=0, description="0-based index of the correct option")
    explanation: Optional[str] = None

    @model_validator(mode="after")
    def check_correct_answer(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index one of the options")
        return self


class QuizCreate(BaseModel):
    """Schema for creating a quiz with its questions"""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=100)
    is_published: bool = False
    questions: List[QuestionCreate] = Field(..., min_length=1)


class QuizUpdate(BaseModel):
    """Partial update of quiz metadata"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    is_published: Optional[bool] = None


class QuestionsReplace(BaseModel):
    """Full replacement of a quiz's question set"""
    questions: List[QuestionCreate] = Field(..., min_length=1)


class QuestionOut(BaseModel):
    """Question as served; answer fields only filled in for the creator"""
    id: UUID
    question_text: str
    question_type: str = "multiple_choice"
    options: List[str]
    order_index: int
    correct_answer: Optional[int] = None
    explanation: Optional[str] = None

    class Config:
        from_attributes = True


class QuizSummary(BaseModel):
    """Quiz card data including attempt statistics"""
    id: UUID
    title: str
    description: str
    category: str
    is_published: bool
    created_by: UUID
    creator_name: Optional[str] = None
    created_at: Optional[datetime] = None
    total_questions: int
    total_attempts: int
    average_score: float

    class Config:
        from_attributes = True


class QuizDetail(QuizSummary):
    """Quiz with its questions"""
    questions: List[QuestionOut]
