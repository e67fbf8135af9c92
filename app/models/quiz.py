"""
Quiz and Question models
"""
from sqlalchemy import (
    Column, String, Text, Integer, Boolean, Numeric, TIMESTAMP, ForeignKey, Uuid, func
)
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.types import JSONType
import uuid


class Quiz(Base):
    """
    Quizzes table - quiz metadata plus denormalized attempt statistics

    total_attempts and average_score are maintained by stats_service from
    the quiz_attempts rows, never incremented blindly.
    """
    __tablename__ = "quizzes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=False)
    is_published = Column(Boolean, nullable=False, default=False, index=True)
    created_by = Column(Uuid(as_uuid=True), nullable=False, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
    total_questions = Column(Integer, nullable=False, default=0)
    total_attempts = Column(Integer, nullable=False, default=0)
    average_score = Column(Numeric(5, 2), nullable=False, default=0)

    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    attempts = relationship(
        "QuizAttempt",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, title={self.title}, published={self.is_published})>"


class Question(Base):
    """
    Questions table - multiple-choice questions owned by a quiz
    """
    __tablename__ = "questions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_text = Column(Text, nullable=False)
    question_type = Column(String(30), nullable=False, default="multiple_choice")
    options = Column(JSONType, nullable=False)  # ["Paris", "Rome", "Madrid"]
    correct_answer = Column(Integer, nullable=False)  # 0-based index into options
    explanation = Column(Text)
    order_index = Column(Integer, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    quiz = relationship("Quiz", back_populates="questions")

    def __repr__(self):
        return f"<Question(id={self.id}, quiz_id={self.quiz_id}, order={self.order_index})>"
