"""
QuizAttempt model - one completed run through a quiz
"""
from sqlalchemy import Column, Integer, TIMESTAMP, ForeignKey, Uuid, func
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.types import JSONType
import uuid


class QuizAttempt(Base):
    """
    Quiz attempts table - append-only record of submissions and scores
    """
    __tablename__ = "quiz_attempts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("quizzes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    score = Column(Integer, nullable=False)  # percent, 0-100
    total_questions = Column(Integer, nullable=False)  # snapshot at attempt time
    time_taken = Column(Integer, nullable=False, default=0)  # seconds
    answers = Column(JSONType, nullable=False)  # {question_id: option_index}
    completed_at = Column(TIMESTAMP, nullable=False, server_default=func.now(), index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    quiz = relationship("Quiz", back_populates="attempts")

    def __repr__(self):
        return f"<QuizAttempt(user_id={self.user_id}, quiz_id={self.quiz_id}, score={self.score})>"
