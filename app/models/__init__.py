"""
Database models package
"""
from app.models.profile import Profile
from app.models.quiz import Quiz, Question
from app.models.quiz_attempt import QuizAttempt

__all__ = ["Profile", "Quiz", "Question", "QuizAttempt"]
