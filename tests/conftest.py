import os

# Settings are read at import time, so configure the environment first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "100000"
os.environ["SUBMIT_RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from datetime import datetime
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.main import app
from app.models import Profile, Question, Quiz, QuizAttempt
from app.utils.clock import utcnow
from app.utils.rate_limiter import rate_limiter


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    rate_limiter.reset()
    return TestClient(app)


def auth(user_id) -> dict:
    return {"X-User-Id": str(user_id)}


def make_profile(db, full_name: str = "Ada Lovelace", user_id: Optional[uuid.UUID] = None) -> Profile:
    user_id = user_id or uuid.uuid4()
    profile = Profile(id=user_id, email=f"{user_id.hex[:12]}@example.com", full_name=full_name)
    db.add(profile)
    db.commit()
    return profile


def make_quiz(
    db,
    created_by: Optional[uuid.UUID] = None,
    correct_answers: List[int] = (0, 1, 2, 3),
    is_published: bool = True,
    title: str = "World capitals",
    category: str = "Geography",
) -> Quiz:
    quiz = Quiz(
        title=title,
        description="How well do you know them?",
        category=category,
        is_published=is_published,
        created_by=created_by or uuid.uuid4(),
        total_questions=len(correct_answers),
        total_attempts=0,
        average_score=0,
    )
    quiz.questions = [
        Question(
            question_text=f"Question {index + 1}",
            options=["A", "B", "C", "D"],
            correct_answer=answer,
            order_index=index,
        )
        for index, answer in enumerate(correct_answers)
    ]
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    return quiz


def make_attempt(
    db,
    quiz: Quiz,
    user_id: uuid.UUID,
    score: int,
    completed_at: Optional[datetime] = None,
) -> QuizAttempt:
    attempt = QuizAttempt(
        quiz_id=quiz.id,
        user_id=user_id,
        score=score,
        total_questions=quiz.total_questions,
        time_taken=30,
        answers={},
        completed_at=completed_at or utcnow(),
    )
    db.add(attempt)
    db.commit()
    return attempt
