import threading
import uuid
from itertools import permutations

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from app.database import Base
from app.exceptions import InvalidInputError, InvariantViolationError, NotFoundError, PersistenceError
from app.models import Quiz, QuizAttempt
from app.utils.clock import utcnow
from app.services.stats_service import stats_service

from conftest import make_attempt, make_quiz


def record_and_apply(db, quiz, scores):
    for score in scores:
        make_attempt(db, quiz, uuid.uuid4(), score)
        stats_service.apply_score(db, quiz.id, score)


def test_first_attempt_sets_exact_score(db):
    quiz = make_quiz(db)

    record_and_apply(db, quiz, [70])

    db.refresh(quiz)
    assert quiz.total_attempts == 1
    assert float(quiz.average_score) == 70.0


@pytest.mark.parametrize("order", list(permutations([80, 100, 60])))
def test_average_is_independent_of_order(db, order):
    quiz = make_quiz(db)

    record_and_apply(db, quiz, order)

    db.refresh(quiz)
    assert quiz.total_attempts == 3
    assert float(quiz.average_score) == 80.0


def test_average_is_recomputed_from_all_attempts(db):
    quiz = make_quiz(db)

    record_and_apply(db, quiz, [100, 0, 50, 33])

    db.refresh(quiz)
    assert quiz.total_attempts == 4
    assert float(quiz.average_score) == 45.75


def test_missed_update_is_repaired_by_next_call(db):
    quiz = make_quiz(db)
    # Two attempts stored without a stats update
    make_attempt(db, quiz, uuid.uuid4(), 40)
    make_attempt(db, quiz, uuid.uuid4(), 60)

    record_and_apply(db, quiz, [80])

    db.refresh(quiz)
    assert quiz.total_attempts == 3
    assert float(quiz.average_score) == 60.0


def test_quizzes_are_tracked_independently(db):
    first = make_quiz(db, title="First")
    second = make_quiz(db, title="Second")

    record_and_apply(db, first, [100, 90])
    record_and_apply(db, second, [10])

    db.refresh(first)
    db.refresh(second)
    assert (first.total_attempts, float(first.average_score)) == (2, 95.0)
    assert (second.total_attempts, float(second.average_score)) == (1, 10.0)


def test_quiz_without_attempts_is_an_invariant_violation(db):
    quiz = make_quiz(db)

    with pytest.raises(InvariantViolationError):
        stats_service.apply_score(db, quiz.id, 50)

    db.refresh(quiz)
    assert quiz.total_attempts == 0
    assert float(quiz.average_score) == 0.0


def test_unknown_quiz_is_not_found(db):
    with pytest.raises(NotFoundError):
        stats_service.apply_score(db, uuid.uuid4(), 50)


@pytest.mark.parametrize("score", [-1, 101])
def test_out_of_range_score_is_rejected(db, score):
    quiz = make_quiz(db)

    with pytest.raises(InvalidInputError):
        stats_service.apply_score(db, quiz.id, score)


def test_store_failure_raises_persistence_error(db, monkeypatch):
    quiz = make_quiz(db)
    make_attempt(db, quiz, uuid.uuid4(), 90)

    def failing_commit():
        raise OperationalError("UPDATE quizzes", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(PersistenceError):
        stats_service.apply_score(db, quiz.id, 90)

    monkeypatch.undo()
    stored = db.query(Quiz).filter(Quiz.id == quiz.id).one()
    assert stored.total_attempts == 0


def test_concurrent_updates_do_not_lose_attempts(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'stats.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = Session()
    quiz = make_quiz(setup)
    make_attempt(setup, quiz, uuid.uuid4(), 100)
    quiz_id, total_questions = quiz.id, quiz.total_questions
    setup.close()

    first_counted = threading.Event()
    second_done = threading.Event()
    errors = []

    @event.listens_for(engine, "after_cursor_execute")
    def pause_first_after_count(conn, cursor, statement, parameters, context, executemany):
        # Hold the first update between its count and its write
        if threading.current_thread().name == "first" and "count(" in statement:
            first_counted.set()
            second_done.wait(timeout=1)

    def first():
        session = Session()
        try:
            stats_service.apply_score(session, quiz_id, 100)
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    def second():
        session = Session()
        try:
            session.add(QuizAttempt(
                quiz_id=quiz_id,
                user_id=uuid.uuid4(),
                score=50,
                total_questions=total_questions,
                time_taken=30,
                answers={},
                completed_at=utcnow(),
            ))
            session.commit()
            stats_service.apply_score(session, quiz_id, 50)
        except Exception as e:
            errors.append(e)
        finally:
            session.close()
            second_done.set()

    first_thread = threading.Thread(target=first, name="first")
    first_thread.start()
    assert first_counted.wait(timeout=10)
    second_thread = threading.Thread(target=second, name="second")
    second_thread.start()
    first_thread.join(timeout=60)
    second_thread.join(timeout=60)

    assert errors == []
    check = Session()
    stored = check.query(Quiz).filter(Quiz.id == quiz_id).one()
    assert stored.total_attempts == check.query(QuizAttempt).filter(QuizAttempt.quiz_id == quiz_id).count() == 2
    assert float(stored.average_score) == 75.0
    check.close()
    engine.dispose()
