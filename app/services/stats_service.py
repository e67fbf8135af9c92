"""
Per-quiz attempt statistics
Keeps quizzes.total_attempts / quizzes.average_score in line with quiz_attempts
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import (
    InvalidInputError,
    InvariantViolationError,
    NotFoundError,
    PersistenceError,
    QuizAppError,
)
from app.models import Quiz, QuizAttempt

logger = logging.getLogger(__name__)


class StatsService:
    """
    Recomputes quiz aggregates from the attempts table

    Each call opens with a no-op UPDATE of the quiz row before reading the
    attempts. PostgreSQL takes a row lock, so calls for one quiz serialize
    while other quizzes are unaffected; SQLite takes its database write lock,
    so every call serializes. Both fields are recomputed from source rows rather than
    incremented, which also repairs any update that failed earlier.
    """

    def apply_score(self, db: Session, quiz_id: UUID, new_score: int) -> Quiz:
        """
        Refresh a quiz's aggregates after an attempt scoring new_score

        Args:
            db: Database session
            quiz_id: Quiz UUID
            new_score: Score of the attempt just recorded (0-100)

        Returns:
            The updated Quiz

        Raises:
            InvalidInputError: new_score outside 0..100
            NotFoundError: quiz does not exist
            InvariantViolationError: quiz has no attempts
            PersistenceError: store failure; nothing was written
        """
        if not 0 <= new_score <= 100:
            raise InvalidInputError(
                f"Score {new_score} outside 0..100", details={"score": new_score}
            )

        try:
            # No-op write first: row lock on PostgreSQL, database write lock
            # on SQLite, held until commit so the reads below stay current
            locked = db.execute(
                update(Quiz)
                .where(Quiz.id == quiz_id)
                .values(total_attempts=Quiz.total_attempts)
                .execution_options(synchronize_session=False)
            )
            if not locked.rowcount:
                raise NotFoundError("Quiz", quiz_id)

            quiz = db.query(Quiz).filter(Quiz.id == quiz_id).populate_existing().one()

            attempt_count, mean_score = (
                db.query(func.count(QuizAttempt.id), func.avg(QuizAttempt.score))
                .filter(QuizAttempt.quiz_id == quiz_id)
                .one()
            )

            if not attempt_count:
                raise InvariantViolationError(
                    "Cannot update statistics for a quiz without attempts",
                    details={"quiz_id": str(quiz_id)},
                )

            quiz.total_attempts = attempt_count
            quiz.average_score = self._round_average(mean_score)

            db.commit()
            db.refresh(quiz)

        except QuizAppError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update stats for quiz {quiz_id}: {str(e)}")
            raise PersistenceError(
                "Failed to update quiz statistics", details={"quiz_id": str(quiz_id)}
            ) from e

        logger.info(
            f"Quiz stats updated: quiz={quiz_id}, new_score={new_score}, "
            f"attempts={quiz.total_attempts}, average={quiz.average_score}"
        )

        return quiz

    @staticmethod
    def _round_average(value) -> Decimal:
        # avg() comes back as Decimal on PostgreSQL and float on SQLite
        return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


# Global instance
stats_service = StatsService()
