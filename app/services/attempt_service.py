"""
Attempt recording service
Scores a submission, stores it, then refreshes the quiz statistics
"""
import logging
from collections.abc import Mapping
from typing import Any, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import InvalidInputError, NotFoundError, PersistenceError, QuizAppError
from app.models import Quiz, QuizAttempt
from app.services.scoring_service import scoring_service
from app.services.stats_service import stats_service
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


class AttemptService:
    """
    Records quiz attempts

    The attempt insert and the statistics update run in separate
    transactions. The attempt is the record of truth: a failed statistics
    update is reported back as a warning and never undoes the insert.
    Submissions are not deduplicated; every call stores a new attempt.
    """

    def record_attempt(
        self,
        db: Session,
        quiz_id: UUID,
        user_id: UUID,
        questions: Sequence[Any],
        answers: Mapping,
        time_taken: int,
    ) -> Tuple[QuizAttempt, Optional[str]]:
        """
        Score and persist one attempt

        Args:
            db: Database session
            quiz_id: Quiz being attempted
            user_id: User submitting the attempt
            questions: The quiz's questions in display order
            answers: {question_id: option_index}
            time_taken: Seconds spent on the quiz

        Returns:
            Tuple of (stored attempt, stats warning or None)

        Raises:
            InvalidInputError: no questions, bad answers or negative time
            NotFoundError: quiz does not exist
            PersistenceError: the attempt could not be stored
        """
        if time_taken is None or time_taken < 0:
            raise InvalidInputError(
                "time_taken must be zero or more seconds", details={"time_taken": time_taken}
            )

        try:
            quiz_exists = db.query(Quiz.id).filter(Quiz.id == quiz_id).first()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to look up quiz {quiz_id}: {str(e)}")
            raise PersistenceError("Failed to look up quiz", details={"quiz_id": str(quiz_id)}) from e

        if not quiz_exists:
            raise NotFoundError("Quiz", quiz_id)

        score = scoring_service.score(questions, answers)

        attempt = QuizAttempt(
            quiz_id=quiz_id,
            user_id=user_id,
            score=score,
            total_questions=len(questions),
            time_taken=time_taken,
            answers={str(key): value for key, value in answers.items()},
            completed_at=utcnow(),
        )

        try:
            db.add(attempt)
            db.commit()
            db.refresh(attempt)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to store attempt for quiz {quiz_id}: {str(e)}")
            raise PersistenceError(
                "Failed to store quiz attempt", details={"quiz_id": str(quiz_id)}
            ) from e

        # Keep the loaded attempt usable whatever the stats transaction does
        db.expunge(attempt)

        logger.info(
            f"Quiz attempt saved: {attempt.id}, quiz={quiz_id}, user={user_id}, "
            f"score={score}, questions={attempt.total_questions}"
        )

        stats_warning = None
        try:
            stats_service.apply_score(db, quiz_id, score)
        except QuizAppError as e:
            stats_warning = f"Attempt saved but quiz statistics were not updated: {e.message}"
            logger.warning(f"Stats update failed for quiz {quiz_id} after attempt {attempt.id}: {e.message}")

        return attempt, stats_warning


# Global instance
attempt_service = AttemptService()
