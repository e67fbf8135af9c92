"""
Leaderboard service
Per-user totals over a time window with dense ranking
"""
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import InvalidInputError, PersistenceError
from app.models import Profile, Quiz, QuizAttempt
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)

TIME_FILTERS = ("all", "month", "week")


def window_start(time_filter: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    First instant included in a leaderboard window

    'all' has no lower bound, 'month' starts on the 1st of the current
    month and 'week' on Monday of the current ISO week, both at 00:00 UTC.
    An aware now is converted to UTC first; the result is always naive UTC.
    """
    if time_filter not in TIME_FILTERS:
        raise InvalidInputError(
            f"Unknown time filter '{time_filter}'",
            details={"allowed": list(TIME_FILTERS)},
        )

    if time_filter == "all":
        return None

    if now is None:
        now = utcnow()
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if time_filter == "month":
        return midnight.replace(day=1)
    return midnight - timedelta(days=midnight.weekday())


def assign_dense_ranks(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Order entries by total_score descending and set their rank

    Equal totals share a rank and the next total gets the following rank
    (300, 300, 200 -> 1, 1, 2). Ties are ordered by user_id.
    """
    ordered = sorted(entries, key=lambda e: (-e["total_score"], str(e["user_id"])))

    rank = 0
    previous_total = None
    for entry in ordered:
        if entry["total_score"] != previous_total:
            rank += 1
            previous_total = entry["total_score"]
        entry["rank"] = rank

    return ordered


class LeaderboardService:
    """Read-only rankings, recomputed on every call"""

    def compute_leaderboard(
        self,
        db: Session,
        time_filter: str = "all",
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Rank users by the sum of their attempt scores

        Args:
            db: Database session
            time_filter: 'all', 'month' or 'week'
            now: Reference time for the window (defaults to current UTC time)

        Returns:
            Entries with user_id, full_name, total_score, quiz_count,
            average_score and rank, ordered by rank
        """
        start = window_start(time_filter, now)

        query = (
            db.query(
                QuizAttempt.user_id,
                Profile.full_name,
                func.sum(QuizAttempt.score).label("total_score"),
                func.count(QuizAttempt.id).label("quiz_count"),
                func.avg(QuizAttempt.score).label("average_score"),
            )
            .outerjoin(Profile, Profile.id == QuizAttempt.user_id)
        )
        if start is not None:
            query = query.filter(QuizAttempt.completed_at >= start)

        try:
            rows = query.group_by(QuizAttempt.user_id, Profile.full_name).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to compute leaderboard: {str(e)}")
            raise PersistenceError("Failed to load leaderboard") from e

        entries = [
            {
                "user_id": row.user_id,
                "full_name": row.full_name,
                "total_score": int(row.total_score),
                "quiz_count": int(row.quiz_count),
                "average_score": float(
                    Decimal(str(row.average_score)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
                ),
            }
            for row in rows
        ]

        ranked = assign_dense_ranks(entries)

        logger.info(f"Leaderboard computed: filter={time_filter}, users={len(ranked)}")

        return ranked

    def top_quizzes(self, db: Session, limit: int = 10) -> List[Quiz]:
        """Published quizzes with the most attempts"""
        try:
            return (
                db.query(Quiz)
                .filter(Quiz.is_published.is_(True))
                .order_by(Quiz.total_attempts.desc(), Quiz.created_at.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load top quizzes: {str(e)}")
            raise PersistenceError("Failed to load top quizzes") from e


# Global instance
leaderboard_service = LeaderboardService()
