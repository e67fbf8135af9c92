"""
Quiz scoring service
Multiple choice only: an answer is correct when the chosen option index
equals the question's correct_answer.
"""
import logging
from collections.abc import Mapping
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Sequence

from app.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def _field(question: Any, name: str) -> Any:
    """Read a field from an ORM Question or a plain question dict"""
    if isinstance(question, Mapping):
        return question.get(name)
    return getattr(question, name, None)


class ScoringService:
    """
    Pure scoring of quiz submissions

    Percent rounding is round-half-up (1/8 correct = 12.5 -> 13), not
    Python's round(), which rounds halves to even.
    """

    # (minimum score, badge) checked top to bottom
    BADGES = [
        (90, "Excellent!"),
        (80, "Great Job!"),
        (70, "Good Work!"),
        (60, "Not Bad!"),
    ]
    DEFAULT_BADGE = "Keep Trying!"

    def score(self, questions: Sequence[Any], answers: Mapping) -> int:
        """
        Compute the integer percentage score of a submission

        Args:
            questions: Ordered questions, each with id, options and correct_answer
            answers: {question_id: option_index}; missing entries count as wrong

        Returns:
            Score in 0..100
        """
        correct = self.count_correct(questions, answers)
        return self.percent(correct, len(questions))

    def count_correct(self, questions: Sequence[Any], answers: Mapping) -> int:
        """Number of questions answered correctly"""
        self._validate(questions, answers)
        chosen = self._normalize_answers(answers)

        return sum(
            1 for question in questions
            if self._is_correct(question, chosen.get(str(_field(question, "id"))))
        )

    def review(self, questions: Sequence[Any], answers: Mapping) -> List[Dict[str, Any]]:
        """
        Per-question breakdown for the results view

        Returns:
            List of dicts with question_id, user_answer, correct_answer and is_correct
        """
        self._validate(questions, answers)
        chosen = self._normalize_answers(answers)

        breakdown = []
        for question in questions:
            question_id = str(_field(question, "id"))
            user_answer = chosen.get(question_id)
            breakdown.append({
                "question_id": question_id,
                "user_answer": user_answer,
                "correct_answer": _field(question, "correct_answer"),
                "is_correct": self._is_correct(question, user_answer),
            })
        return breakdown

    @staticmethod
    def percent(correct: int, total: int) -> int:
        """Round-half-up integer percentage of correct over total"""
        if total <= 0:
            raise InvalidInputError("Cannot score a quiz with no questions")
        if not 0 <= correct <= total:
            raise InvalidInputError(
                f"Correct count {correct} outside 0..{total}",
                details={"correct": correct, "total": total},
            )

        exact = Decimal(100 * correct) / Decimal(total)
        return int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def badge(self, score: int) -> str:
        """Short result label shown with a score"""
        for threshold, label in self.BADGES:
            if score >= threshold:
                return label
        return self.DEFAULT_BADGE

    def _validate(self, questions: Sequence[Any], answers: Mapping) -> None:
        if not questions:
            raise InvalidInputError("Cannot score a quiz with no questions")

        if not isinstance(answers, Mapping):
            raise InvalidInputError("Answers must be a mapping of question id to option index")

        for question in questions:
            correct_answer = _field(question, "correct_answer")
            options = _field(question, "options")

            if not isinstance(correct_answer, int) or isinstance(correct_answer, bool):
                raise InvalidInputError(
                    "Question has no valid correct answer",
                    details={"question_id": str(_field(question, "id"))},
                )
            if options is not None and not 0 <= correct_answer < len(options):
                raise InvalidInputError(
                    "Correct answer index is outside the question's options",
                    details={
                        "question_id": str(_field(question, "id")),
                        "correct_answer": correct_answer,
                        "options": len(options),
                    },
                )

    @staticmethod
    def _normalize_answers(answers: Mapping) -> Dict[str, Any]:
        # JSON round-trips turn UUID keys into strings
        return {str(key): value for key, value in answers.items()}

    @staticmethod
    def _is_correct(question: Any, user_answer: Any) -> bool:
        if not isinstance(user_answer, int) or isinstance(user_answer, bool):
            return False
        return user_answer == _field(question, "correct_answer")


# Global instance
scoring_service = ScoringService()
