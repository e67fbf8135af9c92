"""
Quiz management service
Creation, listing, editing and access checks for quizzes and their questions
"""
import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import InvalidInputError, NotFoundError, PermissionDeniedError, PersistenceError
from app.models import Profile, Question, Quiz
from app.schemas.quiz import QuestionCreate, QuizCreate, QuizUpdate
from app.utils.cache import cache_service

logger = logging.getLogger(__name__)


class QuizService:
    """
    Quiz CRUD with the platform's access rules

    - Published quizzes are readable by everyone, drafts only by their creator
    - Only the creator may change or delete a quiz and its questions
    """

    def create_quiz(self, db: Session, user_id: UUID, data: QuizCreate) -> Quiz:
        """Create a quiz together with its questions"""
        self._check_question_count(data.questions)

        quiz = Quiz(
            title=data.title,
            description=data.description,
            category=data.category,
            is_published=data.is_published,
            created_by=user_id,
            total_questions=len(data.questions),
            total_attempts=0,
            average_score=0,
        )
        quiz.questions = self._build_questions(data.questions)

        db.add(quiz)
        self._commit(db, "create quiz")
        db.refresh(quiz)

        logger.info(f"Quiz created: {quiz.id} by {user_id} with {quiz.total_questions} questions")

        return quiz

    def list_published(
        self,
        db: Session,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Quiz]:
        """Published quizzes, newest first"""
        query = db.query(Quiz).filter(Quiz.is_published.is_(True))

        if category:
            query = query.filter(Quiz.category == category)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Quiz.title.ilike(pattern), Quiz.description.ilike(pattern)))

        return self._all(query.order_by(Quiz.created_at.desc()))

    def list_for_creator(self, db: Session, user_id: UUID) -> List[Quiz]:
        """All quizzes created by a user, drafts included, most recently edited first"""
        query = db.query(Quiz).filter(Quiz.created_by == user_id).order_by(Quiz.updated_at.desc())
        return self._all(query)

    def get_quiz(self, db: Session, quiz_id: UUID) -> Quiz:
        try:
            quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load quiz {quiz_id}: {str(e)}")
            raise PersistenceError("Failed to load quiz") from e

        if not quiz:
            raise NotFoundError("Quiz", quiz_id)
        return quiz

    def get_readable_quiz(self, db: Session, quiz_id: UUID, user_id: UUID) -> Quiz:
        """Quiz the caller may view; unpublished quizzes of others look missing"""
        quiz = self.get_quiz(db, quiz_id)
        if not quiz.is_published and quiz.created_by != user_id:
            raise NotFoundError("Quiz", quiz_id)
        return quiz

    def get_owned_quiz(self, db: Session, quiz_id: UUID, user_id: UUID) -> Quiz:
        """Quiz the caller may modify"""
        quiz = self.get_readable_quiz(db, quiz_id, user_id)
        if quiz.created_by != user_id:
            raise PermissionDeniedError(
                "Only the quiz creator can modify this quiz", details={"quiz_id": str(quiz_id)}
            )
        return quiz

    def update_quiz(self, db: Session, quiz_id: UUID, user_id: UUID, data: QuizUpdate) -> Quiz:
        quiz = self.get_owned_quiz(db, quiz_id, user_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(quiz, field, value)

        self._commit(db, "update quiz")
        db.refresh(quiz)
        cache_service.clear_quiz_cache(quiz_id)

        logger.info(f"Quiz updated: {quiz_id}, published={quiz.is_published}")

        return quiz

    def replace_questions(
        self,
        db: Session,
        quiz_id: UUID,
        user_id: UUID,
        questions: List[QuestionCreate],
    ) -> Quiz:
        """
        Swap the question set of a quiz

        Existing attempts keep their total_questions snapshot.
        """
        self._check_question_count(questions)
        quiz = self.get_owned_quiz(db, quiz_id, user_id)

        quiz.questions = self._build_questions(questions)
        quiz.total_questions = len(questions)

        self._commit(db, "replace questions")
        db.refresh(quiz)
        cache_service.clear_quiz_cache(quiz_id)

        logger.info(f"Questions replaced for quiz {quiz_id}: {quiz.total_questions} questions")

        return quiz

    def delete_quiz(self, db: Session, quiz_id: UUID, user_id: UUID) -> None:
        """Delete a quiz; its questions and attempts go with it"""
        quiz = self.get_owned_quiz(db, quiz_id, user_id)

        db.delete(quiz)
        self._commit(db, "delete quiz")
        cache_service.clear_quiz_cache(quiz_id)

        logger.info(f"Quiz deleted: {quiz_id}")

    def get_questions(self, db: Session, quiz_id: UUID) -> List[Question]:
        """Questions of a quiz in display order"""
        query = db.query(Question).filter(Question.quiz_id == quiz_id).order_by(Question.order_index)
        return self._all(query)

    def public_questions(self, db: Session, quiz: Quiz) -> List[Dict[str, Any]]:
        """Question payload for quiz takers, without answers"""
        cache_key = cache_service.questions_key(quiz.id)

        cached = cache_service.get(cache_key)
        if cached is not None:
            return cached

        payload = [
            {
                "id": str(question.id),
                "question_text": question.question_text,
                "question_type": question.question_type,
                "options": list(question.options),
                "order_index": question.order_index,
            }
            for question in self.get_questions(db, quiz.id)
        ]

        cache_service.set(cache_key, payload)

        return payload

    def serialize_quiz(
        self,
        db: Session,
        quiz: Quiz,
        user_id: UUID,
        include_questions: bool = False,
    ) -> Dict[str, Any]:
        """Quiz as a response dict; answers are only included for the creator"""
        data = {
            "id": quiz.id,
            "title": quiz.title,
            "description": quiz.description,
            "category": quiz.category,
            "is_published": quiz.is_published,
            "created_by": quiz.created_by,
            "creator_name": self.creator_names(db, [quiz.created_by]).get(quiz.created_by),
            "created_at": quiz.created_at,
            "total_questions": quiz.total_questions,
            "total_attempts": quiz.total_attempts,
            "average_score": float(quiz.average_score or 0),
        }

        if include_questions:
            if quiz.created_by == user_id:
                data["questions"] = [
                    {
                        "id": question.id,
                        "question_text": question.question_text,
                        "question_type": question.question_type,
                        "options": list(question.options),
                        "order_index": question.order_index,
                        "correct_answer": question.correct_answer,
                        "explanation": question.explanation,
                    }
                    for question in self.get_questions(db, quiz.id)
                ]
            else:
                data["questions"] = self.public_questions(db, quiz)

        return data

    def creator_names(self, db: Session, user_ids: Iterable[UUID]) -> Dict[UUID, str]:
        """Map of profile id -> full name for the given users"""
        ids = set(user_ids)
        if not ids:
            return {}

        rows = self._all(db.query(Profile.id, Profile.full_name).filter(Profile.id.in_(ids)))
        return {row.id: row.full_name for row in rows}

    def _build_questions(self, questions: List[QuestionCreate]) -> List[Question]:
        return [
            Question(
                question_text=question.question_text,
                question_type="multiple_choice",
                options=list(question.options),
                correct_answer=question.correct_answer,
                explanation=question.explanation,
                order_index=index,
            )
            for index, question in enumerate(questions)
        ]

    def _check_question_count(self, questions: List[QuestionCreate]) -> None:
        if not questions:
            raise InvalidInputError("A quiz needs at least one question")
        if len(questions) > settings.MAX_QUESTIONS_PER_QUIZ:
            raise InvalidInputError(
                f"A quiz can have at most {settings.MAX_QUESTIONS_PER_QUIZ} questions",
                details={"questions": len(questions)},
            )

    def _commit(self, db: Session, action: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to {action}: {str(e)}")
            raise PersistenceError(f"Failed to {action}") from e

    @staticmethod
    def _all(query) -> List[Any]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            logger.error(f"Query failed: {str(e)}")
            raise PersistenceError("Failed to read from the database") from e


# Global instance
quiz_service = QuizService()
