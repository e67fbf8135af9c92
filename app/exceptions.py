"""
Domain exceptions for scoring, attempt recording and aggregation

Services raise these; app.main renders them as JSON error responses.
"""
from typing import Any, Dict, Optional


class QuizAppError(Exception):
    """Base exception for the quiz platform"""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(QuizAppError):
    """Malformed or empty input, e.g. scoring a quiz with no questions"""

    status_code = 400
    error_code = "INVALID_INPUT"


class PermissionDeniedError(QuizAppError):
    """Caller is not allowed to read or change the resource"""

    status_code = 403
    error_code = "PERMISSION_DENIED"


class NotFoundError(QuizAppError):
    """Referenced quiz, question, attempt or profile does not exist"""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} not found",
            details={"resource": resource, "id": str(resource_id)},
        )


class InvariantViolationError(QuizAppError):
    """Aggregation invoked for a quiz with no backing attempts"""

    status_code = 500
    error_code = "INVARIANT_VIOLATION"


class PersistenceError(QuizAppError):
    """Store unreachable or write rejected; the operation can be retried"""

    status_code = 503
    error_code = "PERSISTENCE_ERROR"
