"""
Rate limiting for API endpoints
"""
import re
import time
from collections import defaultdict
from fastapi import Request, HTTPException
from typing import Callable, Dict
import logging

from app.config import settings

logger = logging.getLogger(__name__)

SUBMIT_PATH = re.compile(r"^/api/quizzes/[^/]+/attempts/?$")


class RateLimiter:
    """
    In-memory sliding-window rate limiter

    Callers are identified by the X-User-Id header, falling back to the
    client IP. Attempt submissions have their own, lower per-minute limit.
    Production: Use Redis for distributed rate limiting
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        submissions_per_minute: int = 10,
        clock: Callable[[], float] = time.time,
    ):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.submissions_per_minute = submissions_per_minute
        self.clock = clock

        # {client_id: [timestamp, ...]}
        self.minute_tracker: Dict[str, list] = defaultdict(list)
        self.hour_tracker: Dict[str, list] = defaultdict(list)
        self.submit_tracker: Dict[str, list] = defaultdict(list)

    def reset(self) -> None:
        """Forget all recorded requests"""
        self.minute_tracker.clear()
        self.hour_tracker.clear()
        self.submit_tracker.clear()

    def _get_client_id(self, request: Request) -> str:
        """Extract client identifier from request"""
        user_id = request.headers.get("x-user-id")
        if user_id:
            return f"user:{user_id}"

        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"

    @staticmethod
    def _cleanup_old_entries(tracker: Dict[str, list], window_seconds: int, now: float) -> None:
        """Remove entries older than window"""
        cutoff = now - window_seconds

        for client_id in list(tracker.keys()):
            tracker[client_id] = [ts for ts in tracker[client_id] if ts > cutoff]

            # Remove empty entries
            if not tracker[client_id]:
                del tracker[client_id]

    @staticmethod
    def _reject(client_id: str, limit: int, period: str, retry_after: int) -> None:
        logger.warning(f"Rate limit exceeded ({period}): {client_id}")
        raise HTTPException(
            status_code=429,
            detail={
                "error": "rate_limit_exceeded",
                "message": f"Too many requests. Limit: {limit} per {period}",
                "retry_after": retry_after
            }
        )

    async def check_rate_limit(self, request: Request) -> None:
        """
        Check if request exceeds rate limits

        Raises:
            HTTPException: 429 if rate limit exceeded
        """
        client_id = self._get_client_id(request)
        now = self.clock()

        self._cleanup_old_entries(self.minute_tracker, 60, now)
        self._cleanup_old_entries(self.hour_tracker, 3600, now)
        self._cleanup_old_entries(self.submit_tracker, 60, now)

        if len(self.minute_tracker[client_id]) >= self.requests_per_minute:
            self._reject(client_id, self.requests_per_minute, "minute", 60)

        if len(self.hour_tracker[client_id]) >= self.requests_per_hour:
            self._reject(client_id, self.requests_per_hour, "hour", 3600)

        is_submission = request.method == "POST" and SUBMIT_PATH.match(request.url.path)
        if is_submission:
            if len(self.submit_tracker[client_id]) >= self.submissions_per_minute:
                self._reject(client_id, self.submissions_per_minute, "minute of quiz submissions", 60)
            self.submit_tracker[client_id].append(now)

        self.minute_tracker[client_id].append(now)
        self.hour_tracker[client_id].append(now)


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR,
    submissions_per_minute=settings.SUBMIT_RATE_LIMIT_PER_MINUTE,
)
