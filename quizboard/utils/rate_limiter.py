"""
Rate limiting for API endpoints
"""
import time
from collections import deque
from fastapi import Request, HTTPException
from typing import Deque, Dict
import logging

from quizboard.config import settings
from quizboard.stores.identity import USER_ID_HEADER

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding-window rate limiter, per process
    
    Learners are keyed by their user id header, anonymous clients by IP.
    """
    
    WINDOWS = (("minute", 60), ("hour", 3600))
    HISTORY_SECONDS = 3600
    SWEEP_INTERVAL = 60
    
    def __init__(self, requests_per_minute: int = 60, requests_per_hour: int = 1000):
        self.limits = {"minute": requests_per_minute, "hour": requests_per_hour}
        
        # {client_id: timestamps of accepted requests within the last hour}
        self.requests: Dict[str, Deque[float]] = {}
        self._last_sweep = 0.0
    
    def _get_client_id(self, request: Request) -> str:
        """Extract client identifier from request"""
        user_id = request.headers.get(USER_ID_HEADER)
        if user_id:
            return f"user:{user_id}"
        
        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"
    
    def _cleanup_old_entries(self, now: float) -> None:
        """Drop expired timestamps, and clients with none left"""
        cutoff = now - self.HISTORY_SECONDS
        
        for client_id in list(self.requests.keys()):
            timestamps = self.requests[client_id]
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()
            
            if not timestamps:
                del self.requests[client_id]
        
        self._last_sweep = now
    
    async def check_rate_limit(self, request: Request) -> None:
        """
        Check if request exceeds rate limits
        
        Raises:
            HTTPException: 429 if rate limit exceeded
        """
        client_id = self._get_client_id(request)
        now = time.time()
        
        # idle clients are forgotten at most once per sweep interval
        if now - self._last_sweep >= self.SWEEP_INTERVAL:
            self._cleanup_old_entries(now)
        
        timestamps = self.requests.get(client_id, deque())
        while timestamps and timestamps[0] <= now - self.HISTORY_SECONDS:
            timestamps.popleft()
        
        for window, seconds in self.WINDOWS:
            limit = self.limits[window]
            in_window = sum(1 for ts in timestamps if ts > now - seconds)
            if in_window >= limit:
                logger.warning(f"Rate limit exceeded ({window}): {client_id}")
                raise HTTPException(
                    status_code=429,
                    detail={
                        "error": "rate_limit_exceeded",
                        "message": f"Too many requests. Limit: {limit} requests per {window}",
                        "retry_after": seconds
                    }
                )
        
        timestamps.append(now)
        self.requests[client_id] = timestamps
    
    def reset(self) -> None:
        """Forget all tracked requests"""
        self.requests.clear()
        self._last_sweep = 0.0


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)
