"""
Redis cache utility for quiz definitions and quiz sessions
"""
import redis
import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional
from quizboard.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis-based JSON cache; degrades to a no-op when Redis is unreachable"""
    
    def __init__(self, redis_client: Optional[redis.Redis] = None):
        if redis_client is not None:
            self.redis_client = redis_client
            return
        
        try:
            self.redis_client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established")
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None
    
    @property
    def available(self) -> bool:
        return self.redis_client is not None
    
    @staticmethod
    def quiz_key(quiz_id: str) -> str:
        """Cache key for a normalized quiz definition"""
        return f"quiz:{quiz_id}"
    
    @staticmethod
    def session_key(session_id: str) -> str:
        """Cache key for an in-progress quiz session"""
        return f"quiz_session:{session_id}"
    
    @staticmethod
    def submission_key(session_id: str, generation: int) -> str:
        """Marker for the one request allowed to record a session's attempt"""
        return f"quiz_session:{session_id}:submitted:{generation}"
    
    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache
        
        Args:
            key: Cache key
            
        Returns:
            Cached value or None
        """
        if not self.redis_client:
            return None
        
        try:
            value = self.redis_client.get(key)
            if value:
                logger.debug(f"Cache hit: {key}")
                return json.loads(value)
            logger.debug(f"Cache miss: {key}")
            return None
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Cache get error: {str(e)}")
            return None
    
    def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None
    ) -> bool:
        """
        Set value in cache
        
        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
            ttl: Time to live in seconds (default from settings)
            
        Returns:
            Success status
        """
        if not self.redis_client:
            return False
        
        try:
            ttl = ttl or settings.QUIZ_CACHE_TTL
            serialized = json.dumps(value, default=str)
            self.redis_client.setex(key, ttl, serialized)
            logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.warning(f"Cache set error: {str(e)}")
            return False
    
    def add(self, key: str, value: Any, ttl: Optional[int] = None) -> Optional[bool]:
        """
        Set value only if the key does not exist yet (SET NX), atomically
        
        Returns:
            True if this call created the key, False if it already existed,
            None when Redis is unreachable
        """
        if not self.redis_client:
            return None
        
        try:
            ttl = ttl or settings.QUIZ_CACHE_TTL
            created = self.redis_client.set(key, json.dumps(value, default=str), ex=ttl, nx=True)
            logger.debug(f"Cache add: {key} (created: {bool(created)})")
            return bool(created)
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.warning(f"Cache add error: {str(e)}")
            return None

    def health_check(self) -> Dict[str, Any]:
        """
        Check Redis health

        Quiz sessions live only in Redis, so an unreachable cache means
        sessions cannot be started even though quizzes still load.
        """
        if not self.redis_client:
            return {"status": "disabled", "connected": False}

        try:
            self.redis_client.ping()
            return {"status": "healthy", "connected": True}
        except redis.RedisError as e:
            return {"status": "unhealthy", "connected": False, "error": str(e)}


@lru_cache
def get_cache_service() -> CacheService:
    """Process-wide cache service, connected on first use"""
    return CacheService()
