"""
Hybrid in-memory + Redis rate limiting utilities
Counts are kept in process memory and synced to Redis periodically
"""

import logging
import os
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)

# Redis connection
redis_client: Optional[redis.Redis] = None

# Format: {key: {'count': int, 'reset_time': int, 'last_redis_sync': int}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

MEMORY_CACHE_SYNC_INTERVAL = 10  # Sync to Redis every 10 seconds
MEMORY_CACHE_CLEANUP_INTERVAL = 60  # Clean up expired entries every 60 seconds
last_cleanup_time = 0


def _mask_url(redis_url: str) -> str:
    if "@" not in redis_url:
        return "****"
    url_parts = redis_url.split("@")
    protocol = url_parts[0].split(":")[0]
    return f"{protocol}:****@{url_parts[1]}"


def get_redis_client() -> redis.Redis:
    """
    Get or create the shared Redis client.
    Uses REDIS_URL when set, otherwise the individual REDIS_* variables.
    """
    global redis_client

    if redis_client is None:
        logger.info("🔄 Initializing Redis connection...")

        redis_url = os.getenv("REDIS_URL")
        common = {
            "decode_responses": True,
            "socket_connect_timeout": 5,
            "socket_timeout": 10,
            "retry_on_timeout": True,
            "health_check_interval": 30,
            "max_connections": 20,
        }

        if redis_url:
            logger.info(f"📡 Using Redis URL connection: {_mask_url(redis_url)}")
            client = redis.from_url(redis_url, **common)
        else:
            redis_host = os.getenv("REDIS_HOST", "localhost")
            redis_port = int(os.getenv("REDIS_PORT", "6379"))
            redis_ssl = os.getenv("REDIS_SSL", "false").lower() == "true"
            logger.info(
                f"📡 Using Redis at {redis_host}:{redis_port} (SSL: {'on' if redis_ssl else 'off'})"
            )
            client = redis.Redis(
                host=redis_host,
                port=redis_port,
                password=os.getenv("REDIS_PASSWORD"),
                db=int(os.getenv("REDIS_DB", "0")),
                ssl=redis_ssl,
                **common,
            )

        try:
            client.ping()
        except Exception as e:
            logger.error(f"❌ Failed to connect to Redis: {str(e)}")
            raise

        redis_client = client
        logger.info("Redis connected successfully")

    return redis_client


def cleanup_expired_cache():
    """Remove expired entries from memory cache"""
    global last_cleanup_time
    current_time = int(time.time())

    if current_time - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return

    with cache_lock:
        expired_keys = [
            k for k, v in memory_cache.items() if current_time >= v.get("reset_time", 0)
        ]
        for k in expired_keys:
            del memory_cache[k]

        if expired_keys:
            logger.debug(f"🧹 Cleaned up {len(expired_keys)} expired rate limit entries")

    last_cleanup_time = current_time


def check_rate_limit(
    key: str, limit: int, window_seconds: int, redis_client: redis.Redis
) -> tuple[bool, int, int]:
    """Check if rate limit is exceeded using the hybrid in-memory + Redis approach

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    try:
        current_time = int(time.time())
        cleanup_expired_cache()

        with cache_lock:
            if key not in memory_cache:
                # Initialize from Redis if exists, otherwise create new window
                try:
                    redis_count = redis_client.get(key)
                    redis_ttl = redis_client.ttl(key)
                except Exception as e:
                    logger.warning(f"⚠️ Failed to load from Redis, using memory only: {e}")
                    redis_count, redis_ttl = None, 0

                if redis_count and redis_ttl > 0:
                    memory_cache[key] = {
                        "count": int(redis_count),
                        "reset_time": current_time + redis_ttl,
                        "last_redis_sync": current_time,
                    }
                else:
                    memory_cache[key] = {
                        "count": 0,
                        "reset_time": current_time + window_seconds,
                        "last_redis_sync": current_time,
                    }

            cache_entry = memory_cache[key]

            if current_time >= cache_entry["reset_time"]:
                cache_entry["count"] = 0
                cache_entry["reset_time"] = current_time + window_seconds
                cache_entry["last_redis_sync"] = 0

            is_allowed = cache_entry["count"] < limit
            if is_allowed:
                cache_entry["count"] += 1

            # Sync to Redis periodically (not on every request)
            if current_time - cache_entry.get("last_redis_sync", 0) >= MEMORY_CACHE_SYNC_INTERVAL:
                try:
                    redis_client.set(key, cache_entry["count"], ex=window_seconds)
                    cache_entry["last_redis_sync"] = current_time
                    logger.debug(f"📡 Synced {key} to Redis: {cache_entry['count']}/{limit}")
                except Exception as e:
                    logger.warning(f"⚠️ Failed to sync to Redis: {e}")

            ttl = cache_entry["reset_time"] - current_time
            return is_allowed, cache_entry["count"], max(0, ttl)

    except Exception as e:
        logger.error(f"❌ Rate limit check failed: {str(e)}")
        logger.warning("🔒 Denying request due to rate limiting error (fail-closed mode)")
        return False, limit, 0


async def rate_limit_dependency(
    request: Request,
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    use_ip: bool = True,
):
    """
    FastAPI dependency for rate limiting

    Args:
        request: FastAPI request object
        limit: Maximum requests allowed
        window_seconds: Time window in seconds
        key_prefix: Prefix for Redis key
        use_ip: If True, use client IP in key (per-IP limit), otherwise global
    """
    try:
        client = get_redis_client()

        if use_ip:
            client_ip = request.client.host if request.client else "unknown"
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                client_ip = forwarded.split(",")[0].strip()
            key = f"{key_prefix}:{client_ip}"
        else:
            key = f"{key_prefix}:global"

        is_allowed, current_count, ttl = check_rate_limit(key, limit, window_seconds, client)

        if not is_allowed:
            logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {current_count}/{limit} requests used")
            raise HTTPException(
                status_code=429,
                detail={
                    "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                    "retry_after": ttl,
                    "limit": limit,
                    "window_seconds": window_seconds,
                },
                headers={"Retry-After": str(ttl)},
            )

        request.state.rate_limit_remaining = limit - current_count
        request.state.rate_limit_limit = limit
        request.state.rate_limit_reset = int(time.time()) + ttl

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Rate limiting error: {str(e)}")
        logger.warning("🔒 Denying request due to rate limiting error (fail-closed mode)")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rate limiting service temporarily unavailable",
        ) from e


def create_rate_limiter(
    limit: int, window_seconds: int, key_prefix: str = "rate_limit", use_ip: bool = True
):
    """
    Create a rate limiter dependency with specific parameters

    Example usage:
        rate_limit_sessions = create_rate_limiter(limit=20, window_seconds=60, key_prefix="auth_session")

        @router.post("/session")
        async def create_session(_: None = Depends(rate_limit_sessions)):
            ...
    """

    async def rate_limiter(request: Request):
        return await rate_limit_dependency(request, limit, window_seconds, key_prefix, use_ip)

    return rate_limiter
