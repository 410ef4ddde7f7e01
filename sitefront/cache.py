"""
In-memory caching with TTL and in-flight request de-duplication
"""
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
import asyncio
import time

_MISSING = object()


class TTLCache:
    """Async-safe in-memory cache with TTL support"""

    def __init__(self, default_ttl: int = 300):
        self._cache: Dict[str, Tuple[Any, float]] = {}
        self._default_ttl = default_ttl
        self._lock = asyncio.Lock()
        self._inflight: Dict[str, asyncio.Future] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        """Get value from cache if not expired"""
        async with self._lock:
            if key in self._cache:
                value, expiry = self._cache[key]
                if time.monotonic() < expiry:
                    return value
                del self._cache[key]
            return default

    async def set(self, key: str, value: Any, ttl: Optional[float] = None):
        """Set value in cache with TTL"""
        ttl = ttl or self._default_ttl
        expiry = time.monotonic() + ttl
        async with self._lock:
            self._cache[key] = (value, expiry)

    async def delete(self, key: str):
        """Remove key from cache"""
        async with self._lock:
            self._cache.pop(key, None)

    async def clear(self):
        """Clear all cache entries"""
        async with self._lock:
            self._cache.clear()

    def pending(self, key: str) -> bool:
        """A load for key is in flight"""
        return key in self._inflight

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl_for: Optional[Callable[[Any], Optional[float]]] = None,
    ) -> Any:
        """
        Return the cached value or run loader once for all concurrent callers.

        Callers arriving while a load for the same key is in flight await that
        load instead of starting another. ttl_for maps the loaded value to its
        TTL; returning 0 skips caching. Failed loads are never cached and their
        exception reaches every waiter. When the caller running the load is
        cancelled, waiters start the load again instead of failing.
        """
        while True:
            cached = await self.get(key, _MISSING)
            if cached is not _MISSING:
                return cached

            pending = self._inflight.get(key)
            if pending is None:
                break
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                if not pending.cancelled():
                    # This waiter itself was cancelled
                    raise

        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await loader()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unawaited future does not log a warning
            future.exception()
            raise
        else:
            ttl = ttl_for(value) if ttl_for else self._default_ttl
            if ttl:
                await self.set(key, value, ttl)
            future.set_result(value)
            return value
        finally:
            self._inflight.pop(key, None)
