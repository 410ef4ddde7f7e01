"""
Client for the domain-check collaborator endpoint
"""
import asyncio
from typing import Optional, Protocol

import requests
from pydantic import ValidationError

from .cache import TTLCache
from .config import get_settings
from .exceptions import DomainCheckError
from .logging import logger, metrics
from .models import DomainCheckResult

# Not-found answers are reused for a shorter time than positive ones
NEGATIVE_TTL = 60


class DomainResolver(Protocol):
    """Anything that can answer a domain check"""

    async def check(self, hostname: str) -> Optional[DomainCheckResult]:
        ...


class DomainCheckClient:
    """
    Looks up hostnames through GET {api_base_url}/domain-check?hostname=<host>.

    Answers are cached per hostname and concurrent lookups of one hostname share
    a single request. Transport failures, non-2xx statuses, empty bodies and
    unparseable payloads all come back as None after being logged.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        ttl: Optional[int] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        settings = get_settings()
        self.url = (base_url or settings.api_base_url).rstrip("/") + settings.domain_check_path
        self.ttl = ttl or settings.domain_check_ttl
        self.timeout = timeout or settings.domain_check_timeout
        self.session = session or requests.Session()
        self._cache = TTLCache(default_ttl=self.ttl)

    async def check(self, hostname: str) -> Optional[DomainCheckResult]:
        hostname = hostname.strip().lower()
        try:
            result = await self._cache.get_or_load(
                hostname,
                lambda: self._lookup(hostname),
                ttl_for=lambda value: self.ttl if value is not None else NEGATIVE_TTL,
            )
        except DomainCheckError as e:
            logger.error("Domain check failed", hostname=hostname, error=e.message)
            await metrics.increment("domain_check_failures_total")
            return None

        await metrics.increment(
            "domain_check_total",
            labels={"outcome": "miss" if result is None else "hit"},
        )
        return result

    def is_pending(self, hostname: str) -> bool:
        return self._cache.pending(hostname.strip().lower())

    async def invalidate(self, hostname: Optional[str] = None):
        if hostname is None:
            await self._cache.clear()
        else:
            await self._cache.delete(hostname.strip().lower())

    async def _lookup(self, hostname: str) -> Optional[DomainCheckResult]:
        logger.debug("Domain check request", hostname=hostname, url=self.url)
        payload = await asyncio.to_thread(self._fetch, hostname)
        if not payload:
            return None
        try:
            return DomainCheckResult.model_validate(payload)
        except ValidationError as e:
            raise DomainCheckError(hostname, f"malformed response: {e.error_count()} errors")

    def _fetch(self, hostname: str):
        try:
            response = self.session.get(
                self.url,
                params={"hostname": hostname},
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        except requests.RequestException as e:
            raise DomainCheckError(hostname, str(e))

        if response.status_code == 404:
            return None
        if not response.ok:
            raise DomainCheckError(hostname, f"HTTP {response.status_code}")
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise DomainCheckError(hostname, "response body is not JSON")


class StaticDomainResolver:
    """Resolver over a fixed hostname table, for local development and tests"""

    def __init__(self, answers: Optional[dict] = None):
        self.answers = {k.lower(): v for k, v in (answers or {}).items()}
        self.calls = []

    async def check(self, hostname: str) -> Optional[DomainCheckResult]:
        hostname = hostname.strip().lower()
        self.calls.append(hostname)
        answer = self.answers.get(hostname)
        if answer is None or isinstance(answer, DomainCheckResult):
            return answer
        return DomainCheckResult.model_validate(answer)
