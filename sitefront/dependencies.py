"""
Dependency injection container for the collaborator clients
"""
from functools import lru_cache

from .config import get_settings
from .content import ApiContentRepository, ContentRepository, MarkdownContentRepository
from .domain_check import DomainCheckClient, DomainResolver
from .sitemap import SitemapService


class ServiceContainer:
    """Lazily built, process-wide collaborator clients"""

    def __init__(self):
        self._instances = {}
        self._settings = get_settings()

    @property
    def settings(self):
        return self._settings

    @property
    def domain_resolver(self) -> DomainResolver:
        """Cached, deduplicating domain-check client"""
        if 'domain_resolver' not in self._instances:
            self._instances['domain_resolver'] = DomainCheckClient()
        return self._instances['domain_resolver']

    @property
    def content_repository(self) -> ContentRepository:
        """REST or markdown-directory content, per settings.content_source"""
        if 'content_repository' not in self._instances:
            if self._settings.content_source == "markdown":
                repository = MarkdownContentRepository(self._settings.content_directory)
            else:
                repository = ApiContentRepository()
            self._instances['content_repository'] = repository
        return self._instances['content_repository']

    @property
    def sitemap_service(self) -> SitemapService:
        if 'sitemap_service' not in self._instances:
            self._instances['sitemap_service'] = SitemapService()
        return self._instances['sitemap_service']

    def reset(self):
        """Reset all instances (useful for testing)"""
        self._instances.clear()


@lru_cache()
def get_container() -> ServiceContainer:
    """Get the global service container"""
    return ServiceContainer()


# FastAPI dependency functions
def get_domain_resolver() -> DomainResolver:
    return get_container().domain_resolver


def get_content_repository() -> ContentRepository:
    return get_container().content_repository


def get_sitemap_service() -> SitemapService:
    return get_container().sitemap_service
