"""
Per-tenant sitemap.xml: the home page, every indexable post and the top tag
archives, with URLs built under the tenant's base path
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .cache import TTLCache
from .content import ContentRepository
from .context import BasePathContext
from .links import get_post_url, tag_path
from .logging import logger, metrics
from .models import Post

SITEMAP_PATH = "/sitemap.xml"
SITEMAP_TTL = 15 * 60
SITEMAP_TAG_LIMIT = 20


@dataclass
class SitemapEntry:
    loc: str
    changefreq: str
    priority: str
    lastmod: Optional[str] = None


def _day(post: Post) -> Optional[str]:
    stamp = post.updated_at or post.created_at
    return stamp.date().isoformat() if stamp else None


def sitemap_entries(context: BasePathContext, posts: Sequence[Post],
                    tags: Sequence[str]) -> List[SitemapEntry]:
    """Newest post first, as the collaborator orders them; noindex posts are left out"""
    site = context.site
    indexable = [post for post in posts if not post.noindex]
    home_lastmod = (_day(indexable[0]) if indexable else None) or datetime.now(timezone.utc).date().isoformat()

    entries = [SitemapEntry(context.get_full_url("/"), "daily", "1.0", home_lastmod)]
    for post in indexable:
        loc = post.canonical_url or context.get_full_url(get_post_url(post.slug, site))
        entries.append(SitemapEntry(loc, "weekly", "0.8", _day(post)))
    for tag in list(tags)[:SITEMAP_TAG_LIMIT]:
        entries.append(SitemapEntry(context.get_full_url(tag_path(tag)), "weekly", "0.6"))
    return entries


class SitemapService:
    """
    Sitemap entries cached per site and base URL, so a site's primary domain
    and each alias domain get their own URLs. Failed content fetches raise
    ContentFetchError and are not cached.
    """

    def __init__(self, ttl: int = SITEMAP_TTL):
        self._cache = TTLCache(default_ttl=ttl)

    @staticmethod
    def cache_key(context: BasePathContext) -> str:
        host = context.hostname or context.site.domain
        return f"{context.site.id}:{context.scheme}://{host}{context.base_path}"

    async def entries(self, context: BasePathContext, content: ContentRepository) -> List[SitemapEntry]:
        async def load() -> List[SitemapEntry]:
            posts, tags = await asyncio.gather(
                content.list_posts(context.site), content.list_top_tags(context.site)
            )
            entries = sitemap_entries(context, posts or [], tags or [])
            logger.info("Sitemap generated", entries=len(entries))
            await metrics.increment("sitemaps_generated_total")
            return entries

        return await self._cache.get_or_load(self.cache_key(context), load)
