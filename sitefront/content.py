"""
Content collaborator clients.

The renderers only need Post lists and tag lists per site. ApiContentRepository
fetches them from the platform REST API; MarkdownContentRepository reads them
from a directory of frontmatter markdown files (content/<site id>/<slug>.md),
which is how local development and previews run without the platform.
"""
import asyncio
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Protocol, TypeVar, Union
from urllib.parse import quote

import frontmatter
import requests
from pydantic import TypeAdapter, ValidationError

from .cache import TTLCache
from .config import get_settings
from .exceptions import ContentFetchError
from .logging import logger, metrics
from .models import Post, Site

T = TypeVar('T')
E = TypeVar('E')


class ContentRepository(Protocol):
    """Read side of the content-management collaborator"""

    async def list_posts(self, site: Site) -> List[Post]:
        ...

    async def list_top_tags(self, site: Site) -> List[str]:
        ...

    async def get_post(self, site: Site, slug: str) -> Optional[Post]:
        ...

    async def list_related_posts(self, site: Site, post: Post) -> List[Post]:
        ...

    async def list_posts_by_tag(self, site: Site, tag: str) -> List[Post]:
        ...


def top_tags(posts: List[Post], limit: int = 20) -> List[str]:
    """Tags by frequency (first appearance breaks ties), each tag once"""
    counts = Counter()
    first_seen: Dict[str, int] = {}
    for post in posts:
        for tag in dict.fromkeys(post.tags):
            counts[tag] += 1
            first_seen.setdefault(tag, len(first_seen))
    ranked = sorted(counts, key=lambda tag: (-counts[tag], first_seen[tag]))
    return ranked[:limit]


def related_posts(posts: List[Post], post: Post, limit: int = 3) -> List[Post]:
    """Other posts ranked by number of shared tags, keeping collection order on ties"""
    wanted = {tag.lower() for tag in post.tags}
    scored = []
    for index, candidate in enumerate(posts):
        if candidate.slug == post.slug:
            continue
        shared = len(wanted & {tag.lower() for tag in candidate.tags})
        if shared:
            scored.append((-shared, index, candidate))
    return [candidate for _, _, candidate in sorted(scored, key=lambda item: item[:2])][:limit]


def filter_by_tag(posts: List[Post], tag: str) -> List[Post]:
    tag = tag.lower()
    return [post for post in posts if tag in (t.lower() for t in post.tags)]


_TAGS = TypeAdapter(List[str])


class ApiContentRepository:
    """Content read from the platform's public REST endpoints"""

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None,
                 ttl: Optional[int] = None):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = settings.domain_check_timeout
        self.related_limit = settings.related_posts_limit
        self._cache = TTLCache(default_ttl=ttl or settings.content_ttl)

    def _site_url(self, site: Site, *parts: str) -> str:
        path = "/".join(quote(part, safe="") for part in parts)
        return f"{self.base_url}/public/sites/{quote(site.id, safe='')}/{path}"

    async def _get_json(self, url: str, resource: str) -> Any:
        return await self._cache.get_or_load(url, lambda: asyncio.to_thread(self._fetch, url, resource))

    def _fetch(self, url: str, resource: str) -> Any:
        try:
            response = self.session.get(url, timeout=self.timeout, headers={"Accept": "application/json"})
        except requests.RequestException as e:
            raise ContentFetchError(resource, str(e))
        if response.status_code == 404:
            return None
        if not response.ok:
            raise ContentFetchError(resource, f"HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError:
            raise ContentFetchError(resource, "response body is not JSON")

    async def list_posts(self, site: Site) -> List[Post]:
        payload = await self._get_json(self._site_url(site, "posts"), "posts")
        return self._validate_posts(payload, "posts")

    async def list_top_tags(self, site: Site) -> List[str]:
        payload = await self._get_json(self._site_url(site, "top-tags"), "top tags")
        return self._validate(_TAGS, payload or [], "top tags")

    async def get_post(self, site: Site, slug: str) -> Optional[Post]:
        payload = await self._get_json(self._site_url(site, "posts", slug), f"post '{slug}'")
        if not payload:
            return None
        return self._validate(Post, payload, f"post '{slug}'")

    async def list_related_posts(self, site: Site, post: Post) -> List[Post]:
        payload = await self._get_json(self._site_url(site, "related-posts", post.id), "related posts")
        return self._validate_posts(payload, "related posts")[:self.related_limit]

    async def list_posts_by_tag(self, site: Site, tag: str) -> List[Post]:
        payload = await self._get_json(self._site_url(site, "posts-by-tag", tag), f"tag '{tag}'")
        return self._validate_posts(payload, f"tag '{tag}'")

    @staticmethod
    def _validate_posts(payload, resource: str) -> List[Post]:
        """A post that fails validation is skipped; the rest of the list still renders"""
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ContentFetchError(resource, "expected a list of posts")
        posts = []
        for item in payload:
            try:
                posts.append(Post.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping malformed post", resource=resource,
                               slug=item.get("slug") if isinstance(item, dict) else None,
                               errors=e.error_count())
        return posts

    @staticmethod
    def _validate(schema, payload, resource: str):
        try:
            if isinstance(schema, TypeAdapter):
                return schema.validate_python(payload)
            return schema.model_validate(payload)
        except ValidationError as e:
            raise ContentFetchError(resource, f"malformed payload: {e.error_count()} errors")


# Markdown directory source

@dataclass
class Success(Generic[T]):
    value: T


@dataclass
class Failure(Generic[E]):
    error: E


Result = Union[Success[T], Failure[E]]


@dataclass
class ParseError:
    message: str
    file_path: Optional[Path] = None


def parse_date(value: Any) -> Optional[datetime]:
    """Frontmatter dates arrive as date, datetime or ISO strings"""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def parse_tags(value: Any) -> List[str]:
    if isinstance(value, list):
        return [str(tag).strip() for tag in value if str(tag).strip()]
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return []


def parse_post_file(file_path: Path, site_id: str) -> Result[Post, ParseError]:
    """Build a Post from one frontmatter markdown file"""
    try:
        document = frontmatter.load(str(file_path))
    except Exception as e:
        return Failure(ParseError(f"Failed to parse frontmatter: {e}", file_path))

    meta = document.metadata
    if meta.get("draft"):
        return Failure(ParseError("Draft post", file_path))

    slug = str(meta.get("slug") or file_path.stem)
    created = parse_date(meta.get("date")) or datetime.fromtimestamp(file_path.stat().st_mtime, tz=timezone.utc)

    try:
        post = Post(
            id=str(meta.get("id") or f"{site_id}:{slug}"),
            site_id=site_id,
            slug=slug,
            title=str(meta.get("title") or slug.replace("-", " ").title()),
            content=document.content,
            tags=parse_tags(meta.get("tags", [])),
            image_url=meta.get("image"),
            author=meta.get("author"),
            meta_title=meta.get("meta_title"),
            meta_description=meta.get("meta_description") or meta.get("description"),
            og_image=meta.get("og_image"),
            canonical_url=meta.get("canonical_url"),
            noindex=bool(meta.get("noindex", False)),
            source=meta.get("source", "manual"),
            created_at=created,
            updated_at=parse_date(meta.get("updated")) or created,
        )
    except ValidationError as e:
        return Failure(ParseError(f"Invalid post metadata: {e.error_count()} errors", file_path))
    return Success(post)


class MarkdownContentRepository:
    """Posts read from content/<site id>/*.md, newest first"""

    def __init__(self, directory: Optional[Path] = None, ttl: Optional[int] = None):
        settings = get_settings()
        self.directory = Path(directory or settings.content_directory)
        self.related_limit = settings.related_posts_limit
        self._cache = TTLCache(default_ttl=ttl or settings.content_ttl)

    def _load_site(self, site_id: str) -> List[Post]:
        site_dir = self.directory / site_id
        if not site_dir.is_dir():
            return []

        posts = []
        for file_path in sorted(site_dir.glob("*.md")):
            match parse_post_file(file_path, site_id):
                case Success(post):
                    posts.append(post)
                case Failure(error):
                    logger.warning("Skipping post file", file=str(error.file_path), error=error.message)

        posts.sort(key=lambda p: p.created_at, reverse=True)
        return posts

    async def list_posts(self, site: Site) -> List[Post]:
        posts = await self._cache.get_or_load(
            site.id, lambda: asyncio.to_thread(self._load_site, site.id)
        )
        await metrics.set_gauge("posts_loaded", len(posts), labels={"site": site.id})
        return posts

    async def list_top_tags(self, site: Site) -> List[str]:
        return top_tags(await self.list_posts(site))

    async def get_post(self, site: Site, slug: str) -> Optional[Post]:
        return next((post for post in await self.list_posts(site) if post.slug == slug), None)

    async def list_related_posts(self, site: Site, post: Post) -> List[Post]:
        return related_posts(await self.list_posts(site), post, self.related_limit)

    async def list_posts_by_tag(self, site: Site, tag: str) -> List[Post]:
        return filter_by_tag(await self.list_posts(site), tag)
