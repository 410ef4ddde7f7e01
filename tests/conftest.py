"""
Shared fixtures: tenant sites, posts and in-memory collaborators
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from sitefront.content import filter_by_tag, related_posts, top_tags
from sitefront.context import BasePathContext
from sitefront.models import DomainCheckResult, Post, Site


def make_post(slug: str, tags: Optional[List[str]] = None, days_ago: int = 0, **fields) -> Post:
    created = datetime(2025, 6, 1, tzinfo=timezone.utc) - timedelta(days=days_ago)
    return Post(
        id=fields.pop("id", f"id-{slug}"),
        site_id=fields.pop("site_id", "s1"),
        slug=slug,
        title=fields.pop("title", slug.replace("-", " ").title()),
        content=fields.pop("content", f"Body of **{slug}** with a [link](/about)."),
        tags=tags or [],
        created_at=created,
        **fields,
    )


class InMemoryContent:
    """Content collaborator over fixed per-site post lists"""

    def __init__(self, posts: Optional[Dict[str, List[Post]]] = None):
        self.posts = posts or {}
        self.calls = []

    async def list_posts(self, site: Site) -> List[Post]:
        self.calls.append(("posts", site.id))
        return list(self.posts.get(site.id, []))

    async def list_top_tags(self, site: Site) -> List[str]:
        self.calls.append(("top-tags", site.id))
        return top_tags(self.posts.get(site.id, []))

    async def get_post(self, site: Site, slug: str) -> Optional[Post]:
        self.calls.append(("post", site.id, slug))
        return next((p for p in self.posts.get(site.id, []) if p.slug == slug), None)

    async def list_related_posts(self, site: Site, post: Post) -> List[Post]:
        return related_posts(self.posts.get(site.id, []), post)

    async def list_posts_by_tag(self, site: Site, tag: str) -> List[Post]:
        return filter_by_tag(self.posts.get(site.id, []), tag)


@pytest.fixture
def news_site() -> Site:
    return Site(id="s1", domain="blog.example.com", base_path="/blog", site_type="news", title="Daily Wire")


@pytest.fixture
def root_site() -> Site:
    return Site(id="s2", domain="www.cafe.test", site_type="restaurant", title="Cafe", post_url_format="root")


@pytest.fixture
def news_context(news_site) -> BasePathContext:
    return BasePathContext.for_site(news_site, hostname="blog.example.com")


@pytest.fixture
def sample_posts() -> List[Post]:
    return [
        make_post("breaking-story", ["politics", "world"], days_ago=0, image_url="https://cdn.test/a.jpg"),
        make_post("market-update", ["economy"], days_ago=1),
        make_post("election-recap", ["politics"], days_ago=2),
        make_post("travel-notes", ["world", "travel"], days_ago=3),
    ]


@pytest.fixture
def domain_answers(news_site, root_site) -> Dict[str, DomainCheckResult]:
    return {
        "admin.example.com": DomainCheckResult(is_admin=True),
        "blog.example.com": DomainCheckResult(site=news_site, allow_admin_access=True, site_id="s1"),
        "www.cafe.test": DomainCheckResult(site=root_site, site_id="s2"),
    }
