"""
Unit tests for sitemap entries and their per-base-URL cache
"""
import asyncio

from conftest import InMemoryContent, make_post
from sitefront.context import BasePathContext
from sitefront.main import templates
from sitefront.models import Site
from sitefront.sitemap import SitemapService, sitemap_entries


def test_entries_cover_home_posts_and_tags(news_context):
    posts = [
        make_post("fresh", ["R&D"], days_ago=0),
        make_post("hidden", noindex=True),
        make_post("moved", canonical_url="https://elsewhere.test/moved"),
    ]
    entries = sitemap_entries(news_context, posts, ["R&D", "world"])

    assert [e.loc for e in entries] == [
        "https://blog.example.com/blog/",
        "https://blog.example.com/blog/post/fresh",
        "https://elsewhere.test/moved",
        "https://blog.example.com/blog/tag/R%26D",
        "https://blog.example.com/blog/tag/world",
    ]
    assert entries[0].lastmod == "2025-06-01"
    assert entries[0].priority == "1.0"
    assert entries[-1].lastmod is None


def test_empty_site_still_lists_home(news_context):
    entries = sitemap_entries(news_context, [], [])
    assert len(entries) == 1
    assert entries[0].lastmod


def test_cache_is_per_base_url(news_site):
    content = InMemoryContent({"s1": [make_post("a")]})
    service = SitemapService()
    primary = BasePathContext.for_site(news_site, hostname="blog.example.com")
    alias = BasePathContext.for_site(news_site, is_alias_domain=True, hostname="news.example.org")

    async def scenario():
        first = await service.entries(primary, content)
        await service.entries(primary, content)
        other = await service.entries(alias, content)
        return first, other

    first, other = asyncio.run(scenario())
    assert first[1].loc == "https://blog.example.com/blog/post/a"
    assert other[1].loc == "https://news.example.org/post/a"
    assert content.calls.count(("posts", "s1")) == 2


def test_template_escapes_xml():
    site = Site(id="s9", domain="a.test")
    context = BasePathContext.for_site(site)
    entries = sitemap_entries(context, [make_post("x", canonical_url="https://a.test/?a=1&b=2")], [])

    xml = templates.get_template("sitemap.xml").render(entries=entries)
    assert "<loc>https://a.test/?a=1&amp;b=2</loc>" in xml
    assert xml.count("<url>") == 2
