"""
HTTP-level tests: tenant routing, rendered pages and the operational API
"""
import pytest
from fastapi.testclient import TestClient

from conftest import InMemoryContent, make_post
from sitefront.dependencies import get_content_repository, get_domain_resolver
from sitefront.domain_check import StaticDomainResolver
from sitefront.exceptions import ContentFetchError
from sitefront.main import app, v1_app

API = "/_sitefront/api/v1"


class UnavailableContent(InMemoryContent):
    async def list_posts(self, site):
        raise ContentFetchError("posts", "collaborator down")


@pytest.fixture
def resolver(domain_answers):
    return StaticDomainResolver(domain_answers)


@pytest.fixture
def content(sample_posts):
    return InMemoryContent({
        "s1": sample_posts,
        "s2": [make_post("daily-special", ["menu"], site_id="s2", title="Daily Special")],
    })


@pytest.fixture
def client(resolver, content):
    for target in (app, v1_app):
        target.dependency_overrides[get_domain_resolver] = lambda: resolver
        target.dependency_overrides[get_content_repository] = lambda: content
    with TestClient(app) as test_client:
        yield test_client
    for target in (app, v1_app):
        target.dependency_overrides.clear()


def get(client, host, path, **kwargs):
    return client.get(path, headers={"host": host}, **kwargs)


def test_admin_login_on_root_without_domain_check(client, resolver):
    response = get(client, "admin.example.com", "/")
    assert response.status_code == 200
    assert 'data-view="login"' in response.text
    assert resolver.calls == []


def test_tenant_home_under_base_path(client):
    response = get(client, "blog.example.com", "/blog")
    assert response.status_code == 200
    assert "Top stories" in response.text
    assert 'href="/blog/post/breaking-story"' in response.text
    assert 'href="/blog/tag/politics"' in response.text
    assert ":root {" in response.text
    assert "X-Request-ID" in response.headers
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_site_admin_under_base_path(client):
    response = get(client, "blog.example.com", "/blog/admin/dashboard")
    assert response.status_code == 200
    assert 'data-view="dashboard"' in response.text
    assert 'data-site-id="s1"' in response.text


def test_unknown_domain_renders_site_not_found(client):
    response = get(client, "unknown.example.com", "/some/page")
    assert response.status_code == 404
    assert "Site not found" in response.text
    assert "unknown.example.com" in response.text


def test_paths_outside_base_path_redirect(client):
    response = get(client, "blog.example.com", "/post/hello?utm=1", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/blog/post/hello?utm=1"


def test_post_page(client):
    response = get(client, "blog.example.com", "/blog/post/market-update")
    assert response.status_code == 200
    assert "Market Update" in response.text
    assert 'application/ld+json' in response.text
    assert '<link rel="canonical" href="https://blog.example.com/blog/post/market-update">' in response.text


def test_missing_post_is_themed_404(client):
    response = get(client, "blog.example.com", "/blog/post/nope")
    assert response.status_code == 404
    assert 'data-state="not-found"' in response.text
    assert 'href="/blog"' in response.text


def test_tag_page(client):
    response = get(client, "blog.example.com", "/blog/tag/politics")
    assert response.status_code == 200
    assert 'data-post-card="breaking-story"' in response.text
    assert 'data-post-card="market-update"' not in response.text


def test_root_url_format_site(client):
    missing = get(client, "www.cafe.test", "/menu-page-that-does-not-exist")
    assert missing.status_code == 404

    response = get(client, "www.cafe.test", "/daily-special")
    assert response.status_code == 200
    assert "Daily Special" in response.text


def test_content_failure_renders_loading_state(resolver):
    app.dependency_overrides[get_domain_resolver] = lambda: resolver
    app.dependency_overrides[get_content_repository] = lambda: UnavailableContent()
    try:
        with TestClient(app) as test_client:
            response = get(test_client, "blog.example.com", "/blog")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 200
    assert 'data-state="loading"' in response.text


def test_health_and_metrics(client):
    get(client, "blog.example.com", "/blog")

    health = client.get(f"{API}/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    metrics = client.get(f"{API}/metrics").json()["performance"]
    assert any(key.startswith("route_decisions_total") for key in metrics["counters"])


def test_theme_catalogue(client):
    themes = client.get(f"{API}/themes").json()
    assert {t["id"] for t in themes["themes"]} == {"blog", "news", "magazine", "portfolio", "restaurant", "crypto"}

    everything = client.get(f"{API}/themes", params={"include_disabled": True}).json()
    assert len(everything["themes"]) == 7

    news = client.get(f"{API}/themes/news").json()
    assert news["default_tokens"]["heading_font"] == "editorial"


def test_unknown_theme_is_json_404(client):
    response = client.get(f"{API}/themes/nope")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "THEME_NOT_FOUND"


def test_merged_tokens_endpoint(client):
    response = client.get(f"{API}/themes/news/tokens", params={"primaryColor": "#000000"})
    tokens = response.json()["tokens"]
    assert tokens["primaryColor"] == "#000000"
    assert tokens["headingFont"] == "editorial"


def test_mistyped_token_query_is_ignored(client):
    response = client.get(f"{API}/themes/news/tokens", params={"postsPerPage": "abc"})
    assert response.status_code == 200
    body = response.json()
    assert body["overrides"] == {}
    assert body["tokens"]["postsPerPage"] == 12


def test_resolve_endpoint(client):
    response = client.get(f"{API}/resolve", params={"hostname": "blog.example.com", "path": "/blog/admin/dashboard"})
    body = response.json()
    assert body["kind"] == "site-admin"
    assert body["effective_path"] == "/admin/dashboard"
    assert body["base_path"] == "/blog"


def test_site_lookup_endpoint(client):
    body = client.get(f"{API}/sites/blog.example.com").json()
    assert body["siteId"] == "s1"
    assert body["allowAdminAccess"] is True
    assert body["site"]["basePath"] == "/blog"


def test_unknown_site_is_json_404(client):
    response = client.get(f"{API}/sites/nowhere.test")
    assert response.status_code == 404
    assert response.json()["error"] == "SITE_NOT_FOUND"


def test_post_urls_redirect_to_the_site_format(client):
    response = get(client, "blog.example.com", "/blog/market-update?ref=x", follow_redirects=False)
    assert response.status_code == 301
    assert response.headers["location"] == "/blog/post/market-update?ref=x"

    response = get(client, "www.cafe.test", "/post/daily-special", follow_redirects=False)
    assert response.status_code == 301
    assert response.headers["location"] == "/daily-special"


def test_sitemap_lists_home_posts_and_tags(client, content):
    response = get(client, "blog.example.com", "/blog/sitemap.xml")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert response.text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<loc>https://blog.example.com/blog/</loc>" in response.text
    assert "<loc>https://blog.example.com/blog/post/market-update</loc>" in response.text
    assert "<loc>https://blog.example.com/blog/tag/politics</loc>" in response.text

    get(client, "blog.example.com", "/blog/sitemap.xml")
    assert content.calls.count(("posts", "s1")) == 1


def test_sitemap_on_root_format_site(client):
    response = get(client, "www.cafe.test", "/sitemap.xml")
    assert response.status_code == 200
    assert "<loc>https://www.cafe.test/daily-special</loc>" in response.text
