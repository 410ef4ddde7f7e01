"""
Unit tests for the base-path context
"""
import pytest

from sitefront.context import (
    BasePathContext, base_path_provider, get_base_path_context, get_current_base_path,
    get_current_site,
)
from sitefront.exceptions import BasePathContextError
from sitefront.logging import tenant_var
from sitefront.models import Site


def test_accessors_fail_loudly_outside_provider():
    for accessor in (get_base_path_context, get_current_site, get_current_base_path):
        with pytest.raises(BasePathContextError) as exc_info:
            accessor()
        assert exc_info.value.status_code == 500


def test_provider_publishes_and_resets(news_context):
    with base_path_provider(news_context):
        assert get_current_site().id == "s1"
        assert get_current_base_path() == "/blog"
        assert tenant_var.get() == {"site_id": "s1", "hostname": "blog.example.com"}
    assert tenant_var.get() is None
    with pytest.raises(BasePathContextError):
        get_base_path_context()


def test_alias_domain_has_no_base_path(news_site):
    context = BasePathContext.for_site(news_site, is_alias_domain=True, hostname="news.test")
    assert context.base_path == ""
    assert context.prefix_path("/post/x") == "/post/x"
    assert context.home_url == "/"


def test_prefix_path_and_full_url(news_context):
    assert news_context.prefix_path("/post/x") == "/blog/post/x"
    assert news_context.prefix_path("post/x") == "/blog/post/x"
    assert news_context.prefix_path("/blog/post/x") == "/blog/post/x"
    assert news_context.prefix_path("https://x.com") == "https://x.com"
    assert news_context.get_full_url("/tag/a") == "https://blog.example.com/blog/tag/a"
    assert news_context.home_url == "/blog"


def test_base_path_is_normalized():
    site = Site(id="x", domain="X.Test", base_path="docs/")
    context = BasePathContext.for_site(site)
    assert context.base_path == "/docs"
    assert site.domain == "x.test"
    assert Site(id="y", domain="y.test", base_path="/").base_path is None
