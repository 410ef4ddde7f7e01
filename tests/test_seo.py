"""
Unit tests for SEO metadata and JSON-LD
"""
import json

from conftest import make_post
from sitefront.context import BasePathContext
from sitefront.models import Site
from sitefront.seo import build_json_ld, build_seo_meta, json_ld_script

SITE = Site(id="s1", domain="blog.example.com", base_path="/blog", title="Daily Wire",
            meta_description="News every day")


def test_home_meta():
    meta = build_seo_meta(SITE, hostname="blog.example.com")
    assert meta.title == "Daily Wire"
    assert meta.description == "News every day"
    assert meta.canonical_url == "https://blog.example.com/blog"


def test_post_meta_falls_back_to_excerpt():
    post = make_post("hello", content="A " * 200)
    meta = build_seo_meta(SITE, post=post, page_path="/post/hello")
    assert meta.title == "Hello | Daily Wire"
    assert len(meta.description) <= 160
    assert meta.canonical_url == "https://blog.example.com/blog/post/hello"
    assert meta.og_type == "article"


def test_post_overrides_win():
    post = make_post("hello", meta_title="Custom", meta_description="Desc",
                     canonical_url="https://elsewhere.test/x", og_image="https://cdn.test/og.png",
                     noindex=True)
    meta = build_seo_meta(SITE, post=post, page_path="/post/hello")
    assert (meta.title, meta.description) == ("Custom", "Desc")
    assert meta.canonical_url == "https://elsewhere.test/x"
    assert meta.og_image == "https://cdn.test/og.png"
    assert meta.noindex


def test_untitled_site_description():
    site = Site(id="s2", domain="x.test")
    assert build_seo_meta(site).description == "Welcome to x.test"


def test_json_ld_for_post_and_tag():
    context = BasePathContext.for_site(SITE, hostname="blog.example.com")
    post = make_post("hello", ["world"], author="Ada")

    article, crumbs = build_json_ld(context, post=post)
    assert article["@type"] == "Article"
    assert article["url"] == "https://blog.example.com/blog/post/hello"
    assert article["author"] == {"@type": "Person", "name": "Ada"}
    assert [item["name"] for item in crumbs["itemListElement"]] == ["Home", "world", "Hello"]

    collection, _ = build_json_ld(context, tag="world")
    assert collection["@type"] == "CollectionPage"
    assert collection["url"] == "https://blog.example.com/blog/tag/world"

    (website,) = build_json_ld(context)
    assert website["@type"] == "WebSite"


def test_json_ld_script_escapes_markup():
    script = json_ld_script([{"name": "</script><b>&"}])
    assert "<" not in script and ">" not in script and "&" not in script
    assert json.loads(script) == [{"name": "</script><b>&"}]
