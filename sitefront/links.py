"""
Internal link rewriting and post URL construction under a tenant base path
"""
import re
from urllib.parse import quote
from typing import Optional

from bs4 import BeautifulSoup

from .models import Site, normalize_base_path

# First path segments that never name a post in root URL format
RESERVED_SEGMENTS = ("tag", "topics", "admin", "editor", "api", "bv_api")


def rewrite_internal_link(href: Optional[str], base_path: Optional[str]) -> Optional[str]:
    """
    Prefix a root-relative href with the tenant base path.

    Examples (with base_path="/blog"):
        "/my-post"             -> "/blog/my-post"
        "/blog/my-post"        -> "/blog/my-post"
        "/blog?utm=1"          -> "/blog?utm=1"
        "https://external.com" -> "https://external.com"
        "#section"             -> "#section"

    Applying the function to its own output returns the output unchanged.
    """
    if not href:
        return href

    base = (base_path or "").rstrip("/")
    if not base:
        return href

    # Only same-origin root-relative paths are candidates
    if not href.startswith("/") or href.startswith("//"):
        return href

    if (
        href == base
        or href.startswith(base + "/")
        or href.startswith(base + "?")
        or href.startswith(base + "#")
    ):
        return href

    return f"{base}{href}"


def get_post_url_format(site: Site) -> str:
    """Return 'root' or 'with-prefix' (the default for any other value)"""
    return "root" if site.post_url_format == "root" else "with-prefix"


def get_post_url(slug: str, site: Site) -> str:
    """Site-relative path of a post, before base-path prefixing"""
    if get_post_url_format(site) == "root":
        return f"/{slug}"
    return f"/post/{slug}"


def extract_post_slug(path: str) -> Optional[str]:
    """
    Return the post slug a path points at, in either URL format, or None.

    "/post/hello" and "/hello" both give "hello"; "/tag/x", "/admin" and
    multi-segment paths give None.
    """
    clean = re.sub(r"^/", "", path).split("?")[0].split("#")[0]

    if clean.startswith("post/"):
        return clean[len("post/"):] or None

    first_segment = clean.split("/")[0]
    if not first_segment or first_segment in RESERVED_SEGMENTS:
        return None

    if "/" not in clean:
        return clean

    return None


def rewrite_html_links(html: str, base_path: Optional[str]) -> str:
    """Pass every anchor href in an HTML fragment through rewrite_internal_link"""
    if not html or not normalize_base_path(base_path):
        return html

    soup = BeautifulSoup(html, "html.parser")
    changed = False
    for anchor in soup.find_all("a", href=True):
        rewritten = rewrite_internal_link(anchor["href"], base_path)
        if rewritten != anchor["href"]:
            anchor["href"] = rewritten
            changed = True

    return str(soup) if changed else html


def tag_path(tag: str) -> str:
    """Site-relative path of a tag archive"""
    return f"/tag/{quote(tag, safe='')}"
