"""
SEO metadata and schema.org structured data for public pages
"""
import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from .context import BasePathContext
from .links import get_post_url, tag_path
from .models import Post, Site, normalize_base_path
from .text import create_excerpt

DESCRIPTION_LENGTH = 160


@dataclass
class SeoMeta:
    title: str
    description: str
    canonical_url: str
    site_name: str
    og_type: str = "website"
    og_image: Optional[str] = None
    noindex: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def site_name(site: Site) -> str:
    return site.title or site.domain


def build_seo_meta(site: Site, post: Optional[Post] = None, page_path: str = "/",
                   hostname: Optional[str] = None, base_path: Optional[str] = None,
                   tag: Optional[str] = None) -> SeoMeta:
    """Title, description, canonical URL and social image for one page"""
    name = site_name(site)
    base = normalize_base_path(site.base_path if base_path is None else base_path)
    path = page_path if page_path.startswith("/") else "/" + page_path
    canonical = f"https://{hostname or site.domain}{base}{'' if base and path == '/' else path}"

    if post is not None:
        return SeoMeta(
            title=post.meta_title or f"{post.title} | {name}",
            description=(
                post.meta_description
                or create_excerpt(post.content, DESCRIPTION_LENGTH)
                or site.meta_description
                or f"Welcome to {name}"
            ),
            canonical_url=post.canonical_url or canonical,
            site_name=name,
            og_type="article",
            og_image=post.og_image or post.image_url or site.og_image,
            noindex=post.noindex,
        )

    if tag is not None:
        return SeoMeta(
            title=f"Posts tagged \"{tag}\" | {name}",
            description=f"All posts about {tag} on {name}",
            canonical_url=canonical,
            site_name=name,
            og_image=site.og_image,
        )

    return SeoMeta(
        title=site.meta_title or name,
        description=site.meta_description or f"Welcome to {name}",
        canonical_url=canonical,
        site_name=name,
        og_image=site.og_image,
    )


def _breadcrumbs(items: List[tuple]) -> Dict[str, Any]:
    return {
        "@context": "https://schema.org",
        "@type": "BreadcrumbList",
        "itemListElement": [
            {"@type": "ListItem", "position": i, "name": label, "item": url}
            for i, (label, url) in enumerate(items, start=1)
        ],
    }


def build_json_ld(context: BasePathContext, post: Optional[Post] = None,
                  tag: Optional[str] = None) -> List[Dict[str, Any]]:
    """schema.org objects for a post, a tag archive or the home page"""
    site = context.site
    name = site_name(site)
    home = context.get_full_url("/")

    if post is not None:
        url = post.canonical_url or context.get_full_url(get_post_url(post.slug, site))
        article = {
            "@context": "https://schema.org",
            "@type": "Article",
            "headline": post.title,
            "description": post.meta_description or create_excerpt(post.content, DESCRIPTION_LENGTH),
            "url": url,
            "mainEntityOfPage": {"@type": "WebPage", "@id": url},
            "publisher": {"@type": "Organization", "name": name},
        }
        if post.image_url or post.og_image:
            article["image"] = post.og_image or post.image_url
        if post.created_at:
            article["datePublished"] = post.created_at.isoformat()
        if post.updated_at or post.created_at:
            article["dateModified"] = (post.updated_at or post.created_at).isoformat()
        if post.author:
            article["author"] = {"@type": "Person", "name": post.author}
        if site.logo_url:
            article["publisher"]["logo"] = {"@type": "ImageObject", "url": site.logo_url}
        if post.tags:
            article["keywords"] = ", ".join(post.tags)

        crumbs = [("Home", home)]
        if post.tags:
            crumbs.append((post.tags[0], context.get_full_url(tag_path(post.tags[0]))))
        crumbs.append((post.title, url))
        return [article, _breadcrumbs(crumbs)]

    if tag is not None:
        url = context.get_full_url(tag_path(tag))
        return [
            {
                "@context": "https://schema.org",
                "@type": "CollectionPage",
                "name": f"Posts tagged \"{tag}\"",
                "url": url,
                "isPartOf": {"@type": "WebSite", "name": name, "url": home},
            },
            _breadcrumbs([("Home", home), (tag, url)]),
        ]

    website = {
        "@context": "https://schema.org",
        "@type": "WebSite",
        "name": name,
        "url": home,
    }
    if site.meta_description:
        website["description"] = site.meta_description
    return [website]


def json_ld_script(data: List[Dict[str, Any]]) -> str:
    """Serialize for an inline <script type="application/ld+json"> element"""
    return (
        json.dumps(data, ensure_ascii=False)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )
