"""
Per-template public renderers.

Every renderer is a plain function of (context, posts, top_tags) returning a
PageView: the Jinja2 template to render plus the values it needs. Renderers
never fetch anything and never raise for bad tenant data. Hrefs handed to the
templates have already been through the link rewriter.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from .context import BasePathContext, get_base_path_context
from .links import get_post_url, rewrite_html_links, tag_path
from .models import Post, TemplateSettings
from .router import ADMIN_NAVIGATION, RouteDecision, RouteKind, match_admin_route
from .seo import build_json_ld, build_seo_meta, json_ld_script
from .text import create_excerpt, reading_time, render_markdown
from .theme import StyleNamespace, ThemeApplier
from .theme_registry import merge_theme_tokens
from .tokens import TemplateClasses, template_classes


@dataclass
class PageView:
    template: str
    context: Dict[str, Any]
    status_code: int = 200


@dataclass
class NavLink:
    label: str
    href: str


@dataclass
class PostCard:
    """A post as listed on index pages"""
    post: Post
    href: str
    excerpt: str
    reading_time: int
    published: str = ""

    @property
    def title(self) -> str:
        return self.post.title


@dataclass
class HomeLayout:
    """Arrangement of one home page; every field is already link-rewritten"""
    hero: Optional[PostCard] = None
    grid: List[PostCard] = field(default_factory=list)
    featured: List[PostCard] = field(default_factory=list)
    headlines: List[PostCard] = field(default_factory=list)
    sections: Dict[str, List[PostCard]] = field(default_factory=dict)
    loading: bool = False
    empty: bool = False
    page: int = 1
    total_pages: int = 1

    @property
    def post_links(self) -> List[str]:
        cards = ([self.hero] if self.hero else []) + self.featured + self.headlines + self.grid
        for section in self.sections.values():
            cards.extend(section)
        return list(dict.fromkeys(card.href for card in cards))


def resolve_settings(context: BasePathContext) -> TemplateSettings:
    """Theme defaults for the site's theme (or type) under its explicit settings"""
    site = context.site
    return merge_theme_tokens(site.theme or site.site_type, site.template_settings)


def theme_css(context: BasePathContext, settings: TemplateSettings) -> str:
    """Derived custom properties as a :root rule, applied in a request-private scope"""
    with ThemeApplier(StyleNamespace(), settings, owner=context.site.id) as applier:
        return applier.namespace.css()


def post_card(post: Post, context: BasePathContext) -> PostCard:
    published = post.created_at.strftime("%B %d, %Y") if post.created_at else ""
    return PostCard(
        post=post,
        href=context.prefix_path(get_post_url(post.slug, context.site)),
        excerpt=post.meta_description or create_excerpt(post.content, 160),
        reading_time=reading_time(post.content),
        published=published,
    )


def nav_links(context: BasePathContext, top_tags: Optional[Sequence[str]], limit: int) -> List[NavLink]:
    return [NavLink(tag, context.prefix_path(tag_path(tag))) for tag in (top_tags or [])[:limit]]


def _layout_values(context: BasePathContext, settings: TemplateSettings,
                   classes: TemplateClasses, top_tags) -> Dict[str, Any]:
    site = context.site
    return {
        "site": site,
        "site_name": site.title or site.domain,
        "base_path": context.base_path,
        "home_url": context.home_url,
        "settings": settings,
        "classes": classes,
        "theme_css": theme_css(context, settings),
        "nav_tags": nav_links(context, top_tags, classes.max_nav_items),
        "top_banner": settings.top_banner_enabled and bool(settings.top_banner_message),
        "top_banner_href": context.prefix_path(settings.top_banner_link) if settings.top_banner_link else "",
        "gdpr_banner": settings.gdpr_banner_enabled,
        "year": datetime.now(timezone.utc).year,
    }


def _paginate(cards: List[PostCard], page: int, per_page: int):
    total_pages = max(1, math.ceil(len(cards) / per_page))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return cards[start:start + per_page], page, total_pages


def _split(context: BasePathContext, posts: Optional[Sequence[Post]],
           classes: TemplateClasses, page: int) -> HomeLayout:
    """Hero plus paginated grid; the hero appears on the first page only"""
    if posts is None:
        return HomeLayout(loading=True)
    if not posts:
        return HomeLayout(empty=True)

    cards = [post_card(post, context) for post in posts]
    hero = None
    if classes.show_hero:
        hero, cards = cards[0], cards[1:]
    grid, page, total_pages = _paginate(cards, page, classes.posts_per_page)
    return HomeLayout(hero=hero if page == 1 else None, grid=grid, page=page, total_pages=total_pages)


def _home_view(template: str, context: BasePathContext, posts, top_tags, page: int,
               arrange: Optional[Callable[[HomeLayout], None]] = None) -> PageView:
    settings = resolve_settings(context)
    classes = template_classes(settings)
    layout = _split(context, posts, classes, page)
    if arrange is not None and not (layout.loading or layout.empty):
        arrange(layout)

    values = _layout_values(context, settings, classes, top_tags)
    values.update(
        layout=layout,
        seo=build_seo_meta(context.site, page_path="/", hostname=context.hostname,
                           base_path=context.base_path),
        json_ld=json_ld_script(build_json_ld(context)),
    )
    return PageView(template, values)


def _take(layout: HomeLayout, count: int) -> List[PostCard]:
    taken, layout.grid = layout.grid[:count], layout.grid[count:]
    return taken


def render_blog_home(context: BasePathContext, posts, top_tags, page: int = 1) -> PageView:
    return _home_view("home_blog.html", context, posts, top_tags, page)


def render_news_home(context: BasePathContext, posts, top_tags, page: int = 1) -> PageView:
    def arrange(layout: HomeLayout):
        # Lead story, then a column of headlines beside it
        layout.headlines = _take(layout, 4)

    return _home_view("home_news.html", context, posts, top_tags, page, arrange)


def render_magazine_home(context: BasePathContext, posts, top_tags, page: int = 1) -> PageView:
    def arrange(layout: HomeLayout):
        layout.featured = _take(layout, 2)

    return _home_view("home_magazine.html", context, posts, top_tags, page, arrange)


def render_novapress_home(context: BasePathContext, posts, top_tags, page: int = 1) -> PageView:
    def arrange(layout: HomeLayout):
        layout.featured = _take(layout, 2)
        layout.headlines = _take(layout, 5)

    return _home_view("home_novapress.html", context, posts, top_tags, page, arrange)


def render_portfolio_home(context: BasePathContext, posts, top_tags, page: int = 1) -> PageView:
    return _home_view("home_portfolio.html", context, posts, top_tags, page)


def render_restaurant_home(context: BasePathContext, posts, top_tags, page: int = 1) -> PageView:
    def arrange(layout: HomeLayout):
        # Menu-style sections keyed by each post's first tag
        sections: Dict[str, List[PostCard]] = {}
        for card in layout.grid:
            sections.setdefault(card.post.tags[0] if card.post.tags else "More", []).append(card)
        layout.sections = sections
        layout.grid = []

    return _home_view("home_restaurant.html", context, posts, top_tags, page, arrange)


def render_crypto_home(context: BasePathContext, posts, top_tags, page: int = 1) -> PageView:
    def arrange(layout: HomeLayout):
        layout.headlines = layout.grid[:5]

    return _home_view("home_crypto.html", context, posts, top_tags, page, arrange)


HomeRenderer = Callable[..., PageView]

HOME_RENDERERS: Dict[str, HomeRenderer] = {
    "blog": render_blog_home,
    "news": render_news_home,
    "magazine": render_magazine_home,
    "novapress": render_novapress_home,
    "portfolio": render_portfolio_home,
    "restaurant": render_restaurant_home,
    "crypto": render_crypto_home,
}

DEFAULT_SITE_TYPE = "blog"


def select_renderer(site_type: Optional[str]) -> HomeRenderer:
    """Total: unknown or missing site types get the blog renderer"""
    return HOME_RENDERERS.get((site_type or "").lower(), HOME_RENDERERS[DEFAULT_SITE_TYPE])


def render_home(context: BasePathContext, posts, top_tags, page: int = 1) -> PageView:
    return select_renderer(context.site.site_type)(context, posts, top_tags, page)


def render_post(context: BasePathContext, post: Optional[Post], related: Sequence[Post],
                top_tags) -> PageView:
    """Post detail: rendered body with rewritten links and up to three related posts"""
    if post is None:
        return render_not_found(context, top_tags)

    settings = resolve_settings(context)
    classes = template_classes(settings)
    values = _layout_values(context, settings, classes, top_tags)

    post_path = get_post_url(post.slug, context.site)
    values.update(
        post=post,
        card=post_card(post, context),
        body=rewrite_html_links(render_markdown(post.content), context.base_path),
        post_tags=[NavLink(tag, context.prefix_path(tag_path(tag))) for tag in post.tags],
        related=[post_card(p, context) for p in related if p.slug != post.slug][:3],
        seo=build_seo_meta(context.site, post=post, page_path=post_path,
                           hostname=context.hostname, base_path=context.base_path),
        json_ld=json_ld_script(build_json_ld(context, post=post)),
    )
    return PageView("post.html", values)


def render_tag(context: BasePathContext, tag: str, posts: Optional[Sequence[Post]],
               top_tags) -> PageView:
    """Tag archive; matching is case-insensitive"""
    settings = resolve_settings(context)
    classes = template_classes(settings)
    values = _layout_values(context, settings, classes, top_tags)

    wanted = tag.lower()
    cards = None
    if posts is not None:
        cards = [post_card(p, context) for p in posts if wanted in (t.lower() for t in p.tags)]
    values.update(
        tag=tag,
        cards=cards or [],
        loading=posts is None,
        empty=cards == [],
        seo=build_seo_meta(context.site, page_path=tag_path(tag), hostname=context.hostname,
                           base_path=context.base_path, tag=tag),
        json_ld=json_ld_script(build_json_ld(context, tag=tag)),
    )
    return PageView("tag.html", values)


def render_not_found(context: BasePathContext, top_tags=None) -> PageView:
    """Unknown path on a resolved tenant, still themed and navigable"""
    settings = resolve_settings(context)
    classes = template_classes(settings)
    values = _layout_values(context, settings, classes, top_tags)
    values.update(
        seo=build_seo_meta(context.site, hostname=context.hostname, base_path=context.base_path),
        json_ld=json_ld_script(build_json_ld(context)),
    )
    return PageView("not_found.html", values, status_code=404)


def render_site_not_found(hostname: str) -> PageView:
    """Terminal state for hostnames that resolve to no tenant"""
    return PageView("site_not_found.html", {"hostname": hostname}, status_code=404)


def render_admin(decision: RouteDecision) -> PageView:
    """
    Shell page for the admin back office, bare or under a tenant's base path.
    The tenant-scoped variant reads its site from the active base_path_provider().
    """
    match = match_admin_route(decision.path)
    context = get_base_path_context() if decision.kind is RouteKind.SITE_ADMIN else None

    def href(path: str) -> str:
        return context.prefix_path(path) if context else path

    return PageView(
        "admin.html",
        {
            "view": match.view,
            "params": match.params,
            "site": context.site if context else None,
            "navigation": [NavLink(label, href(path)) for label, path in ADMIN_NAVIGATION],
            "home_url": href("/admin"),
        },
        status_code=404 if match.view == "not-found" else 200,
    )
