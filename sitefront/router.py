"""
Domain resolver and router switch.

Given (hostname, pathname) decide which subtree serves the request:

    ADMIN       bare admin back office (bypass paths, administrative domains)
    SITE_ADMIN  admin back office scoped under a tenant's base path
    PUBLIC      the tenant's public site
    NOT_FOUND   terminal "site not found" page
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional
from urllib.parse import quote

from .config import get_settings
from .context import BasePathContext
from .domain_check import DomainResolver
from .links import extract_post_slug, get_post_url, get_post_url_format
from .logging import logger, metrics
from .models import DomainCheckResult, Site


class RouteKind(str, Enum):
    ADMIN = "admin"
    SITE_ADMIN = "site-admin"
    PUBLIC = "public"
    NOT_FOUND = "not-found"


@dataclass
class RouteDecision:
    kind: RouteKind
    path: str
    site: Optional[Site] = None
    context: Optional[BasePathContext] = None
    reason: str = ""
    redirect_to: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind.value,
            "path": self.path,
            "site_id": self.site.id if self.site else None,
            "site_type": self.site.site_type if self.site else None,
            "base_path": self.context.base_path if self.context else "",
            "is_alias_domain": self.context.is_alias_domain if self.context else False,
            "reason": self.reason,
            "redirect_to": self.redirect_to,
        }


def _under(path: str, prefix: str) -> bool:
    """path equals prefix or continues it at a segment boundary"""
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def is_admin_bypass(pathname: str, prefixes: Iterable[str], root_bypass: bool = True) -> bool:
    """Paths served by the bare admin router without any domain lookup"""
    if pathname == "/":
        return root_bypass
    return any(_under(pathname, prefix) for prefix in prefixes)


def strip_base_path(pathname: str, base_path: str) -> str:
    """Path relative to the tenant base path; unchanged when outside it"""
    if base_path and _under(pathname, base_path):
        return pathname[len(base_path):] or "/"
    return pathname


def is_alias_host(site: Site, hostname: Optional[str]) -> bool:
    if not hostname:
        return False
    hostname = hostname.lower()
    return hostname != site.domain and hostname in (alias.lower() for alias in site.domain_aliases)


def decide_route(pathname: str, result: Optional[DomainCheckResult],
                 hostname: Optional[str] = None) -> RouteDecision:
    """Pure routing decision for a path and a domain-check answer"""
    if result is None:
        return RouteDecision(RouteKind.NOT_FOUND, pathname, reason="unknown domain")

    if result.is_admin:
        return RouteDecision(RouteKind.ADMIN, pathname, reason="administrative domain")

    site = result.site
    if site is None:
        return RouteDecision(RouteKind.NOT_FOUND, pathname, reason="no site for tenant domain")

    context = BasePathContext.for_site(
        site,
        is_alias_domain=result.is_alias_domain or is_alias_host(site, hostname),
        hostname=hostname,
    )
    effective = strip_base_path(pathname, context.base_path)

    if _under(effective, "/admin") and result.allow_admin_access:
        return RouteDecision(RouteKind.SITE_ADMIN, effective, site=site, context=context,
                             reason="admin access on tenant domain")

    decision = RouteDecision(RouteKind.PUBLIC, effective, site=site, context=context,
                             reason="tenant domain")
    if context.base_path and not _under(pathname, context.base_path):
        decision.redirect_to = context.prefix_path(pathname)
    return decision


async def resolve_route(hostname: str, pathname: str, resolver: DomainResolver) -> RouteDecision:
    """Bypass check, then one (deduplicated) domain check, then decide_route"""
    settings = get_settings()
    pathname = pathname or "/"

    if is_admin_bypass(pathname, settings.admin_prefixes, settings.admin_root_bypass):
        decision = RouteDecision(RouteKind.ADMIN, pathname, reason="admin path")
    else:
        result = await resolver.check(hostname)
        decision = decide_route(pathname, result, hostname)

    logger.debug("Route decided", hostname=hostname, path=pathname,
                 kind=decision.kind.value, reason=decision.reason)
    await metrics.increment("route_decisions_total", labels={"kind": decision.kind.value})
    return decision


# Admin back office routes; the views themselves live in the admin application

@dataclass
class AdminMatch:
    view: str
    params: Dict[str, str] = field(default_factory=dict)


_ADMIN_ROUTES = (
    (re.compile(r"^/$"), "login"),
    (re.compile(r"^/admin/?$"), "dashboard"),
    (re.compile(r"^/admin/dashboard/?$"), "dashboard"),
    (re.compile(r"^/admin/sites/(?P<id>[^/]+)/?$"), "site-config"),
    (re.compile(r"^/admin/users/?$"), "users"),
    (re.compile(r"^/editor/?$"), "editor"),
    (re.compile(r"^/editor/sites/(?P<id>[^/]+)/posts/?$"), "editor-posts"),
    (re.compile(r"^/signup/?$"), "signup"),
    (re.compile(r"^/pricing/?$"), "pricing"),
    (re.compile(r"^/owner(/.*)?$"), "owner"),
)

ADMIN_NAVIGATION = (
    ("Dashboard", "/admin/dashboard"),
    ("Users", "/admin/users"),
    ("Editor", "/editor"),
)


def match_admin_route(path: str) -> AdminMatch:
    for pattern, view in _ADMIN_ROUTES:
        match = pattern.match(path)
        if match:
            return AdminMatch(view, {k: v for k, v in match.groupdict().items() if v})
    return AdminMatch("not-found")


# Public tenant routes

class PublicPage(str, Enum):
    HOME = "home"
    POST = "post"
    TAG = "tag"
    NOT_FOUND = "not-found"


@dataclass
class PublicMatch:
    page: PublicPage
    slug: Optional[str] = None
    tag: Optional[str] = None
    # Site-relative canonical path when the request used the other post URL format
    redirect_to: Optional[str] = None


_POST_RE = re.compile(r"^/post/(?P<slug>[^/]+)/?$")
_TAG_RE = re.compile(r"^/tag/(?P<tag>[^/]+)/?$")


def _post_match(slug: str, site: Site, canonical: bool) -> PublicMatch:
    if canonical:
        return PublicMatch(PublicPage.POST, slug=slug)
    return PublicMatch(PublicPage.POST, slug=slug, redirect_to=get_post_url(quote(slug, safe=""), site))


def match_public_route(path: str, site: Site) -> PublicMatch:
    """
    Match an effective (base-path-stripped, already URL-decoded) path.

    A post requested in the URL format the site does not use matches with
    redirect_to set to the canonical form: /slug for root sites, /post/slug
    otherwise.
    """
    if path in ("", "/"):
        return PublicMatch(PublicPage.HOME)

    root_format = get_post_url_format(site) == "root"

    match = _POST_RE.match(path)
    if match:
        return _post_match(match.group("slug"), site, canonical=not root_format)

    match = _TAG_RE.match(path)
    if match:
        return PublicMatch(PublicPage.TAG, tag=match.group("tag"))

    slug = extract_post_slug(path.rstrip("/"))
    if slug and "/" not in slug:
        return _post_match(slug, site, canonical=root_format)

    return PublicMatch(PublicPage.NOT_FOUND)
