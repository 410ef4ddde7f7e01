"""
Multi-tenant public front end.

One process serves every tenant: the Host header picks the site through the
domain-check collaborator, the path picks the page, and the site's theme tokens
style it. The admin back office shell is served for admin paths and domains.
"""
import asyncio
import time
import uuid
from pathlib import Path
from typing import Awaitable, Optional, TypeVar

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from .api_models import error_response
from .api_v1 import v1_router
from .config import get_settings, validate_routing
from .content import ContentRepository
from .context import base_path_provider
from .dependencies import get_container, get_content_repository, get_domain_resolver, get_sitemap_service
from .domain_check import DomainResolver
from .exceptions import ContentFetchError, SitefrontException
from .logging import logger, metrics, request_id_var, request_tracker
from .renderers import (
    PageView, render_admin, render_home, render_not_found, render_post,
    render_site_not_found, render_tag,
)
from .router import PublicMatch, PublicPage, RouteDecision, RouteKind, match_public_route, resolve_route
from .sitemap import SITEMAP_PATH, SitemapService

T = TypeVar('T')

# Get configuration
settings = validate_routing(get_settings())

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

app = FastAPI(
    title=settings.app_name,
    description="""
    Multi-tenant public site renderer.

    * **Domain routing**: the Host header resolves to a tenant site or the admin back office
    * **Base paths**: tenants may live under a path prefix such as `/blog`
    * **Themes**: per-site design tokens layered over theme defaults
    * **Operational API**: health, metrics, theme catalogue and route debugging
    """,
    version=settings.app_version,
    # Every path belongs to tenants; API docs live on the mounted v1 app
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


# Security middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        if request.url.path.startswith(settings.api_prefix) or response.status_code >= 300:
            response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        elif request.method in ("GET", "HEAD"):
            # Public pages may be cached briefly by a CDN
            response.headers["Cache-Control"] = "public, max-age=60"

        return response


# Apply middleware
app.add_middleware(SecurityHeadersMiddleware)

# Trusted host middleware (prevents host header injection)
if settings.allowed_hosts:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts
    )

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600
)


# Request tracking middleware
@app.middleware("http")
async def track_requests(request: Request, call_next):
    """Track request performance and add request ID"""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request_id_var.set(request_id)

    start_time = time.time()
    host = request_hostname(request)
    path = request.url.path
    method = request.method

    await request_tracker.start_request(request_id, host, path, method)

    try:
        response = await call_next(request)
        duration = time.time() - start_time

        await request_tracker.end_request(
            request_id, host, path, method, response.status_code, duration
        )

        response.headers["X-Request-ID"] = request_id
        return response

    except Exception as e:
        duration = time.time() - start_time
        await request_tracker.end_request(request_id, host, path, method, 500, duration)
        await metrics.increment("http_requests_errors_total")
        logger.error("Request failed",
                     request_id=request_id,
                     error=str(e),
                     host=host,
                     path=path,
                     method=method)
        raise


def request_hostname(request: Request) -> str:
    return (request.url.hostname or "").strip().lower()


def wants_json(request: Request) -> bool:
    return request.url.path.startswith(settings.api_prefix)


# Exception handlers
async def api_exception_handler(request: Request, exc: SitefrontException):
    logger.error("API error", code=exc.code, error=exc.message, path=request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            exc.code,
            exc.message,
            details=exc.details,
            request_id=request_id_var.get()
        ).model_dump(mode="json")
    )


async def sitefront_exception_handler(request: Request, exc: SitefrontException):
    """JSON under the API prefix, an HTML error page everywhere else"""
    if wants_json(request):
        return await api_exception_handler(request, exc)
    logger.error("Request error", code=exc.code, error=exc.message, path=request.url.path)
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "status_code": exc.status_code,
            "code": exc.code,
            "message": exc.message if settings.debug or exc.status_code < 500 else "Something went wrong",
            "request_id": request_id_var.get(),
        },
        status_code=exc.status_code,
    )


app.add_exception_handler(SitefrontException, sitefront_exception_handler)


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    container = get_container()
    logger.info("Starting Sitefront",
                version=settings.app_version,
                api_base_url=settings.api_base_url,
                content_source=container.settings.content_source,
                api_prefix=settings.api_prefix)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Sitefront")
    get_container().reset()


# Create v1 sub-application
v1_app = FastAPI(
    title=f"{settings.app_name} - API v1",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)
v1_app.include_router(v1_router)
v1_app.add_exception_handler(SitefrontException, api_exception_handler)

# Mounted before the catch-all so tenant routing never sees API paths
app.mount(settings.api_prefix, v1_app)


def redirect_response(request: Request, target: str, status_code: int):
    """Redirect keeping the query string"""
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return RedirectResponse(url=target, status_code=status_code)


def page_response(request: Request, view: PageView):
    return templates.TemplateResponse(
        request, view.template, view.context, status_code=view.status_code
    )


async def optional_content(resource: str, fetch: Awaitable[T]) -> Optional[T]:
    """
    Content that failed to load renders as the loading state instead of
    failing the page; the tenant has already been resolved at this point.
    """
    try:
        return await fetch
    except ContentFetchError as e:
        logger.warning("Content unavailable", resource=resource, error=e.message)
        await metrics.increment("content_fetch_failures_total", labels={"resource": resource})
        return None


async def render_public(decision: RouteDecision, match: PublicMatch, content: ContentRepository,
                        page: int) -> PageView:
    context = decision.context
    site = context.site

    tags_task = optional_content("top-tags", content.list_top_tags(site))

    if match.page is PublicPage.HOME:
        posts, top_tags = await asyncio.gather(
            optional_content("posts", content.list_posts(site)), tags_task
        )
        return render_home(context, posts, top_tags, page)

    if match.page is PublicPage.POST:
        post, top_tags = await asyncio.gather(
            optional_content("post", content.get_post(site, match.slug)), tags_task
        )
        related = []
        if post is not None:
            related = await optional_content("related-posts", content.list_related_posts(site, post)) or []
        return render_post(context, post, related, top_tags)

    if match.page is PublicPage.TAG:
        posts, top_tags = await asyncio.gather(
            optional_content("tag-posts", content.list_posts_by_tag(site, match.tag)), tags_task
        )
        return render_tag(context, match.tag, posts, top_tags)

    return render_not_found(context, await tags_task)


# Every tenant path; registered last
@app.get("/{full_path:path}", include_in_schema=False)
async def serve(
    request: Request,
    full_path: str,
    page: int = Query(1, ge=1, le=10000),
    resolver: DomainResolver = Depends(get_domain_resolver),
    content: ContentRepository = Depends(get_content_repository),
    sitemaps: SitemapService = Depends(get_sitemap_service),
):
    """Resolve the tenant for this host and render the requested page"""
    hostname = request_hostname(request)
    decision = await resolve_route(hostname, request.url.path, resolver)

    if decision.kind is RouteKind.NOT_FOUND:
        return page_response(request, render_site_not_found(hostname))

    if decision.kind is RouteKind.ADMIN:
        return page_response(request, render_admin(decision))

    if decision.kind is RouteKind.SITE_ADMIN:
        with base_path_provider(decision.context):
            return page_response(request, render_admin(decision))

    if decision.redirect_to:
        return redirect_response(request, decision.redirect_to, 307)

    with base_path_provider(decision.context):
        if decision.path == SITEMAP_PATH:
            entries = await sitemaps.entries(decision.context, content)
            return templates.TemplateResponse(
                request, "sitemap.xml", {"entries": entries}, media_type="application/xml"
            )

        match = match_public_route(decision.path, decision.site)
        if match.redirect_to:
            # Posts have one canonical URL per site
            return redirect_response(request, decision.context.prefix_path(match.redirect_to), 301)

        view = await render_public(decision, match, content, page)
        await metrics.increment("renders_total", labels={
            "site_type": decision.site.site_type,
            "template": view.template,
        })
        return page_response(request, view)
