"""
Operational API v1: health, metrics, theme catalogue and route debugging
"""
import time
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from .api_models import (
    HealthResponse, MetricsResponse, RouteResponse, ThemeResponse, ThemesListResponse, TokensResponse,
)
from .config import get_settings
from .domain_check import DomainResolver
from .dependencies import get_domain_resolver
from .exceptions import SiteNotFoundError, SitefrontException
from .logging import metrics
from .router import resolve_route
from .theme_registry import (
    THEME_CATEGORIES, ThemeDefinition, explicit_tokens, get_all_themes, get_enabled_themes,
    get_theme_definition, get_themes_by_category, is_theme_enabled, merge_theme_tokens,
)

settings = get_settings()
started_at = time.monotonic()

# Create v1 router (prefix will be added when mounting)
v1_router = APIRouter()


class ThemeNotFoundError(SitefrontException):
    def __init__(self, theme_id: str):
        super().__init__(
            message=f"Theme '{theme_id}' not found",
            code="THEME_NOT_FOUND",
            status_code=404,
            details={"theme_id": theme_id}
        )


def _theme_response(theme: ThemeDefinition) -> ThemeResponse:
    return ThemeResponse(**theme.to_dict(), enabled=is_theme_enabled(theme.id))


@v1_router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check():
    """Liveness plus a summary of configuration the front end depends on"""
    checks = {
        "themes_registered": len(get_all_themes()),
        "themes_enabled": len(get_enabled_themes()),
        "content_source": settings.content_source,
        "api_base_url": settings.api_base_url,
    }
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        checks=checks,
        uptime_seconds=round(time.monotonic() - started_at, 3),
    )


@v1_router.get("/metrics", response_model=MetricsResponse, summary="Performance metrics")
async def get_metrics():
    """Domain-check, routing, render and HTTP metrics"""
    return MetricsResponse(performance=await metrics.get_summary())


@v1_router.get("/themes", response_model=ThemesListResponse, summary="List themes")
async def list_themes(
    category: Optional[str] = Query(None, description="Only themes of this category"),
    include_disabled: bool = Query(False, description="Also list registered but disabled themes"),
):
    """Theme catalogue offered to tenants"""
    if category:
        themes = get_themes_by_category(category)
    else:
        themes = get_all_themes()
    if not include_disabled:
        themes = [theme for theme in themes if is_theme_enabled(theme.id)]

    return ThemesListResponse(
        themes=[_theme_response(theme) for theme in themes],
        categories=list(THEME_CATEGORIES),
    )


@v1_router.get("/themes/{theme_id}", response_model=ThemeResponse, summary="Get theme")
async def get_theme(theme_id: str):
    theme = get_theme_definition(theme_id)
    if theme is None:
        raise ThemeNotFoundError(theme_id)
    return _theme_response(theme)


@v1_router.get("/themes/{theme_id}/tokens", response_model=TokensResponse, summary="Merged design tokens")
async def get_theme_tokens(theme_id: str, request: Request):
    """
    Resolve tokens for a theme with optional overrides given as query
    parameters (camelCase or snake_case), e.g. ?primaryColor=%23000000.
    Unknown themes resolve to the base defaults.
    """
    overrides = dict(request.query_params)
    merged = merge_theme_tokens(theme_id, overrides)
    return TokensResponse(
        theme_id=theme_id,
        known_theme=get_theme_definition(theme_id) is not None,
        overrides=explicit_tokens(overrides),
        tokens=merged.model_dump(by_alias=True),
    )


@v1_router.get("/resolve", response_model=RouteResponse, summary="Route decision")
async def resolve(
    hostname: str = Query(..., min_length=1, max_length=253),
    path: str = Query("/", max_length=2048),
    resolver: DomainResolver = Depends(get_domain_resolver),
):
    """Which subtree would serve hostname + path"""
    decision = await resolve_route(hostname, path, resolver)
    values = decision.to_dict()
    return RouteResponse(
        hostname=hostname,
        path=path,
        kind=values["kind"],
        effective_path=values["path"],
        site_id=values["site_id"],
        site_type=values["site_type"],
        base_path=values["base_path"],
        is_alias_domain=values["is_alias_domain"],
        redirect_to=values["redirect_to"],
        reason=values["reason"],
    )


@v1_router.get("/sites/{hostname}", summary="Domain-check answer")
async def get_site(
    hostname: str,
    resolver: DomainResolver = Depends(get_domain_resolver),
):
    """The domain-check answer the front end is using for a hostname"""
    result = await resolver.check(hostname)
    if result is None:
        raise SiteNotFoundError(hostname)
    return result.model_dump(by_alias=True, mode="json")
