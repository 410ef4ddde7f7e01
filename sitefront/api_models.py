"""
Response models for the operational JSON API
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ErrorResponse(BaseModel):
    """Body of every non-2xx API answer"""
    success: bool = False
    error: str = Field(..., description="Machine-readable code such as THEME_NOT_FOUND")
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=utc_now)
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = Field(..., description="healthy or degraded")
    version: str
    timestamp: datetime = Field(default_factory=utc_now)
    checks: Dict[str, Any] = Field(default_factory=dict, description="Configuration the renderer depends on")
    uptime_seconds: Optional[float] = None


class MetricsResponse(BaseModel):
    performance: Dict[str, Any] = Field(..., description="Counters, gauges and histogram summaries")
    timestamp: datetime = Field(default_factory=utc_now)


class ThemeResponse(BaseModel):
    """One theme definition"""
    id: str
    name: str
    description: str
    category: str
    version: str
    features: List[str] = Field(default_factory=list)
    default_tokens: Dict[str, Any] = Field(default_factory=dict)
    enabled: bool = Field(True, description="Offered to tenants")


class ThemesListResponse(BaseModel):
    themes: List[ThemeResponse]
    categories: List[Dict[str, str]]


class TokensResponse(BaseModel):
    """Theme defaults merged under explicit overrides"""
    theme_id: str
    known_theme: bool
    overrides: Dict[str, Any]
    tokens: Dict[str, Any] = Field(..., description="Merged tokens keyed by their camelCase wire names")


class RouteResponse(BaseModel):
    """Routing decision for a hostname and path"""
    hostname: str
    path: str
    kind: str
    effective_path: str
    site_id: Optional[str] = None
    site_type: Optional[str] = None
    base_path: str = ""
    is_alias_domain: bool = False
    redirect_to: Optional[str] = None
    reason: str = ""


def error_response(
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None
) -> ErrorResponse:
    return ErrorResponse(error=error_code, message=message, details=details, request_id=request_id)
