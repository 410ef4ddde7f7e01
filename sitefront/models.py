from datetime import datetime
from functools import lru_cache
from typing import Annotated, Any, Dict, List, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .logging import logger


class WireModel(BaseModel):
    """Base for records exchanged with the REST collaborator (camelCase on the wire)"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """A null column on the wire means "use the default", never a type error"""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class TemplateSettings(WireModel):
    """Design tokens for one site; every field has a documented default"""
    # Colors
    primary_color: str = Field(default="#3b82f6", description="Primary brand color (hex)")
    secondary_color: str = Field(default="#8b5cf6", description="Secondary brand color (hex)")
    background_color: str = Field(default="#ffffff", description="Page background color (hex)")
    text_color: str = Field(default="#1f2937", description="Body text color (hex)")

    # Typography
    heading_font: str = Field(default="modern", description="Key into the font family table")
    body_font: str = Field(default="modern", description="Key into the font family table")
    font_scale: str = Field(default="normal", description="Key into the font size scale table")

    # Layout
    logo_size: str = Field(default="medium")
    logo_size_custom: Optional[int] = Field(default=None, description="Logo width in px when logo_size is custom")
    hide_logo_text: bool = Field(default=False)
    content_width: str = Field(default="medium")
    card_style: str = Field(default="rounded")
    post_card_style: str = Field(default="standard")
    header_style: str = Field(default="standard")
    header_background_color: str = Field(default="")
    header_text_color: str = Field(default="")
    menu_spacing: str = Field(default="normal")
    max_nav_items: int = Field(default=10, ge=0)
    posts_per_page: int = Field(default=12, ge=1)

    # Feature toggles
    show_featured_hero: bool = Field(default=True)
    show_search: bool = Field(default=True)
    gdpr_banner_enabled: bool = Field(default=False)
    top_banner_enabled: bool = Field(default=False)

    # Free text
    footer_text: str = Field(default="")
    top_banner_message: str = Field(default="")
    top_banner_link: str = Field(default="")
    top_banner_background_color: str = Field(default="")
    top_banner_text_color: str = Field(default="")
    top_banner_dismissible: bool = Field(default=True)
    gdpr_banner_message: str = Field(
        default="We use cookies to improve your experience. By continuing, you agree to our use of cookies."
    )
    gdpr_banner_button_text: str = Field(default="Accept")
    gdpr_banner_decline_text: str = Field(default="Decline")
    gdpr_banner_background_color: str = Field(default="")
    gdpr_banner_text_color: str = Field(default="")

    # Social links
    social_twitter: str = Field(default="")
    social_facebook: str = Field(default="")
    social_instagram: str = Field(default="")
    social_linkedin: str = Field(default="")

    @model_validator(mode="before")
    @classmethod
    def drop_invalid_tokens(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return clean_tokens(data)
        return data


@lru_cache(maxsize=None)
def _token_adapter(name: str) -> TypeAdapter:
    field = TemplateSettings.model_fields[name]
    if field.metadata:
        return TypeAdapter(Annotated[(field.annotation, *field.metadata)])
    return TypeAdapter(field.annotation)


def token_name(key: str) -> Optional[str]:
    """snake_case field name for a token given in either spelling, or None"""
    if key in TemplateSettings.model_fields:
        return key
    name = _snake(key)
    return name if name in TemplateSettings.model_fields else None


def _snake(key: str) -> str:
    return "".join("_" + char.lower() if char.isupper() else char for char in key)


def clean_tokens(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Known tokens keyed by field name, without nulls and without values that
    fail their field's validation. Bad tenant data degrades to defaults.
    """
    tokens = {}
    for key, value in data.items():
        name = token_name(key)
        if name is None or value is None:
            continue
        try:
            _token_adapter(name).validate_python(value)
        except ValidationError:
            logger.warning("Ignoring invalid design token", token=name, value=str(value)[:80])
            continue
        tokens[name] = value
    return tokens


DEFAULT_TEMPLATE_SETTINGS = TemplateSettings()


def normalize_base_path(value: Optional[str]) -> str:
    """Normalize a base path to '' or '/segment[/segment...]' without a trailing slash"""
    if not value:
        return ""
    value = value.strip().rstrip("/")
    if not value:
        return ""
    if not value.startswith("/"):
        value = "/" + value
    return value


class Site(WireModel):
    """A tenant: one independently branded public website"""
    id: str = Field(..., description="Unique site identifier")
    domain: str = Field(..., description="Primary hostname")
    domain_aliases: List[str] = Field(default=[], description="Hostnames served with the base path stripped upstream")
    base_path: Optional[str] = Field(None, description="URL path prefix the site is served under, e.g. /blog")
    site_type: str = Field(default="blog", description="Selects the public renderer")
    template_settings: Optional[TemplateSettings] = Field(None, description="Design tokens (None means defaults)")
    theme: Optional[str] = Field(None, description="Theme whose defaults sit under the template settings")
    post_url_format: Optional[str] = Field(None, description="'with-prefix' (/post/slug) or 'root' (/slug)")
    title: str = Field(default="", description="Site title")
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    og_image: Optional[str] = None
    logo_url: Optional[str] = None
    favicon: Optional[str] = None
    analytics_id: Optional[str] = None

    @field_validator("base_path")
    @classmethod
    def validate_base_path(cls, v):
        return normalize_base_path(v) or None

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v):
        return v.strip().lower()


class Post(WireModel):
    """A published article belonging to exactly one site"""
    id: str = Field(..., description="Unique post identifier")
    site_id: Optional[str] = Field(None, description="Owning site")
    slug: str = Field(..., description="URL-friendly identifier, unique within the site")
    title: str = Field(..., description="Post title")
    content: str = Field(default="", description="Markdown or HTML body")
    tags: List[str] = Field(default=[], description="Ordered tag list")
    image_url: Optional[str] = None
    author: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    og_image: Optional[str] = None
    canonical_url: Optional[str] = None
    noindex: bool = Field(default=False, description="Nullable column; null reads as False")
    source: str = Field(default="manual", description="manual, ai or rss; other values are kept as given")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DomainCheckResult(WireModel):
    """Answer of the domain-check collaborator for one hostname"""
    is_admin: bool = Field(default=False, description="Hostname is an administrative domain")
    site: Optional[Site] = Field(None, description="Tenant served on this hostname")
    allow_admin_access: bool = Field(default=False, description="Admin UI may be served under the tenant domain")
    site_id: Optional[str] = None
    is_alias_domain: bool = Field(default=False, description="Upstream proxy already stripped the base path")
