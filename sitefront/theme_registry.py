"""
Theme registry: named bundles of default design tokens.

Precedence when resolving a site's tokens is fixed:
base defaults < theme defaults < the site's explicit settings.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from .models import TemplateSettings, DEFAULT_TEMPLATE_SETTINGS, clean_tokens

ThemeCategory = Literal["blog", "news", "business", "creative"]


@dataclass(frozen=True)
class ThemeDefinition:
    """Immutable theme metadata plus its default tokens (snake_case keys)"""
    id: str
    name: str
    description: str
    category: ThemeCategory
    default_tokens: Mapping[str, Any]
    features: tuple = ()
    version: str = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "version": self.version,
            "features": list(self.features),
            "default_tokens": dict(self.default_tokens),
        }


def _theme(id: str, name: str, description: str, category: ThemeCategory,
           features: List[str], **tokens) -> ThemeDefinition:
    return ThemeDefinition(
        id=id,
        name=name,
        description=description,
        category=category,
        default_tokens=MappingProxyType(tokens),
        features=tuple(features),
    )


THEME_REGISTRY: Mapping[str, ThemeDefinition] = MappingProxyType({
    theme.id: theme for theme in (
        _theme(
            "blog", "Blog", "Classic blog layout with featured hero and grid posts", "blog",
            ["Featured Hero", "Grid Layout", "Tag Navigation", "Reading Time"],
            primary_color="#3b82f6", secondary_color="#8b5cf6",
            background_color="#ffffff", text_color="#1f2937",
            heading_font="modern", body_font="modern",
            card_style="rounded", post_card_style="standard",
            show_featured_hero=True, content_width="medium", header_style="standard",
        ),
        _theme(
            "news", "News", "Professional news layout with breaking news sections", "news",
            ["Breaking News Banner", "Section Grid", "Trending Sidebar", "Live Updates"],
            primary_color="#dc2626", secondary_color="#1e40af",
            background_color="#ffffff", text_color="#111827",
            heading_font="editorial", body_font="modern",
            card_style="sharp", post_card_style="editorial",
            show_featured_hero=True, content_width="wide", header_style="full",
        ),
        _theme(
            "magazine", "Magazine", "Elegant magazine-style layout with rich typography", "creative",
            ["Cover Stories", "Category Sections", "Author Profiles", "Rich Media"],
            primary_color="#7c3aed", secondary_color="#db2777",
            background_color="#fafafa", text_color="#1f2937",
            heading_font="elegant", body_font="editorial",
            card_style="rounded", post_card_style="overlay",
            show_featured_hero=True, content_width="wide", header_style="standard",
        ),
        _theme(
            "novapress", "NovaPress", "Modern editorial theme with bold typography", "creative",
            ["Dark Mode", "Minimal Cards", "Focus Mode", "Code Highlighting"],
            primary_color="#0ea5e9", secondary_color="#f59e0b",
            background_color="#0f172a", text_color="#f1f5f9",
            heading_font="modern", body_font="modern",
            card_style="borderless", post_card_style="minimal",
            show_featured_hero=True, content_width="medium", header_style="minimal",
        ),
        _theme(
            "portfolio", "Portfolio", "Clean portfolio layout for showcasing work", "business",
            ["Project Grid", "Case Studies", "Skills Section", "Contact Form"],
            primary_color="#10b981", secondary_color="#6366f1",
            background_color="#ffffff", text_color="#374151",
            heading_font="modern", body_font="modern",
            card_style="rounded", post_card_style="standard",
            show_featured_hero=False, content_width="wide", header_style="minimal",
        ),
        _theme(
            "restaurant", "Restaurant", "Warm restaurant theme with menu showcasing", "business",
            ["Menu Cards", "Reservation CTA", "Gallery", "Hours & Location"],
            primary_color="#b45309", secondary_color="#059669",
            background_color="#fffbeb", text_color="#451a03",
            heading_font="elegant", body_font="editorial",
            card_style="rounded", post_card_style="overlay",
            show_featured_hero=True, content_width="medium", header_style="full",
        ),
        _theme(
            "crypto", "Crypto", "Modern crypto/fintech theme with dark aesthetics", "business",
            ["Price Tickers", "Chart Integration", "Dark Mode", "Data Tables"],
            primary_color="#22c55e", secondary_color="#eab308",
            background_color="#09090b", text_color="#fafafa",
            heading_font="tech", body_font="modern",
            card_style="sharp", post_card_style="minimal",
            show_featured_hero=True, content_width="wide", header_style="minimal",
        ),
    )
})

# Themes tenants may pick; defined-but-unlisted themes stay resolvable for existing sites
ENABLED_THEMES = frozenset({"blog", "news", "magazine", "portfolio", "restaurant", "crypto"})

THEME_CATEGORIES = (
    {"id": "blog", "label": "Blog", "description": "Personal blogs and content sites"},
    {"id": "news", "label": "News", "description": "News and media publications"},
    {"id": "business", "label": "Business", "description": "Corporate and professional sites"},
    {"id": "creative", "label": "Creative", "description": "Art, design, and creative portfolios"},
)


def get_theme_definition(theme_id: Optional[str]) -> Optional[ThemeDefinition]:
    return THEME_REGISTRY.get(theme_id) if theme_id else None


def get_theme_default_tokens(theme_id: Optional[str]) -> Dict[str, Any]:
    """Default tokens of a theme; {} for an unknown id"""
    theme = get_theme_definition(theme_id)
    return dict(theme.default_tokens) if theme else {}


def get_all_themes() -> List[ThemeDefinition]:
    return list(THEME_REGISTRY.values())


def get_enabled_themes() -> List[ThemeDefinition]:
    return [theme for theme in THEME_REGISTRY.values() if theme.id in ENABLED_THEMES]


def get_themes_by_category(category: str) -> List[ThemeDefinition]:
    return [theme for theme in THEME_REGISTRY.values() if theme.category == category]


def is_valid_theme(theme_id: Optional[str]) -> bool:
    """The theme exists in the registry"""
    return bool(theme_id) and theme_id in THEME_REGISTRY


def is_theme_enabled(theme_id: Optional[str]) -> bool:
    """The theme exists and is offered to tenants"""
    return is_valid_theme(theme_id) and theme_id in ENABLED_THEMES


def explicit_tokens(overrides: Union[TemplateSettings, Mapping[str, Any], None]) -> Dict[str, Any]:
    """
    Normalize overrides to snake_case keys, keeping only explicitly given values.

    A TemplateSettings contributes only the fields that were set on it, so its
    defaults never mask a theme's defaults. Unknown keys, nulls and values of
    the wrong type are dropped, so the theme default applies in their place.
    """
    if overrides is None:
        return {}
    if isinstance(overrides, TemplateSettings):
        return overrides.model_dump(exclude_unset=True)

    return clean_tokens(overrides)


def merge_theme_tokens(
    theme_id: Optional[str],
    overrides: Union[TemplateSettings, Mapping[str, Any], None] = None,
) -> TemplateSettings:
    """Base defaults, then theme defaults, then overrides; later wins key by key"""
    merged = {
        **DEFAULT_TEMPLATE_SETTINGS.model_dump(),
        **get_theme_default_tokens(theme_id),
        **explicit_tokens(overrides),
    }
    return TemplateSettings.model_validate(merged)
