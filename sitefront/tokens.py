"""
Enum design tokens and their lookup tables.

Every token is parsed into an Enum whose _missing_ hook returns the documented
fallback member, and every lookup is an exhaustive match with a default arm, so an
unrecognized or absent key can never yield an empty class name or font stack.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .models import TemplateSettings, DEFAULT_TEMPLATE_SETTINGS


class _Token(str, Enum):
    """Enum token that falls back to its first member for unknown values"""

    @classmethod
    def _missing_(cls, value):
        return cls.fallback()

    @classmethod
    def fallback(cls):
        return next(iter(cls))

    @classmethod
    def parse(cls, value: Optional[str]):
        return cls(value) if value else cls.fallback()


class FontFamily(_Token):
    MODERN = "modern"
    CLASSIC = "classic"
    EDITORIAL = "editorial"
    TECH = "tech"
    ELEGANT = "elegant"


class FontScale(_Token):
    NORMAL = "normal"
    COMPACT = "compact"
    SPACIOUS = "spacious"


class LogoSize(_Token):
    MEDIUM = "medium"
    SMALL = "small"
    LARGE = "large"
    CUSTOM = "custom"


class ContentWidth(_Token):
    MEDIUM = "medium"
    NARROW = "narrow"
    WIDE = "wide"


class CardStyle(_Token):
    ROUNDED = "rounded"
    SHARP = "sharp"
    BORDERLESS = "borderless"


class HeaderStyle(_Token):
    STANDARD = "standard"
    MINIMAL = "minimal"
    FULL = "full"


class MenuSpacing(_Token):
    NORMAL = "normal"
    COMPACT = "compact"
    RELAXED = "relaxed"
    SPACIOUS = "spacious"


@dataclass(frozen=True)
class FontSizes:
    base: str
    heading: str
    hero: str


@dataclass(frozen=True)
class CardClasses:
    container: str
    image: str
    image_bottom: str
    hover: str
    radius: str
    radius_sm: str
    radius_lg: str


@dataclass(frozen=True)
class HeaderClasses:
    height: str
    padding: str
    border: str
    blur: str


def font_stack(family: FontFamily) -> str:
    match family:
        case FontFamily.CLASSIC:
            return "Georgia, Times New Roman, serif"
        case FontFamily.EDITORIAL:
            return "Merriweather, Georgia, serif"
        case FontFamily.TECH:
            return "JetBrains Mono, Roboto Mono, monospace"
        case FontFamily.ELEGANT:
            return "Playfair Display, Georgia, serif"
        case _:
            return "Inter, system-ui, sans-serif"


def font_sizes(scale: FontScale) -> FontSizes:
    match scale:
        case FontScale.COMPACT:
            return FontSizes(base="0.875rem", heading="1.5rem", hero="2.5rem")
        case FontScale.SPACIOUS:
            return FontSizes(base="1.125rem", heading="2.25rem", hero="3.5rem")
        case _:
            return FontSizes(base="1rem", heading="1.875rem", hero="3rem")


def logo_width(size: LogoSize, custom_px: Optional[int] = None) -> tuple:
    """(css class, width in px) for a logo size"""
    match size:
        case LogoSize.SMALL:
            return "w-8", 32
        case LogoSize.LARGE:
            return "w-14", 56
        case LogoSize.CUSTOM:
            return "", custom_px or 48
        case _:
            return "w-12", 48


def content_width_class(width: ContentWidth) -> str:
    match width:
        case ContentWidth.NARROW:
            return "max-w-4xl"
        case ContentWidth.WIDE:
            return "max-w-7xl"
        case _:
            return "max-w-6xl"


def card_classes(style: CardStyle) -> CardClasses:
    match style:
        case CardStyle.SHARP:
            return CardClasses(
                container="rounded-none border bg-card shadow-sm",
                image="rounded-none",
                image_bottom="rounded-none",
                hover="hover:shadow-lg hover:border-primary/30 transition-all duration-300",
                radius="rounded-none",
                radius_sm="rounded-none",
                radius_lg="rounded-none",
            )
        case CardStyle.BORDERLESS:
            return CardClasses(
                container="rounded-lg border-0 shadow-none bg-transparent",
                image="rounded-lg",
                image_bottom="rounded-b-lg",
                hover="hover:bg-muted/50 transition-all duration-300",
                radius="rounded-lg",
                radius_sm="rounded-md",
                radius_lg="rounded-xl",
            )
        case _:
            return CardClasses(
                container="rounded-xl border bg-card shadow-sm",
                image="rounded-t-xl",
                image_bottom="rounded-b-xl",
                hover="hover:shadow-lg hover:border-primary/20 transition-all duration-300",
                radius="rounded-xl",
                radius_sm="rounded-lg",
                radius_lg="rounded-2xl",
            )


def header_classes(style: HeaderStyle) -> HeaderClasses:
    match style:
        case HeaderStyle.MINIMAL:
            return HeaderClasses("h-14", "py-2", "border-b-0", "bg-background/80 backdrop-blur-sm")
        case HeaderStyle.FULL:
            return HeaderClasses("h-20", "py-4", "border-b", "bg-card backdrop-blur-lg")
        case _:
            return HeaderClasses(
                "h-16", "py-3", "border-b",
                "bg-card/95 backdrop-blur-md supports-[backdrop-filter]:bg-card/80",
            )


def menu_spacing_classes(spacing: MenuSpacing) -> tuple:
    """(gap class, item padding class)"""
    match spacing:
        case MenuSpacing.COMPACT:
            return "gap-0", "px-2 py-1.5"
        case MenuSpacing.RELAXED:
            return "gap-2", "px-5 py-2.5"
        case MenuSpacing.SPACIOUS:
            return "gap-4", "px-6 py-3"
        case _:
            return "gap-1", "px-4 py-2"


@dataclass
class TemplateClasses:
    """Resolved presentation values handed to templates"""
    heading_font: str
    body_font: str
    font_sizes: FontSizes
    logo_class: str
    logo_px: int
    hide_logo_text: bool
    content_width: str
    card: CardClasses
    card_style: str
    header: HeaderClasses
    header_sticky: bool
    header_background: Optional[str]
    header_text_color: Optional[str]
    menu_gap: str
    menu_item_padding: str
    show_hero: bool
    show_search: bool
    max_nav_items: int
    posts_per_page: int
    post_card_style: str
    footer_text: str
    socials: Dict[str, str] = field(default_factory=dict)

    @property
    def has_socials(self) -> bool:
        return any(self.socials.values())


def template_classes(settings: Optional[TemplateSettings]) -> TemplateClasses:
    """Resolve every token of a settings record through its table"""
    s = settings or DEFAULT_TEMPLATE_SETTINGS

    header_style = HeaderStyle.parse(s.header_style)
    card_style = CardStyle.parse(s.card_style)
    logo_class, logo_px = logo_width(LogoSize.parse(s.logo_size), s.logo_size_custom)
    menu_gap, menu_padding = menu_spacing_classes(MenuSpacing.parse(s.menu_spacing))

    return TemplateClasses(
        heading_font=font_stack(FontFamily.parse(s.heading_font)),
        body_font=font_stack(FontFamily.parse(s.body_font)),
        font_sizes=font_sizes(FontScale.parse(s.font_scale)),
        logo_class=logo_class,
        logo_px=logo_px,
        hide_logo_text=s.hide_logo_text,
        content_width=content_width_class(ContentWidth.parse(s.content_width)),
        card=card_classes(card_style),
        card_style=card_style.value,
        header=header_classes(header_style),
        header_sticky=header_style in (HeaderStyle.STANDARD, HeaderStyle.FULL),
        header_background=s.header_background_color.strip() or None,
        header_text_color=s.header_text_color.strip() or None,
        menu_gap=menu_gap,
        menu_item_padding=menu_padding,
        show_hero=s.show_featured_hero,
        show_search=s.show_search,
        max_nav_items=s.max_nav_items if s.max_nav_items > 0 else 10,
        posts_per_page=s.posts_per_page if s.posts_per_page > 0 else 12,
        post_card_style=s.post_card_style or "standard",
        footer_text=s.footer_text,
        socials={
            "twitter": s.social_twitter.strip(),
            "facebook": s.social_facebook.strip(),
            "instagram": s.social_instagram.strip(),
            "linkedin": s.social_linkedin.strip(),
        },
    )
