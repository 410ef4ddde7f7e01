"""
Runtime theme application.

A StyleNamespace stands for the document root's custom properties. A
ThemeApplier writes a tenant's derived palette into it on mount, remembers what
each property held before, and puts every property back on unmount, whichever
way the mounted scope is left.
"""
from typing import Dict, List, Optional, Tuple

from .colors import HSL, hex_to_hsl, adjust_lightness, contrast_foreground
from .exceptions import ThemeScopeError
from .logging import logger
from .models import TemplateSettings, DEFAULT_TEMPLATE_SETTINGS
from .tokens import FontFamily, FontScale, font_stack, font_sizes

# Every property a mounted theme may write
THEME_PROPERTIES = (
    "--background", "--foreground",
    "--card", "--card-foreground", "--card-border",
    "--popover", "--popover-foreground", "--popover-border",
    "--primary", "--primary-foreground", "--primary-border",
    "--secondary", "--secondary-foreground",
    "--muted", "--muted-foreground",
    "--accent", "--accent-foreground", "--accent-border",
    "--border", "--input", "--ring",
    "--destructive", "--destructive-foreground",
    "--font-sans",
    "--public-heading-font", "--public-body-font",
    "--public-font-base", "--public-font-heading", "--public-font-hero",
)

_COLOR_FIELDS = ("background_color", "text_color", "primary_color", "secondary_color")


def dependency_key(settings: Optional[TemplateSettings]) -> Tuple[str, ...]:
    """The only fields that influence derived properties"""
    s = settings or DEFAULT_TEMPLATE_SETTINGS
    return (
        s.background_color, s.text_color, s.primary_color, s.secondary_color,
        s.heading_font, s.body_font, s.font_scale,
    )


def _color(settings: TemplateSettings, field: str) -> HSL:
    hsl = hex_to_hsl(getattr(settings, field))
    if hsl is None:
        fallback = getattr(DEFAULT_TEMPLATE_SETTINGS, field)
        logger.warning("Malformed theme color, using default",
                       field=field, value=getattr(settings, field), fallback=fallback)
        hsl = hex_to_hsl(fallback)
    return hsl


def derive_palette(settings: Optional[TemplateSettings]) -> Dict[str, str]:
    """Compute every theme property from a (possibly None) settings record"""
    s = settings or DEFAULT_TEMPLATE_SETTINGS
    bg, text, primary, secondary = (_color(s, field) for field in _COLOR_FIELDS)

    is_light = bg.l > 50

    def away(amount: int) -> int:
        # Background-derived surfaces move toward the middle of the lightness range
        return -amount if is_light else amount

    accent_shift = -10 if primary.l > 50 else 30
    body_font = font_stack(FontFamily.parse(s.body_font))
    sizes = font_sizes(FontScale.parse(s.font_scale))

    return {
        "--background": bg.css(),
        "--foreground": text.css(),
        "--card": adjust_lightness(bg, away(4)),
        "--card-foreground": text.css(),
        "--card-border": adjust_lightness(bg, away(12)),
        "--popover": adjust_lightness(bg, away(6)),
        "--popover-foreground": text.css(),
        "--popover-border": adjust_lightness(bg, away(14)),
        "--primary": primary.css(),
        "--primary-foreground": contrast_foreground(primary),
        "--primary-border": adjust_lightness(primary, -10),
        "--secondary": secondary.css(),
        "--secondary-foreground": contrast_foreground(secondary),
        "--muted": adjust_lightness(bg, away(10)),
        "--muted-foreground": adjust_lightness(text, 30 if is_light else -30),
        "--accent": adjust_lightness(primary, accent_shift),
        "--accent-foreground": contrast_foreground(primary),
        "--accent-border": adjust_lightness(primary, accent_shift - 10),
        "--border": adjust_lightness(bg, away(12)),
        "--input": adjust_lightness(bg, away(20)),
        "--ring": primary.css(),
        "--destructive": "0 84% 42%",
        "--destructive-foreground": "0 0% 98%",
        "--font-sans": body_font,
        "--public-heading-font": font_stack(FontFamily.parse(s.heading_font)),
        "--public-body-font": body_font,
        "--public-font-base": sizes.base,
        "--public-font-heading": sizes.heading,
        "--public-font-hero": sizes.hero,
    }


class StyleNamespace:
    """Custom properties on a document root, plus the applier currently mounted on it"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._properties: Dict[str, str] = dict(initial or {})
        self.active_owner: Optional[str] = None
        self.writes = 0

    def get(self, name: str) -> str:
        return self._properties.get(name, "")

    def set(self, name: str, value: str):
        self._properties[name] = value
        self.writes += 1

    def remove(self, name: str):
        self._properties.pop(name, None)

    def __contains__(self, name: str) -> bool:
        return name in self._properties

    def snapshot(self) -> Dict[str, str]:
        return dict(self._properties)

    def css(self) -> str:
        """Serialize as a :root rule for the page head"""
        if not self._properties:
            return ""
        body = "".join(f"  {name}: {value};\n" for name, value in self._properties.items())
        return ":root {\n" + body + "}"


class ThemeApplier:
    """
    Scoped application of one tenant's theme to a StyleNamespace.

    Use as a context manager:

        with ThemeApplier(namespace, site.template_settings, owner=site.id):
            render()
    """

    def __init__(self, namespace: StyleNamespace, settings: Optional[TemplateSettings],
                 owner: str = "anonymous"):
        self.namespace = namespace
        self.settings = settings
        self.owner = owner
        self._originals: Dict[str, Optional[str]] = {}
        self._applied: List[str] = []
        self._key: Optional[Tuple[str, ...]] = None
        self.mounted = False

    def mount(self):
        active = self.namespace.active_owner
        if active is not None and active != self.owner:
            raise ThemeScopeError(active, self.owner)
        self.namespace.active_owner = self.owner
        self.mounted = True
        self._write(self.settings)
        return self

    def update(self, settings: Optional[TemplateSettings]) -> bool:
        """Re-apply for new settings; returns False when nothing output-relevant changed"""
        self.settings = settings
        if dependency_key(settings) == self._key:
            return False
        self._write(settings)
        return True

    def unmount(self):
        for name in self._applied:
            original = self._originals.get(name)
            if original:
                self.namespace.set(name, original)
            else:
                self.namespace.remove(name)
        self._originals.clear()
        self._applied = []
        self._key = None
        if self.namespace.active_owner == self.owner:
            self.namespace.active_owner = None
        self.mounted = False

    def _write(self, settings: Optional[TemplateSettings]):
        for name, value in derive_palette(settings).items():
            if name not in self._originals:
                self._originals[name] = self.namespace.get(name) if name in self.namespace else None
                self._applied.append(name)
            self.namespace.set(name, value)
        self._key = dependency_key(settings)

    def __enter__(self):
        return self.mount()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.unmount()
        return False
