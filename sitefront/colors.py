"""
Hex to HSL conversion for theme palette derivation
"""
import re
from typing import NamedTuple, Optional

_HEX_RE = re.compile(r"^[0-9A-Fa-f]{6}$")
_SHORT_HEX_RE = re.compile(r"^[0-9A-Fa-f]{3}$")


class HSL(NamedTuple):
    """Hue in degrees, saturation and lightness in percent, all whole numbers"""
    h: int
    s: int
    l: int

    def css(self) -> str:
        return f"{self.h} {self.s}% {self.l}%"


def parse_hex(value: Optional[str]) -> Optional[str]:
    """Return the 6-digit lowercase form of a #rgb / #rrggbb color, or None if malformed"""
    if not value or not isinstance(value, str):
        return None
    digits = value.strip().lstrip("#")
    if _SHORT_HEX_RE.match(digits):
        digits = "".join(ch * 2 for ch in digits)
    if not _HEX_RE.match(digits):
        return None
    return digits.lower()


def hex_to_hsl(value: Optional[str]) -> Optional[HSL]:
    """Convert a hex color with the max/min/delta algorithm; None for malformed input"""
    digits = parse_hex(value)
    if digits is None:
        return None

    r = int(digits[0:2], 16) / 255
    g = int(digits[2:4], 16) / 255
    b = int(digits[4:6], 16) / 255

    high = max(r, g, b)
    low = min(r, g, b)
    h = s = 0.0
    l = (high + low) / 2

    if high != low:
        d = high - low
        s = d / (2 - high - low) if l > 0.5 else d / (high + low)
        if high == r:
            h = ((g - b) / d + (6 if g < b else 0)) / 6
        elif high == g:
            h = ((b - r) / d + 2) / 6
        else:
            h = ((r - g) / d + 4) / 6

    return HSL(_round(h * 360), _round(s * 100), _round(l * 100))


def _round(value: float) -> int:
    # Half-up; the builtin round() rounds halves to even
    return int(value + 0.5)


def adjust_lightness(hsl: HSL, amount: int) -> str:
    """Shift lightness by amount, clamped to [0, 100]"""
    return HSL(hsl.h, hsl.s, max(0, min(100, hsl.l + amount))).css()


def contrast_foreground(hsl: HSL) -> str:
    """Near-black text on light colors, near-white on dark ones"""
    return "0 0% 12%" if hsl.l > 50 else "0 0% 98%"
