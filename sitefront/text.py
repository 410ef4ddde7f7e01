"""
Text helpers for post bodies: markdown rendering, plain-text extraction, excerpts
"""
import re
from typing import Optional

import markdown
from bs4 import BeautifulSoup

_MARKDOWN_EXTENSIONS = ["extra", "sane_lists", "smarty"]

_STRIP_RULES = (
    (re.compile(r"^#{1,6}\s+", re.M), ""),
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"__([^_]+)__"), r"\1"),
    (re.compile(r"_([^_]+)_"), r"\1"),
    (re.compile(r"~~([^~]+)~~"), r"\1"),
    (re.compile(r"`{3}[\s\S]*?`{3}"), ""),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"^\s*[-*+]\s+", re.M), ""),
    (re.compile(r"^\s*\d+\.\s+", re.M), ""),
    (re.compile(r"^\s*>\s+", re.M), ""),
    (re.compile(r"^\s*[-*_]{3,}\s*$", re.M), ""),
    (re.compile(r"\|[^\n]+\|"), ""),
    (re.compile(r"\n{2,}"), " "),
    (re.compile(r"\n"), " "),
)


def render_markdown(content: str) -> str:
    """Markdown (or HTML passed through) to HTML"""
    if not content:
        return ""
    return markdown.markdown(content, extensions=_MARKDOWN_EXTENSIONS, output_format="html")


def strip_markdown(text: str, max_length: Optional[int] = None) -> str:
    """Plain text from markdown, optionally cut to max_length with an ellipsis"""
    result = text or ""
    for pattern, replacement in _STRIP_RULES:
        result = pattern.sub(replacement, result)
    result = result.strip()

    if max_length and len(result) > max_length:
        result = result[:max_length].strip() + "..."
    return result


def strip_html(html: str) -> str:
    """Visible text of an HTML fragment with whitespace collapsed"""
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return re.sub(r"\s+", " ", text).strip()


def truncate_text(text: str, max_length: int) -> str:
    """Cut at a word boundary past half of max_length, ending in '...'"""
    if len(text) <= max_length:
        return text
    truncated = text[:max_length - 3]
    last_space = truncated.rfind(" ")
    if last_space > max_length / 2:
        truncated = truncated[:last_space]
    return truncated + "..."


def plain_text(content: str) -> str:
    """Plain text of a post body that may be markdown or HTML"""
    return strip_html(strip_markdown(content))


def create_excerpt(content: str, max_length: int = 160) -> str:
    return truncate_text(plain_text(content), max_length)


def reading_time(content: str) -> int:
    """Minutes at 200 words per minute, at least 1"""
    words = len(plain_text(content).split())
    return max(1, round(words / 200))
