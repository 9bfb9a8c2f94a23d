# backend/apps/core/utils.py
"""
Utility functions for the core app
"""
import html
import re
from decimal import Decimal, InvalidOperation
from typing import Optional
from urllib.parse import urlparse

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_UNSAFE_FILENAME_RE = re.compile(r'[<>:"|?*\\/]')


def escape_html(unsafe: str) -> str:
    """Escape HTML special characters, including quotes and slashes"""
    if not unsafe:
        return ""
    return html.escape(unsafe, quote=True).replace("/", "&#x2F;")


def strip_tags(text: str) -> str:
    """Remove anything that looks like an HTML tag"""
    if not text:
        return ""
    return _TAG_RE.sub("", text)


def sanitize_text(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Clean user supplied free text (review bodies, order notes)

    Strips tags, collapses whitespace and trims. Truncates to max_length
    when given.
    """
    if not text:
        return ""

    text = strip_tags(text)
    text = _WHITESPACE_RE.sub(" ", text).strip()

    if max_length is not None:
        text = text[:max_length]

    return text


def sanitize_url(url: Optional[str]) -> str:
    """Return the URL if it is http(s) with a host, else an empty string"""
    if not url:
        return ""

    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return ""

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return ""

    return parsed.geturl()


def sanitize_filename(name: str) -> str:
    """Drop path traversal and characters not allowed in file names"""
    if not name:
        return ""
    name = name.replace("..", "")
    return _UNSAFE_FILENAME_RE.sub("", name).strip()


def parse_bool(value) -> Optional[bool]:
    """Parse a query string boolean ('true', '1', 'yes'); None when absent"""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_decimal(value) -> Optional[Decimal]:
    """Parse a query string number into a Decimal; None when absent or invalid"""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def parse_int(value, default: int, minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
    """Parse an int query parameter and clamp it into [minimum, maximum]"""
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = default

    if minimum is not None:
        number = max(minimum, number)
    if maximum is not None:
        number = min(maximum, number)
    return number
