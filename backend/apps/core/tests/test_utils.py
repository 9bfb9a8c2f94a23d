# apps/core/tests/test_utils.py
"""Tests for input sanitizing and query parameter parsing"""
from decimal import Decimal

from apps.core.pagination import paginate
from apps.core.utils import (
    escape_html,
    parse_bool,
    parse_decimal,
    parse_int,
    sanitize_filename,
    sanitize_text,
    sanitize_url,
)


class TestSanitizers:
    def test_escape_html(self):
        assert escape_html('<a href="/x">') == "&lt;a href=&quot;&#x2F;x&quot;&gt;"
        assert escape_html("") == ""

    def test_sanitize_text_strips_tags_and_whitespace(self):
        assert sanitize_text("  <b>Great</b>\n\n product  ") == "Great product"

    def test_sanitize_text_truncates(self):
        assert sanitize_text("abcdef", max_length=3) == "abc"
        assert sanitize_text(None) == ""

    def test_sanitize_url(self):
        assert sanitize_url("https://example.com/a.png") == "https://example.com/a.png"
        assert sanitize_url("javascript:alert(1)") == ""
        assert sanitize_url("/relative/path") == ""

    def test_sanitize_filename(self):
        assert sanitize_filename("../../etc/passwd") == "etcpasswd"
        assert sanitize_filename('re:port?.csv') == "report.csv"


class TestParsers:
    def test_parse_bool(self):
        assert parse_bool("true") is True
        assert parse_bool("0") is False
        assert parse_bool(None) is None
        assert parse_bool("") is None

    def test_parse_decimal(self):
        assert parse_decimal("12.50") == Decimal("12.50")
        assert parse_decimal("abc") is None
        assert parse_decimal(None) is None

    def test_parse_int_clamps(self):
        assert parse_int("500", 20, minimum=1, maximum=100) == 100
        assert parse_int("-3", 20, minimum=1) == 1
        assert parse_int("x", 20) == 20


class TestPaginate:
    def test_paginate_list(self):
        items, pagination = paginate(list(range(25)), page=3, limit=10)

        assert items == [20, 21, 22, 23, 24]
        assert pagination == {"page": 3, "limit": 10, "total": 25, "pages": 3}

    def test_paginate_past_end(self):
        items, pagination = paginate(list(range(5)), page=4, limit=10)

        assert items == []
        assert pagination["pages"] == 1
