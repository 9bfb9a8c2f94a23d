# apps/notifications/tests/test_templates.py
"""Tests for Jinja2 email rendering"""
from decimal import Decimal

import pytest

from apps.notifications.templates import TEMPLATE_NAMES, EmailTemplates, format_money


class TestFormatMoney:
    def test_yen_has_no_minor_units(self):
        assert format_money(Decimal("1500"), "JPY") == "¥1,500"

    def test_dollars(self):
        assert format_money("12.5", "USD") == "$12.50"

    def test_unknown_currency_uses_code(self):
        assert format_money(3, "CHF") == "3.00 CHF"


class TestEmailTemplates:
    def setup_method(self):
        self.templates = EmailTemplates()

    def test_every_template_has_three_parts(self):
        for name in TEMPLATE_NAMES:
            for part in ("subject", "html", "txt"):
                assert self.templates.env.get_template(f"{name}.{part}.j2") is not None

    def test_custom_html_is_escaped_but_text_is_not(self):
        rendered = self.templates.render(
            "custom",
            {"store_name": "EC Store", "currency": "JPY", "storefront_url": "http://testserver",
             "subject": "Hi", "message": "<b>bold</b>"},
        )

        assert "&lt;b&gt;bold&lt;/b&gt;" in rendered.html
        assert "<b>bold</b>" in rendered.text

    def test_subject_is_single_line(self):
        rendered = self.templates.render(
            "custom",
            {"store_name": "EC Store", "currency": "JPY", "storefront_url": "http://testserver",
             "subject": "Line one\nBcc: victim@example.com", "message": "x"},
        )

        assert "\n" not in rendered.subject

    def test_unknown_template(self):
        with pytest.raises(ValueError, match="not found"):
            self.templates.render("nope", {})

    def test_layout_title_uses_rendered_subject(self):
        rendered = self.templates.render(
            "welcome",
            {"store_name": "EC Store", "currency": "JPY", "storefront_url": "http://testserver",
             "customer_name": "Aiko", "shop_url": "http://testserver/products"},
        )

        assert rendered.subject == "Welcome to EC Store"
        assert "<title>Welcome to EC Store</title>" in rendered.html
