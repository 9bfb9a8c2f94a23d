# backend/apps/notifications/templates.py
"""
Email Template Manager

Renders subject, HTML and plain-text bodies from Jinja2 templates stored
in email_templates/ as <name>.subject.j2, <name>.html.j2 and <name>.txt.j2.
"""
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound, select_autoescape

TEMPLATE_DIR = Path(__file__).parent / "email_templates"

TEMPLATE_NAMES = ["order_confirmation", "order_shipped", "inventory_alert", "password_reset", "welcome", "custom"]

# Currencies shown without minor units
ZERO_DECIMAL_CURRENCIES = {"JPY", "KRW"}
CURRENCY_SYMBOLS = {"JPY": "¥", "USD": "$", "EUR": "€", "GBP": "£"}


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def format_money(value: Any, currency: str = "JPY") -> str:
    """Format an amount for display, e.g. ¥1,500 or $12.50"""
    amount = Decimal(str(value or 0))
    symbol = CURRENCY_SYMBOLS.get(currency, "")
    if currency in ZERO_DECIMAL_CURRENCIES:
        formatted = f"{amount:,.0f}"
    else:
        formatted = f"{amount:,.2f}"
    return f"{symbol}{formatted}" if symbol else f"{formatted} {currency}"


class EmailTemplates:
    """
    Manages email templates using Jinja2

    HTML bodies are autoescaped; subjects and text bodies are not.
    """

    def __init__(self, template_dir: Path = TEMPLATE_DIR):
        if not template_dir.exists():
            raise ValueError(f"Email template directory not found at {template_dir}")

        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["money"] = format_money

    def render(self, name: str, context: Dict[str, Any]) -> RenderedEmail:
        """
        Render all three parts of one email

        Raises:
            ValueError: unknown template name
        """
        try:
            subject = self.env.get_template(f"{name}.subject.j2").render(**context)
            # Header injection guard: subjects are single line
            subject = " ".join(subject.split())
            # The layout titles the page with the rendered subject
            body_context = {**context, "subject": subject}
            html = self.env.get_template(f"{name}.html.j2").render(**body_context)
            text = self.env.get_template(f"{name}.txt.j2").render(**body_context)
        except TemplateNotFound as e:
            raise ValueError(f"Email template {name} not found ({e.name})")

        return RenderedEmail(subject=subject, html=html, text=text)
