# backend/apps/notifications/services.py
"""
Email Service

Renders Jinja2 templates and hands messages to Django's mail backend.
Every send is recorded in EmailLog; failures are returned as results,
not raised, so callers decide whether they matter.
"""
import logging
import uuid
from dataclasses import dataclass
from smtplib import SMTPException
from typing import Any, Dict, List, Optional, Sequence, Union

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.core.mail.message import make_msgid
from django.utils import timezone
from jinja2 import TemplateError

from apps.infrastructure.config import get_store_config

from .models import EmailLog, PushSubscription
from .templates import EmailTemplates

logger = logging.getLogger(__name__)

Recipients = Union[str, Sequence[str]]


@dataclass(frozen=True)
class EmailResult:
    """Outcome of one send"""

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message_id": self.message_id, "error": self.error}


def _as_list(value: Optional[Recipients]) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class EmailService:
    """Sends the storefront's transactional emails"""

    def __init__(self, templates: Optional[EmailTemplates] = None):
        self._templates = templates

    @property
    def templates(self) -> EmailTemplates:
        if self._templates is None:
            self._templates = EmailTemplates()
        return self._templates

    def _base_context(self) -> Dict[str, Any]:
        config = get_store_config()
        return {
            "store_name": config["name"],
            "currency": config["currency"],
            "storefront_url": config["storefront_url"],
        }

    def send_email(
        self,
        to: Recipients,
        template_name: str,
        context: Dict[str, Any],
        cc: Optional[Recipients] = None,
        bcc: Optional[Recipients] = None,
        reference: str = "",
    ) -> EmailResult:
        """
        Render a template and send it

        Returns:
            EmailResult with the Message-ID on success or the error text
        """
        recipients = _as_list(to)
        if not recipients:
            return EmailResult(success=False, error="No recipients")

        try:
            rendered = self.templates.render(template_name, {**self._base_context(), **context})
        except (TemplateError, ValueError) as e:
            logger.error(f"Failed to render {template_name} email: {e}", exc_info=True)
            self._log(template_name, recipients, "", EmailLog.STATUS_FAILED, "", str(e), reference)
            return EmailResult(success=False, error=f"Template error: {e}")

        store_name = get_store_config()["name"]
        message_id = make_msgid(domain=settings.DEFAULT_FROM_EMAIL.rsplit("@", 1)[-1])

        message = EmailMultiAlternatives(
            subject=rendered.subject,
            body=rendered.text,
            from_email=f"{store_name} <{settings.DEFAULT_FROM_EMAIL}>",
            to=recipients,
            cc=_as_list(cc),
            bcc=_as_list(bcc),
            headers={"Message-ID": message_id},
        )
        message.attach_alternative(rendered.html, "text/html")

        try:
            message.send(fail_silently=False)
        except (SMTPException, OSError) as e:
            logger.error(
                f"Failed to send {template_name} email to {', '.join(recipients)}: {e}",
                exc_info=True,
            )
            self._log(template_name, recipients, rendered.subject, EmailLog.STATUS_FAILED, "", str(e), reference)
            return EmailResult(success=False, error=str(e))

        logger.info(f"Sent {template_name} email to {', '.join(recipients)} ({message_id})")
        self._log(template_name, recipients, rendered.subject, EmailLog.STATUS_SENT, message_id, "", reference)
        return EmailResult(success=True, message_id=message_id)

    def _log(self, email_type, recipients, subject, status, message_id, error, reference):
        EmailLog.objects.create(
            email_type=email_type,
            recipients=recipients,
            subject=subject[:255],
            status=status,
            message_id=message_id,
            error=error,
            reference=str(reference)[:100],
        )

    # ============================================================
    # TRANSACTIONAL EMAILS
    # ============================================================

    def _order_context(self, order) -> Dict[str, Any]:
        profile = getattr(order.user, "profile", None)
        return {
            "customer_name": (profile.display_name if profile else "") or order.user.email,
            "order_number": order.order_number,
            "order_date": timezone.localtime(order.created_at).strftime("%Y-%m-%d %H:%M"),
            "items": [
                {
                    "name": item.product.name,
                    "quantity": item.quantity,
                    "price": item.price,
                    "line_total": item.line_total,
                }
                for item in order.items.all()
            ],
            "subtotal": order.subtotal,
            "shipping_cost": order.shipping_cost,
            "tax_amount": order.tax_amount,
            "total_amount": order.total_amount,
            "shipping_address": order.shipping_address or {},
            "order_url": f"{get_store_config()['storefront_url']}/orders/{order.id}",
        }

    def send_order_confirmation_email(self, order, to: Optional[Recipients] = None) -> EmailResult:
        return self.send_email(
            to or order.user.email, "order_confirmation", self._order_context(order), reference=order.order_number
        )

    def send_order_shipped_email(self, order, to: Optional[Recipients] = None) -> EmailResult:
        return self.send_email(
            to or order.user.email, "order_shipped", self._order_context(order), reference=order.order_number
        )

    def send_inventory_alert_email(self, to: Recipients, data: Dict[str, Any]) -> EmailResult:
        """
        data: product_name, product_sku, current_stock, threshold, category_name
        """
        context = {
            **data,
            "inventory_url": f"{get_store_config()['storefront_url']}/admin/inventory",
        }
        return self.send_email(to, "inventory_alert", context, reference=data.get("product_sku", ""))

    def send_password_reset_email(self, to: str, data: Dict[str, Any]) -> EmailResult:
        """
        data: customer_name, reset_url, expires_in
        """
        context = {
            "customer_name": data.get("customer_name") or to,
            "reset_url": data["reset_url"],
            "expires_in": data.get("expires_in", "1 hour"),
        }
        return self.send_email(to, "password_reset", context)

    def send_welcome_email(self, to: str, customer_name: str = "", reference: str = "") -> EmailResult:
        context = {
            "customer_name": customer_name or to,
            "shop_url": get_store_config()["storefront_url"],
        }
        return self.send_email(to, "welcome", context, reference=reference)

    def send_custom_email(self, to: Recipients, subject: str, message: str, reference: str = "") -> EmailResult:
        return self.send_email(to, "custom", {"subject": subject, "message": message}, reference=reference)

    def verify_connection(self) -> bool:
        """Open and close a connection to the mail backend"""
        connection = get_connection(fail_silently=False)
        try:
            connection.open()
            connection.close()
            return True
        except (SMTPException, OSError) as e:
            logger.error(f"Email service connection failed: {e}")
            return False


# Global instance
email_service = EmailService()


# ============================================================
# PUSH SUBSCRIPTIONS
# ============================================================


def save_push_subscription(
    endpoint: str, p256dh: str, auth: str, user=None, session_id: Optional[str] = None
) -> PushSubscription:
    """
    Register a browser push endpoint, replacing the keys and owner of an existing one

    Anonymous subscribers are tied to their session id; a fresh one is issued
    when the client sent none.
    """
    authenticated = user is not None and user.is_authenticated
    if not authenticated and not session_id:
        session_id = f"session_{uuid.uuid4().hex[:12]}"

    subscription, created = PushSubscription.objects.update_or_create(
        endpoint=endpoint,
        defaults={
            "p256dh_key": p256dh,
            "auth_key": auth,
            "user": user if authenticated else None,
            "session_id": "" if authenticated else session_id,
        },
    )
    owner = f"user {user.id}" if authenticated else f"session {session_id}"
    logger.info(f"Push subscription {'created' if created else 'updated'} for {owner}")
    return subscription


def remove_push_subscription(endpoint: str) -> int:
    """Delete every subscription for an endpoint; returns how many were removed"""
    deleted, _ = PushSubscription.objects.filter(endpoint=endpoint).delete()
    if deleted:
        logger.info(f"Push subscription removed ({deleted})")
    return deleted
