# apps/notifications/tests/test_email_service.py
"""Tests for sending and logging emails"""
from smtplib import SMTPException
from unittest.mock import patch

import pytest
from django.core import mail
from jinja2 import UndefinedError

from apps.core.testing import create_address, create_order, create_product, create_user
from apps.notifications.models import EmailLog
from apps.notifications.services import EmailService


@pytest.mark.django_db
class TestEmailService:
    def setup_method(self):
        self.service = EmailService()

    def test_send_custom_email(self):
        result = self.service.send_custom_email("a@example.com", "Hello", "Body text", reference="r1")

        assert result.success is True
        assert result.message_id
        message = mail.outbox[0]
        assert message.subject == "Hello"
        assert message.from_email == "EC Store <noreply@example.com>"
        assert message.extra_headers["Message-ID"] == result.message_id

        log = EmailLog.objects.get()
        assert log.status == EmailLog.STATUS_SENT
        assert log.recipients == ["a@example.com"]
        assert log.reference == "r1"

    def test_no_recipients(self):
        result = self.service.send_custom_email([], "Hello", "Body")

        assert result.success is False
        assert result.error == "No recipients"
        assert mail.outbox == []

    def test_backend_failure_is_returned_and_logged(self):
        with patch(
            "apps.notifications.services.EmailMultiAlternatives.send",
            side_effect=SMTPException("relay down"),
        ):
            result = self.service.send_custom_email("a@example.com", "Hello", "Body")

        assert result.success is False
        assert "relay down" in result.error
        log = EmailLog.objects.get()
        assert log.status == EmailLog.STATUS_FAILED
        assert "relay down" in log.error

    def test_order_confirmation_lists_items_and_totals(self):
        user = create_user(email="buyer@example.com", name="Buyer")
        product = create_product(name="Teapot", price="1500")
        order = create_order(user, [(product, 2)], address=create_address(user))

        result = self.service.send_order_confirmation_email(order)

        assert result.success
        message = mail.outbox[0]
        assert message.to == ["buyer@example.com"]
        assert order.order_number in message.subject
        assert "Teapot x 2: ¥3,000" in message.body
        assert "Total: ¥3,800" in message.body

    def test_order_shipped(self):
        user = create_user(email="buyer@example.com")
        order = create_order(user, [(create_product(), 1)])

        self.service.send_order_shipped_email(order)

        assert mail.outbox[0].subject == f"[EC Store] Your order {order.order_number} has shipped"

    def test_welcome(self):
        self.service.send_welcome_email("new@example.com", customer_name="Hanako")

        assert mail.outbox[0].subject == "Welcome to EC Store"
        assert "Hanako" in mail.outbox[0].body

    def test_verify_connection(self):
        assert self.service.verify_connection() is True

    def test_password_reset(self):
        result = self.service.send_password_reset_email(
            "forgot@example.com", {"reset_url": "http://testserver/reset/abc"}
        )

        assert result.success is True
        assert "http://testserver/reset/abc" in mail.outbox[0].body
        assert EmailLog.objects.get().email_type == "password_reset"

    def test_render_failure_is_returned_and_logged(self):
        with patch.object(
            self.service.templates, "render", side_effect=UndefinedError("'order_number' is undefined")
        ):
            result = self.service.send_welcome_email("a@example.com", customer_name="A")

        assert result.success is False
        assert "order_number" in result.error
        assert mail.outbox == []
        log = EmailLog.objects.get()
        assert log.status == EmailLog.STATUS_FAILED
        assert log.email_type == "welcome"
