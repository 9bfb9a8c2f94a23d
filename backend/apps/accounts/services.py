# backend/apps/accounts/services.py
"""
Account services: registration, login, profile and address book
"""
import logging
from typing import Optional, Tuple

from django.contrib.auth.models import User, update_last_login
from django.db import transaction
from rest_framework.authtoken.models import Token

from apps.core.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    NotFoundError,
)
from apps.core.utils import sanitize_text, sanitize_url

from .models import Address, Profile

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_profile(user) -> Profile:
    """Profile for a user, created on first access for accounts made elsewhere"""
    profile, _ = Profile.objects.get_or_create(user=user)
    return profile


def email_in_use(email: str, exclude_user_id: Optional[int] = None) -> bool:
    users = User.objects.filter(email__iexact=normalize_email(email))
    if exclude_user_id is not None:
        users = users.exclude(id=exclude_user_id)
    return users.exists()


def register_user(email: str, password: str, name: Optional[str] = None) -> Tuple[User, str]:
    """
    Create a customer account and its API token

    Raises:
        AlreadyExistsError: email already registered
    """
    email = normalize_email(email)
    if email_in_use(email):
        logger.warning(f"Registration rejected, email already registered: {email}")
        raise AlreadyExistsError("This email address is already registered")

    with transaction.atomic():
        user = User.objects.create_user(username=email, email=email, password=password)
        Profile.objects.create(user=user, display_name=sanitize_text(name or "", max_length=150))
        token, _ = Token.objects.get_or_create(user=user)

    logger.info(f"Registered user {user.id} ({email})")

    transaction.on_commit(lambda: _send_welcome(user))
    return user, token.key


def _send_welcome(user):
    from apps.notifications.services import email_service

    result = email_service.send_welcome_email(
        user.email, customer_name=get_profile(user).display_name, reference=str(user.id)
    )
    if not result.success:
        logger.warning(f"Welcome email to user {user.id} failed: {result.error}")


def authenticate_user(email: str, password: str) -> Tuple[User, str]:
    """
    Check credentials and hand back the user's token

    Raises:
        InvalidCredentialsError: unknown email, wrong password or inactive account
    """
    user = User.objects.filter(email__iexact=normalize_email(email)).first()
    if user is None or not user.check_password(password) or not user.is_active:
        logger.warning(f"Failed login for {normalize_email(email)}")
        raise InvalidCredentialsError()

    update_last_login(None, user)
    token, _ = Token.objects.get_or_create(user=user)
    logger.info(f"User {user.id} logged in")
    return user, token.key


def logout_user(user) -> None:
    deleted, _ = Token.objects.filter(user=user).delete()
    logger.info(f"User {user.id} logged out ({deleted} token(s) revoked)")


def update_profile(user, email: str, name: Optional[str] = None, avatar: Optional[str] = None) -> User:
    """
    Raises:
        AlreadyExistsError: email belongs to another account
    """
    email = normalize_email(email)
    if email != normalize_email(user.email) and email_in_use(email, exclude_user_id=user.id):
        raise AlreadyExistsError("This email address is already in use")

    with transaction.atomic():
        user.email = email
        user.username = email
        user.save(update_fields=["email", "username"])

        profile = get_profile(user)
        profile.display_name = sanitize_text(name or "", max_length=150)
        if avatar is not None:
            profile.avatar_url = sanitize_url(avatar)
        profile.save()

    return user


# ============================================================
# ADDRESSES
# ============================================================


def list_addresses(user):
    return Address.objects.filter(user=user)


def get_address(user, address_id) -> Address:
    address = Address.objects.filter(user=user, id=address_id).first()
    if address is None:
        raise NotFoundError("Address", address_id)
    return address


@transaction.atomic
def create_address(user, data: dict) -> Address:
    if data.get("is_default"):
        Address.objects.filter(user=user).update(is_default=False)
    address = Address.objects.create(user=user, **data)
    logger.info(f"User {user.id} added address {address.id}")
    return address


@transaction.atomic
def update_address(user, address_id, data: dict) -> Address:
    address = get_address(user, address_id)
    if data.get("is_default"):
        Address.objects.filter(user=user).exclude(id=address.id).update(is_default=False)
    for field, value in data.items():
        setattr(address, field, value)
    address.save()
    return address


def delete_address(user, address_id) -> None:
    address = get_address(user, address_id)
    address.delete()
    logger.info(f"User {user.id} deleted address {address_id}")
