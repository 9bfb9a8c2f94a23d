# backend/apps/accounts/models.py
"""
Account models: shopper profile and shipping addresses
"""
import uuid

from django.conf import settings
from django.db import models


class Profile(models.Model):
    """Extra account data kept beside auth.User"""

    ROLE_ADMIN = "ADMIN"
    ROLE_CUSTOMER = "CUSTOMER"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, related_name="profile", on_delete=models.CASCADE
    )
    display_name = models.CharField(max_length=150, blank=True)
    avatar_url = models.CharField(max_length=500, blank=True)
    email_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.display_name or self.user.email

    @property
    def role(self):
        return self.ROLE_ADMIN if self.user.is_staff else self.ROLE_CUSTOMER


class Address(models.Model):
    """A shipping address belonging to one user"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, related_name="addresses", on_delete=models.CASCADE
    )
    name = models.CharField(max_length=150)
    company = models.CharField(max_length=150, blank=True)
    address1 = models.CharField(max_length=255)
    address2 = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    zip_code = models.CharField(max_length=20)
    country = models.CharField(max_length=2, default="JP")
    phone = models.CharField(max_length=30, blank=True)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_default", "-created_at"]
        verbose_name_plural = "addresses"

    def __str__(self):
        return f"{self.name}, {self.city} ({self.zip_code})"

    def as_snapshot(self):
        """Plain dict copy stored on orders"""
        return {
            "name": self.name,
            "company": self.company,
            "address1": self.address1,
            "address2": self.address2,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
            "phone": self.phone,
        }
