# backend/apps/core/testing.py
"""
Model factories shared by the app test suites and the seed command
"""
import itertools
from decimal import Decimal

from django.contrib.auth.models import User
from rest_framework.authtoken.models import Token

from apps.accounts.models import Address, Profile
from apps.catalog.models import Category, Product, ProductImage
from apps.orders.models import Order, OrderItem
from apps.orders.services import calculate_totals

_sequence = itertools.count(1)


def _next():
    return next(_sequence)


def create_user(email=None, password="password123", name="", is_staff=False, **extra):
    email = email or f"user{_next()}@example.com"
    user = User.objects.create_user(
        username=email, email=email, password=password, is_staff=is_staff, **extra
    )
    Profile.objects.create(user=user, display_name=name)
    return user


def create_admin(email=None, password="password123", name="Admin"):
    return create_user(email=email or f"admin{_next()}@example.com", password=password, name=name, is_staff=True)


def token_for(user) -> str:
    return Token.objects.get_or_create(user=user)[0].key


def create_category(name=None, slug=None, **extra):
    n = _next()
    name = name or f"Category {n}"
    return Category.objects.create(name=name, slug=slug or f"category-{n}", **extra)


def create_product(
    name=None,
    price="1000",
    stock=20,
    category=None,
    status=Product.STATUS_ACTIVE,
    sku=None,
    images=0,
    **extra,
):
    n = _next()
    product = Product.objects.create(
        name=name or f"Product {n}",
        description=extra.pop("description", f"Description of product {n}"),
        price=Decimal(str(price)),
        stock=stock,
        category=category or create_category(),
        status=status,
        sku=sku or f"SKU-{n:05d}",
        **extra,
    )
    for position in range(images):
        ProductImage.objects.create(
            product=product, url=f"https://img.example.com/{product.sku}/{position}.jpg", order=position
        )
    return product


def create_address(user, is_default=True, **extra):
    defaults = {
        "name": "Taro Yamada",
        "address1": "1-2-3 Chiyoda",
        "city": "Chiyoda-ku",
        "state": "Tokyo",
        "zip_code": "100-0001",
        "country": "JP",
        "phone": "03-0000-0000",
    }
    defaults.update(extra)
    return Address.objects.create(user=user, is_default=is_default, **defaults)


def create_order(user, items, status=Order.STATUS_PENDING, created_at=None, address=None):
    """
    Write an order directly, bypassing checkout and stock

    items is a list of (product, quantity) pairs; lines are priced at the
    product's current price.
    """
    subtotal = sum((product.price * quantity for product, quantity in items), Decimal("0"))
    totals = calculate_totals(subtotal)
    order = Order.objects.create(
        order_number=f"EC{_next():010d}",
        status=status,
        user=user,
        address=address,
        shipping_address=address.as_snapshot() if address else {},
        **totals,
    )
    OrderItem.objects.bulk_create(
        [
            OrderItem(order=order, product=product, quantity=quantity, price=product.price)
            for product, quantity in items
        ]
    )
    if created_at is not None:
        Order.objects.filter(id=order.id).update(created_at=created_at)
        order.refresh_from_db()
    return order
