# backend/apps/core/management/commands/seed_store.py
"""
Django management command to seed the store with demo data
"""
import random
import time
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.catalog.models import Category, Product, Review
from apps.core.testing import create_address, create_admin, create_order, create_user
from apps.infrastructure.cache import analytics_cache, catalog_cache
from apps.infrastructure.config import is_production
from apps.orders.models import Order

SEED_SKU_PREFIX = "SEED-"
SEED_EMAIL_DOMAIN = "seed.example.com"

CATEGORIES = [
    ("Electronics", "electronics", ["Wireless Earbuds", "USB-C Hub", "Mechanical Keyboard", "4K Monitor"]),
    ("Kitchen", "kitchen", ["Pour-over Kettle", "Chef Knife", "Rice Cooker", "Ceramic Pan"]),
    ("Outdoor", "outdoor", ["Trail Backpack", "Camping Lantern", "Insulated Bottle", "Rain Shell"]),
    ("Books", "books", ["Python Cookbook", "Design Patterns", "Tokyo Travel Guide", "Haiku Anthology"]),
]

REVIEW_COMMENTS = [
    "Works exactly as described, very happy with it.",
    "Good value for the price, shipping was quick.",
    "Decent quality but the packaging could be better.",
    "Better than I expected, would buy again.",
]


class Command(BaseCommand):
    help = "Seed the store with categories, products, customers, orders and reviews"

    def add_arguments(self, parser):
        parser.add_argument(
            "--customers",
            type=int,
            default=10,
            help="Number of demo customers to create (default 10)",
        )
        parser.add_argument(
            "--clear",
            action="store_true",
            help="Clear existing seed data before creating new",
        )
        parser.add_argument(
            "--admin-password",
            default="admin12345",
            help="Password for the seeded staff account",
        )

    def handle(self, *args, **options):
        # Prevent seeding production
        if is_production():
            raise CommandError(
                "Cannot seed database in production environment. "
                "Current ENVIRONMENT=production"
            )

        start_time = time.time()

        if options["clear"]:
            self.clear_seed_data()

        with transaction.atomic():
            admin = self.seed_admin(options["admin_password"])
            products = self.seed_catalog()
            customers = self.seed_customers(options["customers"])
            orders = self.seed_orders(customers, products)
            reviews = self.seed_reviews(customers, products)

        catalog_cache.clear()
        analytics_cache.clear()

        elapsed = time.time() - start_time
        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {len(products)} products, {len(customers)} customers, "
                f"{orders} orders and {reviews} reviews in {elapsed:.2f} seconds"
            )
        )
        self.stdout.write(f"Staff login: {admin.email}")

    def clear_seed_data(self):
        """Clear existing seed data"""
        seed_users = User.objects.filter(email__endswith=f"@{SEED_EMAIL_DOMAIN}")
        seed_products = Product.objects.filter(sku__startswith=SEED_SKU_PREFIX)

        Order.objects.filter(user__in=seed_users).delete()
        Review.objects.filter(product__in=seed_products).delete()
        product_count = seed_products.count()
        user_count = seed_users.count()
        seed_products.delete()
        seed_users.delete()
        Category.objects.filter(slug__in=[slug for _, slug, _ in CATEGORIES], products__isnull=True).delete()

        self.stdout.write(
            self.style.WARNING(f"Cleared {product_count} seed products and {user_count} seed users")
        )

    def seed_admin(self, password: str):
        email = f"admin@{SEED_EMAIL_DOMAIN}"
        admin = User.objects.filter(email=email).first()
        if admin is None:
            admin = create_admin(email=email, password=password)
        return admin

    def seed_catalog(self):
        products = []
        for name, slug, product_names in CATEGORIES:
            category, _ = Category.objects.get_or_create(slug=slug, defaults={"name": name})
            for index, product_name in enumerate(product_names, start=1):
                sku = f"{SEED_SKU_PREFIX}{slug[:4].upper()}-{index:03d}"
                product, created = Product.objects.get_or_create(
                    sku=sku,
                    defaults={
                        "name": product_name,
                        "description": f"{product_name} from our {name.lower()} range.",
                        "price": Decimal(random.choice([980, 1980, 2980, 4980, 12800])),
                        "stock": random.randint(0, 60),
                        "category": category,
                        "tags": [slug],
                    },
                )
                if created:
                    product.images.create(
                        url=f"https://img.example.com/{sku.lower()}.jpg", alt=product_name, order=0
                    )
                products.append(product)
        return products

    def seed_customers(self, count: int):
        customers = []
        for index in range(1, count + 1):
            email = f"customer{index}@{SEED_EMAIL_DOMAIN}"
            user = User.objects.filter(email=email).first()
            if user is None:
                user = create_user(email=email, name=f"Customer {index}")
                create_address(user)
            customers.append(user)
        return customers

    def seed_orders(self, customers, products) -> int:
        statuses = [choice for choice, _ in Order.STATUS_CHOICES]
        created = 0
        for customer in customers:
            address = customer.addresses.first()
            for _ in range(random.randint(0, 4)):
                items = [(product, random.randint(1, 3)) for product in random.sample(products, 2)]
                create_order(customer, items, status=random.choice(statuses), address=address)
                created += 1
        return created

    def seed_reviews(self, customers, products) -> int:
        created = 0
        for customer in customers:
            for product in random.sample(products, 3):
                _, was_created = Review.objects.get_or_create(
                    product=product,
                    user=customer,
                    defaults={
                        "rating": random.randint(3, 5),
                        "comment": random.choice(REVIEW_COMMENTS),
                    },
                )
                created += int(was_created)
        return created
