# apps/core/management/commands/clear_store_cache.py
"""
Clear storefront caches

Drops the catalog and analytics TTL caches, or the rate limit counters of
one client.
"""
from django.core.cache import cache
from django.core.management.base import BaseCommand

from apps.infrastructure.cache import analytics_cache, catalog_cache
from apps.infrastructure.rate_limit import PERIOD_SECONDS

CACHES = {
    "catalog": catalog_cache,
    "analytics": analytics_cache,
}


class Command(BaseCommand):
    help = "Clear catalog/analytics caches or one client's rate limit counters"

    def add_arguments(self, parser):
        parser.add_argument(
            "--cache",
            choices=sorted(CACHES) + ["all"],
            default="all",
            help="Which TTL cache to clear (default: all)",
        )
        parser.add_argument(
            "--identifier",
            type=str,
            help="Clear rate limits for one client instead (e.g. 'ip:192.168.1.1' or 'user:123')",
        )

    def handle(self, *args, **options):
        identifier = options.get("identifier")
        if identifier:
            self._clear_identifier(identifier)
            return

        names = sorted(CACHES) if options["cache"] == "all" else [options["cache"]]
        for name in names:
            removed = CACHES[name].clear()
            self.stdout.write(self.style.SUCCESS(f"Cleared {removed} {name} cache entries"))

    def _clear_identifier(self, identifier):
        cleared = 0
        for period in PERIOD_SECONDS:
            if cache.delete(f"rate_limit:{identifier}:{period}"):
                cleared += 1

        self.stdout.write(
            self.style.SUCCESS(f"Cleared {cleared} rate limits for {identifier}")
        )
