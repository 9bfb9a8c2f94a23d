"""
Database settings per environment

test runs on in-memory SQLite; development, staging and production run on
PostgreSQL. Managed environments read credentials from DB_* variables and
refuse to start without them.

Usage:
    from config.settings.databases import get_database_config

    DATABASES = {'default': get_database_config('staging')}
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

REQUIRED_VARS = ['DB_NAME', 'DB_USER', 'DB_PASSWORD', 'DB_HOST']

# Per-environment PostgreSQL tuning: connection reuse (seconds) and SSL
POSTGRES_PROFILES = {
    'development': {'conn_max_age': 60, 'sslmode': 'disable', 'managed': False},
    'staging': {'conn_max_age': 300, 'sslmode': 'require', 'managed': True},
    'production': {'conn_max_age': 600, 'sslmode': 'verify-full', 'managed': True},
}

ENVIRONMENTS = ['test', *POSTGRES_PROFILES]


def _sqlite_memory() -> dict:
    return {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'ATOMIC_REQUESTS': True,
        'TEST': {'NAME': ':memory:'},
    }


def _postgres(environment: str) -> dict:
    profile = POSTGRES_PROFILES[environment]

    if profile['managed']:
        missing = [var for var in REQUIRED_VARS if not os.getenv(var)]
        if missing:
            raise ValueError(
                f"Missing required environment variables for {environment}: {', '.join(missing)}"
            )

    options = {
        'connect_timeout': 10,
        # Shows up in pg_stat_activity
        'application_name': 'storefront',
        'sslmode': profile['sslmode'],
    }
    if profile['sslmode'] == 'verify-full':
        options['sslrootcert'] = str(BASE_DIR / 'certs' / 'db-ca-bundle.pem')

    return {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.getenv('DB_NAME', 'storefront_dev'),
        'USER': os.getenv('DB_USER', 'storefront_user'),
        'PASSWORD': os.getenv('DB_PASSWORD', 'dev_password_123'),
        'HOST': os.getenv('DB_HOST', 'localhost'),
        'PORT': os.getenv('DB_PORT', '5432'),
        'CONN_MAX_AGE': profile['conn_max_age'],
        'ATOMIC_REQUESTS': True,
        'OPTIONS': options,
    }


def get_database_config(environment: str) -> dict:
    """
    Django DATABASES['default'] entry for an environment

    Raises:
        ValueError: unknown environment, or missing credentials for a
            managed one
    """
    if environment not in ENVIRONMENTS:
        raise ValueError(
            f"Invalid environment '{environment}'. Must be one of: {', '.join(ENVIRONMENTS)}"
        )
    if environment == 'test':
        return _sqlite_memory()
    return _postgres(environment)


def get_all_environments() -> list:
    return list(ENVIRONMENTS)


def validate_environment(environment: str) -> bool:
    return environment in ENVIRONMENTS


def get_connection_info(environment: str) -> dict:
    """Connection summary for diagnostics, password masked"""
    config = get_database_config(environment)

    return {
        'environment': environment,
        'engine': config['ENGINE'],
        'host': config.get('HOST', ''),
        'port': config.get('PORT', ''),
        'database': str(config['NAME']),
        'user': config.get('USER', ''),
        'password': '***',
        'ssl_mode': config.get('OPTIONS', {}).get('sslmode', 'N/A'),
    }
