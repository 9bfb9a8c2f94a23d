# backend/config/settings/development.py
from .base import *
from .databases import get_database_config

DEBUG = True

ENVIRONMENT = 'development'

# Add django-extensions shell_plus and friends for development
INSTALLED_APPS += ['django_extensions']

DATABASES = {'default': get_database_config('development')}

# Development-specific settings
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
