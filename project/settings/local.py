# project/settings/local.py
"""Local development settings."""

import os

os.environ.setdefault("DJANGO_SECRET_KEY", "dev-only-insecure-key")

from .base import *  # noqa

DEBUG = True
ALLOWED_HOSTS = ["*"]

EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
