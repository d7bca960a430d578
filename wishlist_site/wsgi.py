"""WSGI entrypoint; production deployments point their server here."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "wishlist_site.settings.prod")

application = get_wsgi_application()
