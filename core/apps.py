"""AppConfig for the `core` app.

Scope
-----
Shared infrastructure used by the domain apps: the error taxonomy and its
HTTP mapping, request-id logging, the owned-model base class, and the
unit-of-work helper.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
