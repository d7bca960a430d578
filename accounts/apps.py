"""Django AppConfig for the accounts app.

This app houses the project's custom user model (`accounts.User`), which carries
the actor attributes consulted by `wishlists.services.permissions`.
"""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
