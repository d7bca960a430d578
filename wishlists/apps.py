"""AppConfig for the `wishlists` domain app (lists, co-managers, invitations)."""

from django.apps import AppConfig


class WishlistsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "wishlists"
