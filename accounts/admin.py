"""Admin registrations for the accounts app.

Notes
-----
- Admin is back-office only (not a public UI). The custom `User` is registered
  on top of Django's `UserAdmin`, with the access-control attributes (role,
  global admin flag, suspension) exposed so staff can suspend accounts.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ("username", "email", "role", "is_admin", "suspended_at", "is_staff")
    list_filter = DjangoUserAdmin.list_filter + ("role", "is_admin")
    fieldsets = DjangoUserAdmin.fieldsets + (
        ("Wishlist access", {"fields": ("role", "is_admin", "suspended_at")}),
    )
