"""Custom user model for the wishlist backend.

Actor attributes
----------------
The permission core reads exactly three columns from this table when it
resolves an actor: `is_admin`, `role`, and `suspended_at`.

- globally privileged: `is_admin` or `role == "admin"`
- suspended: `suspended_at` set or `role == "suspended"`

Suspension always wins over privilege; a suspended admin can do nothing.

`email` is unique (case-insensitively by convention: callers store it
lowercased) because co-manager invitations are addressed by email.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class UserRole(models.TextChoices):
    USER = "user", "User"
    ADMIN = "admin", "Admin"
    SUSPENDED = "suspended", "Suspended"


class User(AbstractUser):
    """Project's custom user model with the attributes used for access decisions."""

    email = models.EmailField("email address", unique=True)
    role = models.CharField(max_length=16, choices=UserRole.choices, default=UserRole.USER)
    is_admin = models.BooleanField(default=False)
    suspended_at = models.DateTimeField(null=True, blank=True)

    @property
    def is_suspended(self) -> bool:
        return self.suspended_at is not None or self.role == UserRole.SUSPENDED

    @property
    def is_globally_privileged(self) -> bool:
        return self.is_admin or self.role == UserRole.ADMIN

    def display_name(self) -> str:
        full = self.get_full_name()
        return full or self.username
