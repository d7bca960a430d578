"""
Shared abstract models.

`OwnedModel` gives domain rows a single exclusive owner plus audit timestamps.
Ownership is never transferred; the permission core treats `owner_id` as the
strongest grant a user can hold on a resource. Access checks themselves live
in `wishlists.services.permissions`.
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class OwnedModel(models.Model):
    """
    Abstract base for owner-held rows.

    Fields:
        owner: FK to the owning user (CASCADE on delete).
        created_at / updated_at: standard audit timestamps.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        # NOTE: keeps reverse accessors distinct per concrete class (owned_wishlist_set, owned_wish_set).
        related_name="owned_%(class)s_set",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ("-created_at",)

    def clean(self):
        super().clean()
        if self.owner_id is None:
            raise ValidationError({"owner": "Owner must be set for owned records."})

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={getattr(self, 'id', None)} owner_id={self.owner_id}>"
