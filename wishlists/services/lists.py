"""
List lifecycle operations that cross the permission core.

- `delete_list()` removes a list together with every row that grants or
  records access to it (co-manager grants, group shares, invitations, wish
  placements, reservations on its wishes) in one unit of work, so no orphaned
  grant can survive the list.
- `generate_share_token()` rotates the list's share token; co-managers may
  share, so they may call it too.
"""

from __future__ import annotations

import logging
import secrets
from typing import Callable, Optional

from core.exceptions import NotFoundError
from core.utils.transactions import run_in_transaction
from wishlists.models import AuditAction, ListAdmin, ListInvitation, ListShare, ListWish, Reservation, WishList
from wishlists.services.audit import record_list_action
from wishlists.services.passwords import verify_list_password
from wishlists.services.permissions import Action, PermissionService, ResourceRef

logger = logging.getLogger(__name__)


class ListService:
    def __init__(
        self,
        permissions: Optional[PermissionService] = None,
        auditor: Optional[Callable] = None,
        password_verifier: Optional[Callable[[str, str], bool]] = None,
    ):
        self.permissions = permissions or PermissionService()
        self.auditor = auditor or record_list_action
        self.password_verifier = password_verifier or verify_list_password

    def delete_list(self, list_id, actor_id) -> None:
        self.permissions.require(actor_id, Action.DELETE, ResourceRef.for_list(list_id))
        name = WishList.objects.filter(pk=list_id).values_list("name", flat=True).first()

        def delete_list_row() -> int:
            deleted = WishList.objects.filter(pk=list_id).delete()[1].get(WishList._meta.label, 0)
            if not deleted:
                # Lost a race with another delete; roll back the dependent deletes too.
                raise NotFoundError("List not found")
            return deleted

        run_in_transaction(
            lambda: Reservation.objects.filter(wish__list_memberships__wishlist_id=list_id).delete(),
            lambda: ListWish.objects.filter(wishlist_id=list_id).delete(),
            lambda: ListShare.objects.filter(wishlist_id=list_id).delete(),
            lambda: ListAdmin.objects.filter(wishlist_id=list_id).delete(),
            lambda: ListInvitation.objects.filter(wishlist_id=list_id).delete(),
            delete_list_row,
        )
        logger.info("List %s deleted by %s", list_id, actor_id)
        self.auditor(list_id, actor_id, AuditAction.DELETED, {"name": name})

    def generate_share_token(self, list_id, actor_id) -> str:
        self.permissions.require(actor_id, Action.SHARE, ResourceRef.for_list(list_id))
        token = secrets.token_urlsafe(24)
        updated = WishList.objects.filter(pk=list_id).update(share_token=token)
        if not updated:
            raise NotFoundError("List not found")
        self.auditor(list_id, actor_id, AuditAction.SHARED, {"share_token_rotated": True})
        return token

    def verify_password(self, candidate: str, stored_hash: str) -> bool:
        return self.password_verifier(candidate, stored_hash)
