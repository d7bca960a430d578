"""
Point lookups consumed by the permission core.

Every method is a minimal projection (`values()` / `values_list()` / `exists()`)
returning a frozen snapshot or a primitive, never a model instance, so a
decision cannot accidentally lazy-load relations. `None` means "no such row".

`ResourceRepository` documents the contract; tests substitute fakes or wrap
`DjangoResourceRepository` in a `Mock` to count calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from accounts.models import User, UserRole
from wishlists.models import GroupMembership, Group, ListAdmin, ListShare, ListWish, Reservation, Wish, WishList


@dataclass(frozen=True)
class ActorSnapshot:
    is_admin: bool
    role: str
    suspended_at: Optional[datetime]

    @property
    def is_suspended(self) -> bool:
        return self.suspended_at is not None or self.role == UserRole.SUSPENDED

    @property
    def is_globally_privileged(self) -> bool:
        return self.is_admin or self.role == UserRole.ADMIN


@dataclass(frozen=True)
class ListSnapshot:
    id: int
    owner_id: int
    visibility: str
    password_hash: str
    co_manager_ids: frozenset


@dataclass(frozen=True)
class WishSnapshot:
    id: int
    owner_id: int


@dataclass(frozen=True)
class ReservationSnapshot:
    id: int
    user_id: int
    wish_owner_id: int


class ResourceRepository(Protocol):
    def get_actor(self, user_id) -> Optional[ActorSnapshot]: ...

    def get_list(self, list_id) -> Optional[ListSnapshot]: ...

    def is_group_member_for_list(self, user_id, list_id) -> bool: ...

    def get_wish(self, wish_id) -> Optional[WishSnapshot]: ...

    def list_ids_for_wish(self, wish_id) -> list: ...

    def get_group_role(self, user_id, group_id) -> Optional[str]: ...

    def group_exists(self, group_id) -> bool: ...

    def get_reservation(self, reservation_id) -> Optional[ReservationSnapshot]: ...


class DjangoResourceRepository:
    """ORM-backed implementation of `ResourceRepository`."""

    def get_actor(self, user_id) -> Optional[ActorSnapshot]:
        row = User.objects.filter(pk=user_id).values("is_admin", "role", "suspended_at").first()
        return ActorSnapshot(**row) if row else None

    def get_list(self, list_id) -> Optional[ListSnapshot]:
        row = (
            WishList.objects.filter(pk=list_id)
            .values("id", "owner_id", "visibility", "password")
            .first()
        )
        if row is None:
            return None
        co_managers = ListAdmin.objects.filter(wishlist_id=list_id).values_list("user_id", flat=True)
        return ListSnapshot(
            id=row["id"],
            owner_id=row["owner_id"],
            visibility=row["visibility"],
            password_hash=row["password"],
            co_manager_ids=frozenset(co_managers),
        )

    def is_group_member_for_list(self, user_id, list_id) -> bool:
        return ListShare.objects.filter(
            wishlist_id=list_id,
            group__memberships__user_id=user_id,
        ).exists()

    def get_wish(self, wish_id) -> Optional[WishSnapshot]:
        row = Wish.objects.filter(pk=wish_id).values("id", "owner_id").first()
        return WishSnapshot(**row) if row else None

    def list_ids_for_wish(self, wish_id) -> list:
        return list(
            ListWish.objects.filter(wish_id=wish_id)
            .order_by("added_at", "id")
            .values_list("wishlist_id", flat=True)
        )

    def get_group_role(self, user_id, group_id) -> Optional[str]:
        return (
            GroupMembership.objects.filter(user_id=user_id, group_id=group_id)
            .values_list("role", flat=True)
            .first()
        )

    def group_exists(self, group_id) -> bool:
        return Group.objects.filter(pk=group_id).exists()

    def get_reservation(self, reservation_id) -> Optional[ReservationSnapshot]:
        row = (
            Reservation.objects.filter(pk=reservation_id)
            .values("id", "user_id", "wish__owner_id")
            .first()
        )
        if row is None:
            return None
        return ReservationSnapshot(id=row["id"], user_id=row["user_id"], wish_owner_id=row["wish__owner_id"])
