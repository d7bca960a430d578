"""
Permission decision core.

Overview
--------
`PermissionService.can(actor_id, action, ref)` answers "may this user perform
this action on this resource?" and returns a `PermissionResult`; it never
raises for a denial. `require()` is the raising wrapper used by services.

Decision order (single pass)
----------------------------
1. Unknown action string: deny, no queries.
2. Anonymous caller (`actor_id is None`): public/password list view and
   reservation `reserve` only.
3. Load the actor (one minimal query). Missing: deny "User not found".
4. Suspended: deny "Account suspended". Evaluated before privilege, so a
   suspended admin is locked out too.
5. Globally privileged: allow without touching any resource table.
6. Dispatch on `ResourceType` to the per-resource rule.

Enumeration prevention
----------------------
A list the actor cannot see is reported exactly like a missing one ("List not
found", `not_found=True`). `core.exceptions.status_for_exception` additionally
conceals list `admin` denials as 404.

Notes
-----
- The service is stateless; construct it per use with the repository and
  password verifier it should consult. Nothing is cached between calls.
- Repository errors propagate; an infrastructure failure is never a denial.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from django.core.exceptions import ImproperlyConfigured

from core.exceptions import ForbiddenError, NotFoundError
from wishlists.models import GroupRole, Visibility
from wishlists.services.passwords import verify_list_password
from wishlists.services.repository import DjangoResourceRepository, ListSnapshot, ResourceRepository

logger = logging.getLogger(__name__)


class Action(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    DELETE = "delete"
    SHARE = "share"
    ADMIN = "admin"
    INVITE = "invite"
    RESERVE = "reserve"

    @classmethod
    def coerce(cls, value) -> Optional["Action"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class ResourceType(str, Enum):
    LIST = "list"
    WISH = "wish"
    GROUP = "group"
    RESERVATION = "reservation"


# Closed action sets for ordinary actors; global privilege is decided before them.
SUPPORTED_ACTIONS: dict[ResourceType, frozenset] = {
    ResourceType.LIST: frozenset({Action.VIEW, Action.EDIT, Action.DELETE, Action.SHARE, Action.ADMIN}),
    ResourceType.WISH: frozenset({Action.VIEW, Action.EDIT, Action.DELETE}),
    ResourceType.GROUP: frozenset(
        {Action.VIEW, Action.SHARE, Action.EDIT, Action.ADMIN, Action.INVITE, Action.DELETE}
    ),
    ResourceType.RESERVATION: frozenset({Action.VIEW, Action.EDIT, Action.DELETE}),
}

CO_MANAGER_ACTIONS = frozenset({Action.VIEW, Action.EDIT, Action.SHARE})


@dataclass(frozen=True)
class ResourceRef:
    type: ResourceType
    id: int

    def __post_init__(self):
        object.__setattr__(self, "type", ResourceType(self.type))

    @classmethod
    def for_list(cls, list_id) -> "ResourceRef":
        return cls(ResourceType.LIST, list_id)

    @classmethod
    def for_wish(cls, wish_id) -> "ResourceRef":
        return cls(ResourceType.WISH, wish_id)

    @classmethod
    def for_group(cls, group_id) -> "ResourceRef":
        return cls(ResourceType.GROUP, group_id)

    @classmethod
    def for_reservation(cls, reservation_id) -> "ResourceRef":
        return cls(ResourceType.RESERVATION, reservation_id)


@dataclass(frozen=True)
class PermissionResult:
    allowed: bool
    reason: Optional[str] = None
    not_found: bool = False


ALLOWED = PermissionResult(allowed=True)


def _deny(reason: str, *, not_found: bool = False) -> PermissionResult:
    return PermissionResult(allowed=False, reason=reason, not_found=not_found)


LIST_NOT_FOUND = _deny("List not found", not_found=True)


class PermissionService:
    """Stateless decision service; see the module docstring for the algorithm."""

    def __init__(
        self,
        repository: Optional[ResourceRepository] = None,
        password_verifier: Optional[Callable[[str, str], bool]] = None,
    ):
        self.repository = repository if repository is not None else DjangoResourceRepository()
        self.password_verifier = password_verifier or verify_list_password
        self._rules = {
            ResourceType.LIST: self._check_list,
            ResourceType.WISH: self._check_wish,
            ResourceType.GROUP: self._check_group,
            ResourceType.RESERVATION: self._check_reservation,
        }
        missing = set(ResourceType) - set(self._rules)
        if missing:
            raise ImproperlyConfigured(f"No permission rule for resource types: {sorted(missing)}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def can(self, actor_id, action, ref: ResourceRef, *, password: Optional[str] = None) -> PermissionResult:
        act = Action.coerce(action)
        if act is None:
            return _deny("Unknown action")

        if actor_id is None:
            return self._check_anonymous(act, ref, password)

        actor = self.repository.get_actor(actor_id)
        if actor is None:
            return _deny("User not found", not_found=True)
        if actor.is_suspended:
            return _deny("Account suspended")
        if actor.is_globally_privileged:
            return ALLOWED

        return self._rules[ref.type](actor_id, act, ref.id, password)

    def require(self, actor_id, action, ref: ResourceRef, *, password: Optional[str] = None) -> None:
        result = self.can(actor_id, action, ref, password=password)
        if result.allowed:
            return
        logger.debug(
            "Denied %s on %s:%s for actor %s: %s",
            action, ref.type.value, ref.id, actor_id, result.reason,
        )
        if result.not_found:
            raise NotFoundError(result.reason)
        raise ForbiddenError(result.reason, action=Action.coerce(action) or action, resource_type=ref.type)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------
    def _check_anonymous(self, action: Action, ref: ResourceRef, password: Optional[str]) -> PermissionResult:
        if ref.type is ResourceType.LIST and action is Action.VIEW:
            lst = self.repository.get_list(ref.id)
            if lst is None:
                return LIST_NOT_FOUND
            return self._check_visibility(lst, password)
        if ref.type is ResourceType.RESERVATION and action is Action.RESERVE:
            return ALLOWED
        return _deny("Anonymous users have limited permissions")

    def _check_list(self, actor_id, action: Action, list_id, password: Optional[str]) -> PermissionResult:
        lst = self.repository.get_list(list_id)
        if lst is None:
            return LIST_NOT_FOUND

        # Owner beats co-manager membership and visibility.
        if lst.owner_id == actor_id:
            if action in SUPPORTED_ACTIONS[ResourceType.LIST]:
                return ALLOWED
            return self._unsupported(ResourceType.LIST)

        if actor_id in lst.co_manager_ids:
            if action in CO_MANAGER_ACTIONS:
                return ALLOWED
            if action is Action.DELETE:
                return _deny("Only list owners can delete lists")
            if action is Action.ADMIN:
                return _deny("Only list owners can add/remove co-managers")
            return _deny("Action not allowed for co-managers")

        if action is not Action.VIEW:
            return LIST_NOT_FOUND

        if self.repository.is_group_member_for_list(actor_id, list_id):
            return ALLOWED
        return self._check_visibility(lst, password)

    def _check_visibility(self, lst: ListSnapshot, password: Optional[str]) -> PermissionResult:
        if lst.visibility == Visibility.PUBLIC:
            return ALLOWED
        if lst.visibility == Visibility.PASSWORD:
            if not password:
                return _deny("Password is required for this list")
            if not self.password_verifier(password, lst.password_hash):
                return _deny("Invalid password")
            return ALLOWED
        return LIST_NOT_FOUND

    def _check_wish(self, actor_id, action: Action, wish_id, password: Optional[str]) -> PermissionResult:
        wish = self.repository.get_wish(wish_id)
        if wish is None:
            return _deny("Wish not found", not_found=True)
        if action not in SUPPORTED_ACTIONS[ResourceType.WISH]:
            return self._unsupported(ResourceType.WISH)
        if wish.owner_id == actor_id:
            return ALLOWED
        if action is Action.VIEW:
            # One level of inheritance: any list containing the wish that grants view.
            for list_id in self.repository.list_ids_for_wish(wish_id):
                if self._check_list(actor_id, Action.VIEW, list_id, None).allowed:
                    return ALLOWED
            return _deny("No access to lists containing this wish")
        return _deny("Insufficient permissions")

    def _check_group(self, actor_id, action: Action, group_id, password: Optional[str]) -> PermissionResult:
        if action not in SUPPORTED_ACTIONS[ResourceType.GROUP]:
            return self._unsupported(ResourceType.GROUP)
        role = self.repository.get_group_role(actor_id, group_id)
        if role is None:
            if not self.repository.group_exists(group_id):
                return _deny("Group not found", not_found=True)
            return _deny("You do not have permission to access this group")
        if action in (Action.VIEW, Action.SHARE):
            return ALLOWED
        if role == GroupRole.ADMIN:
            return ALLOWED
        if action is Action.DELETE:
            return _deny("You do not have permission to delete this group")
        return _deny("Admin permission required")

    def _check_reservation(self, actor_id, action: Action, reservation_id, password: Optional[str]) -> PermissionResult:
        reservation = self.repository.get_reservation(reservation_id)
        if reservation is None:
            return _deny("Reservation not found", not_found=True)
        if action not in SUPPORTED_ACTIONS[ResourceType.RESERVATION]:
            return self._unsupported(ResourceType.RESERVATION)
        if reservation.user_id == actor_id:
            return ALLOWED
        if action is Action.VIEW:
            if reservation.wish_owner_id == actor_id:
                return ALLOWED
            return _deny("Can only view your own reservations or reservations on your wishes")
        if action is Action.DELETE:
            return _deny("Can only cancel your own reservations")
        return _deny("Can only modify your own reservations")

    @staticmethod
    def _unsupported(resource_type: ResourceType) -> PermissionResult:
        return _deny(f"Action not supported for {resource_type.value}")
