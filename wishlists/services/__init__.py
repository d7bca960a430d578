"""Domain services for wishlists: permission decisions, co-managers, list lifecycle."""

from wishlists.services.invitations import ListInvitationService
from wishlists.services.lists import ListService
from wishlists.services.permissions import Action, PermissionResult, PermissionService, ResourceRef, ResourceType

__all__ = [
    "Action",
    "ListInvitationService",
    "ListService",
    "PermissionResult",
    "PermissionService",
    "ResourceRef",
    "ResourceType",
]
