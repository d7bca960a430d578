from wishlists.api.audit import ListAuditLogView
from wishlists.api.co_managers import CoManagerDetailView, ListCoManagersView
from wishlists.api.invitations import InvitationTokenView, ListInvitationDetailView, ListInvitationsView
from wishlists.api.lists import ShareTokenView, WishListDetailView

__all__ = [
    "CoManagerDetailView",
    "InvitationTokenView",
    "ListAuditLogView",
    "ListCoManagersView",
    "ListInvitationDetailView",
    "ListInvitationsView",
    "ShareTokenView",
    "WishListDetailView",
]
