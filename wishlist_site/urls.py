"""
Project URL configuration.

Surfaces
--------
- `/admin/`: Django admin (back-office only).
- `/api/lists/<id>/...`: list administration: co-managers, invitations,
  deletion, share tokens, audit trail.
- `/api/invitations/list/<token>/`: invitation inspection and acceptance.
- `/api/schema`, `/api/docs`, `/api/redoc`: OpenAPI schema & UIs.
"""

from __future__ import annotations

from django.contrib import admin
from django.urls import path

from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

from wishlists.api import (
    CoManagerDetailView,
    InvitationTokenView,
    ListAuditLogView,
    ListCoManagersView,
    ListInvitationDetailView,
    ListInvitationsView,
    ShareTokenView,
    WishListDetailView,
)

urlpatterns = [
    path("admin/", admin.site.urls),

    # OpenAPI / Docs
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),

    # Lists
    path("api/lists/<int:list_id>/", WishListDetailView.as_view(), name="list-detail"),
    path("api/lists/<int:list_id>/share-token/", ShareTokenView.as_view(), name="list-share-token"),
    path("api/lists/<int:list_id>/audit/", ListAuditLogView.as_view(), name="list-audit"),

    # Co-managers
    path("api/lists/<int:list_id>/admins/", ListCoManagersView.as_view(), name="list-admins"),
    path("api/lists/<int:list_id>/admins/<int:user_id>/", CoManagerDetailView.as_view(), name="list-admin-detail"),

    # Invitations
    path("api/lists/<int:list_id>/invitations/", ListInvitationsView.as_view(), name="list-invitations"),
    path(
        "api/lists/<int:list_id>/invitations/<int:invitation_id>/",
        ListInvitationDetailView.as_view(),
        name="list-invitation-detail",
    ),
    path("api/invitations/list/<str:token>/", InvitationTokenView.as_view(), name="invitation-token"),
]
