from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, permissions

from wishlists.filters import AuditLogFilter
from wishlists.models import AuditLog
from wishlists.schema import ERROR_RESPONSE, LIST_ID_PARAM, NOT_FOUND_RESPONSE
from wishlists.serializers import AuditLogSerializer
from wishlists.services import Action, PermissionService, ResourceRef


@extend_schema(
    tags=["Audit"],
    parameters=[
        LIST_ID_PARAM,
        OpenApiParameter(name="action", type=OpenApiTypes.STR, required=False, description="e.g. co_manager_added"),
        OpenApiParameter(name="date_from", type=OpenApiTypes.DATETIME, required=False),
        OpenApiParameter(name="date_to", type=OpenApiTypes.DATETIME, required=False),
    ],
    responses={200: AuditLogSerializer(many=True), 401: ERROR_RESPONSE, 404: NOT_FOUND_RESPONSE},
    description="Audit trail of a list, readable by whoever may administer it.",
)
class ListAuditLogView(generics.ListAPIView):
    """
    Read-only audit entries for one list, newest first.

    Filters (query params):
      - action: one of AuditAction
      - date_from, date_to: ISO8601 datetimes (inclusive)
    """

    serializer_class = AuditLogSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = AuditLogFilter
    throttle_scope = "audit-read"
    ordering = ("-created_at", "-id")

    def get_queryset(self):
        # drf-spectacular sets `swagger_fake_view` while generating the schema.
        if getattr(self, "swagger_fake_view", False):
            return AuditLog.objects.none()
        return AuditLog.objects.filter(list_id=self.kwargs["list_id"]).order_by("-created_at", "-id")

    def list(self, request, *args, **kwargs):
        PermissionService().require(request.user.id, Action.ADMIN, ResourceRef.for_list(self.kwargs["list_id"]))
        return super().list(request, *args, **kwargs)
