"""
Co-manager endpoints.

    GET    /api/lists/<list_id>/admins/             co-managers (requires view)
    POST   /api/lists/<list_id>/admins/             add by email (owner only)
    DELETE /api/lists/<list_id>/admins/<user_id>/   remove (owner only)

Status codes come from `core.exceptions.status_for_exception`; an admin
denial on these routes answers 404 so the list stays unconfirmed.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from wishlists.schema import (
    ERROR_RESPONSE,
    LIST_ID_PARAM,
    NOT_FOUND_RESPONSE,
    THROTTLED_RESPONSE,
    VALIDATION_ERROR_RESPONSE,
)
from wishlists.serializers import AddCoManagerSerializer, CoManagerSerializer, InvitationOutcomeSerializer
from wishlists.services import ListInvitationService


class ListCoManagersView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get_throttles(self):
        # Only adding is rate limited; listing shares the global user rate.
        self.throttle_scope = "co-manager-add" if self.request.method == "POST" else None
        return super().get_throttles()

    @extend_schema(
        tags=["Co-managers"],
        parameters=[LIST_ID_PARAM],
        responses={200: CoManagerSerializer(many=True), 401: ERROR_RESPONSE, 404: NOT_FOUND_RESPONSE},
    )
    def get(self, request: Request, list_id: int) -> Response:
        co_managers = ListInvitationService().get_list_co_managers(list_id, request.user.id)
        return Response(CoManagerSerializer(co_managers, many=True).data)

    @extend_schema(
        tags=["Co-managers"],
        parameters=[LIST_ID_PARAM],
        request=AddCoManagerSerializer,
        responses={
            201: InvitationOutcomeSerializer,
            400: VALIDATION_ERROR_RESPONSE,
            401: ERROR_RESPONSE,
            404: NOT_FOUND_RESPONSE,
            429: THROTTLED_RESPONSE,
        },
        description=(
            "Add a co-manager by email. Existing accounts are granted immediately "
            "(`directly_added=true`); other addresses receive an emailed invitation."
        ),
    )
    def post(self, request: Request, list_id: int) -> Response:
        payload = AddCoManagerSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        outcome = ListInvitationService().create_invitation(
            list_id, payload.validated_data["email"], request.user.id
        )
        return Response(InvitationOutcomeSerializer(outcome).data, status=status.HTTP_201_CREATED)


class CoManagerDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    throttle_scope = "co-manager-remove"

    @extend_schema(
        tags=["Co-managers"],
        parameters=[LIST_ID_PARAM],
        responses={
            204: OpenApiResponse(description="Co-manager removed"),
            400: VALIDATION_ERROR_RESPONSE,
            401: ERROR_RESPONSE,
            404: NOT_FOUND_RESPONSE,
            429: THROTTLED_RESPONSE,
        },
    )
    def delete(self, request: Request, list_id: int, user_id: int) -> Response:
        ListInvitationService().remove_co_manager(list_id, user_id, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)
