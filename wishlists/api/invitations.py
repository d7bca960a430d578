"""
Invitation endpoints.

    GET    /api/lists/<list_id>/invitations/                  open invitations (owner only)
    DELETE /api/lists/<list_id>/invitations/<invitation_id>/  cancel (owner only)
    GET    /api/invitations/list/<token>/                     inspect a token (public)
    POST   /api/invitations/list/<token>/                     accept as the signed-in user
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import NotFoundError
from wishlists.schema import ERROR_RESPONSE, LIST_ID_PARAM, NOT_FOUND_RESPONSE, THROTTLED_RESPONSE, VALIDATION_ERROR_RESPONSE
from wishlists.serializers import AcceptedInvitationSerializer, InvitationSerializer
from wishlists.services import ListInvitationService


class ListInvitationsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        tags=["Invitations"],
        parameters=[LIST_ID_PARAM],
        responses={200: InvitationSerializer(many=True), 401: ERROR_RESPONSE, 404: NOT_FOUND_RESPONSE},
    )
    def get(self, request: Request, list_id: int) -> Response:
        invitations = ListInvitationService().get_list_invitations(list_id, request.user.id)
        return Response(InvitationSerializer(invitations, many=True).data)


class ListInvitationDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        tags=["Invitations"],
        parameters=[LIST_ID_PARAM],
        responses={204: OpenApiResponse(description="Invitation cancelled"), 401: ERROR_RESPONSE, 404: NOT_FOUND_RESPONSE},
    )
    def delete(self, request: Request, list_id: int, invitation_id: int) -> Response:
        ListInvitationService().cancel_invitation(invitation_id, request.user.id, list_id=list_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class InvitationTokenView(APIView):
    """Token holders can inspect an invitation before signing in; accepting needs a session."""

    def get_permissions(self):
        if self.request.method == "GET":
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get_throttles(self):
        self.throttle_scope = "invitation-accept" if self.request.method == "POST" else None
        return super().get_throttles()

    @extend_schema(
        tags=["Invitations"],
        responses={200: InvitationSerializer, 404: ERROR_RESPONSE},
    )
    def get(self, request: Request, token: str) -> Response:
        details = ListInvitationService().validate_invitation(token)
        if details is None:
            raise NotFoundError("Invitation not found")
        return Response(InvitationSerializer(details).data)

    @extend_schema(
        tags=["Invitations"],
        request=None,
        responses={
            200: AcceptedInvitationSerializer,
            400: VALIDATION_ERROR_RESPONSE,
            401: ERROR_RESPONSE,
            403: ERROR_RESPONSE,
            404: ERROR_RESPONSE,
            429: THROTTLED_RESPONSE,
        },
    )
    def post(self, request: Request, token: str) -> Response:
        accepted = ListInvitationService().accept_invitation(token, request.user.id)
        return Response(AcceptedInvitationSerializer(accepted).data)
