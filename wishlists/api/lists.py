"""List lifecycle endpoints: delete a list, rotate its share token."""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from wishlists.schema import ERROR_RESPONSE, LIST_ID_PARAM
from wishlists.serializers import ShareTokenSerializer
from wishlists.services import ListService


class WishListDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        tags=["Lists"],
        parameters=[LIST_ID_PARAM],
        responses={
            204: OpenApiResponse(description="List and its grants deleted"),
            401: ERROR_RESPONSE,
            403: ERROR_RESPONSE,
            404: ERROR_RESPONSE,
        },
    )
    def delete(self, request: Request, list_id: int) -> Response:
        ListService().delete_list(list_id, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ShareTokenView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        tags=["Lists"],
        parameters=[LIST_ID_PARAM],
        request=None,
        responses={200: ShareTokenSerializer, 401: ERROR_RESPONSE, 403: ERROR_RESPONSE, 404: ERROR_RESPONSE},
    )
    def post(self, request: Request, list_id: int) -> Response:
        token = ListService().generate_share_token(list_id, request.user.id)
        return Response(ShareTokenSerializer({"share_token": token}).data)
