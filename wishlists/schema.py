"""
drf-spectacular helpers shared by the wishlist API views.

Error envelopes mirror `core.exceptions.api_exception_handler`:
`{"detail": str, "code": str}`, plus `errors` for validation failures and
`retry_after` for throttled requests.
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, inline_serializer
from rest_framework import serializers

LIST_ID_PARAM = OpenApiParameter(
    name="list_id",
    type=OpenApiTypes.INT,
    location=OpenApiParameter.PATH,
    description="Wishlist id.",
)

ERROR_RESPONSE = OpenApiResponse(
    response=inline_serializer(
        name="Error",
        fields={
            "detail": serializers.CharField(),
            "code": serializers.CharField(),
        },
    ),
    description="Error response",
)

# Administration endpoints answer 404 for both "no such list" and "not your list".
NOT_FOUND_RESPONSE = OpenApiResponse(
    response=ERROR_RESPONSE.response,
    description="List not found, or caller may not administer it",
)

VALIDATION_ERROR_RESPONSE = OpenApiResponse(
    response=inline_serializer(
        name="ValidationError",
        fields={
            "detail": serializers.CharField(),
            "code": serializers.CharField(),
            "errors": serializers.DictField(
                child=serializers.ListField(child=serializers.CharField()),
                required=False,
            ),
        },
    ),
    description="Validation error",
)

THROTTLED_RESPONSE = OpenApiResponse(
    response=inline_serializer(
        name="Throttled",
        fields={
            "detail": serializers.CharField(),
            "code": serializers.CharField(),
            "retry_after": serializers.IntegerField(required=False),
        },
    ),
    description="Rate limit exceeded",
)
