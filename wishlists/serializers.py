"""
DRF serializers for the wishlist API.

Service results are frozen dataclasses; the read serializers below declare
fields explicitly and read plain attributes from them.
"""

from __future__ import annotations

from rest_framework import serializers

from wishlists.models import AuditLog


class UserSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()
    email = serializers.EmailField()
    name = serializers.CharField()


class CoManagerSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    user = UserSummarySerializer()
    added_at = serializers.DateTimeField()
    added_by = UserSummarySerializer(allow_null=True)


class AddCoManagerSerializer(serializers.Serializer):
    email = serializers.EmailField()


class InvitationOutcomeSerializer(serializers.Serializer):
    directly_added = serializers.BooleanField()
    invitation_id = serializers.IntegerField(allow_null=True)


class InvitationSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    list_id = serializers.IntegerField()
    list_name = serializers.CharField()
    email = serializers.EmailField()
    invited_by = UserSummarySerializer()
    status = serializers.CharField()
    created_at = serializers.DateTimeField()
    expires_at = serializers.DateTimeField()


class AcceptedInvitationSerializer(serializers.Serializer):
    list_id = serializers.IntegerField()
    list_name = serializers.CharField()


class ShareTokenSerializer(serializers.Serializer):
    share_token = serializers.CharField()


class AuditLogSerializer(serializers.ModelSerializer):
    actor_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = AuditLog
        fields = ["id", "list_id", "actor_id", "action", "changes", "request_id", "created_at"]
