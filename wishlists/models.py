"""
Wishlist domain models.

Entities
--------
- `WishList`: owned by exactly one user; visibility tier private/public/password.
- `ListAdmin`: co-manager grant on a list, at most one per (list, user).
- `Group` / `GroupMembership`: user groups with a member/admin role.
- `ListShare`: a list shared with a group (grants members read access).
- `Wish` / `ListWish`: owned wishes and their placement on lists.
- `Reservation`: a user reserving a wish.
- `ListInvitation`: pending co-manager invitation addressed by email.
- `AuditLog`: append-only trail of list-level mutations.

Integrity
---------
- Join tables use `UniqueConstraint`, so duplicate grants are rejected by the
  database even when two requests race past the application checks.
- `AuditLog.list_id` is a plain integer so entries outlive the list they
  describe (list deletion is itself audited).
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import OwnedModel


class Visibility(models.TextChoices):
    PRIVATE = "private", "Private"
    PUBLIC = "public", "Public"
    PASSWORD = "password", "Password protected"


class GroupRole(models.TextChoices):
    MEMBER = "member", "Member"
    ADMIN = "admin", "Admin"


class AuditAction(models.TextChoices):
    CREATED = "created", "Created"
    UPDATED = "updated", "Updated"
    DELETED = "deleted", "Deleted"
    SHARED = "shared", "Shared"
    CO_MANAGER_ADDED = "co_manager_added", "Co-manager added"
    CO_MANAGER_REMOVED = "co_manager_removed", "Co-manager removed"


class WishList(OwnedModel):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    visibility = models.CharField(max_length=16, choices=Visibility.choices, default=Visibility.PRIVATE)
    # Django password hash (make_password); blank means no password configured.
    password = models.CharField(max_length=128, blank=True, default="")
    share_token = models.CharField(max_length=64, unique=True, null=True, blank=True)

    class Meta(OwnedModel.Meta):
        indexes = [
            models.Index(fields=["owner", "-created_at"], name="wishlist_owner_created_idx"),
            models.Index(fields=["visibility"], name="wishlist_visibility_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class ListAdmin(models.Model):
    """Co-manager grant: `user` may view, edit and share `wishlist`."""

    wishlist = models.ForeignKey(WishList, on_delete=models.CASCADE, related_name="co_managers")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="co_managed_lists")
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    added_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("wishlist", "user"), name="unique_list_co_manager"),
        ]
        indexes = [models.Index(fields=["user"], name="listadmin_user_idx")]
        ordering = ("added_at",)

    def __str__(self) -> str:
        return f"ListAdmin(list={self.wishlist_id}, user={self.user_id})"


class Group(models.Model):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class GroupMembership(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="group_memberships")
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name="memberships")
    role = models.CharField(max_length=16, choices=GroupRole.choices, default=GroupRole.MEMBER)
    joined_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("user", "group"), name="unique_group_membership"),
        ]

    def __str__(self) -> str:
        return f"GroupMembership(group={self.group_id}, user={self.user_id}, role={self.role})"


class ListShare(models.Model):
    """A list shared with a group; members of the group may view the list."""

    wishlist = models.ForeignKey(WishList, on_delete=models.CASCADE, related_name="group_shares")
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name="list_shares")
    shared_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    shared_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("wishlist", "group"), name="unique_list_group_share"),
        ]


class Wish(OwnedModel):
    title = models.CharField(max_length=300)
    url = models.URLField(max_length=2000, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    def __str__(self) -> str:
        return self.title


class ListWish(models.Model):
    wishlist = models.ForeignKey(WishList, on_delete=models.CASCADE, related_name="list_wishes")
    wish = models.ForeignKey(Wish, on_delete=models.CASCADE, related_name="list_memberships")
    added_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("wishlist", "wish"), name="unique_list_wish"),
        ]


class Reservation(models.Model):
    wish = models.ForeignKey(Wish, on_delete=models.CASCADE, related_name="reservations")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="reservations")
    reserved_at = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return f"Reservation(wish={self.wish_id}, user={self.user_id})"


class InvitationStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    EXPIRED = "expired", "Expired"


class ListInvitation(models.Model):
    """Co-manager invitation for an email address with no account yet."""

    wishlist = models.ForeignKey(WishList, on_delete=models.CASCADE, related_name="invitations")
    email = models.EmailField()
    token = models.CharField(max_length=64, unique=True)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_list_invitations",
    )
    created_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()
    accepted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("wishlist", "email"), name="unique_list_invitation_email"),
        ]
        indexes = [
            models.Index(fields=["email"], name="listinvitation_email_idx"),
            models.Index(fields=["expires_at"], name="listinvitation_expires_idx"),
        ]
        ordering = ("-created_at",)

    def status_at(self, now) -> str:
        if self.accepted_at is not None:
            return InvitationStatus.ACCEPTED
        if self.expires_at < now:
            return InvitationStatus.EXPIRED
        return InvitationStatus.PENDING

    def __str__(self) -> str:
        return f"ListInvitation(list={self.wishlist_id}, email={self.email})"


class AuditLog(models.Model):
    """
    Trail of list-level mutations.

    - `actor` is who did it; nullable so the trail survives account deletion.
    - `changes` is a small JSON payload describing the mutation, e.g.
      {"user_id": 7} for co-manager changes or {"name": "..."} for deletes.
    """

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="wishlist_audit_logs",
    )
    list_id = models.BigIntegerField(db_index=True)
    action = models.CharField(max_length=24, choices=AuditAction.choices)
    changes = models.JSONField(default=dict, blank=True)
    request_id = models.CharField(max_length=64, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["list_id", "-created_at"], name="auditlog_list_created_idx"),
            models.Index(fields=["action"], name="auditlog_action_idx"),
        ]
        ordering = ("-created_at",)

    def __str__(self) -> str:  # pragma: no cover
        return f"AuditLog<{self.action} list:{self.list_id}>"
