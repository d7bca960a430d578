"""
List co-manager workflow.

Overview
--------
Only a list's owner (or a globally privileged user) may manage co-managers;
every entry point starts with `PermissionService.require(..., "admin", list)`.

- Adding someone who already has an account grants `ListAdmin` directly.
  Re-adding an existing co-manager is a successful no-op.
- Adding an email with no account creates (or refreshes) a `ListInvitation`
  and emails an accept link. The email is sent after commit; a delivery
  failure is logged and the invitation stays.
- Removing a co-manager is a conditional delete. Of two racing removals one
  succeeds and the other gets `NotFoundError`.

Invitation lifecycle
--------------------
pending -> accepted (accept_invitation) | expired (clock passes expires_at).
Expired, unaccepted rows are pruned by `cleanup_expired_invitations()`
(management command `cleanup_list_invitations`).
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounts.models import User
from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from core.utils.transactions import run_in_transaction
from wishlists.models import AuditAction, InvitationStatus, ListAdmin, ListInvitation, WishList
from wishlists.services.audit import record_list_action
from wishlists.services.notifications import send_list_invitation
from wishlists.services.permissions import Action, PermissionService, ResourceRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserSummary:
    id: int
    username: str
    email: str
    name: str


@dataclass(frozen=True)
class InvitationOutcome:
    directly_added: bool
    invitation_id: Optional[int] = None


@dataclass(frozen=True)
class CoManager:
    user_id: int
    user: UserSummary
    added_at: datetime
    added_by: Optional[UserSummary]


@dataclass(frozen=True)
class InvitationDetails:
    id: int
    list_id: int
    list_name: str
    email: str
    invited_by: UserSummary
    status: str
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class AcceptedInvitation:
    list_id: int
    list_name: str


def normalize_email(raw: str) -> str:
    return (raw or "").strip().lower()


def summarize_user(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, username=user.username, email=user.email, name=user.display_name())


class ListInvitationService:
    def __init__(
        self,
        permissions: Optional[PermissionService] = None,
        clock: Optional[Callable[[], datetime]] = None,
        mailer: Optional[Callable] = None,
        auditor: Optional[Callable] = None,
    ):
        self.permissions = permissions or PermissionService()
        self.clock = clock or timezone.now
        self.mailer = mailer or send_list_invitation
        self.auditor = auditor or record_list_action

    # ------------------------------------------------------------------
    # Co-managers
    # ------------------------------------------------------------------
    def create_invitation(self, list_id, email: str, requester_id) -> InvitationOutcome:
        """Grant co-manager rights to `email`, directly or through an emailed invitation."""
        self.permissions.require(requester_id, Action.ADMIN, ResourceRef.for_list(list_id))

        normalized = normalize_email(email)
        try:
            validate_email(normalized)
        except DjangoValidationError:
            raise ValidationError("Enter a valid email address", field="email") from None

        requester = User.objects.filter(pk=requester_id).only("id", "email", "username", "first_name", "last_name").first()
        if requester is not None and normalize_email(requester.email) == normalized:
            raise ValidationError("Cannot add yourself as co-manager", field="email")

        wishlist = WishList.objects.select_related("owner").filter(pk=list_id).first()
        if wishlist is None:
            raise NotFoundError("List not found")
        if normalize_email(wishlist.owner.email) == normalized:
            raise ValidationError("List owner cannot be a co-manager", field="email")

        target_id = User.objects.filter(email__iexact=normalized).values_list("id", flat=True).first()
        if target_id is not None:
            return self._grant_existing_user(wishlist, target_id, requester_id)
        return self._invite_by_email(wishlist, normalized, requester)

    def _grant_existing_user(self, wishlist: WishList, user_id, requester_id) -> InvitationOutcome:
        (created,) = run_in_transaction(
            lambda: ListAdmin.objects.get_or_create(
                wishlist_id=wishlist.pk,
                user_id=user_id,
                defaults={"added_by_id": requester_id, "added_at": self.clock()},
            )[1],
        )
        if created:
            logger.info("User %s added as co-manager of list %s by %s", user_id, wishlist.pk, requester_id)
            self.auditor(wishlist.pk, requester_id, AuditAction.CO_MANAGER_ADDED, {"user_id": user_id})
        return InvitationOutcome(directly_added=True)

    def _invite_by_email(self, wishlist: WishList, email: str, requester: User) -> InvitationOutcome:
        now = self.clock()
        expires_at = now + timedelta(days=settings.LIST_INVITATION_TTL_DAYS)

        def locked() -> Optional[ListInvitation]:
            return (
                ListInvitation.objects.select_for_update()
                .filter(wishlist_id=wishlist.pk, email=email)
                .first()
            )

        def upsert() -> ListInvitation:
            invitation = locked()
            if invitation is None:
                try:
                    with transaction.atomic():
                        return ListInvitation.objects.create(
                            wishlist_id=wishlist.pk,
                            email=email,
                            token=secrets.token_urlsafe(32),
                            invited_by_id=requester.pk,
                            created_at=now,
                            expires_at=expires_at,
                        )
                except IntegrityError:
                    # A concurrent invite for the same address committed first.
                    invitation = locked()
                    if invitation is None:
                        raise
            # Re-inviting refreshes the window; a consumed token is never reused.
            invitation.invited_by_id = requester.pk
            invitation.expires_at = expires_at
            fields = ["invited_by", "expires_at"]
            if invitation.accepted_at is not None:
                invitation.accepted_at = None
                invitation.token = secrets.token_urlsafe(32)
                invitation.created_at = now
                fields += ["accepted_at", "token", "created_at"]
            invitation.save(update_fields=fields)
            return invitation

        (invitation,) = run_in_transaction(upsert)
        logger.info("Invitation %s for list %s sent by %s", invitation.pk, wishlist.pk, requester.pk)
        transaction.on_commit(
            lambda: self._deliver(invitation, list_name=wishlist.name, inviter_name=requester.display_name())
        )
        return InvitationOutcome(directly_added=False, invitation_id=invitation.pk)

    def _deliver(self, invitation: ListInvitation, *, list_name: str, inviter_name: str) -> None:
        try:
            self.mailer(invitation, list_name=list_name, inviter_name=inviter_name)
        except Exception:
            logger.exception("Failed to send invitation email for invitation %s", invitation.pk)

    def remove_co_manager(self, list_id, target_user_id, requester_id) -> None:
        self.permissions.require(requester_id, Action.ADMIN, ResourceRef.for_list(list_id))
        if target_user_id == requester_id:
            owner_id = WishList.objects.filter(pk=list_id).values_list("owner_id", flat=True).first()
            if owner_id == requester_id:
                raise ValidationError("Cannot remove yourself as owner")
            raise ValidationError("Cannot remove yourself as co-manager")

        (deleted,) = run_in_transaction(
            lambda: ListAdmin.objects.filter(wishlist_id=list_id, user_id=target_user_id).delete()[0],
        )
        if deleted == 0:
            raise NotFoundError("User is not a co-manager of this list")

        logger.info("User %s removed as co-manager of list %s by %s", target_user_id, list_id, requester_id)
        self.auditor(list_id, requester_id, AuditAction.CO_MANAGER_REMOVED, {"user_id": target_user_id})

    def get_list_co_managers(self, list_id, requester_id) -> list[CoManager]:
        self.permissions.require(requester_id, Action.VIEW, ResourceRef.for_list(list_id))
        grants = (
            ListAdmin.objects.filter(wishlist_id=list_id)
            .select_related("user", "added_by")
            .order_by("added_at", "id")
        )
        return [
            CoManager(
                user_id=grant.user_id,
                user=summarize_user(grant.user),
                added_at=grant.added_at,
                added_by=summarize_user(grant.added_by),
            )
            for grant in grants
        ]

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------
    def _details(self, invitation: ListInvitation, now: datetime) -> InvitationDetails:
        return InvitationDetails(
            id=invitation.pk,
            list_id=invitation.wishlist_id,
            list_name=invitation.wishlist.name,
            email=invitation.email,
            invited_by=summarize_user(invitation.invited_by),
            status=invitation.status_at(now),
            created_at=invitation.created_at,
            expires_at=invitation.expires_at,
        )

    def validate_invitation(self, token: str) -> Optional[InvitationDetails]:
        """Look up an invitation by token; None when the token is unknown."""
        invitation = (
            ListInvitation.objects.select_related("wishlist", "invited_by")
            .filter(token=token)
            .first()
        )
        if invitation is None:
            return None
        return self._details(invitation, self.clock())

    def accept_invitation(self, token: str, user_id) -> AcceptedInvitation:
        """
        Accept an invitation as `user_id`.

        The accepting account's email must match the invitation. Accepting when
        the user is already a co-manager only marks the invitation accepted.
        """
        user_email = User.objects.filter(pk=user_id).values_list("email", flat=True).first()
        if user_email is None:
            raise NotFoundError("User not found")

        invitation = ListInvitation.objects.select_related("wishlist").filter(token=token).first()
        if invitation is None:
            raise NotFoundError("Invitation not found")
        if normalize_email(invitation.email) != normalize_email(user_email):
            raise ForbiddenError("This invitation is not for your email address")

        now = self.clock()
        status = invitation.status_at(now)
        if status == InvitationStatus.ACCEPTED:
            raise ValidationError("Invitation has already been accepted")
        if status == InvitationStatus.EXPIRED:
            raise ValidationError("Invitation has expired")

        def mark_accepted() -> None:
            updated = ListInvitation.objects.filter(pk=invitation.pk, accepted_at__isnull=True).update(accepted_at=now)
            if updated == 0:
                raise ValidationError("Invitation has already been accepted")

        def grant() -> bool:
            return ListAdmin.objects.get_or_create(
                wishlist_id=invitation.wishlist_id,
                user_id=user_id,
                defaults={"added_by_id": invitation.invited_by_id, "added_at": now},
            )[1]

        _, created = run_in_transaction(mark_accepted, grant)
        if created:
            logger.info("User %s accepted invitation %s to list %s", user_id, invitation.pk, invitation.wishlist_id)
            self.auditor(
                invitation.wishlist_id,
                user_id,
                AuditAction.CO_MANAGER_ADDED,
                {"user_id": user_id, "invitation_id": invitation.pk},
            )
        return AcceptedInvitation(list_id=invitation.wishlist_id, list_name=invitation.wishlist.name)

    def get_list_invitations(self, list_id, requester_id) -> list[InvitationDetails]:
        self.permissions.require(requester_id, Action.ADMIN, ResourceRef.for_list(list_id))
        now = self.clock()
        invitations = (
            ListInvitation.objects.filter(wishlist_id=list_id, accepted_at__isnull=True)
            .select_related("wishlist", "invited_by")
            .order_by("-created_at", "-id")
        )
        return [self._details(invitation, now) for invitation in invitations]

    def cancel_invitation(self, invitation_id, requester_id, *, list_id=None) -> None:
        invitation_list_id = (
            ListInvitation.objects.filter(pk=invitation_id).values_list("wishlist_id", flat=True).first()
        )
        if invitation_list_id is None or (list_id is not None and invitation_list_id != list_id):
            raise NotFoundError("Invitation not found")
        self.permissions.require(requester_id, Action.ADMIN, ResourceRef.for_list(invitation_list_id))

        deleted, _ = ListInvitation.objects.filter(pk=invitation_id).delete()
        if not deleted:
            raise NotFoundError("Invitation not found")
        logger.info("Invitation %s on list %s cancelled by %s", invitation_id, invitation_list_id, requester_id)

    def _expired_invitations(self):
        return ListInvitation.objects.filter(accepted_at__isnull=True, expires_at__lt=self.clock())

    def count_expired_invitations(self) -> int:
        return self._expired_invitations().count()

    def cleanup_expired_invitations(self) -> int:
        deleted, _ = self._expired_invitations().delete()
        if deleted:
            logger.info("Removed %s expired list invitations", deleted)
        return deleted

    def get_pending_invitations_for_user(self, email: str) -> list[InvitationDetails]:
        now = self.clock()
        invitations = (
            ListInvitation.objects.filter(
                email__iexact=normalize_email(email),
                accepted_at__isnull=True,
                expires_at__gt=now,
            )
            .select_related("wishlist", "invited_by")
            .order_by("-created_at")
        )
        return [self._details(invitation, now) for invitation in invitations]
