"""
Invitation email delivery.

Delivery is best-effort: callers wrap `send_list_invitation` and log failures,
so an SMTP outage never undoes the invitation record it announces.
"""

from __future__ import annotations

from django.conf import settings
from django.core.mail import send_mail

from wishlists.models import ListInvitation


def invitation_accept_url(token: str) -> str:
    base = settings.APP_BASE_URL.rstrip("/")
    return f"{base}/invitations/list/{token}"


def send_list_invitation(invitation: ListInvitation, *, list_name: str, inviter_name: str) -> None:
    accept_url = invitation_accept_url(invitation.token)
    subject = f'{inviter_name} invited you to help manage "{list_name}"'
    body = (
        f'{inviter_name} invited you to become a co-manager of the wishlist "{list_name}".\n\n'
        f"Create an account with this email address, then accept the invitation:\n{accept_url}\n\n"
        f"This invitation expires on {invitation.expires_at:%Y-%m-%d}."
    )
    send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [invitation.email], fail_silently=False)
