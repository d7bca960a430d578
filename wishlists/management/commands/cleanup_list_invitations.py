"""
Prune expired, never-accepted list invitations.

Usage
-----
    python manage.py cleanup_list_invitations
    python manage.py cleanup_list_invitations --dry-run

Notes
-----
- Accepted invitations are kept; they document how a co-manager was added.
- Safe to run as a cron/periodic job.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand

from wishlists.services import ListInvitationService


class Command(BaseCommand):
    help = "Delete list invitations that expired without being accepted."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report how many invitations would be deleted.",
        )

    def handle(self, *args, **options):
        service = ListInvitationService()
        if options["dry_run"]:
            count = service.count_expired_invitations()
            self.stdout.write(self.style.WARNING(f"{count} expired invitations would be deleted."))
            return

        count = service.cleanup_expired_invitations()
        self.stdout.write(self.style.SUCCESS(f"Deleted {count} expired invitations."))
