"""
HTTP surface tests.

What these tests verify
-----------------------
- 401 for anonymous callers on authenticated endpoints.
- 404 (not 403) when a non-owner probes co-manager administration.
- 403 for other forbidden actions, 400 for validation, 201 on add.
- Throttling on the add-co-manager scope answers 429 with `retry_after`.
- Response bodies carry friendly messages, never internal denial reasons.

Notes
-----
- Throttle rates are bound on the throttle class at import time, so the
  throttling test patches `ScopedRateThrottle.THROTTLE_RATES` directly and
  clears the cache for a clean window.
"""

from __future__ import annotations

from unittest import mock

from django.core.cache import cache
from rest_framework.test import APIClient, APITestCase
from rest_framework.throttling import ScopedRateThrottle

from core.exceptions import FRIENDLY_ERROR_MESSAGES
from wishlists.models import AuditLog, ListAdmin, ListInvitation, WishList
from wishlists.tests.helpers import PASSWORD, add_co_manager, make_list, make_user


class CoManagerApiTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.owner = make_user("owner")
        self.co = make_user("co")
        self.friend = make_user("friend")
        self.wishlist = make_list(self.owner)
        add_co_manager(self.wishlist, self.co)
        self.url = f"/api/lists/{self.wishlist.pk}/admins/"
        self.client = APIClient()

    def login(self, user):
        self.client.login(username=user.username, password=PASSWORD)

    def test_anonymous_is_unauthorized(self):
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, 401, r.content)
        self.assertEqual(r.json()["code"], "UNAUTHORIZED")

    def test_owner_lists_co_managers(self):
        self.login(self.owner)
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, 200, r.content)
        data = r.json()
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]["user_id"], self.co.id)
        self.assertEqual(data[0]["user"]["email"], "co@example.com")
        self.assertEqual(data[0]["added_by"]["id"], self.owner.id)

    def test_owner_adds_existing_user(self):
        self.login(self.owner)
        r = self.client.post(self.url, {"email": "friend@example.com"}, format="json")
        self.assertEqual(r.status_code, 201, r.content)
        self.assertEqual(r.json()["directly_added"], True)
        self.assertTrue(ListAdmin.objects.filter(wishlist=self.wishlist, user=self.friend).exists())

    def test_owner_invites_unknown_email(self):
        self.login(self.owner)
        r = self.client.post(self.url, {"email": "nobody@example.com"}, format="json")
        self.assertEqual(r.status_code, 201, r.content)
        self.assertEqual(r.json()["directly_added"], False)
        self.assertTrue(ListInvitation.objects.filter(email="nobody@example.com").exists())

    def test_self_add_is_validation_error(self):
        self.login(self.owner)
        r = self.client.post(self.url, {"email": "owner@example.com"}, format="json")
        self.assertEqual(r.status_code, 400, r.content)
        body = r.json()
        self.assertEqual(body["code"], "VALIDATION_ERROR")
        self.assertEqual(body["detail"], "Cannot add yourself as co-manager")

    def test_malformed_email_is_validation_error(self):
        self.login(self.owner)
        r = self.client.post(self.url, {"email": "nope"}, format="json")
        self.assertEqual(r.status_code, 400, r.content)
        self.assertIn("email", r.json()["errors"])

    def test_co_manager_add_is_concealed_as_not_found(self):
        self.login(self.co)
        r = self.client.post(self.url, {"email": "friend@example.com"}, format="json")
        self.assertEqual(r.status_code, 404, r.content)
        body = r.json()
        self.assertEqual(body["code"], "NOT_FOUND")
        self.assertEqual(body["detail"], FRIENDLY_ERROR_MESSAGES["NOT_FOUND"])
        self.assertNotIn("co-managers", body["detail"])

    def test_stranger_and_missing_list_are_indistinguishable(self):
        self.login(self.friend)
        hidden = self.client.post(self.url, {"email": "x@example.com"}, format="json")
        missing = self.client.post("/api/lists/999999/admins/", {"email": "x@example.com"}, format="json")
        self.assertEqual(hidden.status_code, 404)
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(hidden.json(), missing.json())

    def test_remove_co_manager(self):
        self.login(self.owner)
        r = self.client.delete(f"{self.url}{self.co.id}/")
        self.assertEqual(r.status_code, 204, r.content)
        again = self.client.delete(f"{self.url}{self.co.id}/")
        self.assertEqual(again.status_code, 404, again.content)

    def test_co_manager_remove_is_not_found(self):
        self.login(self.co)
        r = self.client.delete(f"{self.url}{self.co.id}/")
        self.assertEqual(r.status_code, 404, r.content)
        self.assertTrue(ListAdmin.objects.filter(wishlist=self.wishlist, user=self.co).exists())

    def test_owner_cannot_remove_self(self):
        self.login(self.owner)
        r = self.client.delete(f"{self.url}{self.owner.id}/")
        self.assertEqual(r.status_code, 400, r.content)
        self.assertEqual(r.json()["detail"], "Cannot remove yourself as owner")

    def test_add_is_throttled(self):
        rates = dict(ScopedRateThrottle.THROTTLE_RATES, **{"co-manager-add": "2/min"})
        with mock.patch.object(ScopedRateThrottle, "THROTTLE_RATES", rates):
            self.login(self.owner)
            for _ in range(2):
                r = self.client.post(self.url, {"email": "friend@example.com"}, format="json")
                self.assertEqual(r.status_code, 201, r.content)
            r = self.client.post(self.url, {"email": "friend@example.com"}, format="json")
        self.assertEqual(r.status_code, 429, r.content)
        body = r.json()
        self.assertEqual(body["code"], "RATE_LIMIT_EXCEEDED")
        self.assertIn("retry_after", body)

    def test_listing_is_not_add_throttled(self):
        rates = dict(ScopedRateThrottle.THROTTLE_RATES, **{"co-manager-add": "1/min"})
        with mock.patch.object(ScopedRateThrottle, "THROTTLE_RATES", rates):
            self.login(self.owner)
            for _ in range(3):
                self.assertEqual(self.client.get(self.url).status_code, 200)


class ListApiTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.owner = make_user("owner")
        self.co = make_user("co")
        self.wishlist = make_list(self.owner)
        add_co_manager(self.wishlist, self.co)
        self.client = APIClient()

    def test_co_manager_delete_is_forbidden(self):
        self.client.force_authenticate(self.co)
        r = self.client.delete(f"/api/lists/{self.wishlist.pk}/")
        self.assertEqual(r.status_code, 403, r.content)
        body = r.json()
        self.assertEqual(body["code"], "FORBIDDEN")
        self.assertEqual(body["detail"], FRIENDLY_ERROR_MESSAGES["FORBIDDEN"])
        self.assertTrue(WishList.objects.filter(pk=self.wishlist.pk).exists())

    def test_owner_deletes_list(self):
        self.client.force_authenticate(self.owner)
        r = self.client.delete(f"/api/lists/{self.wishlist.pk}/")
        self.assertEqual(r.status_code, 204, r.content)
        self.assertFalse(ListAdmin.objects.exists())

    def test_co_manager_rotates_share_token(self):
        self.client.force_authenticate(self.co)
        r = self.client.post(f"/api/lists/{self.wishlist.pk}/share-token/")
        self.assertEqual(r.status_code, 200, r.content)
        self.wishlist.refresh_from_db()
        self.assertEqual(r.json()["share_token"], self.wishlist.share_token)

    def test_suspended_owner_is_forbidden(self):
        from django.utils import timezone

        self.owner.suspended_at = timezone.now()
        self.owner.save(update_fields=["suspended_at"])
        self.client.force_authenticate(self.owner)
        r = self.client.delete(f"/api/lists/{self.wishlist.pk}/")
        self.assertEqual(r.status_code, 403, r.content)


class InvitationApiTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.owner = make_user("owner")
        self.wishlist = make_list(self.owner, name="Wedding")
        self.client = APIClient()
        self.client.force_authenticate(self.owner)
        r = self.client.post(f"/api/lists/{self.wishlist.pk}/admins/", {"email": "guest@example.com"}, format="json")
        self.assertEqual(r.status_code, 201, r.content)
        self.invitation = ListInvitation.objects.get(email="guest@example.com")
        self.client.force_authenticate(None)

    def test_token_can_be_inspected_anonymously(self):
        r = self.client.get(f"/api/invitations/list/{self.invitation.token}/")
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json()["list_name"], "Wedding")
        self.assertEqual(r.json()["status"], "pending")

    def test_unknown_token_is_not_found(self):
        r = self.client.get("/api/invitations/list/does-not-exist/")
        self.assertEqual(r.status_code, 404, r.content)

    def test_accept_requires_login(self):
        r = self.client.post(f"/api/invitations/list/{self.invitation.token}/")
        self.assertEqual(r.status_code, 401, r.content)

    def test_accept_flow(self):
        guest = make_user("guest")
        self.client.force_authenticate(guest)
        r = self.client.post(f"/api/invitations/list/{self.invitation.token}/")
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json(), {"list_id": self.wishlist.pk, "list_name": "Wedding"})
        self.assertTrue(ListAdmin.objects.filter(wishlist=self.wishlist, user=guest).exists())

    def test_accept_with_wrong_account_is_forbidden(self):
        self.client.force_authenticate(make_user("intruder"))
        r = self.client.post(f"/api/invitations/list/{self.invitation.token}/")
        self.assertEqual(r.status_code, 403, r.content)

    def test_owner_lists_and_cancels_invitations(self):
        self.client.force_authenticate(self.owner)
        r = self.client.get(f"/api/lists/{self.wishlist.pk}/invitations/")
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual([i["email"] for i in r.json()], ["guest@example.com"])

        r = self.client.delete(f"/api/lists/{self.wishlist.pk}/invitations/{self.invitation.pk}/")
        self.assertEqual(r.status_code, 204, r.content)
        self.assertFalse(ListInvitation.objects.exists())

    def test_non_owner_cannot_list_invitations(self):
        self.client.force_authenticate(make_user("stranger"))
        r = self.client.get(f"/api/lists/{self.wishlist.pk}/invitations/")
        self.assertEqual(r.status_code, 404, r.content)


class AuditApiTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.owner = make_user("owner")
        self.co = make_user("co")
        self.wishlist = make_list(self.owner)
        AuditLog.objects.create(actor=self.owner, list_id=self.wishlist.pk, action="co_manager_added", changes={"user_id": 1})
        AuditLog.objects.create(actor=self.owner, list_id=self.wishlist.pk, action="shared")
        AuditLog.objects.create(actor=self.owner, list_id=self.wishlist.pk + 1, action="shared")
        add_co_manager(self.wishlist, self.co)
        self.url = f"/api/lists/{self.wishlist.pk}/audit/"
        self.client = APIClient()

    def test_owner_reads_trail_filtered_by_action(self):
        self.client.force_authenticate(self.owner)
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json()["count"], 2)

        r = self.client.get(self.url, {"action": "shared"})
        self.assertEqual(r.status_code, 200, r.content)
        results = r.json()["results"]
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]["action"], "shared")

    def test_co_manager_cannot_read_trail(self):
        self.client.force_authenticate(self.co)
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, 404, r.content)
