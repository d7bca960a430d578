"""
Permission decision core tests.

What these tests verify
-----------------------
- Actor precedence: missing actor, suspension (even for admins), global privilege
  short-circuit with no resource lookups.
- List rule: owner over co-manager, co-manager restrictions, group read access,
  visibility tiers and enumeration-hiding "List not found".
- Wish, group and reservation rules, including inherited wish view.
- `require` raises `NotFoundError` vs `ForbiddenError` as appropriate.
"""

from __future__ import annotations

from unittest import mock

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from core.exceptions import ForbiddenError, NotFoundError
from wishlists.models import GroupMembership, GroupRole, Reservation, Visibility
from wishlists.services.permissions import Action, PermissionService, ResourceRef, ResourceType
from wishlists.services.repository import ActorSnapshot, DjangoResourceRepository, ListSnapshot
from wishlists.tests.helpers import (
    add_co_manager,
    make_admin,
    make_list,
    make_role_admin,
    make_suspended,
    make_user,
    make_wish,
    share_with_group,
)


class ActorPrecedenceTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.wishlist = make_list(self.owner)
        self.ref = ResourceRef.for_list(self.wishlist.pk)

    def test_missing_actor_is_not_found(self):
        result = PermissionService().can(987654, "view", self.ref)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "User not found")
        self.assertTrue(result.not_found)
        with self.assertRaises(NotFoundError):
            PermissionService().require(987654, "view", self.ref)

    def test_suspended_owner_is_denied(self):
        self.owner.suspended_at = timezone.now()
        self.owner.save(update_fields=["suspended_at"])
        result = PermissionService().can(self.owner.id, "view", self.ref)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "Account suspended")

    def test_suspension_wins_over_global_privilege(self):
        admin = make_suspended("badadmin", is_admin=True)
        result = PermissionService().can(admin.id, "delete", self.ref)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "Account suspended")

    def test_suspended_role_is_denied(self):
        user = make_user("sus", role="suspended")
        self.assertEqual(PermissionService().can(user.id, "view", self.ref).reason, "Account suspended")

    def test_global_admin_allowed_with_no_reason(self):
        for actor in (make_admin(), make_role_admin("roleadmin")):
            with self.subTest(actor=actor.username):
                result = PermissionService().can(actor.id, "delete", self.ref)
                self.assertTrue(result.allowed)
                self.assertIsNone(result.reason)

    def test_global_admin_skips_per_type_action_sets(self):
        admin = make_admin()
        service = PermissionService()
        self.assertTrue(service.can(admin.id, "reserve", self.ref).allowed)
        self.assertTrue(service.can(admin.id, "share", ResourceRef.for_wish(1)).allowed)
        owner_result = service.can(self.owner.id, "reserve", self.ref)
        self.assertFalse(owner_result.allowed)
        self.assertEqual(owner_result.reason, "Action not supported for list")
        self.assertFalse(service.can(admin.id, "transfer", self.ref).allowed)

    def test_global_admin_triggers_single_actor_query(self):
        admin = make_admin()
        service = PermissionService()
        with self.assertNumQueries(1):
            self.assertTrue(service.can(admin.id, "admin", self.ref).allowed)

    def test_global_admin_never_calls_resource_lookups(self):
        admin = make_admin()
        repo = mock.Mock(wraps=DjangoResourceRepository())
        service = PermissionService(repository=repo)
        for ref in (
            self.ref,
            ResourceRef.for_wish(1),
            ResourceRef.for_group(1),
            ResourceRef.for_reservation(1),
        ):
            self.assertTrue(service.can(admin.id, "delete", ref).allowed)
        self.assertEqual(repo.get_actor.call_count, 4)
        repo.get_list.assert_not_called()
        repo.get_wish.assert_not_called()
        repo.get_group_role.assert_not_called()
        repo.get_reservation.assert_not_called()

    def test_unknown_action_is_denied_without_queries(self):
        with self.assertNumQueries(0):
            result = PermissionService().can(self.owner.id, "transfer", self.ref)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "Unknown action")


class ListRuleTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.co = make_user("co")
        self.stranger = make_user("stranger")
        self.wishlist = make_list(self.owner)
        add_co_manager(self.wishlist, self.co)
        self.ref = ResourceRef.for_list(self.wishlist.pk)
        self.service = PermissionService()

    def test_owner_allowed_every_list_action(self):
        for action in ("view", "edit", "delete", "share", "admin"):
            with self.subTest(action=action):
                self.assertTrue(self.service.can(self.owner.id, action, self.ref).allowed)

    def test_owner_listed_as_co_manager_keeps_owner_rights(self):
        add_co_manager(self.wishlist, self.owner)
        self.assertTrue(self.service.can(self.owner.id, "delete", self.ref).allowed)
        self.assertTrue(self.service.can(self.owner.id, "admin", self.ref).allowed)

    def test_co_manager_can_view_edit_share(self):
        for action in ("view", "edit", "share"):
            with self.subTest(action=action):
                self.assertTrue(self.service.can(self.co.id, action, self.ref).allowed)

    def test_co_manager_cannot_delete(self):
        result = self.service.can(self.co.id, "delete", self.ref)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "Only list owners can delete lists")
        self.assertFalse(result.not_found)

    def test_co_manager_cannot_administer(self):
        result = self.service.can(self.co.id, "admin", self.ref)
        self.assertFalse(result.allowed)
        self.assertEqual(result.reason, "Only list owners can add/remove co-managers")

    def test_co_manager_other_actions_denied(self):
        result = self.service.can(self.co.id, "invite", self.ref)
        self.assertEqual(result.reason, "Action not allowed for co-managers")

    def test_require_raises_forbidden_with_context(self):
        with self.assertRaises(ForbiddenError) as ctx:
            self.service.require(self.co.id, "admin", self.ref)
        self.assertEqual(ctx.exception.action, Action.ADMIN)
        self.assertEqual(ctx.exception.resource_type, ResourceType.LIST)
        self.assertTrue(ctx.exception.conceals_resource)

    def test_private_list_looks_missing_to_strangers(self):
        hidden = self.service.can(self.stranger.id, "view", self.ref)
        missing = self.service.can(self.stranger.id, "view", ResourceRef.for_list(self.wishlist.pk + 1000))
        self.assertEqual(hidden, missing)
        self.assertEqual(hidden.reason, "List not found")
        self.assertTrue(hidden.not_found)
        with self.assertRaises(NotFoundError):
            self.service.require(self.stranger.id, "view", self.ref)

    def test_public_list_view_only(self):
        self.wishlist.visibility = Visibility.PUBLIC
        self.wishlist.save(update_fields=["visibility"])
        self.assertTrue(self.service.can(self.stranger.id, "view", self.ref).allowed)
        edit = self.service.can(self.stranger.id, "edit", self.ref)
        self.assertFalse(edit.allowed)
        self.assertEqual(edit.reason, "List not found")

    def test_password_list(self):
        locked = make_list(self.owner, visibility=Visibility.PASSWORD, password="s3cret", name="Locked")
        ref = ResourceRef.for_list(locked.pk)
        self.assertEqual(self.service.can(self.stranger.id, "view", ref).reason, "Password is required for this list")
        self.assertEqual(self.service.can(self.stranger.id, "view", ref, password="nope").reason, "Invalid password")
        self.assertTrue(self.service.can(self.stranger.id, "view", ref, password="s3cret").allowed)

    def test_password_verification_is_delegated(self):
        locked = make_list(self.owner, visibility=Visibility.PASSWORD, password="s3cret", name="Locked")
        verifier = mock.Mock(return_value=True)
        service = PermissionService(password_verifier=verifier)
        self.assertTrue(service.can(self.stranger.id, "view", ResourceRef.for_list(locked.pk), password="anything").allowed)
        verifier.assert_called_once_with("anything", locked.password)

    def test_group_share_grants_view_only(self):
        member = make_user("member")
        share_with_group(self.wishlist, member)
        self.assertTrue(self.service.can(member.id, "view", self.ref).allowed)
        for action in ("edit", "delete", "share", "admin"):
            with self.subTest(action=action):
                self.assertFalse(self.service.can(member.id, action, self.ref).allowed)

    def test_group_admin_role_still_only_views_shared_list(self):
        group_admin = make_user("gadmin")
        share_with_group(self.wishlist, group_admin, role=GroupRole.ADMIN)
        self.assertFalse(self.service.can(group_admin.id, "edit", self.ref).allowed)

    def test_group_lookup_only_for_view(self):
        repo = mock.Mock(wraps=DjangoResourceRepository())
        service = PermissionService(repository=repo)
        service.can(self.stranger.id, "edit", self.ref)
        repo.is_group_member_for_list.assert_not_called()
        service.can(self.stranger.id, "view", self.ref)
        repo.is_group_member_for_list.assert_called_once_with(self.stranger.id, self.wishlist.pk)


class WishRuleTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.viewer = make_user("viewer")
        self.service = PermissionService()

    def test_missing_wish(self):
        result = self.service.can(self.owner.id, "view", ResourceRef.for_wish(424242))
        self.assertEqual(result.reason, "Wish not found")
        self.assertTrue(result.not_found)

    def test_owner_manages_wish(self):
        wish = make_wish(self.owner)
        for action in ("view", "edit", "delete"):
            with self.subTest(action=action):
                self.assertTrue(self.service.can(self.owner.id, action, ResourceRef.for_wish(wish.pk)).allowed)

    def test_view_inherited_from_accessible_list(self):
        private = make_list(self.owner, name="Private")
        public = make_list(self.owner, visibility=Visibility.PUBLIC, name="Public")
        wish = make_wish(self.owner, private, public)
        self.assertTrue(self.service.can(self.viewer.id, "view", ResourceRef.for_wish(wish.pk)).allowed)

    def test_view_denied_without_accessible_list(self):
        wish = make_wish(self.owner, make_list(self.owner))
        result = self.service.can(self.viewer.id, "view", ResourceRef.for_wish(wish.pk))
        self.assertEqual(result.reason, "No access to lists containing this wish")
        self.assertFalse(result.not_found)

    def test_co_manager_of_list_views_but_cannot_edit_wish(self):
        wishlist = make_list(self.owner)
        add_co_manager(wishlist, self.viewer)
        wish = make_wish(self.owner, wishlist)
        ref = ResourceRef.for_wish(wish.pk)
        self.assertTrue(self.service.can(self.viewer.id, "view", ref).allowed)
        self.assertEqual(self.service.can(self.viewer.id, "edit", ref).reason, "Insufficient permissions")

    def test_inherited_view_stops_at_first_granting_list(self):
        first = make_list(self.owner, visibility=Visibility.PUBLIC, name="First")
        second = make_list(self.owner, visibility=Visibility.PUBLIC, name="Second")
        wish = make_wish(self.owner, first, second)
        repo = mock.Mock(wraps=DjangoResourceRepository())
        PermissionService(repository=repo).can(self.viewer.id, "view", ResourceRef.for_wish(wish.pk))
        self.assertEqual(repo.get_list.call_count, 1)

    def test_unsupported_wish_action(self):
        wish = make_wish(self.owner)
        result = self.service.can(self.owner.id, "admin", ResourceRef.for_wish(wish.pk))
        self.assertEqual(result.reason, "Action not supported for wish")


class GroupRuleTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.member = make_user("member")
        self.group_admin = make_user("gadmin")
        self.outsider = make_user("outsider")
        group = share_with_group(make_list(self.owner), self.member)
        GroupMembership.objects.create(group=group, user=self.group_admin, role=GroupRole.ADMIN)
        self.ref = ResourceRef.for_group(group.pk)
        self.service = PermissionService()

    def test_member_can_view_and_share(self):
        self.assertTrue(self.service.can(self.member.id, "view", self.ref).allowed)
        self.assertTrue(self.service.can(self.member.id, "share", self.ref).allowed)

    def test_member_cannot_administer(self):
        for action in ("edit", "admin", "invite"):
            with self.subTest(action=action):
                self.assertEqual(self.service.can(self.member.id, action, self.ref).reason, "Admin permission required")
        self.assertEqual(
            self.service.can(self.member.id, "delete", self.ref).reason,
            "You do not have permission to delete this group",
        )

    def test_group_admin_allowed_everything(self):
        for action in ("view", "share", "edit", "admin", "invite", "delete"):
            with self.subTest(action=action):
                self.assertTrue(self.service.can(self.group_admin.id, action, self.ref).allowed)

    def test_outsider_and_missing_group(self):
        outsider = self.service.can(self.outsider.id, "view", self.ref)
        self.assertEqual(outsider.reason, "You do not have permission to access this group")
        self.assertFalse(outsider.not_found)
        missing = self.service.can(self.outsider.id, "view", ResourceRef.for_group(999999))
        self.assertEqual(missing.reason, "Group not found")
        self.assertTrue(missing.not_found)


class ReservationRuleTests(TestCase):
    def setUp(self):
        self.wish_owner = make_user("owner")
        self.reserver = make_user("reserver")
        self.other = make_user("other")
        wish = make_wish(self.wish_owner)
        self.reservation = Reservation.objects.create(wish=wish, user=self.reserver)
        self.ref = ResourceRef.for_reservation(self.reservation.pk)
        self.service = PermissionService()

    def test_reserver_has_full_control(self):
        for action in ("view", "edit", "delete"):
            with self.subTest(action=action):
                self.assertTrue(self.service.can(self.reserver.id, action, self.ref).allowed)

    def test_wish_owner_can_only_view(self):
        self.assertTrue(self.service.can(self.wish_owner.id, "view", self.ref).allowed)
        self.assertEqual(
            self.service.can(self.wish_owner.id, "delete", self.ref).reason,
            "Can only cancel your own reservations",
        )
        self.assertEqual(
            self.service.can(self.wish_owner.id, "edit", self.ref).reason,
            "Can only modify your own reservations",
        )

    def test_others_cannot_view(self):
        result = self.service.can(self.other.id, "view", self.ref)
        self.assertFalse(result.allowed)

    def test_missing_reservation(self):
        result = self.service.can(self.other.id, "view", ResourceRef.for_reservation(999999))
        self.assertEqual(result.reason, "Reservation not found")
        self.assertTrue(result.not_found)


class AnonymousRuleTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.service = PermissionService()

    def test_public_list_view(self):
        wishlist = make_list(self.owner, visibility=Visibility.PUBLIC)
        self.assertTrue(self.service.can(None, "view", ResourceRef.for_list(wishlist.pk)).allowed)

    def test_private_list_is_not_found(self):
        wishlist = make_list(self.owner)
        result = self.service.can(None, "view", ResourceRef.for_list(wishlist.pk))
        self.assertTrue(result.not_found)

    def test_password_list_needs_password(self):
        wishlist = make_list(self.owner, visibility=Visibility.PASSWORD, password="s3cret")
        ref = ResourceRef.for_list(wishlist.pk)
        self.assertFalse(self.service.can(None, "view", ref).allowed)
        self.assertTrue(self.service.can(None, "view", ref, password="s3cret").allowed)

    def test_anonymous_reserve_and_limits(self):
        self.assertTrue(self.service.can(None, "reserve", ResourceRef.for_reservation(1)).allowed)
        wishlist = make_list(self.owner, visibility=Visibility.PUBLIC)
        result = self.service.can(None, "edit", ResourceRef.for_list(wishlist.pk))
        self.assertEqual(result.reason, "Anonymous users have limited permissions")


class FakeRepository:
    """In-memory repository: the decision core needs no database."""

    def __init__(self, actors, lists):
        self.actors = actors
        self.lists = lists

    def get_actor(self, user_id):
        return self.actors.get(user_id)

    def get_list(self, list_id):
        return self.lists.get(list_id)

    def is_group_member_for_list(self, user_id, list_id):
        return False


class FakeRepositoryTests(SimpleTestCase):
    def setUp(self):
        plain = ActorSnapshot(is_admin=False, role="user", suspended_at=None)
        self.repo = FakeRepository(
            actors={1: plain, 2: plain},
            lists={10: ListSnapshot(id=10, owner_id=1, visibility="private", password_hash="", co_manager_ids=frozenset({2}))},
        )

    def test_decisions_without_database(self):
        service = PermissionService(repository=self.repo)
        self.assertTrue(service.can(1, "delete", ResourceRef.for_list(10)).allowed)
        self.assertTrue(service.can(2, "edit", ResourceRef.for_list(10)).allowed)
        self.assertFalse(service.can(2, "delete", ResourceRef.for_list(10)).allowed)

    def test_repository_errors_propagate(self):
        repo = mock.Mock()
        repo.get_actor.side_effect = RuntimeError("database unavailable")
        with self.assertRaises(RuntimeError):
            PermissionService(repository=repo).can(1, "view", ResourceRef.for_list(10))

    def test_resource_ref_coerces_type(self):
        self.assertIs(ResourceRef("list", 3).type, ResourceType.LIST)
        with self.assertRaises(ValueError):
            ResourceRef("album", 3)
