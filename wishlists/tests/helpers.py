"""Small builders shared by the wishlist test modules."""

from __future__ import annotations

from django.utils import timezone

from accounts.models import User, UserRole
from wishlists.models import Group, GroupMembership, GroupRole, ListAdmin, ListShare, ListWish, Visibility, Wish, WishList
from wishlists.services.passwords import hash_list_password

PASSWORD = "pass12345"


def make_user(username: str, **extra) -> User:
    extra.setdefault("email", f"{username}@example.com")
    return User.objects.create_user(username=username, password=PASSWORD, **extra)


def make_admin(username: str = "root") -> User:
    return make_user(username, is_admin=True)


def make_suspended(username: str, **extra) -> User:
    return make_user(username, suspended_at=timezone.now(), **extra)


def make_role_admin(username: str) -> User:
    return make_user(username, role=UserRole.ADMIN)


def make_list(owner: User, *, visibility: str = Visibility.PRIVATE, password: str = "", name: str = "Birthday") -> WishList:
    return WishList.objects.create(
        owner=owner,
        name=name,
        visibility=visibility,
        password=hash_list_password(password),
    )


def add_co_manager(wishlist: WishList, user: User, added_by: User | None = None) -> ListAdmin:
    return ListAdmin.objects.create(wishlist=wishlist, user=user, added_by=added_by or wishlist.owner)


def share_with_group(wishlist: WishList, *members: User, role: str = GroupRole.MEMBER) -> Group:
    group = Group.objects.create(name=f"Group for {wishlist.name}")
    for member in members:
        GroupMembership.objects.create(group=group, user=member, role=role)
    ListShare.objects.create(wishlist=wishlist, group=group, shared_by=wishlist.owner)
    return group


def make_wish(owner: User, *lists: WishList, title: str = "Bike") -> Wish:
    wish = Wish.objects.create(owner=owner, title=title)
    for wishlist in lists:
        ListWish.objects.create(wishlist=wishlist, wish=wish)
    return wish
