"""
Admin registrations for wishlist models.

Back-office only. Co-manager grants are normally created through the
invitation workflow; the admin exposes them read-mostly for support work.
"""

from django.contrib import admin

from wishlists.models import (
    AuditLog,
    Group,
    GroupMembership,
    ListAdmin,
    ListInvitation,
    ListShare,
    ListWish,
    Reservation,
    Wish,
    WishList,
)


class ListAdminInline(admin.TabularInline):
    model = ListAdmin
    fk_name = "wishlist"
    extra = 0
    raw_id_fields = ("user", "added_by")


class ListShareInline(admin.TabularInline):
    model = ListShare
    extra = 0
    raw_id_fields = ("group", "shared_by")


@admin.register(WishList)
class WishListAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "owner", "visibility", "created_at")
    list_filter = ("visibility",)
    search_fields = ("name", "owner__username", "owner__email")
    raw_id_fields = ("owner",)
    exclude = ("password",)
    inlines = [ListAdminInline, ListShareInline]


@admin.register(ListInvitation)
class ListInvitationAdmin(admin.ModelAdmin):
    list_display = ("id", "wishlist", "email", "invited_by", "created_at", "expires_at", "accepted_at")
    list_filter = ("accepted_at",)
    search_fields = ("email",)
    raw_id_fields = ("wishlist", "invited_by")
    readonly_fields = ("token",)


class GroupMembershipInline(admin.TabularInline):
    model = GroupMembership
    extra = 0
    raw_id_fields = ("user",)


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_at")
    search_fields = ("name",)
    inlines = [GroupMembershipInline]


@admin.register(Wish)
class WishAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "owner", "created_at")
    search_fields = ("title",)
    raw_id_fields = ("owner",)


admin.site.register(ListWish)
admin.site.register(Reservation)


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "list_id", "actor", "request_id")
    list_filter = ("action",)
    search_fields = ("request_id",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
