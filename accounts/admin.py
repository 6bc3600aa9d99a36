from django.contrib import admin
from .models import User
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin


# ───────────────────────────────
#  User
# ───────────────────────────────
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "name", "role", "position", "has_signature", "is_staff")
    list_filter  = ("role", "is_staff", "is_superuser", "is_active")
    search_fields = ("username", "email", "name", "position")
    ordering = ("-date_joined",)
    fieldsets = (
        (None, {"fields": ("username", "email", "password")}),
        ("Personal info", {"fields": ("first_name", "last_name", "name", "phone", "avatar", "position", "signature")}),
        ("Permissions",   {"fields": ("is_active", "is_staff", "is_superuser", "role", "groups", "user_permissions")}),
        ("Dates",         {"fields": ("last_login", "date_joined")}),
    )

    @admin.display(boolean=True, description="Signature")
    def has_signature(self, obj):
        return obj.has_signature
