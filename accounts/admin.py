from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User


@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'full_name', 'role', 'initials', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'full_name', 'initials')
    fieldsets = UserAdmin.fieldsets + (
        ('Copy Section', {'fields': ('full_name', 'role', 'initials')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Copy Section', {'fields': ('full_name', 'role', 'initials')}),
    )
