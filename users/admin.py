from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User

@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'role', 'github_username', 'discord_username', 'is_profile_public', 'is_staff')
    list_filter = ('role', 'is_staff', 'is_superuser', 'is_profile_public', 'is_active')
    search_fields = ('username', 'email', 'github_username', 'discord_username')
    fieldsets = UserAdmin.fieldsets + (
        ('Profile', {'fields': ('role', 'supabase_id', 'bio', 'profile_picture', 'skills')}),
        ('Connected accounts', {'fields': ('github_username', 'discord_username', 'is_profile_public', 'show_discord')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Profile', {'fields': ('role', 'bio')}),
    )
