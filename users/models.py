# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models

class User(AbstractUser):
    ROLE_CHOICES = (
        ('participant', 'Participant'),
        ('organizer', 'Organizer'),
        ('admin', 'Admin'),
    )

    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default='participant'
    )

    # Identity issued by the auth provider (Supabase `sub` claim)
    supabase_id = models.CharField(max_length=64, blank=True, null=True, unique=True)

    bio = models.TextField(blank=True, null=True)
    profile_picture = models.CharField(max_length=1024, blank=True, null=True)
    skills = models.JSONField(default=list, blank=True, help_text="List of technical skills")

    # 🔹 Connected accounts (written by the OAuth connect flows, read-only here)
    github_username = models.CharField(max_length=100, blank=True, null=True)
    discord_username = models.CharField(max_length=100, blank=True, null=True)

    # Privacy Control
    is_profile_public = models.BooleanField(
        default=False,
        help_text="Profile is listed in the member directory and hackathon pool"
    )
    show_discord = models.BooleanField(
        default=False,
        help_text="Show Discord handle on the public profile"
    )

    @property
    def is_moderator(self):
        return self.is_superuser or self.is_staff or self.role == 'admin'

    def __str__(self):
        return self.username
