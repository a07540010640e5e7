from rest_framework.permissions import BasePermission


# ---- Helper functions -------------------------------------------------


def is_hackathon_admin(user) -> bool:
    """Staff, superusers and platform admins moderate hackathon submissions."""
    if not user or not user.is_authenticated:
        return False
    return user.is_superuser or user.is_staff or getattr(user, "role", None) == "admin"


# ---- Permission classes -----------------------------------------------


class IsHackathonAdmin(BasePermission):
    """
    For moderation endpoints (disqualify, commit audit).
    """
    message = "Only hackathon admins can do this."

    def has_permission(self, request, view):
        return is_hackathon_admin(request.user)
