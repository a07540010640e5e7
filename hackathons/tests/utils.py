from datetime import datetime
from unittest import mock
from zoneinfo import ZoneInfo

from django.contrib.auth import get_user_model

from hackathons.github import RepositoryInfo

User = get_user_model()

BOSTON = ZoneInfo("America/New_York")

PERIOD = "virtual-2025-06"
NEXT_PERIOD = "virtual-2025-07"

# Mid-period instant for PERIOD, well before its cutoff
MID_JUNE = datetime(2025, 6, 15, 12, 0, tzinfo=BOSTON)


def make_participant(username, **overrides):
    """A user whose profile passes the default pool check."""
    fields = {
        "email": f"{username}@example.com",
        "password": "pass1234",
        "is_profile_public": True,
        "github_username": f"{username}-gh",
        "discord_username": f"{username}#0001",
        "show_discord": True,
    }
    fields.update(overrides)
    return User.objects.create_user(username=username, **fields)


def freeze_now(dt):
    """Patch the clock used by hackathon code and Django's auto timestamps."""
    return mock.patch("django.utils.timezone.now", return_value=dt)


def github_returning(private=False, created_at=None):
    """Patch the GitHub client used by the registrar with a canned repo."""
    client = mock.Mock()
    client.get_repository.return_value = RepositoryInfo(
        owner="x",
        name="y",
        private=private,
        created_at=created_at or datetime(2025, 6, 2, 9, 0, tzinfo=BOSTON),
    )
    return mock.patch("hackathons.services.submissions.get_github_client", return_value=client)
