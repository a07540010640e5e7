from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from hackathons.models import Team
from hackathons.periods import resolve_period_id
from hackathons.services.teams import add_member, get_or_create_team_for

User = get_user_model()

MOCK_PREFIX = "mock-member-"

MOCK_TEAMS = [
    {"name": "Full Stack Crew", "members": [1, 2, 3], "wins": 1},
    {"name": "Open Slot Squad", "members": [4, 5], "wins": 1},
    {"name": "Solo Starter", "members": [6], "wins": 0},
]


class Command(BaseCommand):
    help = "Seeds mock hackathon teams (3/3, 2/3, 1/3) so real users can request to join open slots"

    def add_arguments(self, parser):
        parser.add_argument("--hackathon-id", default=None, help="Period id, e.g. virtual-2025-06 (default: current)")

    def handle(self, *args, **options):
        hackathon_id = resolve_period_id(options["hackathon_id"])
        self.stdout.write(f"🌱 Seeding mock teams for {hackathon_id}...")

        for seed in MOCK_TEAMS:
            users = []
            for n in seed["members"]:
                user, _ = User.objects.get_or_create(
                    username=f"{MOCK_PREFIX}{n}",
                    defaults={
                        "email": f"{MOCK_PREFIX}{n}@example.com",
                        "is_profile_public": True,
                        "github_username": f"{MOCK_PREFIX}{n}",
                        "discord_username": f"{MOCK_PREFIX}{n}",
                        "show_discord": True,
                    },
                )
                users.append(user)

            with transaction.atomic():
                team, created = get_or_create_team_for(users[0], hackathon_id)
                for user in users[1:]:
                    add_member(team, user)
                Team.objects.filter(pk=team.pk).update(name=seed["name"], wins=seed["wins"])

            team.refresh_from_db()
            verb = "Created" if created else "Reused"
            self.stdout.write(
                f"{verb} team: {seed['name']} id={team.id} members={team.member_count}/3 wins={team.wins}"
            )

        self.stdout.write(self.style.SUCCESS("✅ Done."))
