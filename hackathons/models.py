# hackathons/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .periods import compare_periods

# Hard ceiling, also enforced by a check constraint on Team.member_count
MAX_TEAM_SIZE = 3


class PoolEntry(models.Model):
    """
    A participant looking for a team in one hackathon period.

    Removed when the participant leaves the pool or joins / creates a team.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hackathon_pool_entries",
    )
    hackathon_id = models.CharField(max_length=32)
    joined_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-joined_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "hackathon_id"], name="pool_user_period_uniq"),
        ]
        indexes = [
            models.Index(fields=["hackathon_id", "-joined_at"], name="pool_period_joined_idx"),
        ]

    def __str__(self):
        return f"{self.user} in pool {self.hackathon_id}"


class Team(models.Model):
    """
    Hackathon team of 1..MAX_TEAM_SIZE participants for one period.

    Created implicitly by the first invite its creator sends; deleted when
    the last member leaves. `member_count` mirrors the TeamMember rows and is
    only changed inside the transaction that changes membership.
    """
    STATE_FORMING = "forming"
    STATE_PARTIAL = "partial"
    STATE_FULL = "full"

    hackathon_id = models.CharField(max_length=32, db_index=True)

    # Profile (unlocked after a win)
    name = models.CharField(max_length=50, blank=True, null=True)
    logo_url = models.URLField(max_length=1024, blank=True, null=True)
    wins = models.PositiveIntegerField(default=0)

    member_count = models.PositiveSmallIntegerField(default=0)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_hackathon_teams",
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(member_count__lte=MAX_TEAM_SIZE),
                name="team_member_count_lte_max",
            ),
        ]
        indexes = [
            models.Index(fields=["hackathon_id", "member_count"], name="team_period_size_idx"),
        ]

    def __str__(self):
        return f"{self.display_name} ({self.hackathon_id})"

    @property
    def member_ids(self):
        """Member user ids in join order."""
        return [m.user_id for m in self.members.all()]

    @property
    def open_slots(self):
        return max(0, MAX_TEAM_SIZE - self.member_count)

    @property
    def is_full(self):
        return self.member_count >= MAX_TEAM_SIZE

    @property
    def state(self):
        from .state_machine import team_state
        return team_state(self.member_count)

    @property
    def display_name(self):
        if self.wins >= 1 and self.name:
            return self.name
        return f"Team {self.pk}"


class TeamMember(models.Model):
    """
    Team membership row.

    `hackathon_id` is copied from the team so the store itself guarantees a
    participant is on at most one team per period.
    """
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="members")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hackathon_memberships",
    )
    hackathon_id = models.CharField(max_length=32)
    joined_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "hackathon_id"], name="teammember_user_period_uniq"),
        ]
        indexes = [
            models.Index(fields=["team", "joined_at"], name="teammember_team_joined_idx"),
        ]

    def __str__(self):
        return f"{self.user} in {self.team}"


class Invite(models.Model):
    """Team -> participant proposal."""
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_DECLINED = "declined"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_DECLINED, "Declined"),
    ]

    from_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_hackathon_invites",
    )
    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hackathon_invites",
    )
    # Kept as history when the team dissolves
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, null=True, blank=True, related_name="invites")
    hackathon_id = models.CharField(max_length=32)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(default=timezone.now)
    responded_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["team", "to_user"],
                condition=Q(status="pending"),
                name="invite_one_pending_per_recipient",
            ),
        ]
        indexes = [
            models.Index(fields=["to_user", "status"], name="invite_recipient_status_idx"),
        ]

    def __str__(self):
        return f"Invite {self.from_user} -> {self.to_user} ({self.status})"

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at <= timezone.now()


class JoinRequest(models.Model):
    """Participant -> team proposal."""
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_DECLINED = "declined"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_DECLINED, "Declined"),
    ]

    from_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hackathon_join_requests",
    )
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, null=True, blank=True, related_name="join_requests")
    hackathon_id = models.CharField(max_length=32)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(default=timezone.now)
    responded_at = models.DateTimeField(null=True, blank=True)
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="answered_hackathon_join_requests",
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            # One team at a time
            models.UniqueConstraint(
                fields=["from_user", "hackathon_id"],
                condition=Q(status="pending"),
                name="joinrequest_one_pending_per_user",
            ),
        ]
        indexes = [
            models.Index(fields=["team", "status"], name="joinrequest_team_status_idx"),
        ]

    def __str__(self):
        return f"Request {self.from_user} -> {self.team_id} ({self.status})"


class Submission(models.Model):
    """
    A team's registered repository for one period.

    repo_url may change until submitted_at is set or the team is
    disqualified; both are one-way.
    """
    hackathon_id = models.CharField(max_length=32)
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, null=True, blank=True, related_name="submissions")

    repo_url = models.URLField(max_length=500)
    repo_created_at = models.DateTimeField(null=True, blank=True)
    registered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="registered_hackathon_submissions",
    )
    registered_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    submitted_at = models.DateTimeField(null=True, blank=True)
    cutoff_at = models.DateTimeField()

    disqualified = models.BooleanField(default=False)
    disqualified_reason = models.CharField(max_length=255, blank=True, default="")
    disqualified_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-registered_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["hackathon_id", "team"], name="submission_period_team_uniq"),
        ]

    def __str__(self):
        return f"{self.repo_url} ({self.hackathon_id})"

    @property
    def is_locked(self):
        return self.submitted_at is not None or self.disqualified

    @property
    def state(self):
        from .state_machine import submission_state
        return submission_state(self)


class ParticipantRecord(models.Model):
    """
    Hackathon-scoped record of a participant.

    The lockout is the single field `locked_until_period_id`: the participant
    may not join a pool or team before that period.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hackathon_record",
    )
    locked_until_period_id = models.CharField(max_length=32, blank=True, null=True)
    locked_at = models.DateTimeField(null=True, blank=True)
    lock_reason = models.CharField(max_length=255, blank=True, default="")

    def __str__(self):
        return f"{self.user} (locked until {self.locked_until_period_id or '-'})"

    def is_locked_for(self, hackathon_id):
        if not self.locked_until_period_id:
            return False
        return compare_periods(hackathon_id, self.locked_until_period_id) < 0
