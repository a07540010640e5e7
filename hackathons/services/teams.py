# hackathons/services/teams.py
"""
Team Manager.

Teams are created implicitly by their creator's first invite, grow through
accepted invites / join requests (add_member), and shrink through leave_team.
A team whose last member leaves is deleted.

Every membership change runs in one transaction holding the team row lock,
and moves member_count with a conditional UPDATE keyed on its current value.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Case, F, IntegerField, Value, When
from rest_framework.exceptions import NotFound, ValidationError

from core.services import ActivityService
from hackathons import activity_verbs as verbs
from hackathons.eligibility import ensure_not_locked_out
from hackathons.exceptions import (
    AlreadyTeamedError,
    NotTeamMemberError,
    ProposalClosedError,
    TeamFullError,
    TeamProfileLockedError,
)
from hackathons.models import (
    MAX_TEAM_SIZE,
    Invite,
    JoinRequest,
    ParticipantRecord,
    Submission,
    Team,
    TeamMember,
)
from hackathons.periods import compare_periods, next_period_id, now
from hackathons.sanitizers import TEAM_NAME_MAX_LENGTH, sanitize_team_name, validate_url

from .pool import remove_from_pool
from .submissions import MEMBER_LEFT_REASON, mark_disqualified

logger = logging.getLogger("cos.hackathons")

LOCKOUT_REASON = "Left a team after it registered a repo"


@dataclass(frozen=True)
class LeaveResult:
    left: bool
    disqualified: bool
    lockout_until_next_period: bool
    team_dissolved: bool
    locked_until_period_id: Optional[str] = None


# ─────────────────────────────────────────────────────────────
# Lookups
# ─────────────────────────────────────────────────────────────

def team_for(user, hackathon_id: str) -> Optional[Team]:
    membership = (
        TeamMember.objects.select_related("team")
        .filter(user=user, hackathon_id=hackathon_id)
        .first()
    )
    return membership.team if membership else None


def is_member(user, team) -> bool:
    return TeamMember.objects.filter(team=team, user=user).exists()


def get_team(team_id) -> Team:
    team = Team.objects.filter(pk=team_id).first()
    if team is None:
        raise NotFound("Team not found.")
    return team


def _with_members(queryset):
    return queryset.prefetch_related("members__user")


def list_open_teams(hackathon_id: str, exclude_user=None):
    """Teams with an open slot, newest first; hides teams `exclude_user` is on."""
    queryset = Team.objects.filter(
        hackathon_id=hackathon_id,
        member_count__gte=1,
        member_count__lt=MAX_TEAM_SIZE,
    )
    if exclude_user is not None:
        queryset = queryset.exclude(members__user=exclude_user)
    return _with_members(queryset.order_by("-created_at", "-id"))


def list_teams(hackathon_id: str):
    """All teams of the period, open ones first."""
    return _with_members(
        Team.objects.filter(hackathon_id=hackathon_id)
        .annotate(
            full_rank=Case(
                When(member_count__gte=MAX_TEAM_SIZE, then=Value(1)),
                default=Value(0),
                output_field=IntegerField(),
            )
        )
        .order_by("full_rank", "-created_at", "-id")
    )


# ─────────────────────────────────────────────────────────────
# Creation and growth
# ─────────────────────────────────────────────────────────────

def _close_pending_proposals_of(user, hackathon_id: str) -> None:
    """The user just joined a team: their other open proposals are moot."""
    stamp = now()
    JoinRequest.objects.filter(
        from_user=user,
        hackathon_id=hackathon_id,
        status=JoinRequest.STATUS_PENDING,
    ).update(status=JoinRequest.STATUS_DECLINED, responded_at=stamp)
    Invite.objects.filter(
        to_user=user,
        hackathon_id=hackathon_id,
        status=Invite.STATUS_PENDING,
    ).update(status=Invite.STATUS_DECLINED, responded_at=stamp)


def get_or_create_team_for(user, hackathon_id: str) -> Tuple[Team, bool]:
    """
    The only way a team comes into existence: `user` is teamless and sends
    an invite. Returns (team, created).
    """
    existing = team_for(user, hackathon_id)
    if existing is not None:
        return existing, False

    ensure_not_locked_out(user, hackathon_id)

    try:
        with transaction.atomic():
            team = Team.objects.create(hackathon_id=hackathon_id, created_by=user, member_count=1)
            TeamMember.objects.create(team=team, user=user, hackathon_id=hackathon_id)
            remove_from_pool(user, hackathon_id)
            _close_pending_proposals_of(user, hackathon_id)
            ActivityService.log_activity(
                actor=user,
                verb=verbs.TEAM_CREATED,
                target=team,
                hackathon_id=hackathon_id,
            )
    except IntegrityError:
        # Created concurrently by another request of the same user
        team = team_for(user, hackathon_id)
        if team is None:
            raise
        return team, False

    logger.info(f"Team created: team={team.id}, hackathon={hackathon_id}, creator={user.id}")
    return team, True


def add_member(team, user, actor=None) -> TeamMember:
    """
    Append `user` to `team`.

    Capacity and the joiner's teamless status are read under the team row
    lock, so a stale `team` instance is safe to pass. Raises TeamFullError
    or AlreadyTeamedError without mutating anything; a user who is already
    on this team is returned as-is.
    """
    with transaction.atomic():
        locked = Team.objects.select_for_update().filter(pk=team.pk).first()
        if locked is None:
            raise ProposalClosedError("This team no longer exists.")
        hackathon_id = locked.hackathon_id

        existing = TeamMember.objects.filter(team=locked, user=user).first()
        if existing is not None:
            return existing

        if locked.member_count >= MAX_TEAM_SIZE:
            logger.warning(f"Join rejected: team={locked.id} is full, user={user.id}")
            raise TeamFullError()
        if TeamMember.objects.filter(user=user, hackathon_id=hackathon_id).exists():
            logger.warning(f"Join rejected: user={user.id} already teamed for {hackathon_id}, team={locked.id}")
            raise AlreadyTeamedError()
        ensure_not_locked_out(user, hackathon_id)

        updated = Team.objects.filter(
            pk=locked.pk,
            member_count=locked.member_count,
            member_count__lt=MAX_TEAM_SIZE,
        ).update(member_count=F("member_count") + 1, updated_at=now())
        if not updated:
            raise TeamFullError()

        try:
            with transaction.atomic():
                member = TeamMember.objects.create(team=locked, user=user, hackathon_id=hackathon_id)
        except IntegrityError:
            raise AlreadyTeamedError()

        remove_from_pool(user, hackathon_id)
        _close_pending_proposals_of(user, hackathon_id)

        ActivityService.log_activity(
            actor=actor or user,
            verb=verbs.TEAM_JOINED,
            target=locked,
            hackathon_id=hackathon_id,
            metadata={"user_id": user.id, "member_count": locked.member_count + 1},
        )

    team.member_count = locked.member_count + 1
    logger.info(f"Member added: team={locked.id}, user={user.id}, size={team.member_count}")
    return member


# ─────────────────────────────────────────────────────────────
# Leave
# ─────────────────────────────────────────────────────────────

def apply_lockout(user, until_period_id: str, reason: str = LOCKOUT_REASON) -> str:
    """
    Bar `user` from pools and teams before `until_period_id`.

    Keeps the later period when a lockout already exists. Returns the
    effective locked-until period. Caller owns the transaction.
    """
    record, _ = ParticipantRecord.objects.select_for_update().get_or_create(user=user)
    current = record.locked_until_period_id
    if current and compare_periods(current, until_period_id) >= 0:
        return current

    record.locked_until_period_id = until_period_id
    record.locked_at = now()
    record.lock_reason = reason
    record.save(update_fields=["locked_until_period_id", "locked_at", "lock_reason"])

    ActivityService.log_activity(
        actor=user,
        verb=verbs.PARTICIPANT_LOCKED_OUT,
        target=record,
        metadata={"locked_until": until_period_id, "reason": reason},
    )
    logger.info(f"Participant locked out: user={user.id}, until={until_period_id}")
    return until_period_id


def _dissolve(team, actor) -> None:
    stamp = now()
    Invite.objects.filter(team=team, status=Invite.STATUS_PENDING).update(
        status=Invite.STATUS_DECLINED, responded_at=stamp,
    )
    JoinRequest.objects.filter(team=team, status=JoinRequest.STATUS_PENDING).update(
        status=JoinRequest.STATUS_DECLINED, responded_at=stamp,
    )
    ActivityService.log_activity(
        actor=actor,
        verb=verbs.TEAM_DISSOLVED,
        target=team,
        hackathon_id=team.hackathon_id,
    )
    team.delete()


def leave_team(user, team_id) -> LeaveResult:
    """
    Remove `user` from the team in one transaction.

    If the team has a submission row, it is disqualified ("Member left") and
    the leaver is locked out until the next period. The last member leaving
    deletes the team.
    """
    with transaction.atomic():
        team = Team.objects.select_for_update().filter(pk=team_id).first()
        if team is None:
            raise NotFound("Team not found.")
        membership = TeamMember.objects.filter(team=team, user=user).first()
        if membership is None:
            raise NotTeamMemberError()

        hackathon_id = team.hackathon_id
        submission = (
            Submission.objects.select_for_update()
            .filter(hackathon_id=hackathon_id, team=team)
            .first()
        )

        membership.delete()
        remaining = team.member_count - 1

        ActivityService.log_activity(
            actor=user,
            verb=verbs.TEAM_LEFT,
            target=team,
            hackathon_id=hackathon_id,
            metadata={"user_id": user.id, "had_submission": submission is not None},
        )

        disqualified = False
        locked_until = None
        if submission is not None:
            mark_disqualified(submission, MEMBER_LEFT_REASON, actor=user)
            disqualified = True
            locked_until = apply_lockout(user, next_period_id(hackathon_id))

        dissolved = remaining <= 0
        if dissolved:
            _dissolve(team, user)
        else:
            Team.objects.filter(pk=team.pk, member_count=team.member_count).update(
                member_count=remaining, updated_at=now(),
            )

    logger.info(
        f"Member left: team={team_id}, user={user.id}, hackathon={hackathon_id}, "
        f"disqualified={disqualified}, dissolved={dissolved}"
    )
    return LeaveResult(
        left=True,
        disqualified=disqualified,
        lockout_until_next_period=locked_until is not None,
        team_dissolved=dissolved,
        locked_until_period_id=locked_until,
    )


# ─────────────────────────────────────────────────────────────
# Profile
# ─────────────────────────────────────────────────────────────

def update_team_profile(team, user, **changes) -> Team:
    """
    Set `name` and/or `logo_url` (None or "" clears). Members only, and only
    once the team has won at least once.
    """
    if not is_member(user, team):
        raise NotTeamMemberError()
    if team.wins < 1:
        raise TeamProfileLockedError()

    fields = []
    if "name" in changes:
        raw = changes["name"] or ""
        if len(raw.strip()) > TEAM_NAME_MAX_LENGTH:
            raise ValidationError({"name": f"Name must be at most {TEAM_NAME_MAX_LENGTH} characters."})
        team.name = sanitize_team_name(raw) or None
        fields.append("name")

    if "logo_url" in changes:
        logo_url = (changes["logo_url"] or "").strip()
        if logo_url and not validate_url(logo_url):
            raise ValidationError({"logo_url": "Logo URL must be an http(s) URL."})
        team.logo_url = logo_url or None
        fields.append("logo_url")

    if not fields:
        return team

    with transaction.atomic():
        team.save(update_fields=fields + ["updated_at"])
        ActivityService.log_activity(
            actor=user,
            verb=verbs.TEAM_PROFILE_UPDATED,
            target=team,
            hackathon_id=team.hackathon_id,
            metadata={field: getattr(team, field) for field in fields},
        )

    logger.info(f"Team profile updated: team={team.id}, fields={fields}, actor={user.id}")
    return team
