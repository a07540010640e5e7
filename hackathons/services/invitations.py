# hackathons/services/invitations.py
"""
Invitation & Request Broker.

Two mirrored proposal flows, each pending -> accepted | declined:
  - Invite: team -> participant, answered by the recipient.
  - JoinRequest: participant -> team, answered by any current member;
    a participant holds at most one pending request per period.

Accepting marks the proposal and appends the member in one transaction,
so a failed append leaves the proposal pending.
"""
import logging
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from core.services import ActivityService
from hackathons import activity_verbs as verbs
from hackathons.eligibility import ensure_eligible
from hackathons.exceptions import (
    AlreadyTeamedError,
    DuplicateInviteError,
    HackathonError,
    NotTeamMemberError,
    ProposalClosedError,
    RequestAlreadyPendingError,
    TeamFullError,
)
from hackathons.models import MAX_TEAM_SIZE, Invite, JoinRequest, Team, TeamMember
from hackathons.periods import resolve_period_id
from hackathons.state_machine import transition_proposal

from .teams import add_member, get_or_create_team_for, is_member

logger = logging.getLogger("cos.hackathons")


def _invite_expiry():
    ttl = getattr(settings, "HACKATHON_INVITE_TTL_HOURS", None)
    if not ttl:
        return None
    return timezone.now() + timedelta(hours=ttl)


def _unexpired():
    return Q(expires_at__isnull=True) | Q(expires_at__gt=timezone.now())


def _close(proposal, new_status, actor):
    ok, reason = transition_proposal(proposal, new_status, actor=actor)
    if not ok:
        raise ProposalClosedError(reason)


# ─────────────────────────────────────────────────────────────
# Invites
# ─────────────────────────────────────────────────────────────

def send_invite(from_user, to_user, hackathon_id: Optional[str] = None) -> Invite:
    """Creates the sender's team if they have none yet."""
    hackathon_id = resolve_period_id(hackathon_id)

    if from_user.pk == to_user.pk:
        raise HackathonError("You cannot invite yourself.", code="self_invite")
    if TeamMember.objects.filter(user=to_user, hackathon_id=hackathon_id).exists():
        raise AlreadyTeamedError("That participant is already on a team for this hackathon.")

    with transaction.atomic():
        team, created = get_or_create_team_for(from_user, hackathon_id)
        team = Team.objects.select_for_update().get(pk=team.pk)
        if team.member_count >= MAX_TEAM_SIZE:
            raise TeamFullError()

        pending = (
            Invite.objects.select_for_update()
            .filter(team=team, to_user=to_user, status=Invite.STATUS_PENDING)
            .first()
        )
        if pending is not None:
            if not pending.is_expired:
                raise DuplicateInviteError()
            # Retire the stale one so the partial unique constraint admits a new invite
            Invite.objects.filter(pk=pending.pk).update(
                status=Invite.STATUS_DECLINED, responded_at=timezone.now(),
            )

        try:
            with transaction.atomic():
                invite = Invite.objects.create(
                    from_user=from_user,
                    to_user=to_user,
                    team=team,
                    hackathon_id=hackathon_id,
                    expires_at=_invite_expiry(),
                )
        except IntegrityError:
            raise DuplicateInviteError()

        ActivityService.log_activity(
            actor=from_user,
            verb=verbs.INVITE_SENT,
            target=invite,
            hackathon_id=hackathon_id,
            metadata={"team_id": team.id, "to_user_id": to_user.id, "team_created": created},
        )

    logger.info(f"Invite sent: invite={invite.id}, team={team.id}, from={from_user.id}, to={to_user.id}")
    return invite


def _locked_invite_for_recipient(invite_id, user) -> Invite:
    invite = Invite.objects.select_for_update().filter(pk=invite_id).first()
    if invite is None:
        raise NotFound("Invite not found.")
    if invite.to_user_id != user.pk:
        raise PermissionDenied("Not your invite.")
    return invite


def accept_invite(invite_id, user) -> Invite:
    with transaction.atomic():
        invite = _locked_invite_for_recipient(invite_id, user)
        if invite.team_id is None and invite.status == Invite.STATUS_PENDING:
            raise ProposalClosedError("This team no longer exists.")

        _close(invite, Invite.STATUS_ACCEPTED, user)
        add_member(invite.team, user)

        ActivityService.log_activity(
            actor=user,
            verb=verbs.INVITE_ACCEPTED,
            target=invite,
            hackathon_id=invite.hackathon_id,
            metadata={"team_id": invite.team_id},
        )
    return invite


def decline_invite(invite_id, user) -> Invite:
    with transaction.atomic():
        invite = _locked_invite_for_recipient(invite_id, user)
        _close(invite, Invite.STATUS_DECLINED, user)
        ActivityService.log_activity(
            actor=user,
            verb=verbs.INVITE_DECLINED,
            target=invite,
            hackathon_id=invite.hackathon_id,
            metadata={"team_id": invite.team_id},
        )
    return invite


def invites_for(user, hackathon_id: Optional[str] = None):
    """Pending, unexpired invites to `user`, newest first."""
    queryset = Invite.objects.filter(to_user=user, status=Invite.STATUS_PENDING).filter(_unexpired())
    if hackathon_id:
        queryset = queryset.filter(hackathon_id=hackathon_id)
    return queryset.select_related("from_user", "team").order_by("-created_at", "-id")


def invites_sent_by_team(team):
    return (
        Invite.objects.filter(team=team, status=Invite.STATUS_PENDING)
        .filter(_unexpired())
        .select_related("to_user")
        .order_by("-created_at", "-id")
    )


# ─────────────────────────────────────────────────────────────
# Join requests
# ─────────────────────────────────────────────────────────────

def send_join_request(user, team_id) -> JoinRequest:
    with transaction.atomic():
        team = Team.objects.select_for_update().filter(pk=team_id).first()
        if team is None:
            raise NotFound("Team not found.")
        hackathon_id = team.hackathon_id

        ensure_eligible(user, hackathon_id, require_teamless=False)
        if TeamMember.objects.filter(user=user, hackathon_id=hackathon_id).exists():
            raise AlreadyTeamedError()
        if JoinRequest.objects.filter(
            from_user=user, hackathon_id=hackathon_id, status=JoinRequest.STATUS_PENDING,
        ).exists():
            raise RequestAlreadyPendingError()
        if team.member_count >= MAX_TEAM_SIZE:
            raise TeamFullError()

        try:
            with transaction.atomic():
                join_request = JoinRequest.objects.create(
                    from_user=user,
                    team=team,
                    hackathon_id=hackathon_id,
                )
        except IntegrityError:
            raise RequestAlreadyPendingError()

        ActivityService.log_activity(
            actor=user,
            verb=verbs.REQUEST_SENT,
            target=join_request,
            hackathon_id=hackathon_id,
            metadata={"team_id": team.id},
        )

    logger.info(f"Join request sent: request={join_request.id}, team={team.id}, from={user.id}")
    return join_request


def _locked_request(request_id) -> JoinRequest:
    join_request = JoinRequest.objects.select_for_update().filter(pk=request_id).first()
    if join_request is None:
        raise NotFound("Request not found.")
    return join_request


def _ensure_team_side(join_request, acting_user):
    if join_request.team_id is None:
        if join_request.status == JoinRequest.STATUS_PENDING:
            raise ProposalClosedError("This team no longer exists.")
        raise NotTeamMemberError()
    if not is_member(acting_user, join_request.team):
        raise NotTeamMemberError()


def accept_join_request(request_id, acting_user) -> JoinRequest:
    """Any current member may accept."""
    with transaction.atomic():
        join_request = _locked_request(request_id)
        _ensure_team_side(join_request, acting_user)

        _close(join_request, JoinRequest.STATUS_ACCEPTED, acting_user)
        add_member(join_request.team, join_request.from_user, actor=acting_user)

        ActivityService.log_activity(
            actor=acting_user,
            verb=verbs.REQUEST_ACCEPTED,
            target=join_request,
            hackathon_id=join_request.hackathon_id,
            metadata={"team_id": join_request.team_id, "from_user_id": join_request.from_user_id},
        )
    return join_request


def decline_join_request(request_id, acting_user) -> JoinRequest:
    with transaction.atomic():
        join_request = _locked_request(request_id)
        _ensure_team_side(join_request, acting_user)
        _close(join_request, JoinRequest.STATUS_DECLINED, acting_user)
        ActivityService.log_activity(
            actor=acting_user,
            verb=verbs.REQUEST_DECLINED,
            target=join_request,
            hackathon_id=join_request.hackathon_id,
            metadata={"team_id": join_request.team_id, "from_user_id": join_request.from_user_id},
        )
    return join_request


def cancel_join_request(request_id, user) -> JoinRequest:
    """The requester withdraws; frees their one pending slot."""
    with transaction.atomic():
        join_request = _locked_request(request_id)
        if join_request.from_user_id != user.pk:
            raise PermissionDenied("Not your request.")
        _close(join_request, JoinRequest.STATUS_DECLINED, user)
        ActivityService.log_activity(
            actor=user,
            verb=verbs.REQUEST_CANCELED,
            target=join_request,
            hackathon_id=join_request.hackathon_id,
            metadata={"team_id": join_request.team_id},
        )
    return join_request


def requests_for_team(team):
    """Pending requests to `team`, newest first."""
    return (
        JoinRequest.objects.filter(team=team, status=JoinRequest.STATUS_PENDING)
        .select_related("from_user")
        .order_by("-created_at", "-id")
    )


def pending_request_of(user, hackathon_id: Optional[str] = None) -> Optional[JoinRequest]:
    hackathon_id = resolve_period_id(hackathon_id)
    return (
        JoinRequest.objects.filter(
            from_user=user, hackathon_id=hackathon_id, status=JoinRequest.STATUS_PENDING,
        )
        .select_related("team")
        .first()
    )
