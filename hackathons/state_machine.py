# hackathons/state_machine.py
"""
Hackathon lifecycle state machines.

Team (derived from member count):
    forming(1) -> partial(2) -> full(3); leaving walks back down,
    and a team with no members is deleted (dissolved).

Invite / JoinRequest:
    pending -> accepted | declined   (terminal states are immutable)

Submission:
    unregistered -> registered -> submitted
    registered | submitted -> disqualified
"""
import logging
from typing import Optional, Tuple

from django.utils import timezone

from .models import MAX_TEAM_SIZE, Invite, JoinRequest, Submission, Team

logger = logging.getLogger("cos.hackathons")


TEAM_DISSOLVED = "dissolved"

SUBMISSION_UNREGISTERED = "unregistered"
SUBMISSION_REGISTERED = "registered"
SUBMISSION_SUBMITTED = "submitted"
SUBMISSION_DISQUALIFIED = "disqualified"


def team_state(member_count: int) -> str:
    if member_count <= 0:
        return TEAM_DISSOLVED
    if member_count >= MAX_TEAM_SIZE:
        return Team.STATE_FULL
    if member_count == 1:
        return Team.STATE_FORMING
    return Team.STATE_PARTIAL


# ─────────────────────────────────────────────────────────────
# Invites and join requests
# ─────────────────────────────────────────────────────────────

# Both proposal models share the same status values
PROPOSAL_TRANSITIONS = {
    Invite.STATUS_PENDING: [Invite.STATUS_ACCEPTED, Invite.STATUS_DECLINED],
    Invite.STATUS_ACCEPTED: [],
    Invite.STATUS_DECLINED: [],
}


def can_transition_proposal(proposal, new_status: str) -> Tuple[bool, str]:
    """
    Check if an invite / join request can move to `new_status`.

    Returns (can_transition: bool, reason: str)
    """
    current = proposal.status
    allowed = PROPOSAL_TRANSITIONS.get(current, [])

    if new_status not in allowed:
        if current != Invite.STATUS_PENDING:
            return False, "Already handled"
        return False, f"Cannot transition from '{current}' to '{new_status}'"

    if isinstance(proposal, Invite) and proposal.is_expired:
        return False, "Invite has expired"

    return True, ""


def transition_proposal(proposal, new_status: str, actor=None, save: bool = True) -> Tuple[bool, str]:
    """
    Move an invite / join request out of pending.

    Callers hold a row lock on `proposal`. Sets responded_at (and
    responded_by on join requests) alongside the status.
    """
    can, reason = can_transition_proposal(proposal, new_status)
    kind = type(proposal).__name__

    if not can:
        logger.warning(
            f"Invalid proposal transition attempted: {kind}={proposal.id}, "
            f"from={proposal.status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}. "
            f"Reason: {reason}"
        )
        return False, reason

    old_status = proposal.status
    proposal.status = new_status
    proposal.responded_at = timezone.now()
    fields = ["status", "responded_at"]
    if isinstance(proposal, JoinRequest):
        proposal.responded_by = actor
        fields.append("responded_by")

    if save:
        proposal.save(update_fields=fields)

    logger.info(
        f"Proposal transition: {kind}={proposal.id}, "
        f"from={old_status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}"
    )
    return True, ""


def is_terminal_status(status: str) -> bool:
    return not PROPOSAL_TRANSITIONS.get(status)


# ─────────────────────────────────────────────────────────────
# Submissions
# ─────────────────────────────────────────────────────────────

def submission_state(submission: Optional[Submission]) -> str:
    if submission is None:
        return SUBMISSION_UNREGISTERED
    if submission.disqualified:
        return SUBMISSION_DISQUALIFIED
    if submission.submitted_at is not None:
        return SUBMISSION_SUBMITTED
    return SUBMISSION_REGISTERED


def validate_submission_action(submission: Optional[Submission], action: str) -> Tuple[bool, str]:
    """
    Validate a registrar action against the submission's current state.

    Actions:
    - 'register': no submission yet, or registered and not locked
    - 'submit': registered and not locked
    - 'disqualify': anything that exists (idempotent once disqualified)
    """
    state = submission_state(submission)

    if action == "register":
        if state == SUBMISSION_DISQUALIFIED:
            return False, "Submission was disqualified"
        if state == SUBMISSION_SUBMITTED:
            return False, "Submission is already locked"
        return True, ""

    elif action == "submit":
        if state == SUBMISSION_UNREGISTERED:
            return False, "Register a repo first before submitting"
        if state == SUBMISSION_DISQUALIFIED:
            return False, "Submission was disqualified"
        if state == SUBMISSION_SUBMITTED:
            return False, "Submission is already locked"
        return True, ""

    elif action == "disqualify":
        if state == SUBMISSION_UNREGISTERED:
            return False, "Nothing to disqualify"
        return True, ""

    return False, f"Unknown action: {action}"
