# hackathons/eligibility.py
"""
Eligibility Checker.

Decides whether a participant may take part in a hackathon period
(join the pool, send or accept a team proposal). Rules, first failure wins:

1. no lockout covering the period
2. profile completeness (pluggable predicate, HACKATHON_PROFILE_CHECK)
3. not already on a team for the period
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from django.conf import settings
from django.utils.module_loading import import_string

from .exceptions import IneligibleError
from .models import ParticipantRecord, TeamMember
from .periods import format_month

DEFAULT_PROFILE_CHECK = "hackathons.eligibility.default_profile_check"

ALREADY_TEAMED_REASON = "You are already on a team for this hackathon."


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    reason: Optional[str] = None


def default_profile_check(user) -> Optional[str]:
    """
    Minimum profile for pool visibility: other participants need to find
    and contact you. Returns the first missing piece, or None.
    """
    if not user.is_profile_public:
        return "Make your profile public in Settings to join the pool."
    if not user.github_username:
        return "Connect GitHub in your profile to join the pool."
    if not user.discord_username:
        return "Connect Discord in your profile to join the pool."
    if not user.show_discord:
        return "Turn on “Show Discord” in your public profile to join the pool."
    return None


@lru_cache(maxsize=None)
def _load_profile_check(path):
    return import_string(path)


def get_profile_check():
    path = getattr(settings, "HACKATHON_PROFILE_CHECK", None) or DEFAULT_PROFILE_CHECK
    return _load_profile_check(path)


def lockout_reason(user, hackathon_id: str) -> Optional[str]:
    record = ParticipantRecord.objects.filter(user=user).first()
    if record is None or not record.is_locked_for(hackathon_id):
        return None
    return (
        "You left a team that had registered a repo. "
        f"You can join a new team from {format_month(record.locked_until_period_id)}."
    )


def check_eligibility(user, hackathon_id: str, require_teamless: bool = True) -> EligibilityResult:
    reason = lockout_reason(user, hackathon_id)
    if reason:
        return EligibilityResult(False, reason)

    reason = get_profile_check()(user)
    if reason:
        return EligibilityResult(False, reason)

    if require_teamless and TeamMember.objects.filter(user=user, hackathon_id=hackathon_id).exists():
        return EligibilityResult(False, ALREADY_TEAMED_REASON)

    return EligibilityResult(True)


def ensure_eligible(user, hackathon_id: str, require_teamless: bool = True) -> None:
    result = check_eligibility(user, hackathon_id, require_teamless=require_teamless)
    if not result.eligible:
        raise IneligibleError(result.reason)


def ensure_not_locked_out(user, hackathon_id: str) -> None:
    """Lockout only; used where the profile bar does not apply (team creation, invites)."""
    reason = lockout_reason(user, hackathon_id)
    if reason:
        raise IneligibleError(reason)
