# hackathons/services/submissions.py
"""
Submission Registrar.

unregistered -> registered -> submitted, with disqualified reachable from
registered and submitted. Register and submit require a full team and are
checked against the period cutoff at call time; nothing is disqualified
automatically when the cutoff passes except by the commit audit.
"""
import logging
from typing import Optional

from django.db import transaction

from core.services import ActivityService
from hackathons import activity_verbs as verbs
from hackathons.exceptions import (
    AlreadyLockedError,
    NotFullTeamError,
    NotRegisteredError,
    NotTeamMemberError,
    RepoInvalidError,
    RepoVerificationUnavailable,
    SubmissionClosedError,
)
from hackathons.github import (
    GitHubAPIError,
    RepositoryInfo,
    RepositoryNotFound,
    get_github_client,
    parse_repo_url,
)
from hackathons.models import MAX_TEAM_SIZE, Submission, Team, TeamMember
from hackathons.periods import (
    format_month,
    is_before_cutoff,
    now,
    period_start,
    resolve_period_id,
    submission_cutoff,
)
from hackathons.state_machine import validate_submission_action

logger = logging.getLogger("cos.hackathons")

MEMBER_LEFT_REASON = "Member left"
COMMIT_AFTER_CUTOFF_REASON = "Commit after cutoff"


def submission_for(team) -> Optional[Submission]:
    return Submission.objects.filter(hackathon_id=team.hackathon_id, team=team).first()


def _member_team(user, hackathon_id: str) -> Team:
    membership = (
        TeamMember.objects.select_related("team")
        .filter(user=user, hackathon_id=hackathon_id)
        .first()
    )
    if membership is None:
        raise NotTeamMemberError("You are not on a team for this hackathon.")
    return membership.team


def submission_for_user(user, hackathon_id: Optional[str] = None) -> Optional[Submission]:
    hackathon_id = resolve_period_id(hackathon_id)
    membership = TeamMember.objects.filter(user=user, hackathon_id=hackathon_id).first()
    if membership is None:
        return None
    return Submission.objects.filter(hackathon_id=hackathon_id, team_id=membership.team_id).first()


def verify_repository(repo_url: str, hackathon_id: str) -> RepositoryInfo:
    """Public github.com repo created during the period, or RepoInvalidError."""
    parsed = parse_repo_url(repo_url)
    if parsed is None:
        raise RepoInvalidError("Invalid GitHub repo URL. Use https://github.com/owner/repo")

    try:
        info = get_github_client().get_repository(*parsed)
    except RepositoryNotFound:
        raise RepoInvalidError("Repo not found or it is private. Repo must be public.")
    except GitHubAPIError:
        raise RepoVerificationUnavailable()

    if info.private:
        raise RepoInvalidError("Repo must be public.")

    start, end = period_start(hackathon_id), submission_cutoff(hackathon_id)
    if info.created_at is None or not (start <= info.created_at < end):
        raise RepoInvalidError(
            f"Repo must have been created during the hackathon month ({format_month(hackathon_id)})."
        )
    return info


def _reject(exc, team, user, action):
    logger.warning(
        f"Submission {action} rejected: team={getattr(team, 'id', None)}, "
        f"actor={getattr(user, 'id', 'unknown')}. Reason: {exc.detail}"
    )
    return exc


def _lock_error(submission, action) -> Optional[AlreadyLockedError]:
    ok, reason = validate_submission_action(submission, action)
    if ok:
        return None
    return AlreadyLockedError(f"{reason}. Repo registration and submission are closed for this team.")


# ─────────────────────────────────────────────────────────────
# Register
# ─────────────────────────────────────────────────────────────

def register_submission(user, repo_url: str, hackathon_id: Optional[str] = None) -> Submission:
    hackathon_id = resolve_period_id(hackathon_id)
    return register_submission_for_team(_member_team(user, hackathon_id), user, repo_url)


def register_submission_for_team(team, user, repo_url: str) -> Submission:
    """
    Create or overwrite the team's repository for its period.

    The GitHub lookup happens before the transaction; team size and the
    submission lock are re-checked under the team row lock afterwards.
    """
    hackathon_id = team.hackathon_id
    repo_url = (repo_url or "").strip()

    if not TeamMember.objects.filter(team=team, user=user).exists():
        raise _reject(NotTeamMemberError(), team, user, "register")

    lock_error = _lock_error(submission_for(team), "register")
    if lock_error:
        raise _reject(lock_error, team, user, "register")
    if not is_before_cutoff(hackathon_id):
        raise _reject(SubmissionClosedError(), team, user, "register")
    team.refresh_from_db(fields=["member_count"])
    if team.member_count < MAX_TEAM_SIZE:
        raise _reject(NotFullTeamError(), team, user, "register")

    info = verify_repository(repo_url, hackathon_id)

    with transaction.atomic():
        locked_team = Team.objects.select_for_update().filter(pk=team.pk).first()
        if locked_team is None or not TeamMember.objects.filter(team=locked_team, user=user).exists():
            raise NotTeamMemberError()
        if locked_team.member_count < MAX_TEAM_SIZE:
            raise NotFullTeamError()

        submission = (
            Submission.objects.select_for_update()
            .filter(hackathon_id=hackathon_id, team=locked_team)
            .first()
        )
        lock_error = _lock_error(submission, "register")
        if lock_error:
            raise lock_error

        stamp = now()
        if submission is None:
            submission = Submission.objects.create(
                hackathon_id=hackathon_id,
                team=locked_team,
                repo_url=repo_url,
                repo_created_at=info.created_at,
                registered_by=user,
                registered_at=stamp,
                cutoff_at=submission_cutoff(hackathon_id),
            )
        else:
            updated = Submission.objects.filter(
                pk=submission.pk,
                submitted_at__isnull=True,
                disqualified=False,
            ).update(
                repo_url=repo_url,
                repo_created_at=info.created_at,
                registered_by=user,
                updated_at=stamp,
            )
            if not updated:
                raise AlreadyLockedError()
            submission.refresh_from_db()

        ActivityService.log_activity(
            actor=user,
            verb=verbs.SUBMISSION_REGISTERED,
            target=submission,
            hackathon_id=hackathon_id,
            metadata={"team_id": locked_team.id, "repo_url": repo_url},
        )

    logger.info(f"Repo registered: team={team.id}, hackathon={hackathon_id}, repo={repo_url}, actor={user.id}")
    return submission


# ─────────────────────────────────────────────────────────────
# Submit (lock)
# ─────────────────────────────────────────────────────────────

def submit(user, hackathon_id: Optional[str] = None) -> Submission:
    hackathon_id = resolve_period_id(hackathon_id)
    return submit_team(_member_team(user, hackathon_id), user)


def submit_team(team, user) -> Submission:
    """Irreversible. A second call raises AlreadyLockedError and changes nothing."""
    hackathon_id = team.hackathon_id

    with transaction.atomic():
        locked_team = Team.objects.select_for_update().filter(pk=team.pk).first()
        if locked_team is None or not TeamMember.objects.filter(team=locked_team, user=user).exists():
            raise _reject(NotTeamMemberError(), team, user, "submit")

        submission = (
            Submission.objects.select_for_update()
            .filter(hackathon_id=hackathon_id, team=locked_team)
            .first()
        )
        if submission is None:
            raise _reject(NotRegisteredError(), team, user, "submit")
        lock_error = _lock_error(submission, "submit")
        if lock_error:
            raise _reject(lock_error, team, user, "submit")
        if not is_before_cutoff(hackathon_id):
            raise _reject(SubmissionClosedError(), team, user, "submit")
        if locked_team.member_count < MAX_TEAM_SIZE:
            raise _reject(NotFullTeamError(), team, user, "submit")

        stamp = now()
        updated = Submission.objects.filter(
            pk=submission.pk,
            submitted_at__isnull=True,
            disqualified=False,
        ).update(
            submitted_at=stamp,
            cutoff_at=submission_cutoff(hackathon_id),
            updated_at=stamp,
        )
        if not updated:
            raise AlreadyLockedError()
        submission.refresh_from_db()

        ActivityService.log_activity(
            actor=user,
            verb=verbs.SUBMISSION_SUBMITTED,
            target=submission,
            hackathon_id=hackathon_id,
            metadata={"team_id": locked_team.id, "repo_url": submission.repo_url},
        )

    logger.info(f"Submission locked: team={team.id}, hackathon={hackathon_id}, actor={user.id}")
    return submission


# ─────────────────────────────────────────────────────────────
# Disqualify
# ─────────────────────────────────────────────────────────────

def mark_disqualified(submission: Submission, reason: str, actor=None) -> bool:
    """
    Conditional write; the first reason wins. Caller owns the transaction.

    Returns True if this call disqualified the submission.
    """
    stamp = now()
    updated = Submission.objects.filter(pk=submission.pk, disqualified=False).update(
        disqualified=True,
        disqualified_reason=reason[:255],
        disqualified_at=stamp,
        updated_at=stamp,
    )
    submission.refresh_from_db(fields=["disqualified", "disqualified_reason", "disqualified_at"])
    if not updated:
        return False

    ActivityService.log_activity(
        actor=actor,
        verb=verbs.SUBMISSION_DISQUALIFIED,
        target=submission,
        hackathon_id=submission.hackathon_id,
        metadata={"team_id": submission.team_id, "reason": reason},
    )
    logger.info(
        f"Submission disqualified: submission={submission.id}, team={submission.team_id}, "
        f"reason={reason}, actor={getattr(actor, 'id', 'system')}"
    )
    return True


def disqualify(submission: Submission, reason: str, actor=None) -> Submission:
    """Administrative / audit disqualification. Idempotent."""
    with transaction.atomic():
        locked = Submission.objects.select_for_update().get(pk=submission.pk)
        mark_disqualified(locked, reason, actor=actor)
    return locked


def check_commits_after_cutoff(hackathon_id: Optional[str] = None, client=None) -> dict:
    """
    Disqualify submitted entries whose repo received commits after the cutoff.

    Submissions whose cutoff has not passed yet are skipped, as are repos
    GitHub cannot answer for (logged, retried on the next run).
    """
    hackathon_id = resolve_period_id(hackathon_id)
    client = client or get_github_client()
    current = now()

    checked = 0
    disqualified = []
    candidates = Submission.objects.filter(
        hackathon_id=hackathon_id,
        submitted_at__isnull=False,
        disqualified=False,
    ).order_by("id")

    for submission in candidates:
        if submission.cutoff_at > current:
            continue
        parsed = parse_repo_url(submission.repo_url)
        if parsed is None:
            continue

        checked += 1
        try:
            late = client.has_commits_since(parsed[0], parsed[1], submission.cutoff_at)
        except GitHubAPIError as e:
            logger.warning(f"Commit audit skipped: submission={submission.id}, repo={submission.repo_url}. Reason: {e}")
            continue

        if late:
            with transaction.atomic():
                locked = Submission.objects.select_for_update().get(pk=submission.pk)
                if mark_disqualified(locked, COMMIT_AFTER_CUTOFF_REASON):
                    disqualified.append(locked.id)

    logger.info(
        f"Commit audit finished: hackathon={hackathon_id}, checked={checked}, disqualified={len(disqualified)}"
    )
    return {
        "hackathon_id": hackathon_id,
        "checked": checked,
        "disqualified_count": len(disqualified),
        "disqualified_ids": disqualified,
    }
