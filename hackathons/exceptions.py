# hackathons/exceptions.py
"""
Typed, user-facing errors for the hackathon team lifecycle.

Every error is a DRF APIException, so views let them propagate and
core.exceptions.custom_exception_handler renders them as
{"success": false, "status_code": ..., "errors": {"detail", "code"}}.
None of them is retried automatically.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class HackathonError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Hackathon action could not be completed."
    default_code = "hackathon_error"


class IneligibleError(HackathonError):
    """Pool join (or team participation) blocked; always carries a reason."""
    default_detail = "You are not eligible to join this hackathon."
    default_code = "ineligible"

    def __init__(self, reason=None):
        super().__init__(detail=reason)
        self.reason = str(self.detail)


class AlreadyTeamedError(HackathonError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already on a team for this hackathon."
    default_code = "already_teamed"


class TeamFullError(HackathonError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Team is full."
    default_code = "team_full"


class RequestAlreadyPendingError(HackathonError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "You already have a pending join request. Wait for a response or cancel it first."
    default_code = "request_already_pending"


class DuplicateInviteError(HackathonError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "An invite to this participant is already pending."
    default_code = "duplicate_invite"


class NotFullTeamError(HackathonError):
    default_detail = "Your team needs 3 members before registering or submitting a repo."
    default_code = "team_not_full"


class NotRegisteredError(HackathonError):
    default_detail = "Register a repo first before submitting."
    default_code = "not_registered"


class RepoInvalidError(HackathonError):
    default_detail = "Repository failed verification."
    default_code = "repo_invalid"


class RepoVerificationUnavailable(HackathonError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Could not verify repo with GitHub."
    default_code = "repo_verification_unavailable"


class AlreadyLockedError(HackathonError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This submission is locked and can no longer change."
    default_code = "already_locked"


class SubmissionClosedError(HackathonError):
    default_detail = "Submission period has ended. No more submissions for this month."
    default_code = "submission_closed"


class NotTeamMemberError(HackathonError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not a member of this team."
    default_code = "not_team_member"


class ProposalClosedError(HackathonError):
    """Invite / join request is no longer pending (or expired)."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already handled."
    default_code = "proposal_closed"


class InvalidPeriodError(HackathonError):
    default_detail = "Invalid hackathon period."
    default_code = "invalid_period"


class TeamProfileLockedError(HackathonError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Team profile is unlocked after winning a hackathon (wins >= 1)."
    default_code = "team_profile_locked"
