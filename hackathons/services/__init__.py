from .pool import join_pool, leave_pool, list_pool
from .teams import (
    LeaveResult,
    add_member,
    get_or_create_team_for,
    leave_team,
    list_open_teams,
    list_teams,
    team_for,
    update_team_profile,
)
from .invitations import (
    accept_invite,
    accept_join_request,
    cancel_join_request,
    decline_invite,
    decline_join_request,
    invites_for,
    pending_request_of,
    requests_for_team,
    send_invite,
    send_join_request,
)
from .submissions import (
    check_commits_after_cutoff,
    disqualify,
    register_submission,
    register_submission_for_team,
    submission_for,
    submit,
    submit_team,
)

__all__ = [
    "join_pool",
    "leave_pool",
    "list_pool",
    "LeaveResult",
    "add_member",
    "get_or_create_team_for",
    "leave_team",
    "list_open_teams",
    "list_teams",
    "team_for",
    "update_team_profile",
    "accept_invite",
    "accept_join_request",
    "cancel_join_request",
    "decline_invite",
    "decline_join_request",
    "invites_for",
    "pending_request_of",
    "requests_for_team",
    "send_invite",
    "send_join_request",
    "check_commits_after_cutoff",
    "disqualify",
    "register_submission",
    "register_submission_for_team",
    "submission_for",
    "submit",
    "submit_team",
]
