# hackathons/activity_verbs.py
"""
Hackathon activity verbs for DomainActivity.

All hackathon activity logging should use these constants
so the ledger can be filtered per transition.
"""

# Pool
POOL_JOINED = "pool.joined"
POOL_LEFT = "pool.left"

# Team membership
TEAM_CREATED = "team.created"
TEAM_JOINED = "team.joined"
TEAM_LEFT = "team.left"
TEAM_DISSOLVED = "team.dissolved"
TEAM_PROFILE_UPDATED = "team.profile_updated"

# Invites (team -> participant)
INVITE_SENT = "invite.sent"
INVITE_ACCEPTED = "invite.accepted"
INVITE_DECLINED = "invite.declined"

# Join requests (participant -> team)
REQUEST_SENT = "request.sent"
REQUEST_ACCEPTED = "request.accepted"
REQUEST_DECLINED = "request.declined"
REQUEST_CANCELED = "request.canceled"

# Submissions
SUBMISSION_REGISTERED = "submission.registered"
SUBMISSION_SUBMITTED = "submission.submitted"
SUBMISSION_DISQUALIFIED = "submission.disqualified"

# Penalties
PARTICIPANT_LOCKED_OUT = "participant.locked_out"
