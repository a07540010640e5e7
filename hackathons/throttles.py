# hackathons/throttles.py

from rest_framework.throttling import SimpleRateThrottle


class TeamProfileUpdateThrottle(SimpleRateThrottle):
    """
    Throttle team profile edits per user per team.

    Scope key: 'hackathon-team-profile'
    Cache key shape:
      throttle_hackathon-team-profile_u<user_id>_t<team_id>
    """
    scope = "hackathon-team-profile"

    def get_cache_key(self, request, view):
        # Only throttle writes
        if request.method not in ("PATCH", "PUT"):
            return None

        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        team_id = getattr(view, "kwargs", {}).get("pk") or "none"
        return f"throttle_{self.scope}_u{user.id}_t{team_id}"


class HackathonProposalThrottle(SimpleRateThrottle):
    """
    Throttle invites and join requests per user.

    Scope key: 'hackathon-proposal'
    Cache key shape:
      throttle_hackathon-proposal_u<user_id>
    """
    scope = "hackathon-proposal"

    def get_cache_key(self, request, view):
        # Only throttle POST (create)
        if request.method != "POST":
            return None

        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        return f"throttle_{self.scope}_u{user.id}"


class RepoVerifyThrottle(SimpleRateThrottle):
    """
    Throttle repo registration per user (each call hits the GitHub API).

    Scope key: 'hackathon-repo-verify'
    """
    scope = "hackathon-repo-verify"

    def get_cache_key(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        return f"throttle_{self.scope}_u{user.id}"
