# hackathons/views/teams.py - Hackathon team API views

from dataclasses import asdict

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from hackathons.exceptions import NotTeamMemberError
from hackathons.models import Team
from hackathons.serializers import (
    InviteSerializer,
    JoinRequestSerializer,
    SubmissionSerializer,
    TeamProfileSerializer,
    TeamSerializer,
)
from hackathons.services import invitations, submissions, teams
from hackathons.throttles import TeamProfileUpdateThrottle

from .generics import requested_hackathon_id


class TeamViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Teams of a hackathon period.

    Teams are never created here: the first invite a teamless participant
    sends creates theirs (see InviteViewSet).
    """
    serializer_class = TeamSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        if self.action == "list":
            hackathon_id = requested_hackathon_id(self.request)
            if self.request.query_params.get("open") in ("1", "true"):
                return teams.list_open_teams(hackathon_id, exclude_user=self.request.user)
            return teams.list_teams(hackathon_id)
        return Team.objects.prefetch_related("members__user")

    def get_throttles(self):
        if self.action == "profile":
            return [TeamProfileUpdateThrottle()]
        return super().get_throttles()

    def _ensure_member(self, team):
        if not teams.is_member(self.request.user, team):
            raise NotTeamMemberError()

    @action(detail=False, methods=["get"], url_path="mine")
    def mine(self, request):
        """
        GET /api/hackathons/teams/mine/?hackathon_id=

        The caller's team, its submission and open proposals for the period.
        """
        hackathon_id = requested_hackathon_id(request)
        team = teams.team_for(request.user, hackathon_id)
        pending = invitations.pending_request_of(request.user, hackathon_id)

        data = {
            "hackathon_id": hackathon_id,
            "team": None,
            "submission": None,
            "invites_sent": [],
            "pending_request": JoinRequestSerializer(pending).data if pending else None,
        }
        if team is not None:
            submission = submissions.submission_for(team)
            data["team"] = TeamSerializer(team).data
            data["submission"] = SubmissionSerializer(submission).data if submission else None
            data["invites_sent"] = InviteSerializer(invitations.invites_sent_by_team(team), many=True).data
        return Response(data)

    @action(detail=True, methods=["post"], url_path="leave")
    def leave(self, request, pk=None):
        """
        Leave the team. If it had registered a repo, the submission is
        disqualified and the caller is locked out until next month.
        """
        result = teams.leave_team(request.user, pk)
        return Response(asdict(result))

    @action(detail=True, methods=["patch"], url_path="profile")
    def profile(self, request, pk=None):
        """Team name / logo, unlocked after the team's first win."""
        team = self.get_object()
        serializer = TeamProfileSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        team = teams.update_team_profile(team, request.user, **serializer.validated_data)
        return Response(TeamSerializer(team).data)

    @action(detail=True, methods=["get"], url_path="requests")
    def requests(self, request, pk=None):
        """Pending join requests to this team (members only), newest first."""
        team = self.get_object()
        self._ensure_member(team)
        pending = invitations.requests_for_team(team)
        return Response(JoinRequestSerializer(pending, many=True).data)
