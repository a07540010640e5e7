# hackathons/views/invitations.py - Invite & join request API views

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from hackathons.serializers import (
    InviteCreateSerializer,
    InviteSerializer,
    JoinRequestCreateSerializer,
    JoinRequestSerializer,
)
from hackathons.services import invitations
from hackathons.throttles import HackathonProposalThrottle

from .generics import requested_hackathon_id


class ProposalThrottleMixin:
    def get_throttles(self):
        if self.action == "create":
            return [HackathonProposalThrottle()]
        return super().get_throttles()


class InviteViewSet(ProposalThrottleMixin, viewsets.ViewSet):
    """
    Team -> participant invites.

    GET  /api/hackathons/invites/              pending invites to me
    POST /api/hackathons/invites/              {"to_user_id", "hackathon_id"?}
    POST /api/hackathons/invites/<id>/accept/
    POST /api/hackathons/invites/<id>/decline/
    """
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        hackathon_id = requested_hackathon_id(request)
        pending = invitations.invites_for(request.user, hackathon_id)
        return Response(InviteSerializer(pending, many=True).data)

    def create(self, request):
        serializer = InviteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        invite = invitations.send_invite(
            request.user,
            serializer.validated_data["to_user_id"],
            serializer.validated_data.get("hackathon_id") or None,
        )
        return Response(
            {"team_id": invite.team_id, "invite": InviteSerializer(invite).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="accept")
    def accept(self, request, pk=None):
        invite = invitations.accept_invite(pk, request.user)
        return Response({"accepted": True, "team_id": invite.team_id})

    @action(detail=True, methods=["post"], url_path="decline")
    def decline(self, request, pk=None):
        invitations.decline_invite(pk, request.user)
        return Response({"declined": True})


class JoinRequestViewSet(ProposalThrottleMixin, viewsets.ViewSet):
    """
    Participant -> team join requests. One pending request per participant.

    GET  /api/hackathons/requests/              my pending request (list of 0 or 1)
    POST /api/hackathons/requests/              {"team_id"}
    POST /api/hackathons/requests/<id>/accept/  any team member
    POST /api/hackathons/requests/<id>/decline/ any team member
    POST /api/hackathons/requests/<id>/cancel/  the requester
    """
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):
        hackathon_id = requested_hackathon_id(request)
        pending = invitations.pending_request_of(request.user, hackathon_id)
        return Response(JoinRequestSerializer([pending] if pending else [], many=True).data)

    def create(self, request):
        serializer = JoinRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        join_request = invitations.send_join_request(request.user, serializer.validated_data["team_id"])
        return Response(JoinRequestSerializer(join_request).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="accept")
    def accept(self, request, pk=None):
        join_request = invitations.accept_join_request(pk, request.user)
        return Response({"accepted": True, "team_id": join_request.team_id})

    @action(detail=True, methods=["post"], url_path="decline")
    def decline(self, request, pk=None):
        invitations.decline_join_request(pk, request.user)
        return Response({"declined": True})

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        invitations.cancel_join_request(pk, request.user)
        return Response({"canceled": True})
