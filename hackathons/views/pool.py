from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from hackathons.serializers import PoolEntrySerializer
from hackathons.services import pool as pool_service

from .generics import requested_hackathon_id


class PoolViewSet(viewsets.ViewSet):
    """
    Participants looking for a team.

    GET  /api/hackathons/pool/?hackathon_id=   newest first
    POST /api/hackathons/pool/join/
    POST /api/hackathons/pool/leave/
    """
    permission_classes = [IsAuthenticated]

    def list(self, request):
        hackathon_id = requested_hackathon_id(request)
        entries = pool_service.list_pool(hackathon_id)
        return Response({
            "hackathon_id": hackathon_id,
            "in_pool": pool_service.is_in_pool(request.user, hackathon_id),
            "results": PoolEntrySerializer(entries, many=True).data,
        })

    @action(detail=False, methods=["post"], url_path="join")
    def join(self, request):
        hackathon_id = requested_hackathon_id(request)
        entry = pool_service.join_pool(request.user, hackathon_id)
        return Response(
            {"joined": True, "hackathon_id": hackathon_id, "entry": PoolEntrySerializer(entry).data},
            status=status.HTTP_200_OK,
        )

    @action(detail=False, methods=["post"], url_path="leave")
    def leave(self, request):
        hackathon_id = requested_hackathon_id(request)
        removed = pool_service.leave_pool(request.user, hackathon_id)
        return Response({"left": removed, "hackathon_id": hackathon_id})
