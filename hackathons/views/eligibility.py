from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from hackathons.eligibility import check_eligibility

from .generics import requested_hackathon_id


class EligibilityView(APIView):
    """
    GET /api/hackathons/eligibility/?hackathon_id=virtual-2025-06

    Whether the current user may join the pool; `reason` explains a "no".
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        hackathon_id = requested_hackathon_id(request)
        result = check_eligibility(request.user, hackathon_id)
        return Response({
            "hackathon_id": hackathon_id,
            "eligible": result.eligible,
            "reason": result.reason,
        })
