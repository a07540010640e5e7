import time

from django.conf import settings
from django.db import connections
from django.db.utils import OperationalError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from hackathons.periods import current_period_id, submission_cutoff


class HealthCheckView(APIView):
    """
    Public uptime check.

    Reports database reachability, the running hackathon period with its
    submission cutoff, and whether GitHub verification has a token (without
    one, repo checks fall back to the anonymous rate limit).
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        started = time.monotonic()

        try:
            with connections["default"].cursor() as cursor:
                cursor.execute("SELECT 1")
            db_ok = True
        except OperationalError:
            db_ok = False

        hackathon_id = current_period_id()
        return Response(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "env": getattr(settings, "ENV", "unknown"),
                "hackathon_id": hackathon_id,
                "submission_cutoff": submission_cutoff(hackathon_id).isoformat(),
                "github_token_configured": bool(getattr(settings, "GITHUB_TOKEN", "")),
                "latency_ms": int((time.monotonic() - started) * 1000),
            }
        )
