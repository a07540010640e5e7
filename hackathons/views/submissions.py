# hackathons/views/submissions.py - Repo registration & submission API views

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from hackathons.models import Submission
from hackathons.permissions import IsHackathonAdmin
from hackathons.serializers import (
    DisqualifySerializer,
    RegisterSubmissionSerializer,
    SubmissionSerializer,
)
from hackathons.services import submissions
from hackathons.throttles import RepoVerifyThrottle

from .generics import requested_hackathon_id


class SubmissionViewSet(viewsets.ViewSet):
    """
    GET  /api/hackathons/submissions/mine/
    POST /api/hackathons/submissions/register/            {"repo_url", "hackathon_id"?}
    POST /api/hackathons/submissions/submit/              irreversible
    POST /api/hackathons/submissions/<id>/disqualify/     admin
    POST /api/hackathons/submissions/check-disqualified/  admin, commit audit
    """
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        if self.action in ("disqualify", "check_disqualified"):
            return [IsAuthenticated(), IsHackathonAdmin()]
        return super().get_permissions()

    def get_throttles(self):
        if self.action == "register":
            return [RepoVerifyThrottle()]
        return super().get_throttles()

    @action(detail=False, methods=["get"], url_path="mine")
    def mine(self, request):
        hackathon_id = requested_hackathon_id(request)
        submission = submissions.submission_for_user(request.user, hackathon_id)
        return Response({
            "hackathon_id": hackathon_id,
            "submission": SubmissionSerializer(submission).data if submission else None,
        })

    @action(detail=False, methods=["post"], url_path="register")
    def register(self, request):
        serializer = RegisterSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        submission = submissions.register_submission(
            request.user,
            serializer.validated_data["repo_url"],
            serializer.validated_data.get("hackathon_id") or None,
        )
        return Response(
            {"registered": True, "submission": SubmissionSerializer(submission).data},
            status=status.HTTP_200_OK,
        )

    @action(detail=False, methods=["post"], url_path="submit")
    def submit(self, request):
        hackathon_id = requested_hackathon_id(request)
        submission = submissions.submit(request.user, hackathon_id)
        return Response({"submitted": True, "submission": SubmissionSerializer(submission).data})

    @action(detail=True, methods=["post"], url_path="disqualify")
    def disqualify(self, request, pk=None):
        submission = get_object_or_404(Submission, pk=pk)
        serializer = DisqualifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        submission = submissions.disqualify(submission, serializer.validated_data["reason"], actor=request.user)
        return Response(SubmissionSerializer(submission).data)

    @action(detail=False, methods=["post"], url_path="check-disqualified")
    def check_disqualified(self, request):
        hackathon_id = requested_hackathon_id(request)
        summary = submissions.check_commits_after_cutoff(hackathon_id)
        summary["message"] = (
            f"Checked submissions for {hackathon_id}; disqualified {summary['disqualified_count']}."
        )
        return Response(summary)
