from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import (
    EligibilityView,
    InviteViewSet,
    JoinRequestViewSet,
    PoolViewSet,
    SubmissionViewSet,
    TeamViewSet,
)

router = DefaultRouter()
router.register(r"pool", PoolViewSet, basename="hackathon-pool")
router.register(r"teams", TeamViewSet, basename="hackathon-teams")
router.register(r"invites", InviteViewSet, basename="hackathon-invites")
router.register(r"requests", JoinRequestViewSet, basename="hackathon-requests")
router.register(r"submissions", SubmissionViewSet, basename="hackathon-submissions")

urlpatterns = [
    path("eligibility/", EligibilityView.as_view(), name="hackathon-eligibility"),
] + router.urls
