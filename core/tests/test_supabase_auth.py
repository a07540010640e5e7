import time
from datetime import datetime
from unittest import mock
from zoneinfo import ZoneInfo

import jwt
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.test import APIClient, APIRequestFactory

from core.supabase_auth import SupabaseJWTAuthentication

User = get_user_model()

SECRET = "test-supabase-jwt-secret-0123456789abcdef"


def make_token(sub="sb-123", email="newbie@example.com", secret=SECRET, **claims):
    payload = {
        "sub": sub,
        "email": email,
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


@override_settings(SUPABASE_JWT_SECRET=SECRET)
class SupabaseJWTAuthenticationTests(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.auth = SupabaseJWTAuthentication()

    def authenticate(self, token):
        request = self.factory.get("/", HTTP_AUTHORIZATION=f"Bearer {token}")
        return self.auth.authenticate(request)

    def test_no_bearer_header_defers_to_other_backends(self):
        self.assertIsNone(self.auth.authenticate(self.factory.get("/")))

    def test_first_login_creates_user(self):
        user, payload = self.authenticate(make_token())

        self.assertEqual(user.username, "newbie")
        self.assertEqual(user.supabase_id, "sb-123")
        self.assertFalse(user.has_usable_password())
        self.assertEqual(payload["email"], "newbie@example.com")

        again, _ = self.authenticate(make_token())
        self.assertEqual(again.pk, user.pk)

    def test_existing_account_is_linked_by_email(self):
        existing = User.objects.create_user(username="old", email="Newbie@example.com", password="x")

        user, _ = self.authenticate(make_token())

        self.assertEqual(user.pk, existing.pk)
        existing.refresh_from_db()
        self.assertEqual(existing.supabase_id, "sb-123")

    def test_username_collision_gets_suffix(self):
        User.objects.create_user(username="newbie", email="other@example.com", password="x")
        user, _ = self.authenticate(make_token())
        self.assertEqual(user.username, "newbie_1")

    def test_bad_tokens_are_rejected(self):
        with self.assertRaisesMessage(AuthenticationFailed, "expired"):
            self.authenticate(make_token(exp=int(time.time()) - 10))
        with self.assertRaisesMessage(AuthenticationFailed, "Invalid token"):
            self.authenticate(make_token(secret="another-secret-0123456789abcdef0123"))
        with self.assertRaisesMessage(AuthenticationFailed, "Invalid token"):
            self.authenticate(make_token(aud="anon"))

    def test_inactive_user_is_rejected(self):
        User.objects.create_user(username="gone", email="gone@example.com", supabase_id="sb-9", is_active=False)
        with self.assertRaises(AuthenticationFailed):
            self.authenticate(make_token(sub="sb-9", email="gone@example.com"))

    def test_bearer_token_reaches_hackathon_api(self):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {make_token()}")

        response = client.get(reverse("hackathon-eligibility"))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["eligible"])

    @override_settings(SUPABASE_JWT_SECRET="")
    def test_unconfigured_secret_skips_jwt(self):
        self.assertIsNone(self.authenticate(make_token()))


class HealthCheckTests(TestCase):
    def test_health_is_public(self):
        response = APIClient().get(reverse("health-check"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "ok")
        self.assertTrue(response.data["db"])

    @override_settings(GITHUB_TOKEN="ghp_test")
    def test_health_reports_running_period(self):
        boston = ZoneInfo("America/New_York")
        with mock.patch("django.utils.timezone.now", return_value=datetime(2025, 6, 30, 23, 30, tzinfo=boston)):
            response = APIClient().get(reverse("health-check"))

        self.assertEqual(response.data["hackathon_id"], "virtual-2025-06")
        self.assertEqual(response.data["submission_cutoff"], "2025-07-01T00:00:00-04:00")
        self.assertTrue(response.data["github_token_configured"])
