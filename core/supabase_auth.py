# core/supabase_auth.py
# Custom DRF authentication class to verify Supabase JWTs

import logging
import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger("cos")

User = get_user_model()


class SupabaseJWTAuthentication(BaseAuthentication):
    """
    Custom authentication class that validates Supabase JWTs.

    This authenticator:
    1. Extracts the JWT from the Authorization header
    2. Verifies the token signature using the Supabase JWT secret
    3. Looks up or creates a Django user keyed on the Supabase user ID
    """
    keyword = "Bearer"

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith(f"{self.keyword} "):
            return None  # Let other auth backends handle it

        token = auth_header.split(" ", 1)[1].strip()

        secret = getattr(settings, "SUPABASE_JWT_SECRET", None)
        if not secret:
            logger.warning("SUPABASE_JWT_SECRET not configured")
            return None

        try:
            # Supabase uses HS256 by default
            payload = jwt.decode(
                token,
                secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid Supabase token: {e}")
            raise AuthenticationFailed("Invalid token")

        supabase_user_id = payload.get("sub")
        if not supabase_user_id:
            raise AuthenticationFailed("Invalid token: missing user ID")

        user = self._get_or_create_user(supabase_user_id, payload.get("email"))
        if not user.is_active:
            raise AuthenticationFailed("User inactive or deleted")

        return (user, payload)

    def authenticate_header(self, request):
        return self.keyword

    def _get_or_create_user(self, supabase_user_id: str, email: str):
        """
        Map a Supabase identity onto a Django user.

        Users are matched on the Supabase ID first; accounts created before
        the ID was stored are matched by email and linked on first login.
        """
        user = User.objects.filter(supabase_id=supabase_user_id).first()
        if user:
            return user

        if not email:
            raise AuthenticationFailed("Token missing email claim")

        user = User.objects.filter(email__iexact=email, supabase_id__isnull=True).first()
        if user:
            user.supabase_id = supabase_user_id
            user.save(update_fields=["supabase_id"])
            return user

        username = email.split("@")[0]
        # Ensure unique username
        base_username = username
        counter = 1
        while User.objects.filter(username=username).exists():
            username = f"{base_username}_{counter}"
            counter += 1

        user = User.objects.create(
            username=username,
            email=email,
            supabase_id=supabase_user_id,
            # Password is not used for Supabase auth
        )
        user.set_unusable_password()
        user.save(update_fields=["password"])
        logger.info(f"Created new user from Supabase: {email}")
        return user
