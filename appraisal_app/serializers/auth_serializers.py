import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.settings import api_settings

from accounts.models import Role
from appraisal_app.services import onboarding

logger = logging.getLogger(__name__)


def user_claims(user) -> dict:
    """Profile bits the frontend needs right after login; also embedded in the token."""
    return {
        "role": Role(user.role).label if user.role in Role.values else user.role,
        "name": user.name or user.email or user.username,
        "position": user.position,
        "has_signature": user.has_signature,
    }


class EmailLoginSerializer(TokenObtainPairSerializer):
    """
    Login with `email` + password. `username` is still accepted for older
    clients; the auth backend treats a username containing "@" as an email.
    When both are sent they must belong to the same account.
    """
    username = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    password = serializers.CharField(write_only=True)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # SimpleJWT adds a required self.username_field; email-only logins must pass without it.
        if self.username_field in self.fields:
            self.fields[self.username_field].required = False
            self.fields[self.username_field].allow_blank = True

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        for claim, value in user_claims(user).items():
            token[claim] = value
        return token

    def validate(self, attrs):
        username = attrs.get("username") or None
        email = attrs.get("email") or None
        if not (username or email):
            raise serializers.ValidationError("Provide username or email.")

        user = authenticate(
            request=self.context.get("request"),
            username=username,
            email=email,
            password=attrs.get("password"),
        )
        if user is None:
            raise serializers.ValidationError("Invalid credentials.")

        self.user = user
        if api_settings.UPDATE_LAST_LOGIN:
            update_last_login(None, user)
        onboarding.reset(user)
        logger.info("User %s signed in", user.pk)

        refresh = self.get_token(user)
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
            **user_claims(user),
        }
