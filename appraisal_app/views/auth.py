import logging

from django.contrib.auth import get_user_model
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView, TokenBlacklistView

from appraisal_app.serializers.auth_serializers import EmailLoginSerializer
from appraisal_app.services import onboarding

logger = logging.getLogger(__name__)


class EmailLoginView(TokenObtainPairView):
    serializer_class = EmailLoginSerializer


class LogoutView(TokenBlacklistView):
    """Blacklists the refresh token and drops the one-time dialog flags of its owner."""

    def post(self, request, *args, **kwargs):
        try:
            user_id = RefreshToken(request.data.get("refresh"))[api_settings.USER_ID_CLAIM]
        except (TokenError, KeyError):
            user_id = None

        response = super().post(request, *args, **kwargs)
        if response.status_code == 200 and user_id is not None:
            user = get_user_model().objects.filter(**{api_settings.USER_ID_FIELD: user_id}).first()
            if user is not None:
                onboarding.reset(user)
                logger.info("User %s signed out", user.pk)
        return response
