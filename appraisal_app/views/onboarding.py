from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from appraisal_app.services import onboarding


class OnboardingView(APIView):
    """
    GET /api/onboarding/ → {"show_welcome": bool}

    True only on the first call after each login, per role.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        flag = onboarding.welcome_flag(request.user.role)
        return Response({
            "role": request.user.role,
            "show_welcome": onboarding.consume(request.user, flag),
        })
