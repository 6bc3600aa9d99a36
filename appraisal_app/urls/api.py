# appraisal_app/urls/api.py
from rest_framework.routers import DefaultRouter
from appraisal_app.views.evaluationViewSet import EvaluationViewSet
from appraisal_app.views.weightsConfigurationViewSet import WeightConfigViewSet
from appraisal_app.views.indicators import IndicatorCatalogueView
from appraisal_app.views.auth import EmailLoginView, LogoutView
from appraisal_app.views.onboarding import OnboardingView

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView  # POST /api/auth/refresh/

router = DefaultRouter()

router.register("evaluations", EvaluationViewSet, basename="evaluation") #GET /api/evaluations/
#GET /api/weights-configuration/ & GET /api/weights-configuration/{configuration}/
router.register("weights-configuration", WeightConfigViewSet, basename="weights-configuration")

urlpatterns = [
    # JWT
    path("auth/login/",   EmailLoginView.as_view(),   name="jwt-login"),
    path("auth/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("auth/logout/",  LogoutView.as_view(),       name="jwt-logout"),
    path("indicators/",   IndicatorCatalogueView.as_view(), name="indicator-catalogue"),
    path("onboarding/",   OnboardingView.as_view(),   name="onboarding"),
    # REST resources
    *router.urls
]
