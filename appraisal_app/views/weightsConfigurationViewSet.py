import logging

from rest_framework import mixins, viewsets
from rest_framework.permissions import IsAuthenticated

from appraisal_app.models import WeightsConfiguration
from appraisal_app.permissions import IsAdminOrHR
from appraisal_app.serializers.weight_config_serializer import WeightConfigSerializer

logger = logging.getLogger(__name__)


class WeightConfigViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          mixins.UpdateModelMixin,
                          viewsets.GenericViewSet):
    """
    GET   /api/weights-configuration/                     → every configuration
    GET   /api/weights-configuration/{configuration}/     → one configuration
    PATCH /api/weights-configuration/{configuration}/     → Admin / HR only

    Changes apply to evaluations started afterwards; existing evaluations
    keep the weights they were started with.
    """
    queryset = WeightsConfiguration.objects.all().order_by("configuration")
    serializer_class = WeightConfigSerializer
    lookup_field = "configuration"

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [IsAuthenticated()]
        return [IsAdminOrHR()]

    def perform_update(self, serializer):
        instance = serializer.save()
        logger.info("Weights for %s updated by %s: %s",
                    instance.configuration, self.request.user, instance.as_weights())
