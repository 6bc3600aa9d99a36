from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from appraisal_app.models import ConfigurationName
from appraisal_app.services.configuration import (
    CONFIGURATION_CATEGORIES, JobTargetMode, build_configuration, weights_for,
)
from appraisal_app.services.indicators import (
    CATEGORY_ORDER, CATEGORY_TITLES, SCORE_LABELS, indicators_for,
)


def _indicator_data(indicator):
    return {
        "code": indicator.code,
        "title": indicator.title,
        "description": indicator.description,
        "job_target": indicator.job_target,
    }


class IndicatorCatalogueView(APIView):
    """
    GET /api/indicators/                         → full catalogue by category
    GET /api/indicators/?configuration=HO_BASIC  → only what that configuration scores
        (&job_targets=breakdown for the 7-row Job Targets block)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        name = request.query_params.get("configuration")
        if not name:
            return Response({
                "score_labels": SCORE_LABELS,
                "categories": [
                    {
                        "category": category,
                        "title": CATEGORY_TITLES[category],
                        "indicators": [_indicator_data(ind) for ind in indicators_for(category)],
                    }
                    for category in CATEGORY_ORDER
                ],
            })

        if name not in CONFIGURATION_CATEGORIES:
            return Response({
                "error": "Invalid configuration.",
                "allowed_values": list(ConfigurationName.values),
            }, status=400)

        mode = request.query_params.get("job_targets") or JobTargetMode.SINGLE
        if mode not in (JobTargetMode.SINGLE, JobTargetMode.BREAKDOWN):
            return Response({"error": "job_targets must be 'single' or 'breakdown'."}, status=400)

        config = build_configuration(
            name, "", job_target_mode=mode, weights=weights_for(name),
        )
        by_code = {ind.code: ind for category in config.categories for ind in indicators_for(category)}
        return Response({
            "configuration": config.name,
            "score_labels": SCORE_LABELS,
            "steps": [
                {
                    "step": step.number,
                    "category": step.category,
                    "title": step.title,
                    "weight": config.weights.get(step.category, 0),
                    "indicators": [
                        {**_indicator_data(by_code[code]), "required": code in step.required_codes}
                        for code in step.indicator_codes
                    ],
                }
                for step in config.steps
            ],
        })
