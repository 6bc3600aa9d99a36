import django_filters as filters
from appraisal_app.models import Evaluation, EvalStatus, ConfigurationName, EvaluationType


class EvaluationFilter(filters.FilterSet):
    # expose nice query params…
    employee_id   = filters.UUIDFilter(field_name="employee__employee_id", lookup_expr="exact")
    user_id       = filters.UUIDFilter(field_name="employee__user__user_id", lookup_expr="exact")
    reviewer_id   = filters.UUIDFilter(field_name="reviewer__user_id", lookup_expr="exact")
    status        = filters.ChoiceFilter(field_name="status", choices=EvalStatus.choices)  # keys e.g. SUBMITTED
    configuration = filters.ChoiceFilter(field_name="configuration", choices=ConfigurationName.choices)
    evaluation_type = filters.ChoiceFilter(field_name="evaluation_type", choices=EvaluationType.choices)
    year          = filters.NumberFilter(field_name="created_at", lookup_expr="year")

    class Meta:
        model = Evaluation
        fields = ["employee_id", "user_id", "reviewer_id", "status", "configuration", "evaluation_type", "year"]
