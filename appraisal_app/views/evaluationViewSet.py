import logging
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Avg, Count, Q
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, status, filters, serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from appraisal_app.exceptions import AppraisalError
from appraisal_app.filters import EvaluationFilter
from appraisal_app.models import Evaluation, Employee, EvalStatus, CategoryCode
from appraisal_app.permissions import IsAdmin, IsHR, IsEvaluator, CanEditEvaluation
from appraisal_app.serializers.evaluation_serializer import (
    EvaluationSerializer, EvaluationListSerializer, IndicatorScoreSerializer, ScoreEntrySerializer,
)
from appraisal_app.services import onboarding
from appraisal_app.services.evaluation_math import recompute
from appraisal_app.services.quarterly import quarterly_review_status
from appraisal_app.services.scores import clear_category, ensure_editable, record_scores
from appraisal_app.services.submission import SubmissionGuard
from appraisal_app.services.wizard import StepWizard
from appraisal_app.utils import LabelChoiceField

logger = logging.getLogger(__name__)

MUTATING_ACTIONS = (
    "update", "partial_update", "destroy",
    "scores", "clear_scores", "next_step", "previous_step",
    "confirm", "cancel_confirmation", "submit",
)


def _money(value):
    return f"{Decimal(value or 0):.2f}"


def snapshot_data(snapshot):
    overall = snapshot.overall
    return {
        "configuration": snapshot.configuration,
        "categories": [
            {**row, "average": _money(row["average"]), "weighted": _money(row["weighted"])}
            for row in snapshot.breakdown
        ],
        "weighted_total": _money(overall.weighted_total),
        "percentage": _money(overall.percentage),
        "rating_label": overall.rating,
        "passed": overall.passed,
    }


class EvaluationViewSet(viewsets.ModelViewSet):
    """
    Permissions
    -----------
    • ADMIN / HR      → full CRUD on every evaluation.
    • EVALUATOR       → may start evaluations (as reviewer) and fill in,
                        navigate and submit the ones they review.
    • Employee        → read-only access to own evaluations.
    """
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    permission_classes = [IsAuthenticated]  #default fallback
    serializer_class = EvaluationSerializer
    filterset_class = EvaluationFilter
    search_fields = ["employee__user__name", "employee__position", "employee__branch__name"]
    ordering_fields = ["created_at", "submitted_at", "rating", "percentage"]

    #----dynamic permissions----
    def get_permissions(self):
        role = self.request.user.role if self.request.user.is_authenticated else None
        action = self.action

        if action == "create":
            if role in ("ADMIN", "HR"):
                return [(IsAdmin | IsHR)()]
            return [IsEvaluator()]

        if action in MUTATING_ACTIONS:
            return [CanEditEvaluation()]

        return [IsAuthenticated()]

    def get_serializer_class(self):
        if self.action == "list":
            return EvaluationListSerializer
        return super().get_serializer_class()

    # ---- queryset filtered by role ---------------------------
    def get_queryset(self):
        qs = (Evaluation.objects
              .select_related("employee__user", "employee__branch", "reviewer")
              .prefetch_related("indicator_scores"))
        user = self.request.user
        if user.role in ("ADMIN", "HR"):
            return qs
        if user.role == "EVALUATOR":
            return qs.filter(Q(reviewer=user) | Q(employee__user=user))
        return qs.filter(employee__user=user)

    # ---- error translation ------------------------------------
    def handle_exception(self, exc):
        if isinstance(exc, AppraisalError):
            return Response({"error": exc.message}, status=exc.status_code)
        if isinstance(exc, DjangoValidationError):
            return Response({"error": exc.messages[0] if exc.messages else str(exc)},
                            status=status.HTTP_400_BAD_REQUEST)
        return super().handle_exception(exc)

    # ---- CRUD ---------------------------------------------------
    def perform_create(self, serializer):
        user = self.request.user
        if user.role == "EVALUATOR":
            # evaluators always review what they start
            serializer.save(reviewer=user)
        else:
            serializer.save(reviewer=serializer.validated_data.get("reviewer") or user)

    @transaction.atomic
    def perform_update(self, serializer):
        ensure_editable(serializer.instance, lock=True)
        serializer.save()

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        with transaction.atomic():
            ensure_editable(instance, lock=True)
            self.perform_destroy(instance)
        logger.info("Evaluation %s discarded by %s", kwargs.get("pk"), request.user)
        return Response({
            "message": "Evaluation deleted successfully."
        }, status=status.HTTP_204_NO_CONTENT)

    # ---- scores -------------------------------------------------
    @action(detail=True, methods=["get", "post"], url_path="scores")
    def scores(self, request, pk=None):
        evaluation = self.get_object()
        if request.method == "POST":
            payload = request.data.get("scores", request.data) if isinstance(request.data, dict) else request.data
            entries = ScoreEntrySerializer(data=payload, many=True)
            entries.is_valid(raise_exception=True)
            snapshot = record_scores(evaluation, entries.validated_data)
        else:
            snapshot = recompute(evaluation, persist=False)

        rows = evaluation.indicator_scores.order_by("category", "indicator")
        return Response({
            "scores": IndicatorScoreSerializer(rows, many=True).data,
            "result": snapshot_data(snapshot),
        })

    @action(detail=True, methods=["post"], url_path="clear-scores")
    def clear_scores(self, request, pk=None):
        evaluation = self.get_object()
        category_field = LabelChoiceField(choices=CategoryCode.choices)
        category = category_field.run_validation(request.data.get("category"))
        snapshot = clear_category(evaluation, category)
        return Response({"result": snapshot_data(snapshot)})

    # ---- wizard -------------------------------------------------
    def _step_response(self, request, wizard):
        data = wizard.describe()
        data["show_job_targets_info"] = (
            data["key"] == CategoryCode.QUALITY_OF_WORK
            and wizard.config.show_job_targets
            and onboarding.consume(request.user, onboarding.JOB_TARGETS_INFO)
        )
        return Response(data)

    @action(detail=True, methods=["get"], url_path="step")
    def step(self, request, pk=None):
        return self._step_response(request, StepWizard(self.get_object()))

    @action(detail=True, methods=["post"], url_path="next", url_name="next")
    def next_step(self, request, pk=None):
        wizard = StepWizard(self.get_object())
        wizard.next()
        return self._step_response(request, wizard)

    @action(detail=True, methods=["post"], url_path="previous", url_name="previous")
    def previous_step(self, request, pk=None):
        wizard = StepWizard(self.get_object())
        wizard.previous()
        return self._step_response(request, wizard)

    @action(detail=True, methods=["get"], url_path="result")
    def result(self, request, pk=None):
        evaluation = self.get_object()
        snapshot = recompute(evaluation, persist=not evaluation.is_submitted)
        return Response(snapshot_data(snapshot))

    # ---- submission ---------------------------------------------
    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request, pk=None):
        summary = SubmissionGuard(self.get_object()).request_confirmation()
        return Response(summary)

    @action(detail=True, methods=["post"], url_path="cancel-confirmation")
    def cancel_confirmation(self, request, pk=None):
        evaluation = self.get_object()
        SubmissionGuard(evaluation).cancel_confirmation()
        return Response({"status": evaluation.get_status_display()})

    @action(detail=True, methods=["post"], url_path="submit")
    def submit(self, request, pk=None):
        # signed by the evaluation's reviewer, also when HR or an admin presses submit
        evaluation = self.get_object()
        outcome = SubmissionGuard(evaluation).confirm()
        return Response({
            "message": "Evaluation submitted successfully.",
            "route": outcome["route"],
            "summary": outcome["summary"],
            "submitted_at": evaluation.submitted_at,
        }, status=status.HTTP_200_OK)

    # ---- reports ------------------------------------------------
    @action(detail=False, methods=["get"], url_path="summary")
    def summary(self, request):
        params = request.query_params
        qs = self.get_queryset()

        if params.get("employee_id"):
            qs = qs.filter(employee__employee_id=params["employee_id"])

        status_filter = params.get("status")
        if status_filter:
            status_field = LabelChoiceField(choices=EvalStatus.choices, required=False)
            try:
                qs = qs.filter(status=status_field.to_internal_value(status_filter))
            except serializers.ValidationError:
                return Response({
                    "error": "Invalid status.",
                    "allowed_values": [choice[0] for choice in EvalStatus.choices],
                    "allowed_labels": [choice[1] for choice in EvalStatus.choices],
                }, status=status.HTTP_400_BAD_REQUEST)

        if params.get("configuration"):
            qs = qs.filter(configuration=params["configuration"])

        year = params.get("year")
        if year:
            try:
                qs = qs.filter(created_at__year=int(year))
            except ValueError:
                return Response({
                    "error": "Invalid year format. Please provide a valid year (e.g., 2025)."
                }, status=status.HTTP_400_BAD_REQUEST)

        agg = qs.aggregate(
            count=Count("pk"),
            average=Avg("rating"),
            average_percentage=Avg("percentage"),
            passed=Count("pk", filter=Q(passed=True)),
        )
        return Response({
            "count": agg["count"] or 0,
            "average_rating": _money(agg["average"]),
            "average_percentage": _money(agg["average_percentage"]),
            "passed": agg["passed"] or 0,
        }, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="quarterly-status")
    def quarterly_status(self, request):
        employee_id = request.query_params.get("employee_id")
        if not employee_id:
            return Response({"error": "employee_id is required."}, status=status.HTTP_400_BAD_REQUEST)
        employee = get_object_or_404(Employee, employee_id=employee_id)
        if request.user.role not in ("ADMIN", "HR", "EVALUATOR") and employee.user_id != request.user.pk:
            self.permission_denied(request, message="You cannot view this employee.")

        year = request.query_params.get("year")
        try:
            year = int(year) if year else None
        except ValueError:
            return Response({
                "error": "Invalid year format. Please provide a valid year (e.g., 2025)."
            }, status=status.HTTP_400_BAD_REQUEST)
        return Response(quarterly_review_status(employee, year))
