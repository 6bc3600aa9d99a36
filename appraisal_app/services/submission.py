import logging
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from appraisal_app.exceptions import (
    EvaluationLocked, SignatureRequired, SubmissionBackendError, SubmissionConflict,
)
from appraisal_app.models import EvalStatus, Evaluation
from appraisal_app.services.backends import SubmissionBackend, get_backend
from appraisal_app.services.configuration import route_for_evaluation
from appraisal_app.services.evaluation_math import EvaluationSnapshot, recompute
from appraisal_app.services.wizard import StepWizard

logger = logging.getLogger(__name__)


def can_submit(evaluator) -> bool:
    return bool(evaluator is not None and getattr(evaluator, "has_signature", False))


def _money(value) -> str:
    return f"{value:.2f}"


class SubmissionGuard:
    """
    Confirmation and submission of a finished evaluation.

    DRAFT --request_confirmation--> CONFIRMING --confirm--> SUBMITTING --> SUBMITTED
    CONFIRMING --cancel_confirmation--> DRAFT
    SUBMITTING --backend error--> CONFIRMING
    """

    def __init__(self, evaluation: Evaluation, evaluator=None, backend: Optional[SubmissionBackend] = None):
        self.evaluation = evaluation
        self.evaluator = evaluator if evaluator is not None else evaluation.reviewer
        self._backend = backend

    @property
    def backend(self) -> SubmissionBackend:
        if self._backend is None:
            self._backend = get_backend()
        return self._backend

    def _set_status(self, status, *, expected, **extra) -> bool:
        updated = Evaluation.objects.filter(
            pk=self.evaluation.pk, status=expected,
        ).update(status=status, **extra)
        if updated:
            self.evaluation.status = status
            for key, value in extra.items():
                setattr(self.evaluation, key, value)
        return bool(updated)

    def _refresh_status(self):
        self.evaluation.status = (
            Evaluation.objects.filter(pk=self.evaluation.pk).values_list("status", flat=True).first()
        )

    def _ensure_ready(self):
        """Submission starts from the Overall Assessment step with every category step valid."""
        wizard = StepWizard(self.evaluation)
        if not wizard.is_terminal():
            raise SubmissionConflict("Complete every step before submitting.")
        step = wizard.first_incomplete_step()
        if step is not None:
            raise ValidationError(wizard.validation_message(step))

    def summary(self, snapshot: Optional[EvaluationSnapshot] = None) -> dict:
        snapshot = snapshot or recompute(self.evaluation)
        overall = snapshot.overall
        return {
            "employee_name": self.evaluation.employee.full_name,
            "weighted_total": _money(overall.weighted_total),
            "percentage": _money(overall.percentage),
            "rating_label": overall.rating,
            "passed": overall.passed,
            "can_submit": can_submit(self.evaluator),
        }

    def request_confirmation(self) -> dict:
        self.evaluation.refresh_from_db(fields=["status", "current_step"])
        if self.evaluation.is_submitted:
            raise EvaluationLocked()
        self._ensure_ready()
        if not self._set_status(EvalStatus.CONFIRMING, expected=EvalStatus.DRAFT):
            raise SubmissionConflict("Evaluation is not a draft.")
        return self.summary()

    def cancel_confirmation(self) -> None:
        if self.evaluation.is_submitted:
            raise EvaluationLocked()
        if not self._set_status(EvalStatus.DRAFT, expected=EvalStatus.CONFIRMING):
            raise SubmissionConflict("Evaluation is not awaiting confirmation.")

    def build_payload(self, route: str, snapshot: EvaluationSnapshot) -> dict:
        ev = self.evaluation
        overall = snapshot.overall
        return {
            "evaluation_id": str(ev.pk),
            "employee_id": str(ev.employee_id),
            "employee_name": ev.employee.full_name,
            "evaluator_id": str(self.evaluator.pk) if self.evaluator else None,
            "evaluator_name": getattr(self.evaluator, "name", "") if self.evaluator else "",
            "evaluator_signature": getattr(self.evaluator, "signature", "") if self.evaluator else "",
            "route": route,
            "configuration": ev.configuration,
            "evaluation_type": ev.evaluation_type,
            "review_type": {
                "probationary": ev.review_type_probationary,
                "regular": ev.review_type_regular,
                "improvement": ev.review_type_improvement,
                "custom": ev.review_type_custom,
            },
            "coverage_from": ev.coverage_from.isoformat() if ev.coverage_from else None,
            "coverage_to": ev.coverage_to.isoformat() if ev.coverage_to else None,
            "scores": [
                {"category": s.category, "indicator": s.indicator, "score": s.score, "comment": s.comment}
                for s in ev.indicator_scores.order_by("category", "indicator")
            ],
            "categories": [
                {**row, "average": _money(row["average"]), "weighted": _money(row["weighted"])}
                for row in snapshot.breakdown
            ],
            "priority_areas": [ev.priority_area_1, ev.priority_area_2, ev.priority_area_3],
            "remarks": ev.remarks,
            "rating": _money(overall.weighted_total),
            "percentage": _money(overall.percentage),
            "rating_label": overall.rating,
            "passed": overall.passed,
        }

    def confirm(self) -> dict:
        """
        Send the evaluation to the submission backend. Only one submit can be
        in flight per evaluation; a failed submit leaves it awaiting confirmation.
        """
        self.evaluation.refresh_from_db(fields=["status", "current_step"])
        if self.evaluation.is_submitted:
            raise EvaluationLocked()
        if not can_submit(self.evaluator):
            logger.warning("Submission of %s refused: evaluator has no signature", self.evaluation.pk)
            raise SignatureRequired()
        self._ensure_ready()

        with transaction.atomic():
            if not self._set_status(EvalStatus.SUBMITTING, expected=EvalStatus.CONFIRMING):
                self._refresh_status()
                if self.evaluation.is_submitted:
                    raise EvaluationLocked()
                raise SubmissionConflict()

        snapshot = recompute(self.evaluation)
        route = route_for_evaluation(self.evaluation)
        payload = self.build_payload(route, snapshot)
        logger.info("Submitting evaluation %s via %s", self.evaluation.pk, route)

        try:
            response = self.backend.submit(route, payload)
        except SubmissionBackendError as exc:
            self._set_status(EvalStatus.CONFIRMING, expected=EvalStatus.SUBMITTING)
            logger.warning("Submission of %s failed: %s", self.evaluation.pk, exc.message)
            raise
        except Exception:
            self._set_status(EvalStatus.CONFIRMING, expected=EvalStatus.SUBMITTING)
            logger.exception("Submission backend crashed for %s", self.evaluation.pk)
            raise

        if not self._set_status(EvalStatus.SUBMITTED, expected=EvalStatus.SUBMITTING, submitted_at=timezone.now()):
            logger.error("Evaluation %s left SUBMITTING while the backend accepted it", self.evaluation.pk)
            raise SubmissionConflict("Evaluation changed while it was being submitted.")
        logger.info("Evaluation %s submitted", self.evaluation.pk)
        return {"route": route, "response": response, "summary": self.summary(snapshot)}
