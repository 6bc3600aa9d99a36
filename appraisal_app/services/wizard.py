import logging
from typing import Optional

from django.core.exceptions import ValidationError

from appraisal_app.models import CategoryCode, EvalStatus, Evaluation
from appraisal_app.services.category_math import ScoreStore
from appraisal_app.services.indicators import SINGLE_JOB_TARGET_CODE
from appraisal_app.services.configuration import (
    OVERALL_ASSESSMENT, configuration_for_evaluation,
)
from appraisal_app.services.quarterly import quarter_already_used
from appraisal_app.services.scores import ensure_editable

logger = logging.getLogger(__name__)


def has_review_type(evaluation: Evaluation) -> bool:
    return bool(
        evaluation.review_type_probationary
        or evaluation.review_type_regular
        or evaluation.review_type_improvement
        or (evaluation.review_type_custom or "").strip()
    )


class StepWizard:
    """
    Linear navigation over the category steps of one evaluation, ending on
    the Overall Assessment step. Moving forward requires the current step
    to be complete; there is no direct jump.
    """

    def __init__(self, evaluation: Evaluation, scores: Optional[ScoreStore] = None):
        self.evaluation = evaluation
        self.config = configuration_for_evaluation(evaluation)
        self._scores = scores

    @property
    def scores(self) -> ScoreStore:
        if self._scores is None:
            self._scores = ScoreStore.for_evaluation(self.evaluation)
        return self._scores

    @property
    def first(self) -> int:
        return 1

    @property
    def last(self) -> int:
        return self.config.terminal_step

    @property
    def current(self) -> int:
        return min(max(self.evaluation.current_step or 1, self.first), self.last)

    def is_terminal(self, step: Optional[int] = None) -> bool:
        return (step or self.current) == self.last

    def step_key(self, step: Optional[int] = None) -> str:
        step = step or self.current
        if self.is_terminal(step):
            return OVERALL_ASSESSMENT
        return self.config.step(step).category

    # ── validation ──────────────────────────────────────────────────────
    def _employee_information_message(self) -> Optional[str]:
        ev = self.evaluation
        if not has_review_type(ev):
            return "Please select at least one review type"
        if not ev.coverage_from:
            return "Please select Performance Coverage 'From' date"
        if not ev.coverage_to:
            return "Please select Performance Coverage 'To' date"
        if ev.coverage_from >= ev.coverage_to:
            return "Performance Coverage 'From' date must be earlier than 'To' date"
        hire_date = getattr(ev.employee, "hire_date", None)
        if hire_date and ev.coverage_from < hire_date:
            return "Performance Coverage cannot start before Date Hired"
        if quarter_already_used(ev):
            return f"{ev.review_type_regular} review already submitted for this employee"
        return None

    def validation_message(self, step: Optional[int] = None) -> Optional[str]:
        """User-facing reason why `step` is incomplete, or None."""
        step = step or self.current
        if self.is_terminal(step):
            return None

        if step == self.first:
            message = self._employee_information_message()
            if message:
                return message

        category_step = self.config.step(step)
        missing = [code for code in category_step.required_codes if not self.scores.is_set(code)]
        if not missing:
            return None
        if category_step.category == CategoryCode.QUALITY_OF_WORK and missing == [SINGLE_JOB_TARGET_CODE]:
            return "Please complete the Job Targets score"
        return f"Please complete all {category_step.title} scores"

    def is_step_complete(self, step: Optional[int] = None) -> bool:
        return self.validation_message(step) is None

    def first_incomplete_step(self) -> Optional[int]:
        """First category step still failing validation, wherever the wizard currently is."""
        for step in range(self.first, self.last):
            if not self.is_step_complete(step):
                return step
        return None

    # ── navigation ──────────────────────────────────────────────────────
    def _move_to(self, step: int) -> int:
        previous = self.current
        moved = Evaluation.objects.filter(
            pk=self.evaluation.pk, status=EvalStatus.DRAFT,
        ).update(current_step=step)
        if not moved:
            # confirmed or submitted by another request since ensure_editable
            ensure_editable(self.evaluation)
            return self.current
        self.evaluation.current_step = step
        logger.debug("Evaluation %s: step %s -> %s", self.evaluation.pk, previous, step)
        return step

    def next(self) -> int:
        ensure_editable(self.evaluation)
        if self.is_terminal():
            return self.current
        message = self.validation_message()
        if message:
            raise ValidationError(message)
        return self._move_to(self.current + 1)

    def previous(self) -> int:
        ensure_editable(self.evaluation)
        if self.current <= self.first:
            return self.current
        return self._move_to(self.current - 1)

    def describe(self, step: Optional[int] = None) -> dict:
        step = step or self.current
        category_step = self.config.step(step)
        return {
            "step": step,
            "total_steps": self.last,
            "key": self.step_key(step),
            "title": self.config.step_title(step),
            "is_first": step == self.first,
            "is_terminal": self.is_terminal(step),
            "indicators": list(category_step.indicator_codes) if category_step else [],
            "required": list(category_step.required_codes) if category_step else [],
            "complete": self.is_step_complete(step),
            "message": self.validation_message(step),
        }
