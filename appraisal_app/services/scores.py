import logging
from typing import Iterable, Mapping

from django.core.exceptions import ValidationError
from django.db import transaction

from appraisal_app.exceptions import EvaluationLocked, SubmissionConflict
from appraisal_app.models import EvalStatus, Evaluation, IndicatorScore
from appraisal_app.services.configuration import configuration_for_evaluation
from appraisal_app.services.evaluation_math import recompute

logger = logging.getLogger(__name__)


def ensure_editable(evaluation: Evaluation, *, lock: bool = False) -> None:
    """
    Only drafts can be edited or navigated. The status is re-read from the
    database, row-locked when `lock` is set (callers hold a transaction).
    """
    qs = Evaluation.objects.filter(pk=evaluation.pk)
    if lock:
        qs = qs.select_for_update()
    current = qs.values_list("status", flat=True).first()
    if current is not None:
        evaluation.status = current

    if evaluation.status == EvalStatus.DRAFT:
        return
    if evaluation.status == EvalStatus.SUBMITTED:
        raise EvaluationLocked()
    if evaluation.status == EvalStatus.SUBMITTING:
        raise SubmissionConflict()
    raise SubmissionConflict("Cancel the confirmation before editing this evaluation.")


def _clean_score(code, value):
    # legacy clients send 0 for "not selected"
    if value in (None, "", 0, "0"):
        return None
    try:
        score = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Score for {code} must be a whole number between 1 and 5.")
    if not 1 <= score <= 5:
        raise ValidationError(f"Score for {code} must be between 1 and 5.")
    return score


@transaction.atomic
def record_scores(evaluation: Evaluation, entries: Iterable[Mapping]):
    """
    Upsert `{indicator, score, comment}` entries for one evaluation and
    recompute its result. Every indicator must belong to the evaluation's
    configuration.
    """
    ensure_editable(evaluation, lock=True)
    config = configuration_for_evaluation(evaluation)

    for entry in entries:
        code = entry.get("indicator")
        category = config.category_for_indicator(code)
        if category is None:
            raise ValidationError(f"Indicator '{code}' is not part of this evaluation.")

        defaults = {"category": category, "score": _clean_score(code, entry.get("score"))}
        if "comment" in entry:
            defaults["comment"] = entry.get("comment") or ""
        IndicatorScore.objects.update_or_create(
            evaluation=evaluation, indicator=code, defaults=defaults,
        )

    return recompute(evaluation)


@transaction.atomic
def clear_category(evaluation: Evaluation, category: str):
    """Reset every score of one category to unset (comments are kept)."""
    ensure_editable(evaluation, lock=True)
    config = configuration_for_evaluation(evaluation)
    if category not in config.categories:
        raise ValidationError(f"Category '{category}' is not part of this evaluation.")

    cleared = IndicatorScore.objects.filter(
        evaluation=evaluation, category=category,
    ).update(score=None)
    logger.debug("Cleared %s scores in %s for evaluation %s", cleared, category, evaluation.pk)
    return recompute(evaluation)
