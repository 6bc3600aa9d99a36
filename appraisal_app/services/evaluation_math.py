import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Mapping, Tuple

from appraisal_app.models import Evaluation
from appraisal_app.services.category_math import (
    ScoreStore, category_averages, category_breakdown, rating_label,
)
from appraisal_app.services.configuration import configuration_for_evaluation
from appraisal_app.utils import round2, to_decimal

logger = logging.getLogger(__name__)

PASSING_SCORE = Decimal("3.00")
MAX_SCORE = Decimal("5")


@dataclass(frozen=True)
class OverallScore:
    weighted_total: Decimal
    percentage: Decimal
    passed: bool
    rating: str


@dataclass(frozen=True)
class EvaluationSnapshot:
    """Result of one recompute; what the result page and the summary show."""
    evaluation_id: str
    configuration: str
    averages: Mapping[str, Decimal]
    breakdown: Tuple[dict, ...]
    overall: OverallScore


def score(averages: Mapping[str, Decimal], weights: Mapping[str, int]) -> OverallScore:
    """
    Formula:
        weighted_total = Σ average_i × weight_i / 100   (0..5)
        percentage     = weighted_total / 5 × 100       (0..100)
        passed         = weighted_total ≥ 3.00

    A category with no scores participates with an average of 0.00.
    """
    total = Decimal("0")
    for category, weight in weights.items():
        total += to_decimal(averages.get(category, 0)) * Decimal(weight) / Decimal("100")

    weighted_total = round2(total)
    percentage = round2(weighted_total / MAX_SCORE * Decimal("100"))
    return OverallScore(
        weighted_total=weighted_total,
        percentage=percentage,
        passed=weighted_total >= PASSING_SCORE,
        rating=rating_label(weighted_total),
    )


def compute(evaluation: Evaluation, scores=None) -> EvaluationSnapshot:
    config = configuration_for_evaluation(evaluation)
    store = scores if scores is not None else ScoreStore.for_evaluation(evaluation)
    averages: Dict[str, Decimal] = category_averages(config, store)
    overall = score(averages, config.weights)
    return EvaluationSnapshot(
        evaluation_id=str(evaluation.pk),
        configuration=config.name,
        averages=averages,
        breakdown=tuple(category_breakdown(config, store)),
        overall=overall,
    )


def recompute(evaluation: Evaluation, *, persist: bool = True) -> EvaluationSnapshot:
    """
    Scores → category averages → overall result, written back onto the
    evaluation. Called after every score mutation.
    """
    snapshot = compute(evaluation)
    overall = snapshot.overall

    if persist:
        Evaluation.objects.filter(pk=evaluation.pk).update(
            rating=overall.weighted_total,
            percentage=overall.percentage,
            passed=overall.passed,
        )
        evaluation.rating = overall.weighted_total
        evaluation.percentage = overall.percentage
        evaluation.passed = overall.passed

    logger.debug(
        "Recomputed evaluation %s: rating=%s percentage=%s passed=%s",
        evaluation.pk, overall.weighted_total, overall.percentage, overall.passed,
    )
    return snapshot
