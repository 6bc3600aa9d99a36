from typing import Dict, Optional

from django.db.models import Q
from django.utils import timezone

from appraisal_app.models import EvalStatus, Evaluation, RegularReview


def quarterly_review_status(employee, year: Optional[int] = None, *, exclude=None) -> Dict[str, bool]:
    """
    {"q1": bool, ..., "q4": bool}: whether a submitted regular review for
    that quarter already exists for `employee` in `year`.
    The year is taken from coverage_from, or submitted_at when no coverage was given.
    """
    year = year or timezone.now().year
    qs = Evaluation.objects.filter(
        employee=employee,
        status=EvalStatus.SUBMITTED,
    ).exclude(review_type_regular="").filter(
        Q(coverage_from__year=year) | Q(coverage_from__isnull=True, submitted_at__year=year)
    )
    if exclude is not None:
        qs = qs.exclude(pk=exclude.pk)

    used = set(qs.values_list("review_type_regular", flat=True))
    return {quarter.lower(): quarter in used for quarter in RegularReview.values}


def quarter_already_used(evaluation) -> bool:
    quarter = evaluation.review_type_regular
    if not quarter:
        return False
    year = evaluation.coverage_from.year if evaluation.coverage_from else None
    status = quarterly_review_status(evaluation.employee, year, exclude=evaluation)
    return status.get(quarter.lower(), False)
