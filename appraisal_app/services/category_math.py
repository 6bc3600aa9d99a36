from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from appraisal_app.services.configuration import ResolvedConfiguration
from appraisal_app.utils import round2, to_decimal

# (threshold, label), checked top-down
RATING_BANDS = (
    (Decimal("4.5"), "Outstanding"),
    (Decimal("4.0"), "Exceeds Expectations"),
    (Decimal("3.5"), "Meets Expectations"),
    (Decimal("2.5"), "Needs Improvement"),
)
LOWEST_RATING = "Unsatisfactory"


class ScoreStore:
    """
    Read-only view of one evaluation's scores: indicator code → 1..5 or None.
    A stored 0 is treated as unset.
    """

    def __init__(self, scores: Optional[Mapping[str, Optional[int]]] = None):
        self._scores: Dict[str, Optional[int]] = {}
        for code, value in (scores or {}).items():
            self._scores[code] = int(value) if value else None

    @classmethod
    def for_evaluation(cls, evaluation) -> "ScoreStore":
        rows = evaluation.indicator_scores.values_list("indicator", "score")
        return cls(dict(rows))

    def get(self, code: str) -> Optional[int]:
        return self._scores.get(code)

    def is_set(self, code: str) -> bool:
        return self._scores.get(code) is not None

    def as_dict(self) -> Dict[str, Optional[int]]:
        return dict(self._scores)

    def __contains__(self, code):
        return self.is_set(code)

    def __len__(self):
        return sum(1 for v in self._scores.values() if v is not None)


def _as_store(scores) -> ScoreStore:
    return scores if isinstance(scores, ScoreStore) else ScoreStore(scores)


def average_of(indicator_codes: Iterable[str], scores) -> Decimal:
    """
    Mean of the set scores among `indicator_codes`, 2dp half-up.
    Unset (and zero) values are skipped; nothing set → 0.00.
    """
    store = _as_store(scores)
    values = [store.get(code) for code in indicator_codes if store.is_set(code)]
    if not values:
        return round2(0)
    return round2(Decimal(sum(values)) / Decimal(len(values)))


def category_average(config: ResolvedConfiguration, category: str, scores) -> Decimal:
    return average_of(config.indicator_codes(category), scores)


def rating_label(average) -> str:
    value = to_decimal(average)
    for threshold, label in RATING_BANDS:
        if value >= threshold:
            return label
    return LOWEST_RATING


def category_averages(config: ResolvedConfiguration, scores) -> Dict[str, Decimal]:
    store = _as_store(scores)
    return {category: category_average(config, category, store) for category in config.categories}


def category_breakdown(config: ResolvedConfiguration, scores) -> List[dict]:
    """Per-category rows for the result page, in step order."""
    store = _as_store(scores)
    rows = []
    for step in config.steps:
        average = average_of(step.indicator_codes, store)
        weight = config.weights.get(step.category, 0)
        rows.append({
            "category": step.category,
            "title": step.title,
            "average": average,
            "weight": weight,
            "weighted": round2(average * Decimal(weight) / Decimal("100")),
            "rating": rating_label(average),
            "rated": sum(1 for code in step.indicator_codes if store.is_set(code)),
            "total": len(step.indicator_codes),
        })
    return rows
