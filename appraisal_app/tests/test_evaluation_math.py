import pytest
from decimal import Decimal

from django.core.management import call_command

from appraisal_app.models import CategoryCode, ConfigurationName, EvalStatus, Evaluation, EvaluationType
from appraisal_app.services.configuration import DEFAULT_WEIGHT_TABLES, configuration_for_evaluation
from appraisal_app.services.evaluation_math import recompute, score
from appraisal_app.services.scores import record_scores

BRANCH_WEIGHTS = DEFAULT_WEIGHT_TABLES[ConfigurationName.BRANCH_RANK_N_FILE]


def uniform(value):
    return {category: Decimal(value) for category in BRANCH_WEIGHTS}


class TestScore:
    def test_weighted_total_percentage_and_label(self):
        result = score(uniform("3.60"), BRANCH_WEIGHTS)
        assert result.weighted_total == Decimal("3.60")
        assert result.percentage == Decimal("72.00")
        assert result.passed is True
        assert result.rating == "Meets Expectations"

    def test_single_category_contribution(self):
        result = score({CategoryCode.QUALITY_OF_WORK: Decimal("5.00")}, BRANCH_WEIGHTS)
        assert result.weighted_total == Decimal("1.00")
        assert result.percentage == Decimal("20.00")

    def test_pass_boundary(self):
        assert score(uniform("3.00"), BRANCH_WEIGHTS).passed is True
        assert score(uniform("2.99"), BRANCH_WEIGHTS).passed is False

    def test_nothing_scored(self):
        result = score({}, BRANCH_WEIGHTS)
        assert result.weighted_total == Decimal("0.00")
        assert result.percentage == Decimal("0.00")
        assert result.passed is False
        assert result.rating == "Unsatisfactory"

    @pytest.mark.parametrize("category", list(BRANCH_WEIGHTS))
    def test_monotonic_in_each_category(self, category):
        previous = None
        for step in ("0.00", "1.00", "2.50", "3.75", "5.00"):
            averages = uniform("3.00")
            averages[category] = Decimal(step)
            total = score(averages, BRANCH_WEIGHTS).weighted_total
            if previous is not None:
                assert total >= previous
            previous = total

    def test_perfect_score(self):
        result = score(uniform("5.00"), BRANCH_WEIGHTS)
        assert result.weighted_total == Decimal("5.00")
        assert result.percentage == Decimal("100.00")
        assert result.rating == "Outstanding"


@pytest.mark.django_db
class TestRecompute:
    def test_persists_result_on_evaluation(self, create_employee, start):
        ev = start(create_employee(), EvaluationType.RANK_N_FILE)
        config = configuration_for_evaluation(ev)
        record_scores(ev, [{"indicator": code, "score": 4} for code in config.all_indicator_codes])

        ev.refresh_from_db()
        assert ev.rating == Decimal("4.00")
        assert ev.percentage == Decimal("80.00")
        assert ev.passed is True

    def test_unscored_categories_count_as_zero(self, create_employee, start):
        ev = start(create_employee(), EvaluationType.RANK_N_FILE)
        snapshot = record_scores(ev, [
            {"indicator": "JK1", "score": 5},
            {"indicator": "JK2", "score": 5},
            {"indicator": "JK3", "score": 5},
        ])
        # Job Knowledge weight 20 → 5.00 × 20 / 100
        assert snapshot.overall.weighted_total == Decimal("1.00")
        assert snapshot.overall.percentage == Decimal("20.00")
        assert snapshot.averages[CategoryCode.CUSTOMER_SERVICE] == Decimal("0.00")

    def test_without_persist_leaves_row_untouched(self, create_employee, start):
        ev = start(create_employee(), EvaluationType.RANK_N_FILE)
        ev.indicator_scores.create(category=CategoryCode.JOB_KNOWLEDGE, indicator="JK1", score=5)

        snapshot = recompute(ev, persist=False)
        ev.refresh_from_db()
        assert snapshot.overall.weighted_total == Decimal("1.00")
        assert ev.rating == Decimal("0.00")

    def test_recompute_command_skips_submitted(self, create_employee, start):
        draft = start(create_employee(), EvaluationType.RANK_N_FILE)
        done = start(create_employee(), EvaluationType.RANK_N_FILE)
        for ev in (draft, done):
            ev.indicator_scores.create(category=CategoryCode.JOB_KNOWLEDGE, indicator="JK1", score=5)
        Evaluation.objects.filter(pk=done.pk).update(status=EvalStatus.SUBMITTED)

        call_command("recompute_scores")

        draft.refresh_from_db()
        done.refresh_from_db()
        assert draft.rating == Decimal("1.00")
        assert done.rating == Decimal("0.00")
