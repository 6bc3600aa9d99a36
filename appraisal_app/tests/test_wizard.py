import pytest
from datetime import date
from django.core.exceptions import ValidationError
from django.utils import timezone

from appraisal_app.exceptions import EvaluationLocked, SubmissionConflict
from appraisal_app.models import CategoryCode, EvalStatus, Evaluation, EvaluationType
from appraisal_app.services.configuration import OVERALL_ASSESSMENT, configuration_for_evaluation
from appraisal_app.services.scores import record_scores
from appraisal_app.services.wizard import StepWizard


def score_everything(ev, value=4, skip=()):
    config = configuration_for_evaluation(ev)
    record_scores(ev, [
        {"indicator": code, "score": value}
        for code in config.all_indicator_codes if code not in skip
    ])


@pytest.mark.django_db
class TestStepOneValidation:
    def test_requires_review_type(self, create_employee, start):
        ev = start(create_employee())
        with pytest.raises(ValidationError, match="Please select at least one review type"):
            StepWizard(ev).next()

    def test_requires_coverage_dates(self, create_employee, start):
        ev = start(create_employee(), review_type_improvement=True)
        assert StepWizard(ev).validation_message() == "Please select Performance Coverage 'From' date"

        ev.coverage_from = date(2025, 1, 1)
        assert StepWizard(ev).validation_message() == "Please select Performance Coverage 'To' date"

    def test_coverage_must_be_ordered(self, create_employee, start):
        ev = start(create_employee(), review_type_custom="Promotion review",
                   coverage_from=date(2025, 3, 1), coverage_to=date(2025, 1, 1))
        assert StepWizard(ev).validation_message() == \
            "Performance Coverage 'From' date must be earlier than 'To' date"

    def test_coverage_not_before_hire_date(self, create_employee, start):
        employee = create_employee(hire_date=date(2025, 2, 1))
        ev = start(employee, review_type_probationary=3,
                   coverage_from=date(2025, 1, 1), coverage_to=date(2025, 4, 30))
        assert StepWizard(ev).validation_message() == "Performance Coverage cannot start before Date Hired"

    def test_requires_job_knowledge_scores(self, create_employee, start, step_one_ready):
        ev = start(create_employee(), **step_one_ready)
        record_scores(ev, [{"indicator": "JK1", "score": 3}])
        with pytest.raises(ValidationError, match="Please complete all Job Knowledge scores"):
            StepWizard(ev).next()

    def test_quarter_already_submitted(self, create_employee, start, step_one_ready):
        employee = create_employee()
        earlier = start(employee, **step_one_ready)
        Evaluation.objects.filter(pk=earlier.pk).update(status=EvalStatus.SUBMITTED, submitted_at=timezone.now())

        ev = start(employee, **step_one_ready)
        score_everything(ev)
        assert StepWizard(ev).validation_message() == "Q1 review already submitted for this employee"


@pytest.mark.django_db
class TestNavigation:
    def test_walks_to_overall_assessment(self, create_employee, start, step_one_ready):
        ev = start(create_employee(), **step_one_ready)
        score_everything(ev)
        wizard = StepWizard(ev)

        keys = [wizard.step_key()]
        while not wizard.is_terminal():
            wizard.next()
            keys.append(wizard.step_key())

        assert keys == list(wizard.config.categories) + [OVERALL_ASSESSMENT]
        ev.refresh_from_db()
        assert ev.current_step == wizard.config.terminal_step

    def test_next_at_terminal_is_noop(self, create_employee, start, step_one_ready):
        ev = start(create_employee(), **step_one_ready)
        score_everything(ev)
        terminal = configuration_for_evaluation(ev).terminal_step
        Evaluation.objects.filter(pk=ev.pk).update(current_step=terminal)
        ev.refresh_from_db()

        assert StepWizard(ev).next() == terminal

    def test_previous_at_first_is_noop(self, create_employee, start):
        ev = start(create_employee())
        assert StepWizard(ev).previous() == 1

    def test_scores_survive_round_trip(self, create_employee, start, step_one_ready):
        ev = start(create_employee(), **step_one_ready)
        score_everything(ev, value=5)
        wizard = StepWizard(ev)
        wizard.next()
        wizard.previous()

        assert wizard.current == 1
        assert set(ev.indicator_scores.values_list("score", flat=True)) == {5}
        assert wizard.is_step_complete()

    def test_branch_requires_single_job_target(self, create_employee, start, step_one_ready):
        ev = start(create_employee(), EvaluationType.RANK_N_FILE, **step_one_ready)
        score_everything(ev, skip=("QW5",))
        wizard = StepWizard(ev)
        wizard.next()
        assert wizard.step_key() == CategoryCode.QUALITY_OF_WORK
        with pytest.raises(ValidationError, match="Please complete the Job Targets score"):
            wizard.next()

    def test_head_office_job_target_optional(self, create_employee, start, head_office, step_one_ready):
        employee = create_employee(branch=head_office, position="Accounting Clerk")
        ev = start(employee, EvaluationType.RANK_N_FILE, **step_one_ready)
        score_everything(ev, skip=("QW5",))
        wizard = StepWizard(ev)
        wizard.next()
        assert wizard.next() == 3

    def test_job_target_breakdown_rows_optional(self, create_employee, start, step_one_ready):
        employee = create_employee(position="Area Manager")
        ev = start(employee, EvaluationType.DEFAULT, **step_one_ready)
        assert ev.show_job_targets
        score_everything(ev, skip=tuple(c for c in configuration_for_evaluation(ev).all_indicator_codes
                                        if c.startswith("JT_")))
        wizard = StepWizard(ev)
        wizard.next()
        assert wizard.next() == 3

    def test_submitted_evaluation_is_locked(self, create_employee, start):
        ev = start(create_employee())
        Evaluation.objects.filter(pk=ev.pk).update(status=EvalStatus.SUBMITTED)
        ev.refresh_from_db()
        with pytest.raises(EvaluationLocked):
            StepWizard(ev).next()

    def test_frozen_while_awaiting_confirmation(self, create_employee, start, step_one_ready):
        ev = start(create_employee(), **step_one_ready)
        score_everything(ev)
        # another request confirms after this instance was loaded
        Evaluation.objects.filter(pk=ev.pk).update(status=EvalStatus.CONFIRMING, current_step=2)

        with pytest.raises(SubmissionConflict, match="Cancel the confirmation"):
            StepWizard(ev).next()
        with pytest.raises(SubmissionConflict):
            StepWizard(ev).previous()
        assert Evaluation.objects.get(pk=ev.pk).current_step == 2
