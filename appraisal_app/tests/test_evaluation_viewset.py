import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse

from appraisal_app.models import (
    CategoryCode, ConfigurationName, EvalStatus, Evaluation, EvaluationType, SubmissionRecord,
    WeightsConfiguration,
)
from appraisal_app.services.configuration import configuration_for_evaluation
from appraisal_app.services.scores import record_scores


def all_scores(ev, value=4, skip=()):
    codes = configuration_for_evaluation(ev).all_indicator_codes
    return [{"indicator": code, "score": value} for code in codes if code not in skip]


@pytest.fixture
def hr_client(api_client, create_user):
    api_client.force_authenticate(user=create_user(role="HR"))
    return api_client


@pytest.mark.django_db
class TestEvaluationCRUD:
    def test_evaluator_starts_evaluation_as_reviewer(self, evaluator_client, evaluator, create_employee, seeded_weights):
        employee = create_employee()
        res = evaluator_client.post(reverse("evaluation-list"), {
            "employee_id": str(employee.employee_id),
            "evaluation_type": "RANK_N_FILE",
        }, format="json")

        assert res.status_code == 201
        assert res.data["configuration"] == "Branch Rank and File"
        assert res.data["status"] == "Draft"
        assert res.data["current_step"] == 1
        assert res.data["weights"][CategoryCode.CUSTOMER_SERVICE] == 30

        ev = Evaluation.objects.get(pk=res.data["evaluation_id"])
        assert ev.reviewer == evaluator

    def test_unsigned_evaluator_cannot_start(self, api_client, create_user, create_employee, seeded_weights):
        api_client.force_authenticate(user=create_user(role="EVALUATOR", position="Branch Manager"))
        res = api_client.post(reverse("evaluation-list"), {
            "employee_id": str(create_employee().employee_id),
            "evaluation_type": "RANK_N_FILE",
        }, format="json")

        assert res.status_code == 400
        assert res.data["error"] == "You must have a signature saved in your profile to start an evaluation."
        assert not Evaluation.objects.exists()

    def test_employee_cannot_start_evaluation(self, api_client, create_user, create_employee, seeded_weights):
        api_client.force_authenticate(user=create_user(role="EMP"))
        res = api_client.post(reverse("evaluation-list"), {
            "employee_id": str(create_employee().employee_id),
        }, format="json")
        assert res.status_code == 403

    def test_employee_sees_only_own_evaluations(self, api_client, create_employee, start):
        own = start(create_employee())
        start(create_employee())

        api_client.force_authenticate(user=own.employee.user)
        res = api_client.get(reverse("evaluation-list"))

        assert res.status_code == 200
        assert [row["evaluation_id"] for row in res.data["results"]] == [str(own.pk)]

    def test_evaluation_type_fixed_after_start(self, evaluator_client, create_employee, start):
        ev = start(create_employee())
        res = evaluator_client.patch(
            reverse("evaluation-detail", args=[ev.pk]), {"evaluation_type": "BASIC"}, format="json",
        )
        assert res.status_code == 400
        assert "evaluation_type" in res.data

    def test_other_evaluator_cannot_edit(self, api_client, create_user, create_employee, start):
        ev = start(create_employee())
        api_client.force_authenticate(user=create_user(role="EVALUATOR", signature="sig.png"))
        res = api_client.patch(reverse("evaluation-detail", args=[ev.pk]), {"remarks": "x"}, format="json")
        assert res.status_code == 404

    def test_summary_over_visible_evaluations(self, hr_client, create_employee, start):
        passing = start(create_employee())
        record_scores(passing, all_scores(passing, 4))
        start(create_employee())

        res = hr_client.get(reverse("evaluation-summary"))
        assert res.status_code == 200
        assert res.data["count"] == 2
        assert res.data["passed"] == 1
        assert res.data["average_rating"] == "2.00"

        bad = hr_client.get(reverse("evaluation-summary"), {"status": "ARCHIVED"})
        assert bad.status_code == 400


@pytest.mark.django_db
class TestScoresAndSteps:
    def test_post_scores_returns_result(self, evaluator_client, create_employee, start):
        ev = start(create_employee())
        res = evaluator_client.post(
            reverse("evaluation-scores", args=[ev.pk]),
            {"scores": [{"indicator": "JK1", "score": 5}, {"indicator": "JK2", "score": 4}]},
            format="json",
        )

        assert res.status_code == 200
        assert {row["indicator"] for row in res.data["scores"]} == {"JK1", "JK2"}
        job_knowledge = res.data["result"]["categories"][0]
        assert job_knowledge["category"] == CategoryCode.JOB_KNOWLEDGE
        assert job_knowledge["average"] == "4.50"

    def test_unknown_indicator_rejected(self, evaluator_client, create_employee, start):
        ev = start(create_employee())
        res = evaluator_client.post(
            reverse("evaluation-scores", args=[ev.pk]), [{"indicator": "MS1", "score": 3}], format="json",
        )
        assert res.status_code == 400
        assert res.data["error"] == "Indicator 'MS1' is not part of this evaluation."

    def test_next_without_review_type(self, evaluator_client, create_employee, start):
        ev = start(create_employee())
        res = evaluator_client.post(reverse("evaluation-next", args=[ev.pk]))
        assert res.status_code == 400
        assert res.data["error"] == "Please select at least one review type"

    def test_job_targets_info_shown_once_per_login(self, evaluator_client, create_employee, start, step_one_ready):
        ev = start(create_employee(position="Area Manager"), EvaluationType.DEFAULT, **step_one_ready)
        evaluator_client.post(reverse("evaluation-scores", args=[ev.pk]), all_scores(ev), format="json")

        first = evaluator_client.post(reverse("evaluation-next", args=[ev.pk]))
        assert first.status_code == 200
        assert first.data["key"] == CategoryCode.QUALITY_OF_WORK
        assert first.data["show_job_targets_info"] is True

        evaluator_client.post(reverse("evaluation-previous", args=[ev.pk]))
        again = evaluator_client.post(reverse("evaluation-next", args=[ev.pk]))
        assert again.data["key"] == CategoryCode.QUALITY_OF_WORK
        assert again.data["show_job_targets_info"] is False

    def test_clear_scores(self, evaluator_client, create_employee, start):
        ev = start(create_employee())
        evaluator_client.post(reverse("evaluation-scores", args=[ev.pk]), all_scores(ev, 5), format="json")
        res = evaluator_client.post(
            reverse("evaluation-clear-scores", args=[ev.pk]), {"category": "Customer Service"}, format="json",
        )

        assert res.status_code == 200
        # Customer Service carries 30 of the 100 points
        assert res.data["result"]["weighted_total"] == "3.50"


@pytest.mark.django_db
class TestSubmissionFlow:
    def _finish(self, client, ev):
        client.post(reverse("evaluation-scores", args=[ev.pk]), all_scores(ev), format="json")
        for _ in range(configuration_for_evaluation(ev).step_count):
            assert client.post(reverse("evaluation-next", args=[ev.pk])).status_code == 200

    def test_confirm_then_submit(self, evaluator_client, create_employee, start, step_one_ready, settings):
        settings.APPRAISAL_SUBMISSION_BACKEND = "appraisal_app.services.backends.LocalSubmissionBackend"
        ev = start(create_employee(), **step_one_ready)
        self._finish(evaluator_client, ev)

        confirm = evaluator_client.post(reverse("evaluation-confirm", args=[ev.pk]))
        assert confirm.status_code == 200
        assert confirm.data["percentage"] == "80.00"
        assert confirm.data["can_submit"] is True

        submit = evaluator_client.post(reverse("evaluation-submit", args=[ev.pk]))
        assert submit.status_code == 200
        assert submit.data["route"] == "branch-rank-n-file"

        ev.refresh_from_db()
        assert ev.status == EvalStatus.SUBMITTED

        locked = evaluator_client.patch(reverse("evaluation-detail", args=[ev.pk]), {"remarks": "late"}, format="json")
        assert locked.status_code == 409
        assert locked.data["error"] == "Evaluation already submitted."

        quarters = evaluator_client.get(
            reverse("evaluation-quarterly-status"), {"employee_id": str(ev.employee_id), "year": 2025},
        )
        assert quarters.data == {"q1": True, "q2": False, "q3": False, "q4": False}

    def test_submit_after_signature_removed(self, evaluator_client, evaluator, create_employee, start, step_one_ready):
        ev = start(create_employee(), **step_one_ready)
        self._finish(evaluator_client, ev)
        get_user_model().objects.filter(pk=evaluator.pk).update(signature="")

        confirm = evaluator_client.post(reverse("evaluation-confirm", args=[ev.pk]))
        assert confirm.data["can_submit"] is False

        res = evaluator_client.post(reverse("evaluation-submit", args=[ev.pk]))
        assert res.status_code == 400
        assert "signature" in res.data["error"]
        ev.refresh_from_db()
        assert ev.status == EvalStatus.CONFIRMING

    def test_confirm_before_last_step(self, evaluator_client, create_employee, start):
        ev = start(create_employee())
        res = evaluator_client.post(reverse("evaluation-confirm", args=[ev.pk]))
        assert res.status_code == 409

    def test_navigation_frozen_while_confirming(self, evaluator_client, create_employee, start, step_one_ready, settings):
        settings.APPRAISAL_SUBMISSION_BACKEND = "appraisal_app.services.backends.LocalSubmissionBackend"
        ev = start(create_employee(), **step_one_ready)
        self._finish(evaluator_client, ev)
        assert evaluator_client.post(reverse("evaluation-confirm", args=[ev.pk])).status_code == 200

        back = evaluator_client.post(reverse("evaluation-previous", args=[ev.pk]))
        assert back.status_code == 409
        edit = evaluator_client.post(reverse("evaluation-scores", args=[ev.pk]), all_scores(ev, 1), format="json")
        assert edit.status_code == 409
        patch = evaluator_client.patch(reverse("evaluation-detail", args=[ev.pk]), {"remarks": "x"}, format="json")
        assert patch.status_code == 409

        submit = evaluator_client.post(reverse("evaluation-submit", args=[ev.pk]))
        assert submit.status_code == 200
        assert submit.data["summary"]["percentage"] == "80.00"

    def test_hr_submits_with_reviewer_signature(self, evaluator_client, evaluator, create_user,
                                                create_employee, start, step_one_ready, settings):
        settings.APPRAISAL_SUBMISSION_BACKEND = "appraisal_app.services.backends.LocalSubmissionBackend"
        ev = start(create_employee(), **step_one_ready)
        self._finish(evaluator_client, ev)
        evaluator_client.post(reverse("evaluation-confirm", args=[ev.pk]))

        evaluator_client.force_authenticate(user=create_user(role="HR"))
        res = evaluator_client.post(reverse("evaluation-submit", args=[ev.pk]))

        assert res.status_code == 200
        payload = SubmissionRecord.objects.get(evaluation=ev).payload
        assert payload["evaluator_id"] == str(evaluator.pk)
        assert payload["evaluator_signature"] == "signatures/eva.png"


@pytest.mark.django_db
class TestWeightsConfiguration:
    def url(self, name=ConfigurationName.HO_RANK_N_FILE):
        return reverse("weights-configuration-detail", args=[name])

    def test_anyone_signed_in_can_read(self, evaluator_client, seeded_weights):
        res = evaluator_client.get(self.url())
        assert res.status_code == 200
        assert res.data["total"] == 100

    def test_evaluator_cannot_change(self, evaluator_client, seeded_weights):
        res = evaluator_client.patch(self.url(), {"job_knowledge_weight": 30}, format="json")
        assert res.status_code == 403

    def test_hr_change_must_sum_to_100(self, hr_client, seeded_weights):
        res = hr_client.patch(self.url(), {"job_knowledge_weight": 30}, format="json")
        assert res.status_code == 400

    def test_hr_change_applies(self, hr_client, seeded_weights):
        res = hr_client.patch(self.url(), {"job_knowledge_weight": 30, "quality_of_work_weight": 20}, format="json")
        assert res.status_code == 200
        row = WeightsConfiguration.objects.get(configuration=ConfigurationName.HO_RANK_N_FILE)
        assert (row.job_knowledge_weight, row.quality_of_work_weight) == (30, 20)


@pytest.mark.django_db
class TestCatalogueAndAuth:
    def test_indicator_catalogue_for_configuration(self, evaluator_client, seeded_weights):
        res = evaluator_client.get(reverse("indicator-catalogue"), {"configuration": "HO_RANK_N_FILE"})
        assert res.status_code == 200
        categories = [step["category"] for step in res.data["steps"]]
        assert CategoryCode.CUSTOMER_SERVICE not in categories
        assert CategoryCode.MANAGERIAL_SKILLS not in categories

    def test_unknown_configuration(self, evaluator_client):
        res = evaluator_client.get(reverse("indicator-catalogue"), {"configuration": "ANNUAL"})
        assert res.status_code == 400

    def test_login_with_email(self, api_client, evaluator):
        res = api_client.post(reverse("jwt-login"), {
            "email": evaluator.email, "password": "pass12345",
        }, format="json")

        assert res.status_code == 200
        assert res.data["role"] == "Evaluator"
        assert res.data["has_signature"] is True
        assert "access" in res.data and "refresh" in res.data

    def test_login_with_email_in_username_field(self, api_client, evaluator):
        res = api_client.post(reverse("jwt-login"), {
            "username": evaluator.email.upper(), "password": "pass12345",
        }, format="json")
        assert res.status_code == 200

    def test_bad_password(self, api_client, evaluator):
        res = api_client.post(reverse("jwt-login"), {
            "email": evaluator.email, "password": "wrong",
        }, format="json")
        assert res.status_code == 400

    def test_logout_blacklists_refresh_token(self, api_client, evaluator):
        tokens = api_client.post(reverse("jwt-login"), {
            "email": evaluator.email, "password": "pass12345",
        }, format="json").data

        out = api_client.post(reverse("jwt-logout"), {"refresh": tokens["refresh"]}, format="json")
        assert out.status_code == 200

        again = api_client.post(reverse("jwt-refresh"), {"refresh": tokens["refresh"]}, format="json")
        assert again.status_code == 401

    def test_welcome_guide_once_per_login(self, evaluator_client):
        first = evaluator_client.get(reverse("onboarding"))
        second = evaluator_client.get(reverse("onboarding"))
        assert first.data["show_welcome"] is True
        assert second.data["show_welcome"] is False

    def test_welcome_guide_with_bearer_token_only(self, api_client, evaluator):
        def login():
            tokens = api_client.post(reverse("jwt-login"), {
                "email": evaluator.email, "password": "pass12345",
            }, format="json").data
            api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
            return tokens

        tokens = login()
        assert api_client.get(reverse("onboarding")).data["show_welcome"] is True
        assert api_client.get(reverse("onboarding")).data["show_welcome"] is False

        api_client.post(reverse("jwt-logout"), {"refresh": tokens["refresh"]}, format="json")
        evaluator.refresh_from_db()
        assert evaluator.onboarding_flags == {}

        login()
        assert api_client.get(reverse("onboarding")).data["show_welcome"] is True
