import pytest
from datetime import date
from uuid import uuid4
from django.contrib.auth import get_user_model
from django.core.management import call_command
from rest_framework.test import APIClient

from appraisal_app.models import Branch, Employee, EmpStatus, EvaluationType
from appraisal_app.services.evaluation_start import start_evaluation


@pytest.fixture
def create_user(db):
    User = get_user_model()
    def _create_user(**kw):
        data = {
            "username": f"u_{uuid4().hex[:8]}",
            "email": f"{uuid4().hex[:8]}@test.local",
            "password": "pass12345",
            "name": "Test User",
            "role": "EMP",
        }
        data.update(kw)
        return User.objects.create_user(**data)
    return _create_user

@pytest.fixture
def create_branch(db):
    def _create_branch(name="Cebu Main", code="CEB01"):
        return Branch.objects.create(name=name, code=code)
    return _create_branch

@pytest.fixture
def head_office(create_branch):
    return create_branch(name="Head Office", code="HO")

@pytest.fixture
def branch(create_branch):
    return create_branch()

@pytest.fixture
def create_employee(db, create_user, branch):
    def _create_employee(**kw):
        user = kw.pop("user", None) or create_user()
        defaults = dict(
            user=user,
            branch=branch,
            position="Sales Associate",
            status=EmpStatus.ACTIVE,
            hire_date=date(2023, 1, 9),
        )
        defaults.update(kw)
        return Employee.objects.create(**defaults)
    return _create_employee

@pytest.fixture
def seeded_weights(db):
    call_command("seed_weights")

@pytest.fixture
def evaluator(create_user):
    return create_user(role="EVALUATOR", name="Eva Reviewer", position="Branch Manager",
                       signature="signatures/eva.png")

@pytest.fixture
def start(seeded_weights, evaluator):
    """start(employee, evaluation_type=..., **fields) with the signed evaluator as reviewer."""
    def _start(employee, evaluation_type=EvaluationType.RANK_N_FILE, **kw):
        kw.setdefault("reviewer", evaluator)
        reviewer = kw.pop("reviewer")
        return start_evaluation(employee, reviewer, evaluation_type, **kw)
    return _start

@pytest.fixture
def step_one_ready():
    """Employee-information fields that make step 1 valid (scores aside)."""
    return dict(
        review_type_regular="Q1",
        coverage_from=date(2025, 1, 1),
        coverage_to=date(2025, 3, 31),
    )

@pytest.fixture
def api_client():
    return APIClient()

@pytest.fixture
def evaluator_client(api_client, evaluator):
    api_client.force_authenticate(user=evaluator)
    return api_client
