import uuid
from django.db import models
from django.utils import timezone
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.core.exceptions import ValidationError

# ── Lookup / Enum helpers ────────────────────────────────────────────────

class EmpStatus(models.TextChoices):
    ACTIVE   = "ACTIVE",   "Active"
    INACTIVE = "INACTIVE", "Inactive"


class EvaluationType(models.TextChoices):
    RANK_N_FILE = "RANK_N_FILE", "Rank and File"
    BASIC       = "BASIC",       "Basic"
    DEFAULT     = "DEFAULT",     "Default"


class ConfigurationName(models.TextChoices):
    BRANCH_RANK_N_FILE = "BRANCH_RANK_N_FILE", "Branch Rank and File"
    BRANCH_DEFAULT     = "BRANCH_DEFAULT",     "Branch Default"
    BRANCH_BASIC       = "BRANCH_BASIC",       "Branch Basic (Managerial)"
    HO_RANK_N_FILE     = "HO_RANK_N_FILE",     "Head Office Rank and File"
    HO_BASIC           = "HO_BASIC",           "Head Office Basic (Managerial)"


class CategoryCode(models.TextChoices):
    JOB_KNOWLEDGE     = "JOB_KNOWLEDGE",     "Job Knowledge"
    QUALITY_OF_WORK   = "QUALITY_OF_WORK",   "Quality of Work"
    ADAPTABILITY      = "ADAPTABILITY",      "Adaptability"
    TEAMWORK          = "TEAMWORK",          "Teamwork"
    RELIABILITY       = "RELIABILITY",       "Reliability"
    ETHICS            = "ETHICS",            "Ethical & Professional Behavior"
    CUSTOMER_SERVICE  = "CUSTOMER_SERVICE",  "Customer Service"
    MANAGERIAL_SKILLS = "MANAGERIAL_SKILLS", "Managerial Skills"


class EvalStatus(models.TextChoices):
    DRAFT      = "DRAFT",      "Draft"
    CONFIRMING = "CONFIRMING", "Awaiting Confirmation"
    SUBMITTING = "SUBMITTING", "Submitting"
    SUBMITTED  = "SUBMITTED",  "Submitted"


class ProbationaryReview(models.IntegerChoices):
    THREE_MONTHS = 3, "3 months"
    FIVE_MONTHS  = 5, "5 months"


class RegularReview(models.TextChoices):
    Q1 = "Q1", "Q1"
    Q2 = "Q2", "Q2"
    Q3 = "Q3", "Q3"
    Q4 = "Q4", "Q4"


# ── Organisation ─────────────────────────────────────────────────────────
class Branch(models.Model):
    branch_id  = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name       = models.CharField(max_length=120)
    code       = models.CharField(max_length=30, blank=True)
    location   = models.CharField(max_length=180, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Branches"
        constraints = [
            models.UniqueConstraint(fields=["name", "code"], name="uniq_branch_name_code")
        ]

    def __str__(self):
        return f"{self.name} ({self.code})" if self.code else self.name


class Employee(models.Model):
    employee_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user        = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="employee_profile")
    branch      = models.ForeignKey(Branch, on_delete=models.SET_NULL, null=True, blank=True, related_name="employees")
    position    = models.CharField(max_length=120, blank=True)
    status      = models.CharField(max_length=16, choices=EmpStatus.choices, default=EmpStatus.ACTIVE)
    hire_date   = models.DateField(null=True, blank=True)
    created_at  = models.DateTimeField(default=timezone.now)
    updated_at  = models.DateTimeField(auto_now=True)

    @property
    def position_label(self) -> str:
        return self.position or getattr(self.user, "position", "") or ""

    @property
    def full_name(self) -> str:
        return self.user.name or self.user.get_full_name() or self.user.username

    def __str__(self):
        return self.full_name


# ── Weight configuration ---------------------------------------------------
class WeightsConfiguration(models.Model):
    """
    Category weights (percent) for one named evaluation configuration.
    A zero weight means the category is not part of that configuration.
    """
    configuration            = models.CharField(primary_key=True, max_length=20, choices=ConfigurationName.choices)
    job_knowledge_weight     = models.PositiveSmallIntegerField(default=0)
    quality_of_work_weight   = models.PositiveSmallIntegerField(default=0)
    adaptability_weight      = models.PositiveSmallIntegerField(default=0)
    teamwork_weight          = models.PositiveSmallIntegerField(default=0)
    reliability_weight       = models.PositiveSmallIntegerField(default=0)
    ethics_weight            = models.PositiveSmallIntegerField(default=0)
    customer_service_weight  = models.PositiveSmallIntegerField(default=0)
    managerial_skills_weight = models.PositiveSmallIntegerField(default=0)

    CATEGORY_FIELDS = {
        CategoryCode.JOB_KNOWLEDGE: "job_knowledge_weight",
        CategoryCode.QUALITY_OF_WORK: "quality_of_work_weight",
        CategoryCode.ADAPTABILITY: "adaptability_weight",
        CategoryCode.TEAMWORK: "teamwork_weight",
        CategoryCode.RELIABILITY: "reliability_weight",
        CategoryCode.ETHICS: "ethics_weight",
        CategoryCode.CUSTOMER_SERVICE: "customer_service_weight",
        CategoryCode.MANAGERIAL_SKILLS: "managerial_skills_weight",
    }

    class Meta:
        verbose_name_plural = "Weights configuration"

    @classmethod
    def fields_for(cls, weights) -> dict:
        """{category: weight} → model field values."""
        return {field: int(weights.get(category, 0) or 0) for category, field in cls.CATEGORY_FIELDS.items()}

    def as_weights(self) -> dict:
        return {category: getattr(self, field) for category, field in self.CATEGORY_FIELDS.items()}

    def clean(self):
        from appraisal_app.services.configuration import validate_weight_table
        validate_weight_table(self.configuration, self.as_weights())

    def __str__(self):
        return self.get_configuration_display()


# ── Evaluations & related ---------------------------------------------------
class Evaluation(models.Model):
    evaluation_id   = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employee        = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name="evaluations")
    reviewer        = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="reviews")
    evaluation_type = models.CharField(max_length=12, choices=EvaluationType.choices, default=EvaluationType.DEFAULT)
    configuration   = models.CharField(max_length=20, choices=ConfigurationName.choices)
    status          = models.CharField(max_length=12, choices=EvalStatus.choices, default=EvalStatus.DRAFT)
    current_step    = models.PositiveSmallIntegerField(default=1)

    # Resolved once when the evaluation starts
    show_job_targets      = models.BooleanField(default=False)
    force_job_targets     = models.BooleanField(default=False)
    employee_is_ho        = models.BooleanField(default=False)
    employee_is_area_mgr  = models.BooleanField(default=False)
    evaluator_is_ho       = models.BooleanField(default=False)
    evaluator_is_area_mgr = models.BooleanField(default=False)

    # Weights percentages (snapshot of WeightsConfiguration at creation)
    jk_weight_pct = models.PositiveSmallIntegerField(default=0)
    qw_weight_pct = models.PositiveSmallIntegerField(default=0)
    ad_weight_pct = models.PositiveSmallIntegerField(default=0)
    tw_weight_pct = models.PositiveSmallIntegerField(default=0)
    re_weight_pct = models.PositiveSmallIntegerField(default=0)
    et_weight_pct = models.PositiveSmallIntegerField(default=0)
    cs_weight_pct = models.PositiveSmallIntegerField(default=0)
    ms_weight_pct = models.PositiveSmallIntegerField(default=0)

    # Review type
    review_type_probationary = models.PositiveSmallIntegerField(choices=ProbationaryReview.choices, null=True, blank=True)
    review_type_regular      = models.CharField(max_length=2, choices=RegularReview.choices, blank=True, default="")
    review_type_improvement  = models.BooleanField(default=False)
    review_type_custom       = models.CharField(max_length=200, blank=True, default="")
    coverage_from            = models.DateField(null=True, blank=True)
    coverage_to              = models.DateField(null=True, blank=True)

    # Overall assessment
    priority_area_1 = models.TextField(blank=True, default="")
    priority_area_2 = models.TextField(blank=True, default="")
    priority_area_3 = models.TextField(blank=True, default="")
    remarks         = models.TextField(blank=True, default="")

    # Derived by the recompute pipeline
    rating     = models.DecimalField(max_digits=4, decimal_places=2, default=0)
    percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    passed     = models.BooleanField(default=False)

    created_at   = models.DateTimeField(default=timezone.now)
    updated_at   = models.DateTimeField(auto_now=True)
    submitted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_submitted(self) -> bool:
        return self.status == EvalStatus.SUBMITTED

    def weight_snapshot(self) -> dict:
        return {
            CategoryCode.JOB_KNOWLEDGE: self.jk_weight_pct,
            CategoryCode.QUALITY_OF_WORK: self.qw_weight_pct,
            CategoryCode.ADAPTABILITY: self.ad_weight_pct,
            CategoryCode.TEAMWORK: self.tw_weight_pct,
            CategoryCode.RELIABILITY: self.re_weight_pct,
            CategoryCode.ETHICS: self.et_weight_pct,
            CategoryCode.CUSTOMER_SERVICE: self.cs_weight_pct,
            CategoryCode.MANAGERIAL_SKILLS: self.ms_weight_pct,
        }

    def __str__(self):
        return f"{self.employee} · {self.get_configuration_display()} · {self.get_status_display()}"


class IndicatorScore(models.Model):
    indicator_score_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    evaluation = models.ForeignKey(Evaluation, on_delete=models.CASCADE, related_name="indicator_scores")
    category   = models.CharField(max_length=20, choices=CategoryCode.choices)
    indicator  = models.CharField(max_length=40)
    # NULL = unset; never stored as 0
    score      = models.PositiveSmallIntegerField(
        null=True, blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    comment    = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["evaluation", "indicator"], name="uniq_indicator_per_evaluation")
        ]

    def clean(self):
        if self.score is not None and not (1 <= self.score <= 5):
            raise ValidationError({"score": "Score must be between 1 and 5."})


class SubmissionRecord(models.Model):
    """Frozen copy of the payload accepted by the local submission backend."""
    submission_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    evaluation    = models.OneToOneField(Evaluation, on_delete=models.CASCADE, related_name="submission_record")
    route         = models.CharField(max_length=30)
    payload       = models.JSONField(default=dict)
    created_at    = models.DateTimeField(default=timezone.now)
