import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


CONFIGURATION_CHOICES = [
    ("BRANCH_RANK_N_FILE", "Branch Rank and File"),
    ("BRANCH_DEFAULT", "Branch Default"),
    ("BRANCH_BASIC", "Branch Basic (Managerial)"),
    ("HO_RANK_N_FILE", "Head Office Rank and File"),
    ("HO_BASIC", "Head Office Basic (Managerial)"),
]

CATEGORY_CHOICES = [
    ("JOB_KNOWLEDGE", "Job Knowledge"),
    ("QUALITY_OF_WORK", "Quality of Work"),
    ("ADAPTABILITY", "Adaptability"),
    ("TEAMWORK", "Teamwork"),
    ("RELIABILITY", "Reliability"),
    ("ETHICS", "Ethical & Professional Behavior"),
    ("CUSTOMER_SERVICE", "Customer Service"),
    ("MANAGERIAL_SKILLS", "Managerial Skills"),
]


def weight_field():
    return models.PositiveSmallIntegerField(default=0)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Branch",
            fields=[
                ("branch_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("code", models.CharField(blank=True, max_length=30)),
                ("location", models.CharField(blank=True, max_length=180)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name_plural": "Branches",
            },
        ),
        migrations.AddConstraint(
            model_name="branch",
            constraint=models.UniqueConstraint(fields=("name", "code"), name="uniq_branch_name_code"),
        ),
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("employee_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("position", models.CharField(blank=True, max_length=120)),
                ("status", models.CharField(choices=[("ACTIVE", "Active"), ("INACTIVE", "Inactive")], default="ACTIVE", max_length=16)),
                ("hire_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("branch", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="employees", to="appraisal_app.branch")),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="employee_profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="WeightsConfiguration",
            fields=[
                ("configuration", models.CharField(choices=CONFIGURATION_CHOICES, max_length=20, primary_key=True, serialize=False)),
                ("job_knowledge_weight", weight_field()),
                ("quality_of_work_weight", weight_field()),
                ("adaptability_weight", weight_field()),
                ("teamwork_weight", weight_field()),
                ("reliability_weight", weight_field()),
                ("ethics_weight", weight_field()),
                ("customer_service_weight", weight_field()),
                ("managerial_skills_weight", weight_field()),
            ],
            options={
                "verbose_name_plural": "Weights configuration",
            },
        ),
        migrations.CreateModel(
            name="Evaluation",
            fields=[
                ("evaluation_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("evaluation_type", models.CharField(choices=[("RANK_N_FILE", "Rank and File"), ("BASIC", "Basic"), ("DEFAULT", "Default")], default="DEFAULT", max_length=12)),
                ("configuration", models.CharField(choices=CONFIGURATION_CHOICES, max_length=20)),
                ("status", models.CharField(choices=[("DRAFT", "Draft"), ("CONFIRMING", "Awaiting Confirmation"), ("SUBMITTING", "Submitting"), ("SUBMITTED", "Submitted")], default="DRAFT", max_length=12)),
                ("current_step", models.PositiveSmallIntegerField(default=1)),
                ("show_job_targets", models.BooleanField(default=False)),
                ("force_job_targets", models.BooleanField(default=False)),
                ("employee_is_ho", models.BooleanField(default=False)),
                ("employee_is_area_mgr", models.BooleanField(default=False)),
                ("evaluator_is_ho", models.BooleanField(default=False)),
                ("evaluator_is_area_mgr", models.BooleanField(default=False)),
                ("jk_weight_pct", weight_field()),
                ("qw_weight_pct", weight_field()),
                ("ad_weight_pct", weight_field()),
                ("tw_weight_pct", weight_field()),
                ("re_weight_pct", weight_field()),
                ("et_weight_pct", weight_field()),
                ("cs_weight_pct", weight_field()),
                ("ms_weight_pct", weight_field()),
                ("review_type_probationary", models.PositiveSmallIntegerField(blank=True, choices=[(3, "3 months"), (5, "5 months")], null=True)),
                ("review_type_regular", models.CharField(blank=True, choices=[("Q1", "Q1"), ("Q2", "Q2"), ("Q3", "Q3"), ("Q4", "Q4")], default="", max_length=2)),
                ("review_type_improvement", models.BooleanField(default=False)),
                ("review_type_custom", models.CharField(blank=True, default="", max_length=200)),
                ("coverage_from", models.DateField(blank=True, null=True)),
                ("coverage_to", models.DateField(blank=True, null=True)),
                ("priority_area_1", models.TextField(blank=True, default="")),
                ("priority_area_2", models.TextField(blank=True, default="")),
                ("priority_area_3", models.TextField(blank=True, default="")),
                ("remarks", models.TextField(blank=True, default="")),
                ("rating", models.DecimalField(decimal_places=2, default=0, max_digits=4)),
                ("percentage", models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ("passed", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluations", to="appraisal_app.employee")),
                ("reviewer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="reviews", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="IndicatorScore",
            fields=[
                ("indicator_score_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("category", models.CharField(choices=CATEGORY_CHOICES, max_length=20)),
                ("indicator", models.CharField(max_length=40)),
                ("score", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("comment", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("evaluation", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="indicator_scores", to="appraisal_app.evaluation")),
            ],
        ),
        migrations.AddConstraint(
            model_name="indicatorscore",
            constraint=models.UniqueConstraint(fields=("evaluation", "indicator"), name="uniq_indicator_per_evaluation"),
        ),
        migrations.CreateModel(
            name="SubmissionRecord",
            fields=[
                ("submission_id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("route", models.CharField(max_length=30)),
                ("payload", models.JSONField(default=dict)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("evaluation", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="submission_record", to="appraisal_app.evaluation")),
            ],
        ),
    ]
