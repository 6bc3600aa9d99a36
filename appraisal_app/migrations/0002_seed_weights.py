# Seeds one WeightsConfiguration row per evaluation configuration.

from django.db import migrations

# configuration → (JK, QW, AD, TW, RE, ET, CS, MS)
WEIGHTS = {
    "BRANCH_RANK_N_FILE": (20, 20, 10, 10, 5, 5, 30, 0),
    "BRANCH_DEFAULT":     (20, 20, 10, 10, 5, 5, 30, 0),
    "BRANCH_BASIC":       (15, 15, 10, 10, 5, 5, 20, 20),
    "HO_RANK_N_FILE":     (25, 25, 15, 15, 10, 10, 0, 0),
    "HO_BASIC":           (20, 20, 10, 10, 5, 5, 0, 30),
}

FIELDS = (
    "job_knowledge_weight", "quality_of_work_weight", "adaptability_weight",
    "teamwork_weight", "reliability_weight", "ethics_weight",
    "customer_service_weight", "managerial_skills_weight",
)


def seed_weights(apps, schema_editor):
    WeightsConfiguration = apps.get_model("appraisal_app", "WeightsConfiguration")
    for name, weights in WEIGHTS.items():
        WeightsConfiguration.objects.get_or_create(
            configuration=name,
            defaults=dict(zip(FIELDS, weights)),
        )


def unseed_weights(apps, schema_editor):
    WeightsConfiguration = apps.get_model("appraisal_app", "WeightsConfiguration")
    WeightsConfiguration.objects.filter(configuration__in=list(WEIGHTS)).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("appraisal_app", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_weights, unseed_weights),
    ]
