import logging

from django.db import transaction

from appraisal_app.exceptions import SignatureRequired
from appraisal_app.models import CategoryCode, Evaluation, EvaluationType
from appraisal_app.services.configuration import (
    context_for_employee, context_for_user, resolve_configuration,
)

logger = logging.getLogger(__name__)

# Evaluation snapshot field per category
WEIGHT_FIELDS = {
    CategoryCode.JOB_KNOWLEDGE: "jk_weight_pct",
    CategoryCode.QUALITY_OF_WORK: "qw_weight_pct",
    CategoryCode.ADAPTABILITY: "ad_weight_pct",
    CategoryCode.TEAMWORK: "tw_weight_pct",
    CategoryCode.RELIABILITY: "re_weight_pct",
    CategoryCode.ETHICS: "et_weight_pct",
    CategoryCode.CUSTOMER_SERVICE: "cs_weight_pct",
    CategoryCode.MANAGERIAL_SKILLS: "ms_weight_pct",
}


def weight_snapshot_fields(weights) -> dict:
    return {field: int(weights.get(category, 0) or 0) for category, field in WEIGHT_FIELDS.items()}


@transaction.atomic
def start_evaluation(employee, reviewer=None, evaluation_type=EvaluationType.DEFAULT, *,
                     force_job_targets=False, **fields) -> Evaluation:
    """
    Create a draft evaluation with its configuration resolved and the
    current category weights frozen onto it. Later edits to
    WeightsConfiguration never touch existing evaluations.
    """
    if reviewer is not None and not reviewer.has_signature:
        logger.warning("Evaluation for %s refused: reviewer %s has no signature", employee, reviewer.pk)
        raise SignatureRequired("You must have a signature saved in your profile to start an evaluation.")

    employee_ctx = context_for_employee(employee)
    evaluator_ctx = context_for_user(reviewer)
    config = resolve_configuration(
        employee_ctx, evaluation_type, force_job_targets=force_job_targets,
    )

    evaluation = Evaluation.objects.create(
        employee=employee,
        reviewer=reviewer,
        evaluation_type=evaluation_type,
        configuration=config.name,
        show_job_targets=config.show_job_targets,
        force_job_targets=force_job_targets,
        employee_is_ho=config.employee_is_ho,
        employee_is_area_mgr=config.employee_is_area_manager,
        evaluator_is_ho=evaluator_ctx.is_head_office,
        evaluator_is_area_mgr=evaluator_ctx.is_area_manager,
        **weight_snapshot_fields(config.weights),
        **fields,
    )
    logger.info(
        "Started evaluation %s for %s: %s (%s job targets)",
        evaluation.pk, employee, config.name, config.job_target_mode,
    )
    return evaluation
