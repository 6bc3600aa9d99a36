"""
Category set resolver.

Decides, once per evaluation, which competency categories are scored, which
indicator rows each category uses and which weight table applies. Everything
downstream (aggregation, wizard steps, validation, submission routing) reads
the ResolvedConfiguration instead of re-inspecting branch or position text.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from django.core.exceptions import ValidationError

from appraisal_app.models import CategoryCode, ConfigurationName, EvaluationType
from appraisal_app.services.indicators import (
    CATEGORY_ORDER, CATEGORY_TITLES, SINGLE_JOB_TARGET_CODE, JOB_TARGET_CODES,
    category_indicator_codes,
)

logger = logging.getLogger(__name__)


class JobTargetMode:
    SINGLE = "single"
    BREAKDOWN = "breakdown"


OVERALL_ASSESSMENT = "OVERALL_ASSESSMENT"
OVERALL_ASSESSMENT_TITLE = "Overall Assessment"

_BASE_CATEGORIES = (
    CategoryCode.JOB_KNOWLEDGE,
    CategoryCode.QUALITY_OF_WORK,
    CategoryCode.ADAPTABILITY,
    CategoryCode.TEAMWORK,
    CategoryCode.RELIABILITY,
    CategoryCode.ETHICS,
)

CONFIGURATION_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    ConfigurationName.BRANCH_RANK_N_FILE: _BASE_CATEGORIES + (CategoryCode.CUSTOMER_SERVICE,),
    ConfigurationName.BRANCH_DEFAULT:     _BASE_CATEGORIES + (CategoryCode.CUSTOMER_SERVICE,),
    ConfigurationName.BRANCH_BASIC:       _BASE_CATEGORIES + (CategoryCode.CUSTOMER_SERVICE, CategoryCode.MANAGERIAL_SKILLS),
    ConfigurationName.HO_RANK_N_FILE:     _BASE_CATEGORIES,
    ConfigurationName.HO_BASIC:           _BASE_CATEGORIES + (CategoryCode.MANAGERIAL_SKILLS,),
}


def _table(jk, qw, ad, tw, re, et, cs=0, ms=0) -> Dict[str, int]:
    return {
        CategoryCode.JOB_KNOWLEDGE: jk,
        CategoryCode.QUALITY_OF_WORK: qw,
        CategoryCode.ADAPTABILITY: ad,
        CategoryCode.TEAMWORK: tw,
        CategoryCode.RELIABILITY: re,
        CategoryCode.ETHICS: et,
        CategoryCode.CUSTOMER_SERVICE: cs,
        CategoryCode.MANAGERIAL_SKILLS: ms,
    }


# Seed values for WeightsConfiguration; the table itself is the source of truth.
DEFAULT_WEIGHT_TABLES: Dict[str, Dict[str, int]] = {
    ConfigurationName.BRANCH_RANK_N_FILE: _table(20, 20, 10, 10, 5, 5, cs=30),
    ConfigurationName.BRANCH_DEFAULT:     _table(20, 20, 10, 10, 5, 5, cs=30),
    ConfigurationName.BRANCH_BASIC:       _table(15, 15, 10, 10, 5, 5, cs=20, ms=20),
    ConfigurationName.HO_RANK_N_FILE:     _table(25, 25, 15, 15, 10, 10),
    ConfigurationName.HO_BASIC:           _table(20, 20, 10, 10, 5, 5, ms=30),
}


# ── Role / branch detection ─────────────────────────────────────────────

def _norm(value) -> str:
    return str(value or "").upper().strip()


def is_head_office(branch_name: str = "", branch_code: str = "") -> bool:
    """HO when name or code is "HO"/"HEAD OFFICE" or contains "HEAD OFFICE"."""
    for value in (_norm(branch_name), _norm(branch_code)):
        if value in ("HO", "HEAD OFFICE") or "HEAD OFFICE" in value:
            return True
    return False


def is_area_manager(position: str) -> bool:
    pos = _norm(position)
    return pos == "AREA MANAGER" or "AREA MANAGER" in pos


def is_manager_or_supervisor(position: str) -> bool:
    pos = _norm(position)
    is_manager = "MANAGER" in pos and "AREA MANAGER" not in pos
    return is_manager or "SUPERVISOR" in pos


@dataclass(frozen=True)
class PartyContext:
    """Branch and position of one side of the evaluation (employee or evaluator)."""
    branch_name: str = ""
    branch_code: str = ""
    position: str = ""

    @property
    def has_branch(self) -> bool:
        return bool(self.branch_name or self.branch_code)

    @property
    def is_head_office(self) -> bool:
        return is_head_office(self.branch_name, self.branch_code)

    @property
    def is_area_manager(self) -> bool:
        return is_area_manager(self.position)

    @property
    def is_manager_or_supervisor(self) -> bool:
        return is_manager_or_supervisor(self.position)


def context_for_employee(employee) -> PartyContext:
    if employee is None:
        return PartyContext()
    branch = getattr(employee, "branch", None)
    return PartyContext(
        branch_name=getattr(branch, "name", "") or "",
        branch_code=getattr(branch, "code", "") or "",
        position=employee.position_label,
    )


def context_for_user(user) -> PartyContext:
    """Evaluator context; users without an employee profile only have a position."""
    employee = getattr(user, "employee_profile", None) if user is not None else None
    if employee is not None:
        return context_for_employee(employee)
    return PartyContext(position=getattr(user, "position", "") or "")


# ── Resolved configuration ──────────────────────────────────────────────

@dataclass(frozen=True)
class CategoryStep:
    number: int
    category: str
    title: str
    indicator_codes: Tuple[str, ...]
    required_codes: Tuple[str, ...]


@dataclass(frozen=True)
class ResolvedConfiguration:
    name: str
    evaluation_type: str
    steps: Tuple[CategoryStep, ...]
    weights: Mapping[str, int] = field(default_factory=dict)
    job_target_mode: str = JobTargetMode.SINGLE
    employee_is_ho: bool = False
    employee_is_area_manager: bool = False

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(step.category for step in self.steps)

    @property
    def includes_customer_service(self) -> bool:
        return CategoryCode.CUSTOMER_SERVICE in self.categories

    @property
    def includes_managerial_skills(self) -> bool:
        return CategoryCode.MANAGERIAL_SKILLS in self.categories

    @property
    def show_job_targets(self) -> bool:
        return self.job_target_mode == JobTargetMode.BREAKDOWN

    @property
    def terminal_step(self) -> int:
        """1-based number of the Overall Assessment step."""
        return len(self.steps) + 1

    @property
    def step_count(self) -> int:
        return self.terminal_step

    def step(self, number: int) -> Optional[CategoryStep]:
        if 1 <= number <= len(self.steps):
            return self.steps[number - 1]
        return None

    def step_title(self, number: int) -> str:
        step = self.step(number)
        if step is not None:
            return step.title
        return OVERALL_ASSESSMENT_TITLE if number == self.terminal_step else ""

    def indicator_codes(self, category: str) -> Tuple[str, ...]:
        for step in self.steps:
            if step.category == category:
                return step.indicator_codes
        return ()

    def category_for_indicator(self, code: str) -> Optional[str]:
        for step in self.steps:
            if code in step.indicator_codes:
                return step.category
        return None

    @property
    def all_indicator_codes(self) -> Tuple[str, ...]:
        return tuple(code for step in self.steps for code in step.indicator_codes)


def validate_weight_table(name: str, weights: Mapping[str, int]) -> None:
    """
    A weight table must give weight only to the categories of its
    configuration and those weights must sum to exactly 100.
    """
    included = CONFIGURATION_CATEGORIES.get(name)
    if included is None:
        raise ValidationError(f"Unknown configuration '{name}'.")
    stray = [cat for cat, w in weights.items() if w and cat not in included]
    if stray:
        raise ValidationError(
            f"{name}: categories {', '.join(sorted(stray))} are not part of this configuration "
            f"and must have weight 0."
        )
    total = sum(int(weights.get(cat, 0) or 0) for cat in included)
    if total != 100:
        raise ValidationError(f"{name}: category weights must sum to 100 (got {total}).")


def weights_for(name: str) -> Dict[str, int]:
    """
    Current weight table for a configuration, read from WeightsConfiguration.
    Falls back to the seed table when the row was never created.
    """
    from appraisal_app.models import WeightsConfiguration
    try:
        return dict(WeightsConfiguration.objects.get(configuration=name).as_weights())
    except WeightsConfiguration.DoesNotExist:
        logger.warning("No WeightsConfiguration row for %s, using built-in table", name)
        return dict(DEFAULT_WEIGHT_TABLES[name])


def configuration_name(employee_is_ho: bool, employee_is_area_manager: bool, evaluation_type: str) -> str:
    hides_customer_service = (
        employee_is_ho
        and not employee_is_area_manager
        and evaluation_type in (EvaluationType.RANK_N_FILE, EvaluationType.BASIC)
    )
    if hides_customer_service:
        if evaluation_type == EvaluationType.BASIC:
            return ConfigurationName.HO_BASIC
        return ConfigurationName.HO_RANK_N_FILE
    if evaluation_type == EvaluationType.BASIC:
        return ConfigurationName.BRANCH_BASIC
    if evaluation_type == EvaluationType.RANK_N_FILE:
        return ConfigurationName.BRANCH_RANK_N_FILE
    return ConfigurationName.BRANCH_DEFAULT


def build_configuration(
    name: str,
    evaluation_type: str,
    *,
    job_target_mode: str,
    weights: Mapping[str, int],
    employee_is_ho: bool = False,
    employee_is_area_manager: bool = False,
) -> ResolvedConfiguration:
    validate_weight_table(name, weights)
    included = CONFIGURATION_CATEGORIES[name]
    ho_track = name in (ConfigurationName.HO_RANK_N_FILE, ConfigurationName.HO_BASIC)

    steps = []
    for category in CATEGORY_ORDER:
        if category not in included:
            continue
        codes = tuple(category_indicator_codes(category, job_target_mode=job_target_mode))
        required = tuple(
            code for code in codes
            if code not in JOB_TARGET_CODES
            # the single Job Targets row is optional for head-office staff
            and not (code == SINGLE_JOB_TARGET_CODE and ho_track)
        )
        steps.append(CategoryStep(
            number=len(steps) + 1,
            category=category,
            title=CATEGORY_TITLES[category],
            indicator_codes=codes,
            required_codes=required,
        ))

    return ResolvedConfiguration(
        name=name,
        evaluation_type=evaluation_type,
        steps=tuple(steps),
        weights=MappingProxyType({cat: int(weights.get(cat, 0) or 0) for cat in included}),
        job_target_mode=job_target_mode,
        employee_is_ho=employee_is_ho,
        employee_is_area_manager=employee_is_area_manager,
    )


def resolve_configuration(
    employee: PartyContext,
    evaluation_type: str = EvaluationType.DEFAULT,
    *,
    force_job_targets: bool = False,
    weights: Optional[Mapping[str, int]] = None,
) -> ResolvedConfiguration:
    """
    Rules
    -----
    • Head office: branch name/code is HO / HEAD OFFICE or contains HEAD OFFICE.
      Without any branch on file, rank-and-file and basic evaluations are
      treated as head-office ones.
    • Job Targets breakdown (7 rows): forced by the evaluator, OR area manager,
      OR manager/supervisor outside head office. Otherwise the single row.
    • Customer Service: hidden only for head-office, non area-manager
      employees under a rank-and-file or basic evaluation.
    • Managerial Skills: basic evaluations only.
    """
    if evaluation_type not in EvaluationType.values:
        raise ValidationError(f"Unknown evaluation type '{evaluation_type}'.")

    if employee.has_branch:
        employee_is_ho = employee.is_head_office
    else:
        employee_is_ho = evaluation_type in (EvaluationType.RANK_N_FILE, EvaluationType.BASIC)
    area_manager = employee.is_area_manager

    show_breakdown = (
        force_job_targets
        or area_manager
        or (employee.is_manager_or_supervisor and not employee_is_ho)
    )
    mode = JobTargetMode.BREAKDOWN if show_breakdown else JobTargetMode.SINGLE
    name = configuration_name(employee_is_ho, area_manager, evaluation_type)
    table = dict(weights) if weights is not None else weights_for(name)

    config = build_configuration(
        name, evaluation_type,
        job_target_mode=mode,
        weights=table,
        employee_is_ho=employee_is_ho,
        employee_is_area_manager=area_manager,
    )
    logger.debug(
        "Resolved %s (type=%s, ho=%s, area_mgr=%s, job_targets=%s)",
        name, evaluation_type, employee_is_ho, area_manager, mode,
    )
    return config


def configuration_for_evaluation(evaluation) -> ResolvedConfiguration:
    """
    Rebuild the configuration an evaluation was started with from what was
    stored on it (name, job-target mode, weight snapshot). Never re-derives
    from the employee's current branch or position.
    """
    mode = JobTargetMode.BREAKDOWN if evaluation.show_job_targets else JobTargetMode.SINGLE
    return build_configuration(
        evaluation.configuration,
        evaluation.evaluation_type,
        job_target_mode=mode,
        weights=evaluation.weight_snapshot(),
        employee_is_ho=evaluation.employee_is_ho,
        employee_is_area_manager=evaluation.employee_is_area_mgr,
    )


# ── Submission routing ──────────────────────────────────────────────────

class SubmissionRoute:
    BRANCH_RANK_N_FILE = "branch-rank-n-file"
    BRANCH_BASIC = "branch-basic"
    HO_RANK_N_FILE = "ho-rank-n-file"
    HO_BASIC = "ho-basic"
    DEFAULT = "default"


def submission_route(evaluator_is_ho: bool, evaluator_is_area_manager: bool, evaluation_type: str) -> str:
    """
    Where a finished evaluation is filed, decided by the evaluator:
    head-office area managers file into the branch routes, other head-office
    evaluators into the HO routes, branch evaluators into the branch routes.
    A default evaluation goes to `default` from head office and to
    `branch-basic` from a branch.
    """
    if evaluator_is_ho and not evaluator_is_area_manager:
        routes = {
            EvaluationType.RANK_N_FILE: SubmissionRoute.HO_RANK_N_FILE,
            EvaluationType.BASIC: SubmissionRoute.HO_BASIC,
        }
        return routes.get(evaluation_type, SubmissionRoute.DEFAULT)

    if evaluation_type == EvaluationType.RANK_N_FILE:
        return SubmissionRoute.BRANCH_RANK_N_FILE
    if evaluation_type == EvaluationType.BASIC or not evaluator_is_ho:
        return SubmissionRoute.BRANCH_BASIC
    return SubmissionRoute.DEFAULT


def route_for_evaluation(evaluation) -> str:
    return submission_route(
        evaluation.evaluator_is_ho, evaluation.evaluator_is_area_mgr, evaluation.evaluation_type,
    )
