"""
Competency indicator catalogue.

Every scored row of the evaluation form lives here, grouped by category and
kept in display order. Indicator codes are what clients send back and what
IndicatorScore.indicator stores; titles and descriptions are display text.

Quality of Work carries two alternative ways of scoring job targets:
- QW5, a single "Job Targets" row used by rank-and-file style forms
- seven JT_* rows (one per product line / income stream) used when the
  employee owns branch targets (managers, supervisors, area managers)
Which one applies is decided by the configuration resolver.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

from appraisal_app.models import CategoryCode


@dataclass(frozen=True)
class Indicator:
    code: str
    category: str
    title: str
    description: str = ""
    job_target: bool = False


def _rows(category, rows, *, job_target=False) -> Tuple[Indicator, ...]:
    return tuple(
        Indicator(code=code, category=category, title=title,
                  description=description, job_target=job_target)
        for code, title, description in rows
    )


JOB_KNOWLEDGE = _rows(CategoryCode.JOB_KNOWLEDGE, [
    ("JK1",
     "Mastery in core competencies and job functions",
     "Demonstrates a clear understanding of the duties of the position and applies "
     "the required skills with little or no guidance."),
    ("JK2",
     "Keeps abreast of policies, procedures and product updates",
     "Stays informed of changes to company policies, processes and offerings and "
     "applies them correctly in daily work."),
    ("JK3",
     "Applies knowledge to solve problems at work",
     "Uses technical and procedural knowledge to analyse situations and arrive at "
     "sound, practical solutions."),
])

QUALITY_OF_WORK_BASE = _rows(CategoryCode.QUALITY_OF_WORK, [
    ("QW1",
     "Ensures work is accurate and meets or exceeds established standards",
     "Complies with industry regulations and project specifications; delivers "
     "reliable, high-quality work, and pays attention to detail."),
    ("QW2",
     "Completes tasks and projects within specified deadlines",
     "Submits work on time without compromising quality."),
    ("QW3",
     "Produces a high volume of quality work within a given time frame",
     "Handles a substantial workload without sacrificing quality."),
    ("QW4",
     "Maintains a consistent level of productivity over time",
     "Meets productivity expectations reliably, without significant fluctuations."),
])

JOB_TARGETS_SINGLE = _rows(CategoryCode.QUALITY_OF_WORK, [
    ("QW5",
     "Achieves targets set for their respective position (Sales / CCR / Mechanic / etc.)",
     "Consistently hits monthly targets assigned to their role."),
])

JOB_TARGETS_BREAKDOWN = _rows(CategoryCode.QUALITY_OF_WORK, [
    ("JT_MOTORCYCLES",
     "Achieves branch sales targets for motorcycles",
     "Consistently hits monthly sales targets."),
    ("JT_APPLIANCES",
     "Achieves branch sales targets for appliances",
     "Consistently hits monthly sales targets."),
    ("JT_CARS",
     "Achieves branch sales targets for cars",
     "Consistently hits monthly sales targets."),
    ("JT_TRI_WHEELERS",
     "Achieves branch sales targets for tri-wheelers",
     "Consistently hits monthly sales targets."),
    ("JT_COLLECTION",
     "Achieves branch collection targets",
     "Consistently hits monthly collection targets."),
    ("JT_SPAREPARTS_LUBRICANTS",
     "Achieves branch spareparts and lubricants targets",
     "Consistently hits monthly spareparts and lubricants targets."),
    ("JT_SHOP_INCOME",
     "Achieves branch shop income targets",
     "Consistently hits monthly shop income targets."),
], job_target=True)

ADAPTABILITY = _rows(CategoryCode.ADAPTABILITY, [
    ("AD1",
     "Demonstrates openness to change and new ideas",
     "Accepts new methods, systems and assignments positively and helps others "
     "through the transition."),
    ("AD2",
     "Adjusts work approach when priorities or conditions change",
     "Re-plans tasks quickly when deadlines, targets or resources shift, keeping "
     "output on track."),
    ("AD3",
     "Learns new skills and processes readily",
     "Takes initiative to learn what a new task requires and becomes productive "
     "in it within a reasonable time."),
])

TEAMWORK = _rows(CategoryCode.TEAMWORK, [
    ("TW1",
     "Actively participates in team activities and shared goals",
     "Contributes ideas and effort to team objectives and willingly takes on a "
     "fair share of the workload."),
    ("TW2",
     "Promotes cooperation and a positive working environment",
     "Communicates respectfully, shares information freely and supports "
     "colleagues when they need help."),
    ("TW3",
     "Handles disagreements constructively",
     "Raises concerns openly, listens to other viewpoints and works toward "
     "solutions acceptable to the team."),
])

RELIABILITY = _rows(CategoryCode.RELIABILITY, [
    ("RE1",
     "Demonstrates regular attendance by being present at work as scheduled",
     "Has not taken any unplanned absences and follows the company's attendance policy."),
    ("RE2",
     "Arrives at work and meetings on time or before the scheduled time",
     "Consistently arrives at work on time, ready to begin work promptly."),
    ("RE3",
     "Follows through on assignments from and commitments made to coworkers or superiors",
     "Delivers on commitments, ensuring that expectations are met or exceeded."),
    ("RE4",
     "Demonstrates reliability in completing routine tasks without oversight",
     "Consistently manages day-to-day responsibilities without requiring constant "
     "supervision. Ensures regular tasks are completed correctly and on time."),
])

ETHICS = _rows(CategoryCode.ETHICS, [
    ("ET1",
     "Follows company policies and the code of conduct",
     "Observes rules, procedures and regulations in all dealings and encourages "
     "others to do the same."),
    ("ET2",
     "Demonstrates honesty and integrity",
     "Is truthful in reports and transactions, handles company resources "
     "responsibly and admits mistakes."),
    ("ET3",
     "Maintains confidentiality of company and customer information",
     "Protects sensitive records and discusses confidential matters only with "
     "authorised persons."),
    ("ET4",
     "Treats colleagues and customers with respect and professionalism",
     "Maintains a courteous, fair and professional manner regardless of the "
     "situation or the person involved."),
])

CUSTOMER_SERVICE = _rows(CategoryCode.CUSTOMER_SERVICE, [
    ("CS1",
     "Listens to customers and displays understanding of customer needs and concerns",
     "Repeats or summarizes customer concerns to ensure complete understanding "
     "before responding. Expresses genuine concern and seeks to understand the "
     "customer's perspective."),
    ("CS2",
     "Proactively identifies and solves customer problems to ensure satisfaction",
     "Takes initiative to resolve issues and prevent future challenges for the "
     "customer. Offers alternative solutions when standard options do not fit."),
    ("CS3",
     "Possesses comprehensive product knowledge to assist customers effectively (L.E.A.D.E.R.)",
     "Demonstrates a deep understanding of products and/or services, enabling "
     "accurate and helpful guidance. Suggests products or services that best fit "
     "the customer's needs."),
    ("CS4",
     "Maintains a positive and professional demeanor, particularly during customer interactions (L.E.A.D.E.R.)",
     "Represents the organization positively. Remains courteous and patient, even "
     "with challenging customers or in stressful situations."),
    ("CS5",
     "Resolves customer issues promptly and efficiently (L.E.A.D.E.R.)",
     "Addresses and resolves customer complaints or concerns within established "
     "timeframes. Ensures follow-ups are conducted for unresolved issues."),
])

MANAGERIAL_SKILLS = _rows(CategoryCode.MANAGERIAL_SKILLS, [
    ("MS1",
     "Plans and organizes the work of the team",
     "Sets clear priorities, schedules and assignments so that the team meets "
     "its targets."),
    ("MS2",
     "Delegates tasks and responsibilities effectively",
     "Matches assignments to people's skills, gives clear instructions and "
     "follows up without micromanaging."),
    ("MS3",
     "Coaches and develops team members",
     "Gives regular, specific feedback and creates opportunities for staff to "
     "build their skills."),
    ("MS4",
     "Makes sound and timely decisions",
     "Gathers relevant facts, weighs options and commits to decisions that "
     "serve the branch and the company."),
    ("MS5",
     "Monitors performance and takes corrective action",
     "Tracks results against targets, recognises good performance and addresses "
     "gaps promptly and fairly."),
    ("MS6",
     "Leads by example and motivates the team",
     "Models company values, keeps morale high and inspires commitment to "
     "shared goals."),
])


CATEGORY_TITLES: Dict[str, str] = dict(CategoryCode.choices)

# Display order of category steps
CATEGORY_ORDER: Tuple[str, ...] = (
    CategoryCode.JOB_KNOWLEDGE,
    CategoryCode.QUALITY_OF_WORK,
    CategoryCode.ADAPTABILITY,
    CategoryCode.TEAMWORK,
    CategoryCode.RELIABILITY,
    CategoryCode.ETHICS,
    CategoryCode.CUSTOMER_SERVICE,
    CategoryCode.MANAGERIAL_SKILLS,
)

_CATALOGUE: Dict[str, Tuple[Indicator, ...]] = {
    CategoryCode.JOB_KNOWLEDGE: JOB_KNOWLEDGE,
    CategoryCode.QUALITY_OF_WORK: QUALITY_OF_WORK_BASE + JOB_TARGETS_SINGLE + JOB_TARGETS_BREAKDOWN,
    CategoryCode.ADAPTABILITY: ADAPTABILITY,
    CategoryCode.TEAMWORK: TEAMWORK,
    CategoryCode.RELIABILITY: RELIABILITY,
    CategoryCode.ETHICS: ETHICS,
    CategoryCode.CUSTOMER_SERVICE: CUSTOMER_SERVICE,
    CategoryCode.MANAGERIAL_SKILLS: MANAGERIAL_SKILLS,
}

INDICATORS_BY_CODE: Dict[str, Indicator] = {
    ind.code: ind for rows in _CATALOGUE.values() for ind in rows
}

JOB_TARGET_CODES: Tuple[str, ...] = tuple(ind.code for ind in JOB_TARGETS_BREAKDOWN)
SINGLE_JOB_TARGET_CODE = "QW5"


def indicators_for(category: str) -> Tuple[Indicator, ...]:
    """All catalogue rows of a category, regardless of configuration."""
    return _CATALOGUE.get(category, ())


def get_indicator(code: str) -> Indicator:
    try:
        return INDICATORS_BY_CODE[code]
    except KeyError:
        raise KeyError(f"Unknown indicator '{code}'") from None


def category_indicator_codes(category: str, *, job_target_mode: str = "single") -> List[str]:
    """
    Indicator codes scored in `category` for the given job-target mode
    ("single" → QW5, "breakdown" → the seven JT_* rows).
    Only Quality of Work depends on the mode.
    """
    if category != CategoryCode.QUALITY_OF_WORK:
        return [ind.code for ind in indicators_for(category)]
    codes = [ind.code for ind in QUALITY_OF_WORK_BASE]
    if job_target_mode == "breakdown":
        codes.extend(JOB_TARGET_CODES)
    else:
        codes.append(SINGLE_JOB_TARGET_CODE)
    return codes


SCORE_LABELS = {
    1: "Unsatisfactory",
    2: "Needs Improvement",
    3: "Meets Expectations",
    4: "Exceeds Expectations",
    5: "Outstanding",
}


def score_label(score) -> str:
    return SCORE_LABELS.get(score, "Not Rated")
