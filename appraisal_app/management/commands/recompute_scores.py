from django.core.management.base import BaseCommand

from appraisal_app.models import Evaluation, EvalStatus
from appraisal_app.services.evaluation_math import recompute


class Command(BaseCommand):
    help = "Recompute rating, percentage and pass/fail of evaluations from their stored scores."

    def add_arguments(self, parser):
        parser.add_argument(
            "--include-submitted", action="store_true",
            help="Also recompute submitted evaluations (their weights stay frozen).",
        )

    def handle(self, *args, **options):
        qs = Evaluation.objects.all()
        if not options["include_submitted"]:
            qs = qs.exclude(status=EvalStatus.SUBMITTED)

        total = 0
        for evaluation in qs.iterator():
            recompute(evaluation)
            total += 1
        self.stdout.write(self.style.SUCCESS(f"Recomputed {total} evaluations."))
