from django.core.management.base import BaseCommand

from appraisal_app.models import WeightsConfiguration
from appraisal_app.services.configuration import DEFAULT_WEIGHT_TABLES, validate_weight_table


class Command(BaseCommand):
    help = 'Create the category weight table of every evaluation configuration'

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset", action="store_true",
            help="Overwrite existing rows with the built-in weights.",
        )

    def handle(self, *args, **options):
        for name, weights in DEFAULT_WEIGHT_TABLES.items():
            validate_weight_table(name, weights)
            defaults = WeightsConfiguration.fields_for(weights)
            if options["reset"]:
                _, created = WeightsConfiguration.objects.update_or_create(configuration=name, defaults=defaults)
            else:
                _, created = WeightsConfiguration.objects.get_or_create(configuration=name, defaults=defaults)

            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ {name} weights added'))
            elif options["reset"]:
                self.stdout.write(self.style.SUCCESS(f'✓ {name} weights reset'))
            else:
                self.stdout.write(self.style.WARNING(f'{name} weights already exist'))
