from django.core.management.base import BaseCommand, CommandError

from apps.exchange.application.tasks import warm_rate_buckets


class Command(BaseCommand):
    help = 'Pre-fetch and cache exchange rate buckets for one or more currencies'

    def add_arguments(self, parser):
        parser.add_argument(
            '--currency',
            dest='currencies',
            action='append',
            required=True,
            help='Currency code to warm (repeatable), e.g. --currency BRL --currency EUR'
        )
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Execute synchronously instead of using Celery task queue'
        )

    def handle(self, **options):
        currencies = [code.strip().upper() for code in options['currencies'] if code.strip()]
        sync_mode = options['sync']

        if not currencies:
            raise CommandError('At least one non-empty --currency is required')

        self.stdout.write(
            self.style.SUCCESS(
                f'Warming rate buckets for {", ".join(currencies)}...'
            )
        )

        if sync_mode:
            self.stdout.write('Running in synchronous mode...')
            result = warm_rate_buckets(currencies)

            if result['success']:
                self.stdout.write(
                    self.style.SUCCESS(
                        f"Warmed {len(result['currencies_warmed'])} currencies"
                    )
                )
                if result.get('errors'):
                    self.stdout.write(
                        self.style.WARNING(
                            f"Errors: {len(result['errors'])}"
                        )
                    )
            else:
                raise CommandError(f"Failed: {result.get('message') or '; '.join(result['errors'])}")
        else:
            self.stdout.write('Dispatching Celery task...')
            task = warm_rate_buckets.delay(currencies)

            self.stdout.write(
                self.style.SUCCESS(
                    f'Task dispatched with ID: {task.id}'
                )
            )
            self.stdout.write(
                'Use "celery -A core inspect active" to check task status'
            )
