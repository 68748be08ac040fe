from django.core.management.base import BaseCommand

from apps.core.notifications.dispatch import process_pending_tasks


class Command(BaseCommand):
    help = 'Runs queued side-effect tasks that are due (notifications, emails, chat rooms).'

    def add_arguments(self, parser):
        parser.add_argument('--limit', type=int, default=100)

    def handle(self, *args, **options):
        summary = process_pending_tasks(limit=options['limit'])
        self.stdout.write(
            self.style.SUCCESS(
                f"Dispatch queue: {summary['done']} done, {summary['retrying']} retrying, "
                f"{summary['failed']} failed, "
                f"{summary['skipped']} skipped."
            )
        )
