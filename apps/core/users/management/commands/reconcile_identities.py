from django.core.management.base import BaseCommand

from apps.core.users.provisioning import reconcile_orphaned_identities


class Command(BaseCommand):
    help = 'Deletes authentication identities left behind by failed or abandoned account provisioning.'

    def handle(self, *args, **options):
        summary = reconcile_orphaned_identities()
        self.stdout.write(
            self.style.SUCCESS(
                f"Reconciled provisioning attempts: {summary['completed']} completed, "
                f"{summary['compensated']} compensated, {summary['orphaned']} still orphaned."
            )
        )
