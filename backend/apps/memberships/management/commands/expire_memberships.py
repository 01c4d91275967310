from django.core.management.base import BaseCommand

from ...services import expire_lapsed_memberships


class Command(BaseCommand):
    help = 'Mark memberships whose validity window has closed as expired'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only report how many memberships would be expired'
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            from ...models import Membership
            count = Membership.objects.lapsed().count()
            self.stdout.write(f'{count} membership(s) would be expired')
            return

        updated = expire_lapsed_memberships()
        self.stdout.write(self.style.SUCCESS(f'Expired {updated} membership(s)'))
