from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from backend.apps.accounts.models import User
from ...models import SubscriptionPackage

PACKAGES = [
    {
        'name': 'Basic Plan',
        'description': 'Perfect for individuals getting started with basic features and limited access.',
        'duration_months': 1,
        'price': Decimal('99000'),
        'is_active': True,
    },
    {
        'name': 'Standard Plan',
        'description': 'Great for small teams with enhanced features and priority support.',
        'duration_months': 3,
        'price': Decimal('249000'),
        'is_active': True,
    },
    {
        'name': 'Premium Plan',
        'description': 'Best value for growing businesses with full access to all features.',
        'duration_months': 6,
        'price': Decimal('449000'),
        'is_active': True,
    },
    {
        'name': 'Enterprise Plan',
        'description': 'Complete solution for large organizations with unlimited access and dedicated support.',
        'duration_months': 12,
        'price': Decimal('799000'),
        'is_active': True,
    },
    {
        'name': 'Trial Plan',
        'description': 'Free trial plan for testing purposes (inactive by default).',
        'duration_months': 1,
        'price': Decimal('0'),
        'is_active': False,
    },
]

USERS = [
    {'email': 'admin@example.com', 'name': 'Admin User', 'phone': '+628123456789', 'role': User.Role.ADMIN},
    {'email': 'john@example.com', 'name': 'John Doe', 'phone': '+628123456790', 'role': User.Role.MEMBER},
    {'email': 'jane@example.com', 'name': 'Jane Smith', 'phone': '+628123456791', 'role': User.Role.MEMBER},
    {'email': 'bob@example.com', 'name': 'Bob Wilson', 'phone': '+628123456792', 'role': User.Role.MEMBER},
]


class Command(BaseCommand):
    help = 'Load the default subscription packages (and optionally demo accounts)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--with-users',
            action='store_true',
            help='Also create the demo admin and member accounts'
        )
        parser.add_argument(
            '--password',
            type=str,
            default='password',
            help='Password for the demo accounts (default: password)'
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        for data in PACKAGES:
            _, was_created = SubscriptionPackage.objects.get_or_create(
                name=data['name'],
                defaults={k: v for k, v in data.items() if k != 'name'},
            )
            created += was_created
        self.stdout.write(self.style.SUCCESS(f'{created} package(s) created, {len(PACKAGES) - created} already present'))

        if not options['with_users']:
            return

        for data in USERS:
            if User.objects.filter(email=data['email']).exists():
                self.stdout.write(f"User {data['email']} already exists, skipping")
                continue
            extra = {'name': data['name'], 'phone': data['phone'], 'role': data['role']}
            if data['role'] == User.Role.ADMIN:
                extra['is_staff'] = True
            User.objects.create_user(data['email'], options['password'], **extra)
            self.stdout.write(self.style.SUCCESS(f"Created {data['role'].lower()} {data['email']}"))
