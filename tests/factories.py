# FILE: tests/factories.py
import factory
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from django.contrib.auth import get_user_model
from backend.apps.catalog.models import SubscriptionPackage
from backend.apps.memberships.models import Membership
from backend.apps.payments.models import Transaction
from backend.core.dates import add_months

User = get_user_model()


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    email = factory.Sequence(lambda n: f"member{n}@example.com")
    name = factory.Faker('name')
    is_active = True
    role = User.Role.MEMBER
    password = factory.PostGenerationMethodCall('set_password', 'password')


class AdminFactory(UserFactory):
    email = factory.Sequence(lambda n: f"admin{n}@example.com")
    role = User.Role.ADMIN
    is_staff = True


class SubscriptionPackageFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = SubscriptionPackage

    name = factory.Sequence(lambda n: f"Package {n}")
    description = factory.Faker('sentence')
    duration_months = 1
    price = Decimal('99000.00')
    is_active = True


class TransactionFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Transaction

    user = factory.SubFactory(UserFactory)
    package = factory.SubFactory(SubscriptionPackageFactory)
    transaction_id = factory.Sequence(lambda n: f"TXN-{n:013X}")
    order_id = factory.Sequence(lambda n: f"ORDER-1700000000-{n:08X}")
    amount = factory.LazyAttribute(lambda o: o.package.price)
    status = Transaction.Status.PENDING


class MembershipFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Membership

    user = factory.SubFactory(UserFactory)
    package = factory.SubFactory(SubscriptionPackageFactory)
    started_at = factory.LazyFunction(lambda: timezone.now() - timedelta(days=1))
    expires_at = factory.LazyAttribute(lambda o: add_months(o.started_at, o.package.duration_months))
    status = Membership.Status.ACTIVE
