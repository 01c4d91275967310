# FILE: /backend/apps/catalog/models.py
"""
Package catalog models for the Subscription Platform.
"""
import uuid
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

MIN_DURATION_MONTHS = 1
MAX_DURATION_MONTHS = 120


class SubscriptionPackageQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class SubscriptionPackage(models.Model):
    """
    A sellable subscription tier.
    Transactions snapshot the price at checkout, so later edits to price
    or duration never touch existing transactions or memberships.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(_("name"), max_length=255)
    description = models.TextField(_("description"))
    duration_months = models.PositiveSmallIntegerField(
        _("duration (months)"),
        validators=[
            MinValueValidator(MIN_DURATION_MONTHS),
            MaxValueValidator(MAX_DURATION_MONTHS),
        ],
    )
    price = models.DecimalField(
        _("price"),
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    is_active = models.BooleanField(_("active"), default=True, db_index=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    objects = SubscriptionPackageQuerySet.as_manager()

    class Meta:
        verbose_name = _("subscription package")
        verbose_name_plural = _("subscription packages")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="package_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(duration_months__gte=MIN_DURATION_MONTHS, duration_months__lte=MAX_DURATION_MONTHS),
                name="package_duration_in_range",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.duration_months} mo, {self.price})"

    @property
    def is_referenced(self):
        """True once any transaction or membership points at this package."""
        return self.transactions.exists() or self.memberships.exists()
