# FILE: /backend/apps/memberships/models.py
"""
Membership models for the Subscription Platform.

Expiry is evaluated lazily: a row stored as ACTIVE whose expires_at has
passed reads as EXPIRED (`effective_status`, `MembershipQuerySet.active()`).
The periodic sweep in tasks.py only persists what reads already report.
"""
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class MembershipQuerySet(models.QuerySet):
    def active(self, now=None):
        """Stored as active and still inside the validity window."""
        now = now or timezone.now()
        return self.filter(status=Membership.Status.ACTIVE, expires_at__gt=now)

    def lapsed(self, now=None):
        """Stored as active but past expiry; these read as expired."""
        now = now or timezone.now()
        return self.filter(status=Membership.Status.ACTIVE, expires_at__lte=now)


class Membership(models.Model):
    """Time-bounded entitlement granted by a paid transaction."""

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        EXPIRED = "expired", _("Expired")
        CANCELLED = "cancelled", _("Cancelled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships"
    )
    package = models.ForeignKey(
        "catalog.SubscriptionPackage",
        on_delete=models.PROTECT,
        related_name="memberships"
    )
    started_at = models.DateTimeField(_("started at"))
    expires_at = models.DateTimeField(_("expires at"), db_index=True)
    status = models.CharField(
        _("status"),
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    objects = MembershipQuerySet.as_manager()

    class Meta:
        verbose_name = _("membership")
        verbose_name_plural = _("memberships")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "status"]),
            models.Index(fields=["status", "expires_at"]),
            models.Index(fields=["user", "-started_at"]),
        ]

    def __str__(self):
        return f"Membership {self.id} - {self.user_id} ({self.status})"

    def effective_status_at(self, now):
        if self.status == self.Status.ACTIVE and self.expires_at <= now:
            return self.Status.EXPIRED
        return self.Status(self.status)

    @property
    def effective_status(self):
        return self.effective_status_at(timezone.now())
