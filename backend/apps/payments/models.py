"""
Payments models for the Subscription Platform.
"""
import hashlib
import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


# ----------------------------------------------------------------------
# AUDIT LOG MODEL
# ----------------------------------------------------------------------

class GatewayEventLog(models.Model):
    """
    Immutable log of all payment gateway callbacks.
    Used for audit, replay detection, and reconciliation.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    gateway = models.CharField(max_length=20, db_index=True)
    event_type = models.CharField(max_length=50, db_index=True, blank=True, null=True)
    reference = models.CharField(max_length=255, db_index=True, blank=True, null=True)
    payload = models.JSONField(default=dict)             # Masked, parsed payload
    raw_payload = models.TextField(blank=True)           # Canonical request data (for forensic replay)
    status_code = models.PositiveSmallIntegerField(default=200)
    error_message = models.TextField(blank=True)
    correlation_id = models.CharField(max_length=64, blank=True, db_index=True)
    payload_hash = models.CharField(max_length=64, unique=True, blank=True, null=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("gateway event log")
        verbose_name_plural = _("gateway event logs")
        indexes = [
            models.Index(fields=["gateway", "-created_at"]),
            models.Index(fields=["reference", "gateway"]),
        ]
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        # Same payload with a different outcome (e.g. a retry after a 500) is a new event
        if not self.payload_hash and self.raw_payload:
            digest_input = f"{self.status_code}:{self.raw_payload}"
            self.payload_hash = hashlib.sha256(digest_input.encode()).hexdigest()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.gateway} {self.event_type} {self.reference or ''}"


# ----------------------------------------------------------------------
# TRANSACTION MODEL
# ----------------------------------------------------------------------

class Transaction(models.Model):
    """
    One payment attempt against a subscription package.
    `amount` is a snapshot of the package price at checkout.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        FAILED = "failed", _("Failed")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentMethod(models.TextChoices):
        CREDIT_CARD = "credit_card", _("Credit card")
        BANK_TRANSFER = "bank_transfer", _("Bank transfer")
        E_WALLET = "e_wallet", _("E-wallet")
        OTHER = "other", _("Other")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="transactions"
    )
    package = models.ForeignKey(
        "catalog.SubscriptionPackage",
        on_delete=models.PROTECT,
        related_name="transactions"
    )
    # Set once, when a successful callback grants the membership
    membership = models.OneToOneField(
        "memberships.Membership",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="source_transaction"
    )

    transaction_id = models.CharField(_("transaction ID"), max_length=64, unique=True)
    order_id = models.CharField(_("order ID"), max_length=64, unique=True)

    amount = models.DecimalField(_("amount"), max_digits=12, decimal_places=2)
    status = models.CharField(
        _("status"),
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    payment_method = models.CharField(
        _("payment method"),
        max_length=20,
        choices=PaymentMethod.choices,
        blank=True,
        null=True
    )
    gateway_response = models.JSONField(_("gateway response"), blank=True, null=True)
    paid_at = models.DateTimeField(_("paid at"), null=True, blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("transaction")
        verbose_name_plural = _("transactions")
        indexes = [
            models.Index(fields=["user", "status"]),
            models.Index(fields=["status", "created_at"]),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"Transaction {self.transaction_id} - {self.amount} ({self.status})"

    @property
    def is_pending(self):
        return self.status == self.Status.PENDING
