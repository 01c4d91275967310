"""
Transaction ledger: checkout and gateway-callback state transitions.

A callback moves a transaction out of PENDING at most once. The row is
locked for the duration of the callback and the write itself is
conditional on the status still being PENDING, so replayed or concurrent
callbacks for the same order id turn into no-ops and grant at most one
membership.
"""
import json
import logging
import secrets
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from django.db import DatabaseError, IntegrityError, transaction as db_transaction
from django.utils import timezone

from backend.apps.catalog.models import SubscriptionPackage
from backend.apps.memberships.models import Membership
from backend.apps.memberships.services import grant_membership
from backend.core.exceptions import InvalidPackage, TransactionNotFound

from .gateway import PaymentGateway, get_gateway
from .models import GatewayEventLog, Transaction

logger = logging.getLogger(__name__)

PAID_STATUSES = frozenset({'capture', 'settlement'})
PENDING_STATUSES = frozenset({'pending'})


@dataclass
class CheckoutResult:
    transaction: Transaction
    token: str


@dataclass
class CallbackOutcome:
    transaction: Transaction
    applied: bool
    membership: Optional[Membership] = None


def generate_transaction_id() -> str:
    return f"TXN-{uuid.uuid4().hex[:13].upper()}"


def generate_order_id() -> str:
    return f"ORDER-{int(time.time())}-{secrets.token_hex(4).upper()}"


def map_gateway_status(gateway_status) -> str:
    """capture/settlement -> paid, pending -> pending, anything else -> failed."""
    value = (gateway_status or '').strip().lower()
    if value in PAID_STATUSES:
        return Transaction.Status.PAID
    if value in PENDING_STATUSES:
        return Transaction.Status.PENDING
    return Transaction.Status.FAILED


def get_checkout_package(package_id) -> SubscriptionPackage:
    """Only existing, active packages can be bought."""
    package = SubscriptionPackage.objects.filter(pk=package_id).first()
    if package is None:
        raise InvalidPackage()
    if not package.is_active:
        raise InvalidPackage('This subscription package is no longer available.')
    return package


def initiate_transaction(user, package_id, gateway: Optional[PaymentGateway] = None) -> CheckoutResult:
    """
    Create a PENDING transaction for `user` with the package price
    snapshotted, then ask the gateway for a checkout token.
    """
    gateway = gateway or get_gateway()
    package = get_checkout_package(package_id)

    with db_transaction.atomic():
        txn = Transaction.objects.create(
            user=user,
            package=package,
            transaction_id=generate_transaction_id(),
            order_id=generate_order_id(),
            amount=package.price,
            status=Transaction.Status.PENDING,
        )

    token = gateway.create_checkout_token(package=package, user=user, transaction=txn)
    logger.info(
        f"Transaction {txn.transaction_id} initiated: order={txn.order_id} "
        f"user={user.pk} package={package.pk} amount={txn.amount}"
    )
    return CheckoutResult(transaction=txn, token=token)


def apply_callback(order_id, gateway_status, payload=None, *, payment_type=None,
                   gateway: Optional[PaymentGateway] = None, now=None,
                   correlation_id=None) -> CallbackOutcome:
    """
    Apply a gateway callback to the transaction identified by `order_id`.

    Raises TransactionNotFound for an unknown order id (nothing is written).
    A transaction that already left PENDING is returned unchanged.
    """
    gateway = gateway or get_gateway()
    now = now or timezone.now()
    new_status = map_gateway_status(gateway_status)
    tag = f"[{correlation_id}] " if correlation_id else ''

    with db_transaction.atomic():
        try:
            txn = Transaction.objects.select_for_update().get(order_id=order_id)
        except Transaction.DoesNotExist:
            logger.error(f"{tag}Callback for unknown order id {order_id}")
            raise TransactionNotFound()

        if not txn.is_pending:
            logger.info(f"{tag}Callback replay ignored: transaction {txn.transaction_id} already {txn.status}")
            return CallbackOutcome(transaction=txn, applied=False, membership=txn.membership)

        changes = {
            'status': new_status,
            'gateway_response': payload,
            'updated_at': now,
        }
        method = gateway.payment_method_for(payment_type)
        if method:
            changes['payment_method'] = method
        if new_status == Transaction.Status.PAID:
            changes['paid_at'] = now

        updated = Transaction.objects.filter(pk=txn.pk, status=Transaction.Status.PENDING).update(**changes)
        if not updated:
            txn.refresh_from_db()
            logger.info(f"{tag}Callback lost race: transaction {txn.transaction_id} already {txn.status}")
            return CallbackOutcome(transaction=txn, applied=False, membership=txn.membership)

        txn.refresh_from_db()
        membership = None
        if new_status == Transaction.Status.PAID:
            membership = grant_membership(txn, now=now)

    logger.info(
        f"{tag}Transaction {txn.transaction_id} -> {txn.status} (gateway status '{gateway_status}')"
    )
    return CallbackOutcome(transaction=txn, applied=True, membership=membership)


SENSITIVE_KEYS = ('signature_key', 'masked_card', 'card_token', 'saved_token_id', 'email', 'customer_details')


def mask_sensitive_data(payload):
    """Redact card and customer fields before a payload is stored in the audit log."""
    if not isinstance(payload, dict):
        return payload
    masked = payload.copy()
    for key in SENSITIVE_KEYS:
        if key in masked:
            masked[key] = '***REDACTED***'
    for key, value in masked.items():
        if isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
    return masked


def _clip(field_name, value):
    """Cut a caller-supplied value down to the column length of its audit field."""
    if value is None:
        return value
    max_length = GatewayEventLog._meta.get_field(field_name).max_length
    return str(value)[:max_length]


def log_gateway_event(*, gateway_name, event_type, reference, payload, status_code,
                      error=None, correlation_id=None):
    """
    Create an audit row for a gateway callback; an identical payload with the
    same outcome is stored once. Audit failures are logged and never reach
    the gateway-facing response.
    """
    raw_payload = json.dumps(payload, sort_keys=True, default=str) if payload else ''
    try:
        with db_transaction.atomic():
            GatewayEventLog.objects.create(
                gateway=_clip('gateway', gateway_name),
                event_type=_clip('event_type', event_type),
                reference=_clip('reference', reference),
                payload=mask_sensitive_data(payload) or {},
                raw_payload=raw_payload,
                status_code=status_code,
                error_message=str(error) if error else '',
                correlation_id=_clip('correlation_id', correlation_id) or '',
            )
    except IntegrityError:
        logger.debug(f"Duplicate gateway event for {reference} not logged again")
    except DatabaseError as e:
        logger.exception(f"Could not write gateway event for {reference}: {e}")
