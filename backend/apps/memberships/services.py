"""
Membership grantor and expiry sweep.
"""
import logging

from django.db import transaction as db_transaction
from django.utils import timezone

from backend.core.dates import add_months

from .models import Membership

logger = logging.getLogger(__name__)


def grant_membership(txn, now=None):
    """
    Create the membership bought by a paid transaction and link it back.

    A transaction that already carries a membership gets that membership
    back unchanged; the one-to-one link on the transaction backs this up
    at the database level.
    """
    if txn.membership_id is not None:
        logger.info(f"Membership already granted for transaction {txn.transaction_id}")
        return txn.membership

    now = now or timezone.now()
    package = txn.package
    with db_transaction.atomic():
        membership = Membership.objects.create(
            user_id=txn.user_id,
            package=package,
            started_at=now,
            expires_at=add_months(now, package.duration_months),
            status=Membership.Status.ACTIVE,
        )
        txn.membership = membership
        txn.save(update_fields=['membership', 'updated_at'])

    logger.info(
        f"Membership {membership.pk} granted to user {txn.user_id} "
        f"for package {package.pk} until {membership.expires_at.isoformat()}"
    )
    return membership


def expire_lapsed_memberships(now=None) -> int:
    """Persist EXPIRED on memberships whose window has closed. Returns rows updated."""
    now = now or timezone.now()
    updated = Membership.objects.lapsed(now).update(status=Membership.Status.EXPIRED, updated_at=now)
    if updated:
        logger.info(f"Expired {updated} lapsed membership(s)")
    return updated
