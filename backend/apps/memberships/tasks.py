import logging

from celery import shared_task

from .services import expire_lapsed_memberships

logger = logging.getLogger(__name__)


@shared_task(
    name="memberships.tasks.expire_memberships",
    autoretry_for=(Exception,),
    retry_backoff=True,
    max_retries=3,
    retry_jitter=True
)
def expire_memberships():
    """
    Persist the expiry that reads already compute lazily.
    Runs on the Celery beat schedule; safe to run any number of times.
    """
    updated = expire_lapsed_memberships()
    logger.info(f"Membership expiry sweep finished: {updated} row(s) updated")
    return updated
