# hackathons/services/pool.py
"""
Pool Manager: participants opting into "looking for a team" for a period.
"""
import logging

from django.db import IntegrityError, transaction

from core.services import ActivityService
from hackathons import activity_verbs as verbs
from hackathons.eligibility import check_eligibility
from hackathons.exceptions import IneligibleError
from hackathons.models import PoolEntry

logger = logging.getLogger("cos.hackathons")


def join_pool(user, hackathon_id: str) -> PoolEntry:
    """Idempotent; raises IneligibleError with the first unmet reason."""
    result = check_eligibility(user, hackathon_id)
    if not result.eligible:
        logger.warning(f"Pool join rejected: user={user.id}, hackathon={hackathon_id}. Reason: {result.reason}")
        raise IneligibleError(result.reason)

    existing = PoolEntry.objects.filter(user=user, hackathon_id=hackathon_id).first()
    if existing:
        return existing

    try:
        with transaction.atomic():
            entry = PoolEntry.objects.create(user=user, hackathon_id=hackathon_id)
            ActivityService.log_activity(
                actor=user,
                verb=verbs.POOL_JOINED,
                target=entry,
                hackathon_id=hackathon_id,
            )
    except IntegrityError:
        # Concurrent double-click; the other request created it
        return PoolEntry.objects.get(user=user, hackathon_id=hackathon_id)

    logger.info(f"Pool joined: user={user.id}, hackathon={hackathon_id}")
    return entry


def leave_pool(user, hackathon_id: str) -> bool:
    """Returns True if an entry was removed. No eligibility check."""
    with transaction.atomic():
        entry = PoolEntry.objects.select_for_update().filter(user=user, hackathon_id=hackathon_id).first()
        if entry is None:
            return False
        ActivityService.log_activity(
            actor=user,
            verb=verbs.POOL_LEFT,
            target=entry,
            hackathon_id=hackathon_id,
        )
        entry.delete()

    logger.info(f"Pool left: user={user.id}, hackathon={hackathon_id}")
    return True


def remove_from_pool(user, hackathon_id: str) -> None:
    """Silent removal on team formation; caller owns the transaction."""
    PoolEntry.objects.filter(user=user, hackathon_id=hackathon_id).delete()


def list_pool(hackathon_id: str):
    """Newest first."""
    return (
        PoolEntry.objects.filter(hackathon_id=hackathon_id)
        .select_related("user")
        .order_by("-joined_at", "-id")
    )


def is_in_pool(user, hackathon_id: str) -> bool:
    return PoolEntry.objects.filter(user=user, hackathon_id=hackathon_id).exists()
