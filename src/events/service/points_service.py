"""Points ledger: balances, FIFO redemption, grants and expiry.

Earned entries keep their unconsumed part in ``remaining``. Redemption eats
the oldest non-expired earned entries first; expiry writes off whatever is
left of an entry once its ``expires_at`` passes.
"""

from datetime import datetime, timedelta
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import F, QuerySet, Sum
from django.utils import timezone

from accounts.models import MarketplaceUser
from events.exceptions import InsufficientPoints
from events.models import PointsLedgerEntry, Transaction

logger = structlog.get_logger(__name__)


def spendable_balance(user: MarketplaceUser) -> int:
    """Unconsumed, unexpired earned points."""
    total = PointsLedgerEntry.objects.filter(user=user).spendable().aggregate(total=Sum("remaining"))["total"]
    return int(total or 0)


def held_points(user: MarketplaceUser, exclude_transaction_id: UUID | None = None) -> int:
    """Points reserved by the user's transactions that are not settled yet."""
    qs = Transaction.objects.for_buyer(user).active()
    if exclude_transaction_id is not None:
        qs = qs.exclude(pk=exclude_transaction_id)
    return int(qs.aggregate(total=Sum("points_used"))["total"] or 0)


def available_points(user: MarketplaceUser) -> int:
    """What a new transaction may redeem: balance minus holds, never negative."""
    return max(0, spendable_balance(user) - held_points(user))


def history(user: MarketplaceUser) -> QuerySet[PointsLedgerEntry]:
    return PointsLedgerEntry.objects.filter(user=user).select_related("transaction").order_by("-created_at")


@transaction.atomic
def consume_points(user: MarketplaceUser, amount: int, txn: Transaction) -> PointsLedgerEntry:
    """Redeem ``amount`` points for a confirmed transaction, oldest entries first.

    The earned rows are locked for the duration so a concurrent redemption or
    expiry sweep cannot spend the same remainder twice.

    Raises:
        InsufficientPoints: if the balance no longer covers ``amount``.
    """
    entries = list(PointsLedgerEntry.objects.select_for_update().filter(user=user).spendable())
    balance = sum(entry.remaining for entry in entries)
    if balance < amount:
        raise InsufficientPoints(f"Only {balance} points are left, {amount} are needed.")

    outstanding = amount
    for entry in entries:
        if outstanding == 0:
            break
        take = min(entry.remaining, outstanding)
        PointsLedgerEntry.objects.filter(pk=entry.pk).update(remaining=F("remaining") - take)
        outstanding -= take

    used = PointsLedgerEntry.objects.create(
        user=user,
        amount=-amount,
        reason=PointsLedgerEntry.Reason.USED,
        transaction=txn,
        description=f"Redeemed for {txn.event.name}",
    )
    logger.info("points_consumed", user_id=str(user.id), transaction_id=str(txn.id), amount=amount)
    return used


def grant_points(
    user: MarketplaceUser,
    amount: int,
    description: str = "",
    expires_at: datetime | None = None,
) -> PointsLedgerEntry:
    """Credit ``amount`` points, valid for POINTS_VALIDITY_DAYS unless told otherwise."""
    if amount <= 0:
        raise ValueError("Granted points must be positive.")
    if expires_at is None:
        expires_at = timezone.now() + timedelta(days=settings.POINTS_VALIDITY_DAYS)
    entry = PointsLedgerEntry.objects.create(
        user=user,
        amount=amount,
        remaining=amount,
        reason=PointsLedgerEntry.Reason.EARNED,
        expires_at=expires_at,
        description=description,
    )
    logger.info("points_granted", user_id=str(user.id), amount=amount, expires_at=expires_at.isoformat())
    return entry


@transaction.atomic
def expire_points() -> int:
    """Write off the remainder of every earned entry past its expiry.

    Safe to re-run: an entry is written off once, after which its
    ``remaining`` is zero and it no longer matches.

    Returns:
        Number of entries expired.
    """
    now = timezone.now()
    stale = PointsLedgerEntry.objects.select_for_update().filter(
        reason=PointsLedgerEntry.Reason.EARNED, remaining__gt=0, expires_at__lte=now
    )
    count = 0
    for entry in stale:
        PointsLedgerEntry.objects.create(
            user_id=entry.user_id,
            amount=-entry.remaining,
            reason=PointsLedgerEntry.Reason.EXPIRED,
            description=entry.description or "Points expired",
        )
        PointsLedgerEntry.objects.filter(pk=entry.pk).update(remaining=0, updated_at=now)
        count += 1
    if count:
        logger.info("points_expired", entries=count)
    return count
