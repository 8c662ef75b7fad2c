"""Points balance reconciliation: recompute a student's balance from its sources and persist it."""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from bson.errors import InvalidDocument
from pymongo.errors import PyMongoError

from app.core.audit import log_event
from app.core.config import get_settings
from app.core.exceptions import PointsStorageError
from app.core.logging import get_logger
from app.models.points_transaction import PointsTransaction
from app.models.recharge_card import STATUS_REDEEMED, RechargeCard
from app.models.student_points import StudentPoints

log = get_logger(__name__)

MSG_UPDATE_FAILED = "حدث خطأ أثناء تحديث النقاط"
MSG_INSERT_FAILED = "حدث خطأ أثناء إنشاء سجل النقاط"

_INT_PREFIX = re.compile(r"^\s*([+-]?[0-9]+)")

# bson rejects ints wider than 64 bits before the driver is reached
_WRITE_ERRORS = (PyMongoError, OverflowError, InvalidDocument)


@dataclass
class ReconcileResult:
    total_points: int
    positive_points: int = 0
    negative_points: int = 0
    already_set: bool = False
    source: str = "none"  # override | transactions | recharge_cards | fallback | none | stored


def parse_override(value: str | None) -> int | None:
    """Leading ASCII-integer parse: " 42" -> 42, "12abc" -> 12, "-5" -> -5, "abc" -> None, "٥٠٠" -> None."""
    if not value:
        return None
    m = _INT_PREFIX.match(value)
    if not m:
        return None
    try:
        return int(m.group(1))
    except ValueError:
        # past the interpreter's int digit limit
        return None


def sum_transactions(transactions: Iterable[PointsTransaction]) -> tuple[int, int]:
    """Return (credit total, debit total). Missing magnitudes count as 0; unsigned rows count for neither."""
    positive = 0
    negative = 0
    for tx in transactions:
        if tx.is_positive is True:
            positive += tx.points or 0
        elif tx.is_positive is False:
            negative += tx.points or 0
    return positive, negative


def sum_recharge_cards(cards: Iterable[RechargeCard]) -> int:
    return sum(card.points or 0 for card in cards)


async def get_points_record(user_id: str) -> StudentPoints | None:
    """
    Return the student's balance record or None.
    A failed read is logged and reported as None, so the caller takes the insert path.
    """
    try:
        return await StudentPoints.find_one(StudentPoints.student_id == user_id)
    except PyMongoError as e:
        log.warning("fix_points_balance_read_failed", user_id=user_id, reason=str(e))
        return None


async def fetch_transactions(user_id: str) -> list[PointsTransaction]:
    try:
        return await PointsTransaction.find(PointsTransaction.user_id == user_id).to_list()
    except PyMongoError as e:
        log.error("fix_points_tx_read_failed", user_id=user_id, reason=str(e))
        return []


async def fetch_redeemed_cards(user_id: str) -> list[RechargeCard]:
    try:
        return await RechargeCard.find(
            RechargeCard.redeemed_by == user_id,
            RechargeCard.status == STATUS_REDEEMED,
        ).to_list()
    except PyMongoError as e:
        log.error("fix_points_cards_read_failed", user_id=user_id, reason=str(e))
        return []


async def upsert_points(
    user_id: str,
    points: int,
    record: StudentPoints | None = None,
    *,
    fetched: bool = False,
) -> StudentPoints:
    """
    Set a student's points: update the existing record in place or insert a new one.
    Pass `fetched=True` when `record` is the result of a lookup already made, so None means absent;
    otherwise a missing `record` is looked up here. Raises PointsStorageError (no retry).
    """
    if record is None and not fetched:
        record = await get_points_record(user_id)
    if record is not None:
        record.points = points
        record.updated_at = datetime.utcnow()
        try:
            await record.save()
        except _WRITE_ERRORS as e:
            log.error("fix_points_update_failed", user_id=user_id, reason=str(e))
            raise PointsStorageError(_error_text(e), MSG_UPDATE_FAILED) from e
        log.info("fix_points_updated", user_id=user_id, points=points)
        return record

    record = StudentPoints(student_id=user_id, points=points)
    try:
        await record.insert()
    except _WRITE_ERRORS as e:
        log.error("fix_points_insert_failed", user_id=user_id, reason=str(e))
        raise PointsStorageError(_error_text(e), MSG_INSERT_FAILED) from e
    log.info("fix_points_inserted", user_id=user_id, points=points)
    return record


async def reconcile_points(user_id: str, value: str | None = None, force: bool = False) -> ReconcileResult:
    """
    Recompute and persist a student's points.

    Skipped when the stored balance is non-zero and neither `force` nor `value` is given.
    Otherwise the balance comes from, in order: the `value` override, the transaction
    ledger (credits minus debits), redeemed recharge cards, and finally the configured
    fallback when `force` is set without `value` and every source yielded 0.
    """
    log.info("fix_points_start", user_id=user_id, force=force, value=value)
    record = await get_points_record(user_id)
    current = record.points if record else 0
    log.info("fix_points_current", user_id=user_id, points=current)

    if current != 0 and not force and not value:
        return ReconcileResult(total_points=current, already_set=True, source="stored")

    total = 0
    source = "none"
    transactions: list[PointsTransaction] = []
    override = parse_override(value)
    if override is not None:
        total = override
        source = "override"
        log.info("fix_points_override", user_id=user_id, points=total)
    else:
        transactions = await fetch_transactions(user_id)
        if transactions:
            positive, negative = sum_transactions(transactions)
            total = positive - negative
            source = "transactions"
            log.info("fix_points_from_transactions", user_id=user_id, positive=positive, negative=negative, points=total)
        else:
            log.info("fix_points_no_transactions", user_id=user_id)
            cards = await fetch_redeemed_cards(user_id)
            if cards:
                total = sum_recharge_cards(cards)
                source = "recharge_cards"
                log.info("fix_points_from_cards", user_id=user_id, cards=len(cards), points=total)
            else:
                log.info("fix_points_no_cards", user_id=user_id)

        # `value` given but unparseable still suppresses the fallback
        if force and value is None and total == 0:
            total = get_settings().points_force_fallback
            source = "fallback"
            log.info("fix_points_fallback", user_id=user_id, points=total)

    await upsert_points(user_id, total, record, fetched=True)

    positive_total, negative_total = sum_transactions(transactions)
    await log_event(
        user_id,
        "points_reconciled",
        "student_points",
        user_id,
        {
            "source": source,
            "previous_points": current,
            "points": total,
            "positive_points": positive_total,
            "negative_points": negative_total,
            "force": force,
        },
    )
    return ReconcileResult(
        total_points=total,
        positive_points=positive_total,
        negative_points=negative_total,
        source=source,
    )


def _error_text(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__
