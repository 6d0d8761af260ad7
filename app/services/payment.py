import logging
from datetime import datetime

from app.core.clock import Clock, utc_now
from app.core.exceptions import NotFoundError
from app.models.month_log import MonthLog, PaymentStatus
from app.repositories import Repositories

logger = logging.getLogger(__name__)


def derive_payment_status(month_log: MonthLog, paid: bool, now: datetime) -> PaymentStatus:
    """Status an explicit payment mark lands on.

    Paid when marked paid; otherwise Due once the month is complete and the
    payment date has arrived, else Not due.
    """
    if paid:
        return PaymentStatus.PAID
    if month_log.is_complete and now.date() >= month_log.computed_payment_date:
        return PaymentStatus.DUE
    return PaymentStatus.NOT_DUE


def mark_payment(
    repos: Repositories,
    participant_id: str,
    year: int,
    month: int,
    paid: bool,
    marked_by: str,
    clock: Clock = utc_now
) -> MonthLog:
    """Admin toggle of a month's payment status."""
    try:
        month_log = repos.month_logs.get_for_update(participant_id, year, month)
        if month_log is None:
            raise NotFoundError("Month log not found")

        now = clock()
        month_log.payment_status = derive_payment_status(month_log, paid, now)
        month_log.payment_marked_at = now
        month_log.payment_marked_by = marked_by
        repos.commit()
    except Exception:
        repos.rollback()
        raise

    logger.info(
        "Payment for %s %04d-%02d marked %s by %s",
        participant_id, year, month, month_log.payment_status.value, marked_by
    )
    return month_log
