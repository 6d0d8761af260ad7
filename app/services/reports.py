"""CSV exports of the monthly rollups for the admin reports screen."""
import csv
import io
from typing import Dict, Iterable, List

from app.models.month_log import MonthLog
from app.models.participant import Participant
from app.repositories import Repositories
from app.utils.dates import get_month_name

COMPLIANCE_HEADERS = [
    "Participant Name",
    "Email",
    "Meals Earned",
    "Meals Required",
    "Learning Minutes",
    "Learning Required",
    "Complete",
    "Completed Date",
    "Payment Status",
    "Payment Date",
]

PAYMENT_HEADERS = [
    "Participant Name",
    "Email",
    "Month",
    "Year",
    "Payment Status",
    "Payment Due Date",
    "Marked By",
    "Marked Date",
]


def _participants_by_id(repos: Repositories) -> Dict[str, Participant]:
    return {p.id: p for p in repos.participants.list_all()}


def _write_csv(headers: List[str], rows: Iterable[List[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def _compliance_row(log: MonthLog, participant: Participant) -> List[str]:
    return [
        participant.preferred_name if participant else "Unknown",
        participant.email if participant else "Unknown",
        str(log.meals_earned),
        str(log.meals_required),
        str(log.minutes_earned),
        str(log.minutes_required),
        "Yes" if log.is_complete else "No",
        log.completed_at.date().isoformat() if log.completed_at else "",
        log.payment_status.value,
        log.computed_payment_date.isoformat(),
    ]


def monthly_compliance_csv(repos: Repositories, year: int, month: int) -> str:
    """One row per MonthLog of the given month."""
    participants = _participants_by_id(repos)
    rows = [
        _compliance_row(log, participants.get(log.participant_id))
        for log in repos.month_logs.list_for_month(year, month)
    ]
    return _write_csv(COMPLIANCE_HEADERS, rows)


def payment_report_csv(repos: Repositories) -> str:
    """Every MonthLog whose payment is Due or Paid."""
    participants = _participants_by_id(repos)
    rows = []
    for log in repos.month_logs.list_payment_rows():
        participant = participants.get(log.participant_id)
        rows.append([
            participant.preferred_name if participant else "Unknown",
            participant.email if participant else "Unknown",
            get_month_name(log.month),
            str(log.year),
            log.payment_status.value,
            log.computed_payment_date.isoformat(),
            log.payment_marked_by or "",
            log.payment_marked_at.date().isoformat() if log.payment_marked_at else "",
        ])
    return _write_csv(PAYMENT_HEADERS, rows)
