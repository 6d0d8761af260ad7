"""
CSV exports of month logs.
"""
import csv
import io
from datetime import datetime

from app.models.activity import LearningSource, MealSource, MealType
from app.services import ledger, reports
from app.services.payment import mark_payment


def _rows(content):
    return list(csv.reader(io.StringIO(content)))


def _complete_month(repos, participant, clock, year, month):
    for day in range(1, 5):
        ledger.add_meal_log(
            repos, participant.id, datetime(year, month, day, 19, 0), year, month,
            MealType.OTHER, MealSource.ADMIN_ENTRY, "user-admin", clock=clock,
        )
    for day in (5, 6):
        ledger.add_learning_session(
            repos, participant.id, datetime(year, month, day, 20, 0), 360, year, month,
            LearningSource.ADMIN_ENTRY, "user-admin", clock=clock,
        )


class TestMonthlyCompliance:
    def test_one_row_per_month_log(self, repos, participant, make_participant, clock):
        other = make_participant("user-david", "david@example.com", name="David")
        _complete_month(repos, participant, clock, 2024, 11)
        ledger.ensure_month_log(repos, other.id, 2024, 11)
        ledger.ensure_month_log(repos, other.id, 2024, 10)

        rows = _rows(reports.monthly_compliance_csv(repos, 2024, 11))

        assert rows[0] == reports.COMPLIANCE_HEADERS
        assert len(rows) == 3
        by_email = {row[1]: row for row in rows[1:]}
        assert by_email["sarah@example.com"] == [
            "Sarah", "sarah@example.com", "4", "4", "720", "720", "Yes", "2024-11-15", "Not due", "2025-01-01",
        ]
        assert by_email["david@example.com"][6] == "No"
        assert by_email["david@example.com"][7] == ""

    def test_every_cell_quoted(self, repos, participant):
        ledger.ensure_month_log(repos, participant.id, 2024, 11)
        content = reports.monthly_compliance_csv(repos, 2024, 11)
        assert content.splitlines()[0].startswith('"Participant Name","Email"')


class TestPaymentReport:
    def test_only_due_and_paid_months(self, repos, participant, clock):
        _complete_month(repos, participant, clock, 2024, 9)   # due since 2024-11-01
        _complete_month(repos, participant, clock, 2024, 8)   # due since 2024-10-01
        _complete_month(repos, participant, clock, 2024, 11)  # not due yet
        mark_payment(repos, participant.id, 2024, 8, True, "user-admin", clock)

        rows = _rows(reports.payment_report_csv(repos))

        assert rows[0] == reports.PAYMENT_HEADERS
        body = {(row[2], row[3]): row for row in rows[1:]}
        assert set(body) == {("September", "2024"), ("August", "2024")}
        assert body[("September", "2024")][4:] == ["Due", "2024-11-01", "", ""]
        assert body[("August", "2024")][4:] == ["Paid", "2024-10-01", "user-admin", "2024-11-15"]
