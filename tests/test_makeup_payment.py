"""
Make-up eligibility and the payment mark rule.
"""
from datetime import datetime

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.models.activity import LearningSource, MealSource, MealType
from app.models.month_log import PaymentStatus
from app.services import ledger
from app.services.makeup import can_apply_make_up, resolve_applied_month
from app.services.payment import derive_payment_status, mark_payment


def _complete_month(repos, participant, clock, year, month):
    for day in range(1, 5):
        ledger.add_meal_log(
            repos, participant.id, datetime(year, month, day, 19, 0), year, month,
            MealType.UWS, MealSource.SELF_REPORT, participant.id, clock=clock,
        )
    for day in (5, 6):
        ledger.add_learning_session(
            repos, participant.id, datetime(year, month, day, 20, 0), 360, year, month,
            LearningSource.SELF, participant.id, clock=clock,
        )


# ── Make-up ──────────────────────────────────────────────────────────────

class TestCanApplyMakeUp:
    def test_previous_incomplete_month_qualifies(self, repos, participant):
        ledger.ensure_month_log(repos, participant.id, 2024, 10)
        assert can_apply_make_up(repos, participant.id, 2024, 11, 2024, 10) is True

    def test_complete_month_does_not_qualify(self, repos, participant, clock):
        _complete_month(repos, participant, clock, 2024, 10)
        assert can_apply_make_up(repos, participant.id, 2024, 11, 2024, 10) is False

    def test_two_months_back_does_not_qualify(self, repos, participant):
        ledger.ensure_month_log(repos, participant.id, 2024, 9)
        assert can_apply_make_up(repos, participant.id, 2024, 11, 2024, 9) is False

    def test_missing_month_log_does_not_qualify(self, repos, participant):
        assert can_apply_make_up(repos, participant.id, 2024, 11, 2024, 10) is False

    def test_january_looks_back_to_december(self, repos, participant):
        ledger.ensure_month_log(repos, participant.id, 2024, 12)
        assert can_apply_make_up(repos, participant.id, 2025, 1, 2024, 12) is True


class TestResolveAppliedMonth:
    def test_plain_activity_counts_toward_current_month(self, repos, participant, clock):
        assert resolve_applied_month(repos, participant.id, datetime(2024, 11, 3), clock=clock) == (2024, 11)

    def test_backdated_activity_refused(self, repos, participant, clock):
        with pytest.raises(ValidationError, match="current month"):
            resolve_applied_month(repos, participant.id, datetime(2024, 8, 3, 19, 0), clock=clock)

    def test_future_activity_refused(self, repos, participant, clock):
        with pytest.raises(ValidationError, match="future"):
            resolve_applied_month(repos, participant.id, datetime(2025, 3, 3, 19, 0), clock=clock)
        with pytest.raises(ValidationError, match="future"):
            resolve_applied_month(repos, participant.id, datetime(2024, 11, 20, 9, 0), clock=clock)

    def test_make_up_credits_previous_month(self, repos, participant, clock):
        ledger.ensure_month_log(repos, participant.id, 2024, 10)
        applied = resolve_applied_month(
            repos, participant.id, datetime(2024, 11, 14, 19, 0), apply_as_make_up=True, clock=clock
        )
        assert applied == (2024, 10)

    def test_make_up_rejected_when_previous_complete(self, repos, participant, clock):
        _complete_month(repos, participant, clock, 2024, 10)
        with pytest.raises(ValidationError, match="October 2024"):
            resolve_applied_month(
                repos, participant.id, datetime(2024, 11, 14), apply_as_make_up=True, clock=clock
            )

    def test_make_up_activity_must_be_this_month(self, repos, participant, clock):
        ledger.ensure_month_log(repos, participant.id, 2024, 9)
        with pytest.raises(ValidationError):
            resolve_applied_month(
                repos, participant.id, datetime(2024, 10, 20), apply_as_make_up=True, clock=clock
            )


# ── Payment ──────────────────────────────────────────────────────────────

class TestMarkPayment:
    def test_mark_paid_then_unpaid_rederives_due(self, repos, participant, clock):
        _complete_month(repos, participant, clock, 2024, 9)  # payment date 2024-11-01

        paid = mark_payment(repos, participant.id, 2024, 9, True, "user-admin", clock)
        assert paid.payment_status == PaymentStatus.PAID
        assert paid.payment_marked_by == "user-admin"
        assert paid.payment_marked_at == clock.now

        unpaid = mark_payment(repos, participant.id, 2024, 9, False, "user-admin", clock)
        assert unpaid.payment_status == PaymentStatus.DUE

    def test_unpaid_before_due_date_is_not_due(self, repos, participant, clock):
        _complete_month(repos, participant, clock, 2024, 11)
        month_log = mark_payment(repos, participant.id, 2024, 11, False, "user-admin", clock)
        assert month_log.payment_status == PaymentStatus.NOT_DUE

    def test_unpaid_incomplete_month_is_not_due(self, repos, participant, clock):
        ledger.ensure_month_log(repos, participant.id, 2024, 8)
        month_log = mark_payment(repos, participant.id, 2024, 8, False, "user-admin", clock)
        assert month_log.payment_status == PaymentStatus.NOT_DUE

    def test_missing_month_log(self, repos, participant, clock):
        with pytest.raises(NotFoundError, match="Month log not found"):
            mark_payment(repos, participant.id, 2023, 1, True, "user-admin", clock)

    def test_derive_payment_status_boundary(self, repos, participant, clock):
        _complete_month(repos, participant, clock, 2024, 11)
        month_log = repos.month_logs.get(participant.id, 2024, 11)

        assert derive_payment_status(month_log, False, datetime(2024, 12, 31, 23, 59)) == PaymentStatus.NOT_DUE
        assert derive_payment_status(month_log, False, datetime(2025, 1, 1)) == PaymentStatus.DUE
        assert derive_payment_status(month_log, True, datetime(2024, 12, 1)) == PaymentStatus.PAID
