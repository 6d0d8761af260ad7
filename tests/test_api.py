"""
HTTP API tests through the FastAPI TestClient.
"""
from datetime import date, datetime

import pytest

from app.models.activity import MealSource, MealType
from app.models.month_log import MonthLog
from app.models.participant import ParticipantStatus
from app.services import attendance as attendance_service
from app.services import ledger
from app.services import rsvp as rsvp_service


@pytest.fixture()
def participant_headers(participant, auth_headers):
    return auth_headers(participant.id, participant.email)


@pytest.fixture()
def admin_headers(admin, auth_headers):
    return auth_headers(admin.id, admin.email)


# ── Auth ─────────────────────────────────────────────────────────────────

class TestAuth:
    def test_sync_creates_profile_from_token(self, client, auth_headers):
        res = client.post(
            "/api/auth/sync",
            json={"preferred_name": "Leah"},
            headers=auth_headers("user-leah", "leah@example.com"),
        )
        assert res.status_code == 200
        body = res.json()
        assert body["id"] == "user-leah"
        assert body["email"] == "leah@example.com"
        assert body["role"] == "participant"

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_me_without_profile(self, client, auth_headers):
        res = client.get("/api/auth/me", headers=auth_headers("unknown-sub"))
        assert res.status_code == 401

    def test_bad_token(self, client):
        res = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert res.status_code == 401

    def test_disabled_participant_blocked(self, client, db, participant, participant_headers):
        participant.status = ParticipantStatus.DISABLED
        db.commit()
        res = client.get("/api/participant/dashboard", headers=participant_headers)
        assert res.status_code == 403

    def test_admin_routes_need_admin(self, client, participant_headers):
        assert client.get("/api/admin/participants", headers=participant_headers).status_code == 403


# ── Participant ──────────────────────────────────────────────────────────

class TestParticipantApi:
    def test_dashboard_creates_current_month(self, client, participant_headers):
        res = client.get("/api/participant/dashboard", headers=participant_headers)
        assert res.status_code == 200
        body = res.json()
        assert (body["current"]["year"], body["current"]["month"]) == (2024, 11)
        assert body["current"]["payment_status"] == "Not due"
        assert body["previous"] is None
        assert body["can_make_up"] is False

    def test_log_meal_and_learning(self, client, participant_headers):
        res = client.post(
            "/api/participant/meals",
            json={"occurred_at": "2024-11-09T19:00:00", "type": "UWS"},
            headers=participant_headers,
        )
        assert res.status_code == 201
        assert res.json()["source"] == "Self report"

        res = client.post(
            "/api/participant/learning-sessions",
            json={"started_at": "2024-11-10T20:00:00", "minutes": 90, "source": "Hevruta"},
            headers=participant_headers,
        )
        assert res.status_code == 201

        dashboard = client.get("/api/participant/dashboard", headers=participant_headers).json()
        assert dashboard["current"]["meals_earned"] == 1
        assert dashboard["current"]["minutes_earned"] == 90

    def test_shabbaton_meal_type_rejected(self, client, participant_headers):
        res = client.post(
            "/api/participant/meals",
            json={"occurred_at": "2024-11-09T19:00:00", "type": "Shabbaton"},
            headers=participant_headers,
        )
        assert res.status_code == 400

    def test_learning_minutes_out_of_range(self, client, participant_headers):
        res = client.post(
            "/api/participant/learning-sessions",
            json={"started_at": "2024-11-10T20:00:00", "minutes": 400},
            headers=participant_headers,
        )
        assert res.status_code == 422

    def test_make_up_needs_previous_month_log(self, client, participant_headers):
        client.get("/api/participant/dashboard", headers=participant_headers)
        res = client.post(
            "/api/participant/meals",
            json={"occurred_at": "2024-11-14T19:00:00", "type": "Other", "apply_as_make_up": True},
            headers=participant_headers,
        )
        # October has no month log yet, so make-up is not available.
        assert res.status_code == 400

    def test_make_up_with_open_previous_month(self, client, repos, participant, admin, participant_headers, clock):
        ledger.add_meal_log(
            repos, participant.id, datetime(2024, 10, 20, 19, 0), 2024, 10,
            MealType.UWS, MealSource.ADMIN_ENTRY, admin.id, clock=clock,
        )
        res = client.post(
            "/api/participant/meals",
            json={"occurred_at": "2024-11-14T19:00:00", "type": "Other", "apply_as_make_up": True},
            headers=participant_headers,
        )
        assert res.status_code == 201
        assert (res.json()["applied_year"], res.json()["applied_month"]) == (2024, 10)

        logs = client.get("/api/participant/month-logs", headers=participant_headers).json()
        october = next(log for log in logs if log["month"] == 10)
        assert october["meals_earned"] == 2

    def test_backdated_self_report_refused(self, client, participant_headers):
        res = client.post(
            "/api/participant/meals",
            json={"occurred_at": "2024-08-03T19:00:00", "type": "UWS"},
            headers=participant_headers,
        )
        assert res.status_code == 400
        assert "current month" in res.json()["detail"]

    def test_future_self_report_refused(self, client, participant_headers):
        res = client.post(
            "/api/participant/learning-sessions",
            json={"started_at": "2025-03-03T19:00:00", "minutes": 300},
            headers=participant_headers,
        )
        assert res.status_code == 400

        logs = client.get("/api/participant/month-logs", headers=participant_headers).json()
        assert all((log["year"], log["month"]) != (2025, 3) for log in logs)

    def test_attendance_request_and_duplicate(self, client, repos, participant_headers):
        shabbaton = attendance_service.create_shabbaton(repos, "Fall Shabbaton", datetime(2024, 11, 23, 12, 0))

        res = client.post("/api/participant/attendances", json={"shabbaton_id": shabbaton.id}, headers=participant_headers)
        assert res.status_code == 201
        assert res.json()["status"] == "Pending"

        res = client.post("/api/participant/attendances", json={"shabbaton_id": shabbaton.id}, headers=participant_headers)
        assert res.status_code == 400
        assert "already requested" in res.json()["detail"]

    def test_attendance_unknown_shabbaton(self, client, participant_headers):
        res = client.post("/api/participant/attendances", json={"shabbaton_id": 999}, headers=participant_headers)
        assert res.status_code == 404

    def test_rsvp_closed_on_friday(self, client, participant_headers):
        res = client.put("/api/participant/rsvp", json={"attending": True}, headers=participant_headers)
        assert res.status_code == 400

    def test_rsvp_week_follows_program_timezone(self, client, repos, participant, clock, participant_headers):
        rsvp_service.set_rsvp(repos, participant.id, date(2024, 11, 16), True, clock=clock)
        # Saturday 21:00 in New York, already Sunday in UTC
        clock.set(datetime(2024, 11, 17, 2, 0))

        res = client.get("/api/participant/rsvp", headers=participant_headers)
        assert res.status_code == 200
        assert res.json()["week_date"] == "2024-11-16"

    def test_rsvp_open_on_monday(self, client, clock, participant_headers):
        clock.set(datetime(2024, 11, 18, 15, 0))
        res = client.put("/api/participant/rsvp", json={"attending": True}, headers=participant_headers)
        assert res.status_code == 200
        assert res.json()["week_date"] == "2024-11-23"

        res = client.get("/api/participant/rsvp", headers=participant_headers)
        assert res.json()["attending"] is True


# ── Admin ────────────────────────────────────────────────────────────────

class TestAdminApi:
    def test_confirm_and_revoke_attendance(self, client, repos, participant, participant_headers, admin_headers):
        shabbaton = attendance_service.create_shabbaton(repos, "Fall Shabbaton", datetime(2024, 11, 23, 12, 0))
        attendance_id = client.post(
            "/api/participant/attendances", json={"shabbaton_id": shabbaton.id}, headers=participant_headers
        ).json()["id"]

        res = client.post(f"/api/admin/attendances/{attendance_id}/confirm", headers=admin_headers)
        assert res.status_code == 200
        assert res.json()["status"] == "Confirmed"

        logs = client.get("/api/admin/month-logs?year=2024&month=11", headers=admin_headers).json()
        assert (logs[0]["meals_earned"], logs[0]["minutes_earned"]) == (3, 180)

        res = client.post(f"/api/admin/attendances/{attendance_id}/revoke", headers=admin_headers)
        assert res.json()["status"] == "Denied"
        logs = client.get("/api/admin/month-logs?year=2024&month=11", headers=admin_headers).json()
        assert (logs[0]["meals_earned"], logs[0]["minutes_earned"]) == (0, 0)

    def test_manual_entries_and_soft_delete(self, client, participant, admin_headers):
        res = client.post(
            f"/api/admin/participants/{participant.id}/meals",
            json={"occurred_at": "2024-11-02T19:00:00", "type": "UWS"},
            headers=admin_headers,
        )
        assert res.status_code == 201
        assert res.json()["source"] == "Admin entry"
        meal_id = res.json()["id"]

        res = client.post(f"/api/admin/meals/{meal_id}/delete", json={"reason": "Entered twice"}, headers=admin_headers)
        assert res.status_code == 200
        assert res.json()["deleted"] is True

        res = client.post(f"/api/admin/meals/{meal_id}/delete", json={"reason": ""}, headers=admin_headers)
        assert res.status_code == 422

        activity = client.get(f"/api/admin/participants/{participant.id}/activity", headers=admin_headers).json()
        assert activity["meals"] == []

    def test_mark_payment(self, client, repos, participant, admin_headers):
        res = client.put(
            f"/api/admin/participants/{participant.id}/month-logs/2024/9/payment",
            json={"paid": True},
            headers=admin_headers,
        )
        assert res.status_code == 404

        repos.month_logs.add(MonthLog(
            participant_id=participant.id, year=2024, month=9,
            computed_payment_date=datetime(2024, 11, 1).date(),
        ))
        repos.commit()

        res = client.put(
            f"/api/admin/participants/{participant.id}/month-logs/2024/9/payment",
            json={"paid": True},
            headers=admin_headers,
        )
        assert res.status_code == 200
        assert res.json()["payment_status"] == "Paid"

    def test_recompute_unknown_participant(self, client, admin_headers):
        res = client.post("/api/admin/participants/nobody/month-logs/2024/11/recompute", headers=admin_headers)
        assert res.status_code == 404

    def test_status_update(self, client, participant, admin_headers):
        res = client.put(
            f"/api/admin/participants/{participant.id}/status",
            json={"status": "disabled"},
            headers=admin_headers,
        )
        assert res.status_code == 200
        ids = [p["id"] for p in client.get("/api/admin/participants", headers=admin_headers).json()]
        assert participant.id not in ids

    def test_rsvp_admin_add_list_delete(self, client, participant, admin_headers):
        res = client.post(
            "/api/admin/rsvps",
            json={"participant_id": participant.id, "week_date": "2024-11-16", "attending": True},
            headers=admin_headers,
        )
        assert res.status_code == 201
        rsvp_id = res.json()["id"]
        assert res.json()["preferred_name"] == "Sarah"

        listed = client.get("/api/admin/rsvps?week_date=2024-11-16", headers=admin_headers).json()
        assert [r["id"] for r in listed] == [rsvp_id]

        assert client.delete(f"/api/admin/rsvps/{rsvp_id}", headers=admin_headers).status_code == 204
        assert client.get("/api/admin/rsvps", headers=admin_headers).json() == []

    def test_compliance_csv(self, client, participant, admin_headers):
        client.post(
            f"/api/admin/participants/{participant.id}/learning-sessions",
            json={"started_at": "2024-11-02T20:00:00", "minutes": 120},
            headers=admin_headers,
        )
        res = client.get("/api/admin/reports/monthly-compliance?year=2024&month=11", headers=admin_headers)
        assert res.status_code == 200
        assert res.headers["content-type"].startswith("text/csv")
        assert "monthly-compliance-2024-11.csv" in res.headers["content-disposition"]
        lines = res.text.splitlines()
        assert len(lines) == 2
        assert '"120"' in lines[1]


def test_health(client):
    res = client.get("/")
    assert res.status_code == 200
    assert client.get("/api/health").json()["services"]["api"] == "ok"
