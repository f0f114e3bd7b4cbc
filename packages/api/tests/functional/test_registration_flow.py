# This project was developed with assistance from AI tools.
"""Functional tests: OTP registration, login, token use and logout."""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.auth import hash_password

from ..factories import make_customer, make_lead_file, make_user, result_all, result_one, result_rowcount
from .personas import ALICE_CUSTOMER

pytestmark = pytest.mark.functional

EMAIL = "alice@example.com"


class TestRegistrationHappyPath:
    """Verify customer, verify OTP, complete registration, log in, use the token."""

    def test_full_registration_then_authenticated_call(self, client, stores, outbound):
        customer = make_customer()

        stores.script(crm=[result_one(customer)])
        resp = client.post("/verify-user", json={"customer_number": ALICE_CUSTOMER, "email": EMAIL})
        assert resp.status_code == 200
        assert resp.json() == {"message": "OTP sent successfully to your email."}
        otp = customer.otp
        outbound.email.send_otp.assert_awaited_once_with(EMAIL, otp)

        stores.script(crm=[result_one(customer)])
        resp = client.post("/verify-otp", json={"customer_number": ALICE_CUSTOMER, "email": EMAIL, "otp": otp})
        assert resp.status_code == 200

        def assign_id(obj):
            obj.id = 1

        stores.portal.add.side_effect = assign_id
        stores.script(portal=[result_one(None), result_one(None)], crm=[result_one(customer)])
        resp = client.post(
            "/complete-registration",
            json={"customer_number": ALICE_CUSTOMER, "email": EMAIL, "otp": otp, "new_password": "pw-123"},
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == "User registered successfully. You can now log in."
        user = stores.portal.add.call_args.args[0]
        assert user.customer_number == ALICE_CUSTOMER
        assert customer.otp is None

        stores.script(
            portal=[result_one(user)],
            crm=[result_one(customer), result_all(["LF-100"])],
        )
        resp = client.post("/login", json={"email": EMAIL, "password": "pw-123"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Login successful."
        assert body["user"]["customerNumber"] == ALICE_CUSTOMER
        assert body["user"]["leadFiles"] == ["LF-100"]
        token = body["token"]

        stores.script(portal=[result_one(user)], crm=[result_all([make_lead_file()])])
        resp = client.get("/properties", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert [p["lead_file_no"] for p in resp.json()["properties"]] == ["LF-100"]


class TestWrongOtp:
    def test_wrong_otp_is_401_and_creates_no_user(self, client, stores, outbound):
        customer = make_customer(otp="123456", otp_generated_at=datetime.now(UTC))
        stores.script(crm=[result_one(customer)])
        resp = client.post(
            "/complete-registration",
            json={"customer_number": ALICE_CUSTOMER, "email": EMAIL, "otp": "000000", "new_password": "pw"},
        )
        assert resp.status_code == 401
        assert resp.json()["title"] == "Unauthorized"
        stores.portal.add.assert_not_called()

    def test_expired_otp_is_401(self, client, stores, outbound):
        customer = make_customer(otp="123456", otp_generated_at=datetime.now(UTC) - timedelta(minutes=15))
        stores.script(crm=[result_one(customer)])
        resp = client.post("/verify-otp", json={"customer_number": ALICE_CUSTOMER, "email": EMAIL, "otp": "123456"})
        assert resp.status_code == 401

    def test_unknown_customer_is_404(self, client, stores, outbound):
        stores.script(crm=[result_one(None)])
        resp = client.post("/verify-user", json={"customer_number": "X", "email": EMAIL})
        assert resp.status_code == 404
        assert resp.json()["status"] == 404


class TestLogout:
    def test_token_rejected_after_logout(self, client, stores):
        user = make_user(password_hash=hash_password("pw"))
        stores.script(portal=[result_one(user)], crm=[result_one(make_customer()), result_all([])])
        token = client.post("/login", json={"email": EMAIL, "password": "pw"}).json()["token"]

        stores.script(portal=[result_one(user), result_rowcount(1)])
        resp = client.post("/logout", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json() == {"message": "Logout successful."}

        user.last_logout_at = datetime.now(UTC) + timedelta(seconds=1)
        stores.script(portal=[result_one(user)])
        resp = client.get("/properties", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token has been revoked"
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_missing_token_is_401_problem_details(self, client, stores):
        resp = client.get("/notifications")
        assert resp.status_code == 401
        body = resp.json()
        assert body["type"] == "about:blank"
        assert body["detail"] == "Missing authentication token"
        assert body["request_id"]


class TestBadInput:
    def test_missing_field_is_400(self, client, stores):
        resp = client.post("/login", json={"email": EMAIL})
        assert resp.status_code == 400
        assert resp.json()["title"] == "Bad Request"

    def test_wrong_password_is_401(self, client, stores):
        stores.script(portal=[result_one(make_user(password_hash=hash_password("pw")))])
        resp = client.post("/login", json={"email": EMAIL, "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid email or password."

    def test_request_id_is_echoed(self, client, stores):
        resp = client.post("/login", json={}, headers={"x-request-id": "req-42"})
        assert resp.json()["request_id"] == "req-42"
