# This project was developed with assistance from AI tools.
"""Functional tests: STK Push initiation and the gateway callback.

Covers a successful payment reconciling the installment balance, a failed
payment leaving it untouched, and a duplicate success callback being
applied only once.
"""

import json

import pytest
from db import Notification

from src.core.errors import UpstreamUnavailable
from src.services.daraja import StkPushResult
from src.services.money import parse_amount

from ..factories import make_installment, make_payment, make_user, result_one, result_rowcount
from .personas import ALICE_CUSTOMER, BRIAN_CUSTOMER, alice

pytestmark = pytest.mark.functional


def _callback(checkout_request_id="ws_CO_100", result_code=0, result_desc="Processed"):
    return {
        "Body": {
            "stkCallback": {
                "MerchantRequestID": "mr-1",
                "CheckoutRequestID": checkout_request_id,
                "ResultCode": result_code,
                "ResultDesc": result_desc,
            }
        }
    }


def _initiate_body(**overrides):
    body = {
        "amount": 4000,
        "phone_number": "254712345678",
        "installment_schedule_id": 42,
        "customer_number": ALICE_CUSTOMER,
        "plot_number": "Plot 12",
    }
    body.update(overrides)
    return body


def _notifications(session):
    return [c.args[0] for c in session.add.call_args_list if isinstance(c.args[0], Notification)]


class TestInitiation:
    def test_initiation_returns_gateway_ids(self, make_client, stores, outbound):
        outbound.daraja.stk_push.return_value = StkPushResult(
            checkout_request_id="ws_CO_100",
            merchant_request_id="mr-1",
            response_code="0",
            response_description="Success. Request accepted for processing",
            customer_message="Success. Request accepted for processing",
        )
        stores.script(crm=[result_one(make_installment())])

        resp = make_client(alice()).post("/initiate-mpesa-payment", json=_initiate_body())

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "M-PESA payment initiated"
        assert body["CheckoutRequestID"] == "ws_CO_100"
        assert body["ResponseCode"] == "0"
        payment = outbound.persisted.add.call_args.args[0]
        assert payment.status.value == "Pending"

    def test_bad_phone_is_400(self, make_client, stores, outbound):
        resp = make_client(alice()).post("/initiate-mpesa-payment", json=_initiate_body(phone_number="0712345678"))
        assert resp.status_code == 400
        outbound.daraja.stk_push.assert_not_awaited()

    def test_foreign_customer_number_is_400(self, make_client, stores, outbound):
        resp = make_client(alice()).post(
            "/initiate-mpesa-payment", json=_initiate_body(customer_number=BRIAN_CUSTOMER)
        )
        assert resp.status_code == 400

    def test_gateway_rejection_is_500_with_gateway_message(self, make_client, stores, outbound):
        outbound.daraja.stk_push.side_effect = UpstreamUnavailable("Bad Request - Invalid Amount")
        stores.script(crm=[result_one(make_installment())])

        resp = make_client(alice()).post("/initiate-mpesa-payment", json=_initiate_body())

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Bad Request - Invalid Amount"
        outbound.persisted.add.assert_not_called()


class TestCallback:
    def test_success_callback_reconciles_installment(self, client, stores, outbound):
        installment = make_installment()
        stores.script(
            portal=[result_rowcount(1), result_one(make_payment()), result_one(make_user(push_token="tok"))],
            crm=[result_one(installment)],
        )

        resp = client.post("/mpesa/callback", json=_callback())

        assert resp.status_code == 200
        assert resp.json() == {"message": "Callback received"}
        total = parse_amount(installment.amount_paid) + parse_amount(installment.remaining_amount)
        assert total == parse_amount("10,000.00")
        assert installment.remaining_amount == "6000.00"
        assert installment.paid == "No"
        [notification] = _notifications(stores.portal)
        assert notification.title == "Payment Update"
        outbound.push.send.assert_awaited_once()

    def test_failed_callback_marks_failed_and_keeps_balance(self, client, stores, outbound):
        installment = make_installment()
        stores.script(portal=[result_rowcount(1), result_one(make_payment()), result_one(make_user())])

        resp = client.post("/mpesa/callback", json=_callback(result_code=1032, result_desc="Request cancelled by user"))

        assert resp.status_code == 200
        stores.crm.execute.assert_not_awaited()
        assert installment.amount_paid == "0.00"
        [notification] = _notifications(stores.portal)
        assert notification.title == "Payment Failed"

    def test_duplicate_success_callback_applies_once(self, client, stores, outbound):
        installment = make_installment()
        stores.script(
            portal=[result_rowcount(1), result_one(make_payment()), result_one(make_user())],
            crm=[result_one(installment)],
        )
        assert client.post("/mpesa/callback", json=_callback()).status_code == 200
        after_first = (installment.amount_paid, installment.remaining_amount)

        stores.script(portal=[result_rowcount(0)])
        resp = client.post("/mpesa/callback", json=_callback())

        assert resp.status_code == 200
        assert (installment.amount_paid, installment.remaining_amount) == after_first
        assert len(_notifications(stores.portal)) == 1
        assert stores.crm.execute.await_count == 1

    def test_unknown_checkout_id_is_acknowledged(self, client, stores, outbound):
        stores.script(portal=[result_rowcount(0)])
        resp = client.post("/mpesa/callback", json=_callback("ws_CO_unknown"))
        assert resp.status_code == 200
        stores.portal.add.assert_not_called()

    def test_malformed_callback_is_400(self, client, stores, outbound):
        resp = client.post("/mpesa/callback", json={"Body": {}})
        assert resp.status_code == 400

    def test_database_error_still_acknowledged(self, client, stores, outbound):
        from sqlalchemy.exc import OperationalError

        stores.portal.execute.side_effect = OperationalError("UPDATE", {}, Exception("down"))
        resp = client.post("/mpesa/callback", json=_callback())
        assert resp.status_code == 200

    def test_unexpected_error_still_acknowledged(self, client, stores, outbound):
        outbound.push.send.side_effect = RuntimeError("push down")
        stores.script(
            portal=[result_rowcount(1), result_one(make_payment()), result_one(make_user(push_token="tok"))],
            crm=[result_one(make_installment())],
        )

        resp = client.post("/mpesa/callback", json=_callback())

        assert resp.status_code == 200
        assert resp.json() == {"message": "Callback received"}

    def test_notification_history_lists_payment_update(self, make_client, stores):
        from ..factories import make_notification, result_all

        stores.script(portal=[result_all([make_notification(data=json.dumps({"status": "Success"}))])])
        resp = make_client(alice()).get("/notifications")
        assert resp.status_code == 200
        [item] = resp.json()["notifications"]
        assert item["data"] == {"status": "Success"}


class TestSendNotification:
    def test_push_to_own_account(self, make_client, stores, outbound):
        stores.script(portal=[result_one(make_user(id=1, push_token="ExponentPushToken[a]"))])

        resp = make_client(alice()).post(
            "/send-notification", json={"user_id": 1, "title": "Reminder", "body": "Installment due"}
        )

        assert resp.status_code == 200
        assert resp.json() == {"status": "Notification sent"}
        [notification] = _notifications(stores.portal)
        assert notification.title == "Reminder"
        outbound.push.send.assert_awaited_once()

    def test_push_to_another_user_is_401(self, make_client, stores, outbound):
        resp = make_client(alice()).post("/send-notification", json={"user_id": 2, "title": "Hi", "body": "x"})

        assert resp.status_code == 401
        outbound.push.send.assert_not_awaited()

    def test_requires_auth(self, client, stores, outbound):
        resp = client.post("/send-notification", json={"user_id": 1, "title": "Hi", "body": "x"})
        assert resp.status_code == 401
