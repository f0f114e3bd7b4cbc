# This project was developed with assistance from AI tools.
"""Functional tests: property reads, PDFs and cross-customer isolation."""

import pytest

from ..factories import (
    make_installment,
    make_lead_file,
    make_receipt,
    result_all,
    result_one,
    result_scalar,
)
from .personas import ALICE_CUSTOMER, alice, brian

pytestmark = pytest.mark.functional


class TestOwnProperties:
    def test_installment_schedule(self, make_client, stores):
        stores.script(crm=[result_one(make_lead_file()), result_all([make_installment()])])
        resp = make_client(alice()).get("/properties/LF-100/installment-schedule")
        assert resp.status_code == 200
        [row] = resp.json()["installment_schedules"]
        assert row["id"] == 42
        assert row["remaining_amount"] == "10,000.00"

    def test_installment_schedule_pdf(self, make_client, stores):
        stores.script(crm=[result_one(make_lead_file()), result_all([make_installment()])])
        resp = make_client(alice()).get("/properties/LF-100/installment-schedule/pdf")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content.startswith(b"%PDF")

    def test_empty_schedule_pdf_is_404(self, make_client, stores):
        stores.script(crm=[result_one(make_lead_file()), result_all([])])
        resp = make_client(alice()).get("/properties/LF-100/installment-schedule/pdf")
        assert resp.status_code == 404

    def test_receipts_and_receipt_pdf(self, make_client, stores):
        client = make_client(alice())
        stores.script(crm=[result_one(make_lead_file())], ledger=[result_all([make_receipt()])])
        resp = client.get("/properties/LF-100/receipts")
        assert resp.status_code == 200
        assert resp.json()["receipts"][0]["receipt_no"] == "RCPT-900"

        stores.script(crm=[result_one(make_lead_file())], ledger=[result_one(make_receipt())])
        resp = client.get("/properties/LF-100/receipts/900/pdf")
        assert resp.status_code == 200
        assert resp.content.startswith(b"%PDF")

    def test_title_status_and_total_spent(self, make_client, stores):
        client = make_client(alice())
        stores.script(crm=[result_one(make_lead_file())])
        assert client.get("/properties/LF-100/title-status").json() == {"title_status": "Processing"}

        stores.script(crm=[result_all([make_lead_file()])], ledger=[result_scalar(5000.0)])
        assert client.get("/total-spent").json() == {"total_spent": 5000.0}


class TestCrossCustomerIsolation:
    """Brian asking for Alice's lead file sees 401 and no data."""

    def test_foreign_installment_schedule_is_401(self, make_client, stores):
        stores.script(crm=[result_one(None)])
        resp = make_client(brian()).get("/properties/LF-100/installment-schedule")
        assert resp.status_code == 401
        assert "installment_schedules" not in resp.json()
        assert stores.crm.execute.await_count == 1

    def test_foreign_receipts_are_401(self, make_client, stores):
        stores.script(crm=[result_one(None)])
        resp = make_client(brian()).get("/properties/LF-100/receipts")
        assert resp.status_code == 401
        stores.ledger.execute.assert_not_awaited()

    def test_foreign_transactions_are_401(self, make_client, stores):
        stores.script(crm=[result_one(None)])
        resp = make_client(brian()).get("/properties/LF-100/transactions")
        assert resp.status_code == 401

    def test_property_list_only_contains_callers_plots(self, make_client, stores):
        stores.script(crm=[result_all([make_lead_file(customer_id=ALICE_CUSTOMER)])])
        resp = make_client(alice()).get("/properties")
        assert resp.status_code == 200
        assert len(resp.json()["properties"]) == 1
