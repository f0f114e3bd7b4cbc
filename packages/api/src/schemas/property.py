# This project was developed with assistance from AI tools.
"""Pydantic response models for property, installment and receipt endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PropertyItem(BaseModel):
    """A customer's plot (CRM lead file)."""

    model_config = ConfigDict(from_attributes=True)

    lead_file_no: str
    plot_number: str | None = None
    project_number: str | None = None
    purchase_price: float | None = None
    selling_price: str | None = None
    balance_lcy: float | None = None
    purchase_type: str | None = None
    no_of_installments: str | None = None
    installment_amount: str | None = None
    total_paid: float | None = None
    title_status: str | None = None
    booking_date: datetime | None = None
    completion_date: str | None = None


class PropertyListResponse(BaseModel):
    properties: list[PropertyItem]


class InstallmentItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    member_no: str | None = None
    leadfile_no: str | None = None
    line_no: int | None = None
    installment_no: int | None = None
    installment_amount: str | None = None
    remaining_amount: str | None = None
    amount_paid: str | None = None
    due_date: datetime | None = None
    paid: str | None = None
    plot_no: str | None = None
    plot_name: str | None = None
    penalties_accrued: int | None = None


class InstallmentScheduleResponse(BaseModel):
    installment_schedules: list[InstallmentItem]


class TransactionItem(BaseModel):
    """One payment in a property's history.

    ``source`` is ``receipt`` for posted ledger receipts and ``mpesa`` for
    portal-initiated STK payments.
    """

    id: str
    date: str
    time: str
    type: str
    amount: float
    source: str
    status: str | None = None


class TransactionListResponse(BaseModel):
    transactions: list[TransactionItem]


class ReceiptItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    receipt_no: str | None = None
    date_posted: str | None = None
    payment_date: str | None = None
    customer_id: str | None = None
    lead_file_no: str | None = None
    project_name: str | None = None
    plot_no: str | None = None
    pay_mode: str | None = None
    transaction_type: str | None = None
    amount_lcy: float | None = None
    balance_lcy: float | None = None
    type: str | None = None


class ReceiptListResponse(BaseModel):
    receipts: list[ReceiptItem]


class TitleStatusResponse(BaseModel):
    title_status: str | None = None


class TotalSpentResponse(BaseModel):
    total_spent: float
