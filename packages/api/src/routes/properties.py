# This project was developed with assistance from AI tools.
"""Property, installment, transaction and receipt routes.

All reads are scoped to the caller's active lead files; anything else is
a 401.
"""

from datetime import UTC, datetime

from db import get_crm_db, get_db, get_ledger_db
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFound
from ..middleware.auth import CurrentUser
from ..schemas.property import (
    InstallmentItem,
    InstallmentScheduleResponse,
    PropertyItem,
    PropertyListResponse,
    ReceiptItem,
    ReceiptListResponse,
    TitleStatusResponse,
    TotalSpentResponse,
    TransactionListResponse,
)
from ..services import property as property_service
from ..services.statement import build_installment_schedule_pdf, build_receipt_pdf

router = APIRouter()


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/properties", response_model=PropertyListResponse)
async def list_properties(
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
) -> PropertyListResponse:
    lead_files = await property_service.list_properties(crm_session, user)
    return PropertyListResponse(properties=[PropertyItem.model_validate(lf) for lf in lead_files])


@router.get("/properties/{lead_file_no}/installment-schedule", response_model=InstallmentScheduleResponse)
async def get_installment_schedule(
    lead_file_no: str,
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
) -> InstallmentScheduleResponse:
    _, schedules = await property_service.get_installment_schedule(crm_session, user, lead_file_no)
    return InstallmentScheduleResponse(
        installment_schedules=[InstallmentItem.model_validate(s) for s in schedules]
    )


@router.get("/properties/{lead_file_no}/installment-schedule/pdf")
async def get_installment_schedule_pdf(
    lead_file_no: str,
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
) -> Response:
    lead_file, schedules = await property_service.get_installment_schedule(crm_session, user, lead_file_no)
    if not schedules:
        raise NotFound("No installment schedules found.")
    content = await build_installment_schedule_pdf(
        user.customer_number,
        lead_file.plot_number or lead_file_no,
        schedules,
        datetime.now(UTC).date(),
    )
    return _pdf_response(content, f"installment_schedule_{lead_file_no}.pdf")


@router.get("/properties/{lead_file_no}/transactions", response_model=TransactionListResponse)
async def list_transactions(
    lead_file_no: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    crm_session: AsyncSession = Depends(get_crm_db),
    ledger_session: AsyncSession = Depends(get_ledger_db),
) -> TransactionListResponse:
    transactions = await property_service.list_transactions(
        session, crm_session, ledger_session, user, lead_file_no
    )
    return TransactionListResponse(transactions=transactions)


@router.get("/properties/{lead_file_no}/receipts", response_model=ReceiptListResponse)
async def list_receipts(
    lead_file_no: str,
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
    ledger_session: AsyncSession = Depends(get_ledger_db),
) -> ReceiptListResponse:
    receipts = await property_service.list_receipts(crm_session, ledger_session, user, lead_file_no)
    return ReceiptListResponse(receipts=[ReceiptItem.model_validate(r) for r in receipts])


@router.get("/properties/{lead_file_no}/receipts/{receipt_id}/pdf")
async def get_receipt_pdf(
    lead_file_no: str,
    receipt_id: int,
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
    ledger_session: AsyncSession = Depends(get_ledger_db),
) -> Response:
    lead_file, receipt = await property_service.get_receipt(
        crm_session, ledger_session, user, lead_file_no, receipt_id
    )
    content = await build_receipt_pdf(
        user.customer_number,
        lead_file.plot_number or lead_file_no,
        receipt,
        datetime.now(UTC).date(),
    )
    return _pdf_response(content, f"receipt_{receipt.receipt_no or receipt.id}.pdf")


@router.get("/properties/{lead_file_no}/title-status", response_model=TitleStatusResponse)
async def get_title_status(
    lead_file_no: str,
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
) -> TitleStatusResponse:
    title_status = await property_service.get_title_status(crm_session, user, lead_file_no)
    return TitleStatusResponse(title_status=title_status)


@router.get("/total-spent", response_model=TotalSpentResponse)
async def get_total_spent(
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
    ledger_session: AsyncSession = Depends(get_ledger_db),
) -> TotalSpentResponse:
    total = await property_service.total_spent(crm_session, ledger_session, user)
    return TotalSpentResponse(total_spent=total)
