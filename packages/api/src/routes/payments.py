# This project was developed with assistance from AI tools.
"""M-PESA STK Push initiation and the gateway callback."""

import logging

from db import get_crm_db, get_db
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.payment import (
    CallbackAck,
    PaymentInitiateRequest,
    PaymentInitiateResponse,
    StkCallbackEnvelope,
)
from ..services import payment as payment_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/initiate-mpesa-payment", response_model=PaymentInitiateResponse)
async def initiate_mpesa_payment(
    body: PaymentInitiateRequest,
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
) -> PaymentInitiateResponse:
    return await payment_service.initiate_payment(crm_session, user, body)


@router.post("/mpesa/callback", response_model=CallbackAck)
async def mpesa_callback(
    envelope: StkCallbackEnvelope,
    session: AsyncSession = Depends(get_db),
    crm_session: AsyncSession = Depends(get_crm_db),
) -> CallbackAck:
    """Gateway result ingress. Unauthenticated; always 200 once the body parses."""
    callback = envelope.body.stk_callback
    logger.info(
        "M-PESA callback: checkout=%s result=%s",
        callback.checkout_request_id,
        callback.result_code,
    )
    await payment_service.handle_callback(
        session,
        crm_session,
        callback.checkout_request_id,
        callback.result_code,
        callback.result_desc,
    )
    return CallbackAck()
