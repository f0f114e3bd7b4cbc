# This project was developed with assistance from AI tools.
"""M-PESA payment request/response and callback envelope schemas."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

PHONE_PATTERN = r"^2547\d{8}$"


class PaymentInitiateRequest(BaseModel):
    """STK Push initiation body.

    ``amount`` is whole shillings; numeric strings are accepted because the
    mobile client sends form values as text.
    """

    amount: int = Field(gt=0)
    phone_number: str = Field(
        pattern=PHONE_PATTERN,
        validation_alias=AliasChoices("phone_number", "phone"),
    )
    installment_schedule_id: int
    customer_number: str = Field(min_length=1)
    plot_number: str | None = None


class PaymentInitiateResponse(BaseModel):
    """Gateway identifiers echoed to the client in the gateway's own casing."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "M-PESA payment initiated"
    checkout_request_id: str = Field(alias="CheckoutRequestID")
    merchant_request_id: str = Field(alias="MerchantRequestID")
    response_code: str = Field(alias="ResponseCode")
    response_description: str = Field(alias="ResponseDescription")
    customer_message: str = Field(alias="CustomerMessage")


# ---------------------------------------------------------------------------
# Callback envelope
# ---------------------------------------------------------------------------


class StkCallback(BaseModel):
    model_config = ConfigDict(extra="ignore")

    checkout_request_id: str = Field(alias="CheckoutRequestID", min_length=1)
    result_code: int = Field(alias="ResultCode")
    merchant_request_id: str | None = Field(default=None, alias="MerchantRequestID")
    result_desc: str = Field(default="", alias="ResultDesc")


class StkCallbackBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    stk_callback: StkCallback = Field(alias="stkCallback")


class StkCallbackEnvelope(BaseModel):
    """``{"Body": {"stkCallback": {...}}}`` as posted by the gateway."""

    model_config = ConfigDict(extra="ignore")

    body: StkCallbackBody = Field(alias="Body")


class CallbackAck(BaseModel):
    message: str = "Callback received"
