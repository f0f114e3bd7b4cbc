# This project was developed with assistance from AI tools.
"""RFC 7807 Problem Details body returned for every error status."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Problem Details (https://datatracker.ietf.org/doc/html/rfc7807).

    ``detail`` is safe to show to the customer; upstream error text only
    appears here for STK Push rejections.
    """

    type: str = "about:blank"
    title: str = Field(description="Reason phrase for the status code.")
    status: int
    detail: str = ""
    request_id: str = Field(default="", description="x-request-id header, or a generated UUID.")
