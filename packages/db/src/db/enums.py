# This project was developed with assistance from AI tools.
"""
Domain enums for the customer portal.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class PaymentStatus(str, enum.Enum):
    PENDING = "Pending"
    SUCCESS = "Success"
    FAILED = "Failed"


class PaidFlag(str, enum.Enum):
    """Installment ``paid`` column values as stored by the CRM."""

    YES = "Yes"
    NO = "No"


class UserType(str, enum.Enum):
    INDIVIDUAL = "individual"
    COMPANY = "company"


class ReferralStatus(str, enum.Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    REDEEMED = "Redeemed"
