# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import (
    Base,
    CrmBase,
    DatabaseService,
    LedgerBase,
    get_crm_db,
    get_db,
    get_db_service,
    get_ledger_db,
)
from .enums import PaidFlag, PaymentStatus, ReferralStatus, UserType
from .models import (
    Campaign,
    Customer,
    InstallmentSchedule,
    LeadFile,
    MpesaPayment,
    Notification,
    PasswordReset,
    Project,
    Receipt,
    Referral,
    User,
)

__all__ = [
    "Base",
    "CrmBase",
    "LedgerBase",
    "DatabaseService",
    "get_db",
    "get_crm_db",
    "get_ledger_db",
    "get_db_service",
    "__version__",
    # Enums
    "PaymentStatus",
    "PaidFlag",
    "UserType",
    "ReferralStatus",
    # Portal models
    "User",
    "PasswordReset",
    "MpesaPayment",
    "Notification",
    "Referral",
    "Campaign",
    # CRM models
    "Customer",
    "LeadFile",
    "InstallmentSchedule",
    # Ledger models
    "Receipt",
    "Project",
]
