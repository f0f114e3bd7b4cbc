# This project was developed with assistance from AI tools.
"""
Customer portal -- domain models

Portal tables (users, OTP resets, M-PESA payments, notifications,
referrals, campaigns) are owned by this service. CRM and ledger tables
are mapped onto existing external schemas, so their column names follow
whatever the upstream systems chose.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    Integer,
    String,
    Text,
    func,
)

from .database import Base, CrmBase, LedgerBase
from .enums import PaymentStatus, ReferralStatus, UserType


def _values(enum_cls):
    return [member.value for member in enum_cls]


# ---------------------------------------------------------------------------
# Portal
# ---------------------------------------------------------------------------


class User(Base):
    """Portal account, created only after OTP verification against a CRM customer."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_number = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=True)
    verified = Column(Boolean, nullable=False, default=False)
    user_type = Column(
        Enum(UserType, name="user_type", native_enum=False, values_callable=_values),
        nullable=False,
        default=UserType.INDIVIDUAL,
    )
    push_token = Column(String(255), nullable=True)
    last_logout_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, customer_number='{self.customer_number}')>"


class PasswordReset(Base):
    """One OTP issued for a password reset. The newest row per user wins."""

    __tablename__ = "password_resets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    otp = Column(String(10), nullable=False)
    otp_generated_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<PasswordReset(id={self.id}, user_id={self.user_id})>"


class MpesaPayment(Base):
    """An STK Push attempt, keyed by the gateway's CheckoutRequestID."""

    __tablename__ = "mpesa_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    checkout_request_id = Column(String(100), unique=True, nullable=False, index=True)
    merchant_request_id = Column(String(100), nullable=True)
    installment_schedule_id = Column(Integer, nullable=False, index=True)
    customer_number = Column(String(50), nullable=False, index=True)
    lead_file_no = Column(String(50), nullable=True, index=True)
    phone_number = Column(String(20), nullable=False)
    amount = Column(String(50), nullable=False)
    plot_number = Column(String(100), nullable=True)
    status = Column(
        Enum(PaymentStatus, name="payment_status", native_enum=False, values_callable=_values),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    result_code = Column(Integer, nullable=True)
    result_description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<MpesaPayment(checkout='{self.checkout_request_id}', status='{self.status}')>"


class Notification(Base):
    """Append-only notification history. ``data`` holds a JSON document."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    data = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, title='{self.title}')>"


class Referral(Base):
    """A prospect referred by an existing customer."""

    __tablename__ = "referrals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    referrer_id = Column(String(50), nullable=False, index=True)
    referred_name = Column(String(255), nullable=False)
    referred_email = Column(String(255), nullable=False)
    referred_phone = Column(String(50), nullable=True)
    property_id = Column(String(50), nullable=True)
    status = Column(
        Enum(ReferralStatus, name="referral_status", native_enum=False, values_callable=_values),
        nullable=False,
        default=ReferralStatus.PENDING,
    )
    amount_paid = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Referral(id={self.id}, referrer='{self.referrer_id}', status='{self.status}')>"


class Campaign(Base):
    """Monthly marketing campaign shown in the app."""

    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    banner_image_url = Column(String(500), nullable=True)
    link = Column(String(500), nullable=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Campaign(id={self.id}, title='{self.title}', {self.year}-{self.month:02d})>"


# ---------------------------------------------------------------------------
# CRM (external schema)
# ---------------------------------------------------------------------------


class Customer(CrmBase):
    """CRM customer master record. Only the OTP columns are written by the portal."""

    __tablename__ = "customer"

    customer_no = Column(String(50), primary_key=True)
    customer_name = Column(String(255))
    national_id = Column(String(50))
    phone = Column(String(50))
    primary_email = Column(String(255))
    alternative_email = Column(String(255))
    customer_type = Column(String(50))
    otp = Column(String(10), nullable=True)
    otp_generated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Customer(customer_no='{self.customer_no}')>"


class LeadFile(CrmBase):
    """A plot purchase. Active when ``lead_file_status_dropped == "No"``."""

    __tablename__ = "lead_files"

    lead_file_no = Column(String(50), primary_key=True)
    lead_file_status_dropped = Column(String(10))
    plot_number = Column(String(100))
    project_number = Column(String(50))
    marketer = Column(String(255))
    purchase_price = Column(Float)
    selling_price = Column(String(50))
    balance_lcy = Column("balance(LCY)", Float)
    customer_id = Column(String(50), index=True)
    customer_name = Column(String(255))
    purchase_type = Column(String(50))
    no_of_installments = Column(String(20))
    installment_amount = Column(String(50))
    total_paid = Column(Float)
    booking_date = Column("Booking_date", DateTime)
    completion_date = Column(String(50))
    title_status = Column(String(100))

    def __repr__(self):
        return f"<LeadFile(lead_file_no='{self.lead_file_no}', customer='{self.customer_id}')>"


class InstallmentSchedule(CrmBase):
    """One installment line. Money columns are decimal strings, possibly with separators."""

    __tablename__ = "installment_schedule"

    id = Column("IS_id", Integer, primary_key=True)
    member_no = Column(String(50), index=True)
    leadfile_no = Column(String(50), index=True)
    line_no = Column(Integer)
    installment_no = Column(Integer)
    installment_amount = Column(String(50))
    remaining_amount = Column("remaining_Amount", String(50))
    due_date = Column(DateTime)
    paid = Column(String(5))
    plot_no = Column("plot_No", String(100))
    plot_name = Column("plot_Name", String(255))
    amount_paid = Column("amount_Paid", String(50))
    penalties_accrued = Column(Integer, default=0)

    def __repr__(self):
        return f"<InstallmentSchedule(id={self.id}, leadfile='{self.leadfile_no}', no={self.installment_no})>"


# ---------------------------------------------------------------------------
# Ledger (external schema)
# ---------------------------------------------------------------------------


class Receipt(LedgerBase):
    """Posted payment record from the accounting system."""

    __tablename__ = "Recipts"

    id = Column(Integer, primary_key=True)
    receipt_no = Column("Receipt_No", String(50))
    date_posted = Column("Date_Posted", String(50))
    payment_date = Column("Payment_date", String(50))
    customer_id = Column("Customer_Id", String(50), index=True)
    customer_name = Column("Customer_Name", String(255))
    pay_mode = Column("Pay_mode", String(50))
    lead_file_no = Column("Lead_file_no", String(50), index=True)
    project_name = Column("Project_Name", String(255))
    plot_no = Column("Plot_NO", String(100))
    transaction_type = Column("Transaction_type", String(50))
    amount_lcy = Column("Amount_LCY", Float)
    balance_lcy = Column("Balance_LCY", Float)
    type = Column("Type", String(50))
    status = Column("status", String(50))
    payment_date1 = Column("PAYMENT_DATE1", String(50))

    def __repr__(self):
        return f"<Receipt(id={self.id}, receipt_no='{self.receipt_no}')>"


class Project(LedgerBase):
    """Project catalogue entry. ``epr_id`` matches ``LeadFile.project_number``."""

    __tablename__ = "Projects"

    project_id = Column(Integer, primary_key=True)
    name = Column(String(255))
    link = Column(String(500))
    priority = Column("priolity", String(20))
    visibility = Column(String(20))
    epr_id = Column("EPR_id", String(50))
    description = Column(Text)
    banner = Column(String(500))
    is_featured = Column(Boolean, default=False)

    def __repr__(self):
        return f"<Project(project_id={self.project_id}, name='{self.name}')>"
