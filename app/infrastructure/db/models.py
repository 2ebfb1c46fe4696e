import uuid
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.infrastructure.db.base import Base


class User(Base):
    __tablename__ = "users"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255))
    role = Column(String(20), nullable=False, default="admin")  # admin | ca
    # Issuer identity printed on invoices; company_state drives CGST/SGST vs IGST
    company_name = Column(String(255))
    company_gstin = Column(String(15))
    company_state = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Customer(Base):
    __tablename__ = "customers"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    company_name = Column(String(255))
    email = Column(String(255))
    phone = Column(String(30))
    gstin = Column(String(15))
    street = Column(String(255))
    city = Column(String(100))
    state = Column(String(100))
    pincode = Column(String(10))
    country = Column(String(100), default="India")
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
    )

    invoices = relationship("Invoice", back_populates="customer")


class Project(Base):
    __tablename__ = "projects"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id", ondelete="SET NULL"))
    status = Column(String(20), nullable=False, default="active")  # active | completed | on-hold
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class BankDetails(Base):
    __tablename__ = "bank_details"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    account_holder_name = Column(String(255), nullable=False)
    account_number = Column(String(34), nullable=False)
    ifsc = Column(String(11), nullable=False)
    bank_name = Column(String(255), nullable=False)
    branch = Column(String(255))
    account_type = Column(String(10), nullable=False, default="current")  # savings | current
    is_default = Column(Boolean, nullable=False, default=False)
    is_company_account = Column(Boolean, nullable=False, default=True)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"))
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Invoice(Base):
    __tablename__ = "invoices"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # INV-YYYY-NNNN; uniqueness is the storage-level guard against duplicate numbers
    invoice_number = Column(String(30), unique=True, nullable=False, index=True)
    invoice_date = Column(Date, nullable=False, index=True)
    invoice_type = Column(String(20), nullable=False)  # proforma | tax-invoice | non-tax-invoice
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id", ondelete="SET NULL"), index=True)

    # Embedded line items: [{"description", "quantity", "rate", "amount"}]
    items = Column(JSON, nullable=False, default=list)

    subtotal = Column(Numeric(12, 2), nullable=False)
    gst_applicable = Column(Boolean, nullable=False, default=False)
    gst_rate = Column(Numeric(5, 2), nullable=False, default=0)
    cgst = Column(Numeric(12, 2), nullable=False, default=0)
    sgst = Column(Numeric(12, 2), nullable=False, default=0)
    igst = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)

    tax_id = Column(String(50))
    gst_paid = Column(Boolean, nullable=False, default=False)
    company_bank_id = Column(UUID(as_uuid=True), ForeignKey("bank_details.id", ondelete="SET NULL"))
    customer_bank_id = Column(UUID(as_uuid=True), ForeignKey("bank_details.id", ondelete="SET NULL"))
    notes = Column(Text)

    payment_status = Column(String(20), nullable=False, default="unpaid")  # unpaid | partially-paid | paid
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
    )

    customer = relationship("Customer", back_populates="invoices")
    payments = relationship(
        "Payment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Payment(Base):
    __tablename__ = "payments"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    invoice_id = Column(
        UUID(as_uuid=True),
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    payment_mode = Column(String(20), nullable=False)  # online | offline | bank-transfer | upi | cheque | cash
    transaction_id = Column(String(100))
    notes = Column(Text)
    received_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
    )

    invoice = relationship("Invoice", back_populates="payments")


class InvoiceSequence(Base):
    """Per-calendar-year invoice counter; ``last_value`` is the last issued sequence."""

    __tablename__ = "invoice_sequences"
    year = Column(Integer, primary_key=True, autoincrement=False)
    last_value = Column(Integer, nullable=False, default=0)
