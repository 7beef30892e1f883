"""SQLAlchemy models for feerecon database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(12, 2)


def _now() -> datetime:
    return datetime.now(UTC)


class AccountHolder(Base):
    """Student/guardian account billed by invoices."""

    __tablename__ = "account_holders"

    id = Column(Integer, primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    student_number = Column(String, unique=True, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    invoices = relationship("Invoice", back_populates="account_holder")


class Invoice(Base):
    """Invoice ledger model, owned by the invoicing subsystem."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    reference_number = Column(String, unique=True, nullable=False)
    account_holder_id = Column(Integer, ForeignKey("account_holders.id"), nullable=True)
    amount_due = Column(MONEY, nullable=False)
    amount_paid = Column(MONEY, default=0, nullable=False)
    outstanding_balance = Column(MONEY, nullable=False)
    overpaid_amount = Column(MONEY, default=0, nullable=False)
    status = Column(String, default="Unpaid", nullable=False)
    due_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    # Relationships
    account_holder = relationship("AccountHolder", back_populates="invoices")
    payments = relationship("PaymentTransaction", back_populates="invoice")


class PaymentTransaction(Base):
    """Audit record of a processed statement transaction."""

    __tablename__ = "payment_transactions"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)
    reference_number = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    payment_date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    status = Column(String, nullable=False)
    match_strategy = Column(String, nullable=True)
    needs_review = Column(Boolean, default=False, nullable=False)
    uploaded_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Re-uploading a statement must not record the same payment twice
    __table_args__ = (
        UniqueConstraint(
            "reference_number", "amount", "payment_date", name="uq_payment_reference_amount_date"
        ),
    )

    # Relationships
    invoice = relationship("Invoice", back_populates="payments")


class MappingProfile(Base):
    """Saved column mapping profile."""

    __tablename__ = "mapping_profiles"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    bank_name = Column(String, nullable=True)
    reference_column = Column(String, nullable=True)
    amount_column = Column(String, nullable=True)
    date_column = Column(String, nullable=False)
    description_column = Column(String, nullable=True)
    debit_column = Column(String, nullable=True)
    credit_column = Column(String, nullable=True)
    balance_column = Column(String, nullable=True)
    header_signature = Column(String, nullable=True, index=True)
    is_default = Column(Boolean, default=False, nullable=False)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    last_used_at = Column(DateTime, nullable=True)
    use_count = Column(Integer, default=0, nullable=False)


class PaymentUploadLog(Base):
    """Per-upload processing summary."""

    __tablename__ = "payment_upload_logs"

    id = Column(Integer, primary_key=True)
    filename = Column(String, nullable=False)
    uploaded_by = Column(Integer, nullable=True)
    transactions_processed = Column(Integer, default=0, nullable=False)
    matched_count = Column(Integer, default=0, nullable=False)
    partial_count = Column(Integer, default=0, nullable=False)
    overpaid_count = Column(Integer, default=0, nullable=False)
    unmatched_count = Column(Integer, default=0, nullable=False)
    duplicate_count = Column(Integer, default=0, nullable=False)
    error_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
