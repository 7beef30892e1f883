"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the ledger schema can change
without touching reconciliation code.
"""

from decimal import Decimal

from feerecon.domain import entities as domain
from feerecon.database.models import (
    AccountHolder as ORMAccountHolder,
    Invoice as ORMInvoice,
    PaymentTransaction as ORMPaymentTransaction,
    MappingProfile as ORMMappingProfile,
    PaymentUploadLog as ORMPaymentUploadLog,
)
from feerecon.utils.amount_parser import to_money


def _money(value) -> Decimal:
    return to_money(value if value is not None else 0)


def account_holder_to_domain(orm_holder: ORMAccountHolder) -> domain.AccountHolder:
    """Convert SQLAlchemy AccountHolder model to domain AccountHolder entity."""
    return domain.AccountHolder(
        id=orm_holder.id,
        first_name=orm_holder.first_name,
        last_name=orm_holder.last_name,
        student_number=orm_holder.student_number,
        created_at=orm_holder.created_at,
    )


def invoice_to_domain(orm_invoice: ORMInvoice) -> domain.Invoice:
    """Convert SQLAlchemy Invoice model to domain Invoice entity."""
    return domain.Invoice(
        id=orm_invoice.id,
        reference_number=orm_invoice.reference_number,
        account_holder_id=orm_invoice.account_holder_id,
        amount_due=_money(orm_invoice.amount_due),
        amount_paid=_money(orm_invoice.amount_paid),
        outstanding_balance=_money(orm_invoice.outstanding_balance),
        overpaid_amount=_money(orm_invoice.overpaid_amount),
        status=domain.InvoiceStatus(orm_invoice.status),
        due_date=orm_invoice.due_date,
        created_at=orm_invoice.created_at,
        updated_at=orm_invoice.updated_at,
    )


def payment_transaction_to_domain(
    orm_payment: ORMPaymentTransaction,
) -> domain.PaymentTransactionRecord:
    """Convert SQLAlchemy PaymentTransaction model to domain record."""
    return domain.PaymentTransactionRecord(
        id=orm_payment.id,
        reference_number=orm_payment.reference_number,
        amount=_money(orm_payment.amount),
        payment_date=orm_payment.payment_date,
        description=orm_payment.description,
        invoice_id=orm_payment.invoice_id,
        status=domain.ResultCategory(orm_payment.status),
        match_strategy=orm_payment.match_strategy,
        needs_review=bool(orm_payment.needs_review),
        uploaded_by=orm_payment.uploaded_by,
        created_at=orm_payment.created_at,
    )


def mapping_profile_to_domain(orm_profile: ORMMappingProfile) -> domain.MappingProfile:
    """Convert SQLAlchemy MappingProfile model to domain MappingProfile entity."""
    mapping = domain.ColumnMapping(
        reference=orm_profile.reference_column,
        amount=orm_profile.amount_column,
        date=orm_profile.date_column,
        description=orm_profile.description_column,
        debit=orm_profile.debit_column,
        credit=orm_profile.credit_column,
        balance=orm_profile.balance_column,
    )
    return domain.MappingProfile(
        id=orm_profile.id,
        name=orm_profile.name,
        mapping=mapping,
        bank_name=orm_profile.bank_name,
        is_default=bool(orm_profile.is_default),
        created_by=orm_profile.created_by,
        created_at=orm_profile.created_at,
        last_used_at=orm_profile.last_used_at,
        use_count=orm_profile.use_count or 0,
        header_signature=orm_profile.header_signature,
    )


def upload_log_to_domain(orm_log: ORMPaymentUploadLog) -> domain.UploadLog:
    """Convert SQLAlchemy PaymentUploadLog model to domain UploadLog entity."""
    return domain.UploadLog(
        id=orm_log.id,
        filename=orm_log.filename,
        uploaded_by=orm_log.uploaded_by,
        transactions_processed=orm_log.transactions_processed,
        matched_count=orm_log.matched_count,
        partial_count=orm_log.partial_count,
        overpaid_count=orm_log.overpaid_count,
        unmatched_count=orm_log.unmatched_count,
        duplicate_count=orm_log.duplicate_count,
        error_count=orm_log.error_count,
        created_at=orm_log.created_at,
    )
