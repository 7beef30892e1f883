"""Domain model entities for feerecon.

These are pure data classes representing reconciliation concepts,
independent of database schema. The invoice ledger is owned by the
invoicing subsystem; this package only reads open invoices and moves
their balances.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from feerecon.domain.errors import ValidationError


class SourceKind(str, Enum):
    """Declared kind of an uploaded statement."""

    CSV = "csv"
    PDF = "pdf"


class InvoiceStatus(str, Enum):
    """Payment status of an invoice."""

    UNPAID = "Unpaid"
    PARTIAL = "Partial"
    PAID = "Paid"
    OVERPAID = "Overpaid"


OPEN_INVOICE_STATUSES = (InvoiceStatus.UNPAID, InvoiceStatus.PARTIAL)


class ResultCategory(str, Enum):
    """Output bucket of a processed transaction."""

    MATCHED = "matched"
    PARTIAL = "partial"
    OVERPAID = "overpaid"
    UNMATCHED = "unmatched"
    DUPLICATE = "duplicates"
    ERROR = "errors"


class MatchLookup(str, Enum):
    """How the invoice ledger compares a candidate reference."""

    EXACT = "exact"
    CONTAINS = "contains"
    PAYER_NAME = "payer_name"


COLUMN_ROLES = ("reference", "amount", "date", "description", "debit", "credit", "balance")


@dataclass(frozen=True)
class ColumnMapping:
    """Role to column assignment for a tabular statement.

    Either ``amount`` is set, or both ``debit`` and ``credit`` are set.
    At least one of ``reference`` and ``description`` must be set so a
    payer reference can be extracted.
    """

    date: str
    reference: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = None
    debit: Optional[str] = None
    credit: Optional[str] = None
    balance: Optional[str] = None

    def __post_init__(self):
        has_amount = bool(self.amount)
        has_split = bool(self.debit) and bool(self.credit)
        if not self.date:
            raise ValidationError("Column mapping requires a date column")
        if has_amount and has_split:
            raise ValidationError(
                "Column mapping must use either an amount column or debit/credit columns, not both"
            )
        if not has_amount and not has_split:
            raise ValidationError(
                "Column mapping requires an amount column or both debit and credit columns"
            )
        if not self.reference and not self.description:
            raise ValidationError(
                "Column mapping requires a reference or a description column"
            )

    @property
    def is_debit_credit(self) -> bool:
        return not self.amount

    @classmethod
    def from_roles(cls, roles: Mapping[str, Optional[str]]) -> "ColumnMapping":
        """Build a mapping from a role -> column dict; empty columns count as unset."""
        unknown = set(roles) - set(COLUMN_ROLES)
        if unknown:
            raise ValidationError(
                f"Unknown column role(s): {', '.join(sorted(unknown))}. "
                f"Must be one of: {', '.join(COLUMN_ROLES)}"
            )
        values = {role: (roles.get(role) or None) for role in COLUMN_ROLES}
        return cls(**values)

    def roles(self) -> dict[str, Optional[str]]:
        """Return the role -> column assignment as a plain dict."""
        return {role: getattr(self, role) for role in COLUMN_ROLES}


@dataclass(frozen=True)
class MappingProfile:
    """Saved, named column mapping reusable across uploads."""

    id: int
    name: str
    mapping: ColumnMapping
    bank_name: Optional[str]
    is_default: bool
    created_by: Optional[int]
    created_at: datetime
    last_used_at: Optional[datetime]
    use_count: int
    header_signature: Optional[str] = None


@dataclass(frozen=True)
class AccountHolder:
    """Person an invoice is billed to (student or guardian account)."""

    id: int
    first_name: str
    last_name: str
    student_number: Optional[str]
    created_at: datetime

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class Invoice:
    """Invoice ledger entry.

    ``amount_paid + outstanding_balance == amount_due`` while the status is
    Unpaid, Partial or Paid. When Overpaid, the outstanding balance is zero
    and ``overpaid_amount == amount_paid - amount_due``.
    """

    id: int
    reference_number: str
    account_holder_id: Optional[int]
    amount_due: Decimal
    amount_paid: Decimal
    outstanding_balance: Decimal
    overpaid_amount: Decimal
    status: InvoiceStatus
    due_date: date
    created_at: datetime
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class PaymentTransactionRecord:
    """Immutable audit record of one processed statement transaction."""

    id: int
    reference_number: str
    amount: Decimal
    payment_date: date
    description: Optional[str]
    invoice_id: Optional[int]
    status: ResultCategory
    match_strategy: Optional[str]
    needs_review: bool
    uploaded_by: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class UploadLog:
    """Per-batch upload activity summary."""

    id: int
    filename: str
    uploaded_by: Optional[int]
    transactions_processed: int
    matched_count: int
    partial_count: int
    overpaid_count: int
    unmatched_count: int
    duplicate_count: int
    error_count: int
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Normalized statement transaction, the unit of reconciliation work.

    ``amount`` is always a strictly positive magnitude.
    """

    reference: str
    amount: Decimal
    date: date
    description: str
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False)
    line_number: Optional[int] = None
    date_inferred: bool = False


@dataclass(frozen=True)
class BalanceSnapshot:
    """Invoice balances at one point of a reconciliation."""

    status: InvoiceStatus
    amount_due: Decimal
    amount_paid: Decimal
    outstanding_balance: Decimal
    overpaid_amount: Decimal

    @classmethod
    def of(cls, invoice: Invoice) -> "BalanceSnapshot":
        return cls(
            status=invoice.status,
            amount_due=invoice.amount_due,
            amount_paid=invoice.amount_paid,
            outstanding_balance=invoice.outstanding_balance,
            overpaid_amount=invoice.overpaid_amount,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "amount_due": str(self.amount_due),
            "amount_paid": str(self.amount_paid),
            "outstanding_balance": str(self.outstanding_balance),
            "overpaid_amount": str(self.overpaid_amount),
        }


@dataclass(frozen=True)
class ProcessedTransaction:
    """One transaction's classification with the detail needed to explain it."""

    transaction: Transaction
    category: ResultCategory
    invoice_id: Optional[int] = None
    invoice_reference: Optional[str] = None
    match_strategy: Optional[str] = None
    needs_review: bool = False
    before: Optional[BalanceSnapshot] = None
    after: Optional[BalanceSnapshot] = None
    record_id: Optional[int] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        txn = self.transaction
        return {
            "reference": txn.reference,
            "amount": str(txn.amount),
            "date": txn.date.isoformat(),
            "description": txn.description,
            "line_number": txn.line_number,
            "date_inferred": txn.date_inferred,
            "category": self.category.value,
            "invoice_id": self.invoice_id,
            "invoice": self.invoice_reference,
            "match_strategy": self.match_strategy,
            "needs_review": self.needs_review,
            "before": self.before.to_dict() if self.before else None,
            "after": self.after.to_dict() if self.after else None,
            "record_id": self.record_id,
            "reason": self.reason,
        }


@dataclass
class BatchResult:
    """Bucketed outcome of processing one statement.

    Every transaction that reached reconciliation sits in exactly one
    bucket.
    """

    matched: list[ProcessedTransaction] = field(default_factory=list)
    partial: list[ProcessedTransaction] = field(default_factory=list)
    overpaid: list[ProcessedTransaction] = field(default_factory=list)
    unmatched: list[ProcessedTransaction] = field(default_factory=list)
    duplicates: list[ProcessedTransaction] = field(default_factory=list)
    errors: list[ProcessedTransaction] = field(default_factory=list)
    skipped_rows: int = 0
    rejected_rows: list[tuple[int, str]] = field(default_factory=list)

    def add(self, entry: ProcessedTransaction) -> None:
        getattr(self, entry.category.value).append(entry)

    def bucket(self, category: ResultCategory) -> list[ProcessedTransaction]:
        return getattr(self, category.value)

    @property
    def total(self) -> int:
        return sum(len(self.bucket(category)) for category in ResultCategory)

    def summary(self) -> dict[str, int]:
        counts = {category.value: len(self.bucket(category)) for category in ResultCategory}
        counts["total_processed"] = self.total
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "results": {
                category.value: [entry.to_dict() for entry in self.bucket(category)]
                for category in ResultCategory
            },
            "skipped_rows": self.skipped_rows,
            "rejected_rows": [
                {"line": line, "reason": reason} for line, reason in self.rejected_rows
            ],
        }
