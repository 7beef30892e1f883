"""Invoice ledger domain service.

The reconciliation core only reads open invoices and moves their
balances; this service is the ledger side used to seed holders and
invoices and to export them.
"""

import csv
from datetime import date
from decimal import Decimal
from typing import Optional, TextIO

from feerecon.database.base import Database
from feerecon.domain.entities import AccountHolder, Invoice, InvoiceStatus
from feerecon.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_invoice_reference,
    invoice_not_found,
)
from feerecon.utils.amount_parser import to_money

EXPORT_HEADERS = [
    "Reference Number",
    "Student Number",
    "First Name",
    "Last Name",
    "Amount Due",
    "Amount Paid",
    "Outstanding Balance",
    "Overpaid Amount",
    "Due Date",
    "Status",
    "Created",
    "Updated",
]


class InvoiceService:
    """Service for managing account holders and invoices."""

    def __init__(self, db: Database):
        """Initialize invoice service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account_holder(
        self, first_name: str, last_name: str, student_number: Optional[str] = None
    ) -> int:
        """Create an account holder.

        Raises:
            ValidationError: If either name is empty
        """
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        if not first_name or not last_name:
            raise ValidationError("Account holder needs a first and last name")
        return self.db.create_account_holder(first_name, last_name, student_number or None)

    def get_account_holder(self, holder_id: int) -> Optional[AccountHolder]:
        return self.db.get_account_holder(holder_id)

    def create_invoice(
        self,
        reference_number: str,
        amount_due: Decimal,
        due_date: date,
        account_holder_id: Optional[int] = None,
    ) -> int:
        """Create an Unpaid invoice.

        Args:
            reference_number: Unique reference payers quote (e.g. HAR149)
            amount_due: Positive amount billed
            due_date: Date the invoice is due
            account_holder_id: Optional holder the invoice is billed to

        Returns:
            Invoice ID

        Raises:
            ValidationError: If the reference is empty or the amount not positive
            ConflictError: If the reference is already used
            NotFoundError: If the account holder does not exist
        """
        reference_number = (reference_number or "").strip().upper()
        if not reference_number:
            raise ValidationError("Invoice reference number cannot be empty")
        amount_due = to_money(amount_due)
        if amount_due <= 0:
            raise ValidationError(f"Invoice amount must be positive, got {amount_due}")
        if self.db.get_invoice_by_reference(reference_number) is not None:
            raise ConflictError(duplicate_invoice_reference(reference_number))
        if account_holder_id is not None and self.db.get_account_holder(account_holder_id) is None:
            raise NotFoundError(f"Account holder {account_holder_id} not found")

        return self.db.create_invoice(
            reference_number=reference_number,
            amount_due=amount_due,
            due_date=due_date,
            account_holder_id=account_holder_id,
        )

    def get_invoice(self, invoice_id: int) -> Invoice:
        """Get invoice by ID.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return invoice

    def get_invoice_by_reference(self, reference_number: str) -> Optional[Invoice]:
        return self.db.get_invoice_by_reference(reference_number)

    def list_invoices(self, status: Optional[InvoiceStatus | str] = None) -> list[Invoice]:
        """List invoices by due date, optionally filtered by status."""
        if status is not None:
            try:
                status = InvoiceStatus(status)
            except ValueError:
                raise ValidationError(
                    f"Invalid invoice status '{status}'. Must be one of: "
                    + ", ".join(s.value for s in InvoiceStatus)
                )
        return self.db.list_invoices(status=status)

    def export_csv(self, out: TextIO, status: Optional[InvoiceStatus | str] = None) -> int:
        """Write invoices as CSV, latest due date first.

        Returns:
            Number of invoices written
        """
        invoices = sorted(self.list_invoices(status), key=lambda inv: (inv.due_date, inv.id), reverse=True)
        holders = {h.id: h for h in self.db.list_account_holders()}

        writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(EXPORT_HEADERS)
        for inv in invoices:
            holder = holders.get(inv.account_holder_id)
            writer.writerow(
                [
                    inv.reference_number,
                    (holder.student_number or "") if holder else "",
                    holder.first_name if holder else "",
                    holder.last_name if holder else "",
                    inv.amount_due,
                    inv.amount_paid,
                    inv.outstanding_balance,
                    inv.overpaid_amount,
                    inv.due_date.isoformat(),
                    inv.status.value,
                    inv.created_at.date().isoformat() if inv.created_at else "",
                    inv.updated_at.date().isoformat() if inv.updated_at else "",
                ]
            )
        return len(invoices)
