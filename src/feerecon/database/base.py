"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from feerecon.domain.entities import (
    AccountHolder,
    ColumnMapping,
    Invoice,
    InvoiceStatus,
    MappingProfile,
    MatchLookup,
    PaymentTransactionRecord,
    ResultCategory,
    UploadLog,
)


class Database(ABC):
    """Abstract database interface for feerecon."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Run a block as one unit of work.

        Writes inside the block are committed together when it exits
        normally and rolled back when it raises. Storage errors surface as
        PersistenceFailure.
        """
        pass

    # Account holder operations
    @abstractmethod
    def create_account_holder(
        self, first_name: str, last_name: str, student_number: Optional[str] = None
    ) -> int:
        """Create an account holder. Returns account holder ID."""
        pass

    @abstractmethod
    def get_account_holder(self, holder_id: int) -> Optional[AccountHolder]:
        """Get account holder by ID."""
        pass

    @abstractmethod
    def list_account_holders(self) -> list[AccountHolder]:
        """List all account holders."""
        pass

    # Invoice operations
    @abstractmethod
    def create_invoice(
        self,
        reference_number: str,
        amount_due: Decimal,
        due_date: date,
        account_holder_id: Optional[int] = None,
    ) -> int:
        """Create an Unpaid invoice. Returns invoice ID."""
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        """Get invoice by ID."""
        pass

    @abstractmethod
    def get_invoice_by_reference(self, reference_number: str) -> Optional[Invoice]:
        """Get invoice by reference number (case-insensitive)."""
        pass

    @abstractmethod
    def list_invoices(self, status: Optional[InvoiceStatus] = None) -> list[Invoice]:
        """List invoices, optionally filtered by status."""
        pass

    @abstractmethod
    def find_open_invoices_by_reference(self, candidate: str, lookup: MatchLookup) -> list[Invoice]:
        """Find Unpaid or Partial invoices for a candidate reference.

        Results are ordered by due date, oldest first, then by ID.
        """
        pass

    @abstractmethod
    def update_invoice_balance(
        self,
        invoice_id: int,
        status: InvoiceStatus,
        amount_paid: Decimal,
        outstanding_balance: Decimal,
        overpaid_amount: Decimal,
    ) -> Invoice:
        """Write new balances for an invoice and return it."""
        pass

    # Payment transaction operations
    @abstractmethod
    def find_existing_transaction(
        self, reference_number: str, amount: Decimal, payment_date: date
    ) -> Optional[PaymentTransactionRecord]:
        """Find a recorded transaction with the same reference, amount and date."""
        pass

    @abstractmethod
    def create_transaction_record(
        self,
        reference_number: str,
        amount: Decimal,
        payment_date: date,
        status: ResultCategory,
        description: Optional[str] = None,
        invoice_id: Optional[int] = None,
        match_strategy: Optional[str] = None,
        needs_review: bool = False,
        uploaded_by: Optional[int] = None,
    ) -> int:
        """Record a processed transaction. Returns record ID."""
        pass

    @abstractmethod
    def list_transaction_records(
        self,
        status: Optional[ResultCategory] = None,
        reference_number: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[PaymentTransactionRecord]:
        """List recorded transactions, newest payment date first."""
        pass

    @abstractmethod
    def count_transaction_records(
        self,
        status: Optional[ResultCategory] = None,
        reference_number: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """Count recorded transactions matching the filters."""
        pass

    # Mapping profile operations
    @abstractmethod
    def get_mapping_profile_by_name(self, name: str) -> Optional[MappingProfile]:
        """Get mapping profile by name."""
        pass

    @abstractmethod
    def get_mapping_profile_by_signature(self, header_signature: str) -> Optional[MappingProfile]:
        """Get the most used mapping profile saved for a header signature."""
        pass

    @abstractmethod
    def get_default_mapping_profile(self) -> Optional[MappingProfile]:
        """Get the profile marked as default, if any."""
        pass

    @abstractmethod
    def upsert_mapping_profile(
        self,
        name: str,
        mapping: ColumnMapping,
        bank_name: Optional[str] = None,
        created_by: Optional[int] = None,
        header_signature: Optional[str] = None,
        is_default: Optional[bool] = None,
    ) -> int:
        """Create a profile, or replace the columns of an existing one by name.

        Returns profile ID. At most one profile is the default: marking one
        clears the flag on all others. ``is_default=None`` leaves the flag
        as it is.
        """
        pass

    @abstractmethod
    def record_mapping_profile_use(self, profile_id: int) -> None:
        """Increment use count and stamp last-used time."""
        pass

    @abstractmethod
    def list_mapping_profiles(self, created_by: Optional[int] = None) -> list[MappingProfile]:
        """List profiles, most used first, then most recently used."""
        pass

    @abstractmethod
    def delete_mapping_profile(self, profile_id: int) -> None:
        """Delete a mapping profile."""
        pass

    # Upload log operations
    @abstractmethod
    def create_upload_log(
        self,
        filename: str,
        counts: dict[str, int],
        uploaded_by: Optional[int] = None,
    ) -> int:
        """Record an upload summary. Returns log ID."""
        pass

    @abstractmethod
    def list_upload_logs(self, limit: Optional[int] = None) -> list[UploadLog]:
        """List upload logs, newest first."""
        pass
