"""Recorded payment transaction and upload history queries."""

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from feerecon.database.base import Database
from feerecon.domain.entities import PaymentTransactionRecord, ResultCategory, UploadLog
from feerecon.domain.errors import ValidationError

DEFAULT_PAGE_SIZE = 50


@dataclass(frozen=True)
class TransactionPage:
    """One page of recorded transactions."""

    records: list[PaymentTransactionRecord]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class PaymentHistoryService:
    """Service for browsing what past uploads recorded."""

    def __init__(self, db: Database):
        """Initialize payment history service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_transactions(
        self,
        status: Optional[ResultCategory | str] = None,
        reference: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> TransactionPage:
        """List recorded transactions, newest payment date first.

        Args:
            status: Only records with this result category
            reference: Only references containing this text (case-insensitive)
            start_date: Earliest payment date (inclusive)
            end_date: Latest payment date (inclusive)
            page: 1-based page number
            limit: Page size

        Raises:
            ValidationError: On an unknown status, bad paging or an inverted date range
        """
        if status is not None:
            try:
                status = ResultCategory(status)
            except ValueError:
                raise ValidationError(
                    f"Invalid status '{status}'. Must be one of: "
                    + ", ".join(c.value for c in ResultCategory)
                )
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive")
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")

        filters = dict(
            status=status, reference_number=reference, start_date=start_date, end_date=end_date
        )
        records = self.db.list_transaction_records(
            **filters, limit=limit, offset=(page - 1) * limit
        )
        total = self.db.count_transaction_records(**filters)
        return TransactionPage(records=records, total=total, page=page, limit=limit)

    def list_uploads(self, limit: Optional[int] = None) -> list[UploadLog]:
        """List upload logs, newest first."""
        return self.db.list_upload_logs(limit=limit)
