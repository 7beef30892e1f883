"""Tests for domain entities."""

import pytest
from datetime import date
from decimal import Decimal

from feerecon.domain.entities import (
    BalanceSnapshot,
    BatchResult,
    ColumnMapping,
    InvoiceStatus,
    ProcessedTransaction,
    ResultCategory,
    Transaction,
)
from feerecon.domain.errors import ValidationError


class TestColumnMapping:
    """ColumnMapping validates its mode on construction."""

    def test_single_amount_mode(self):
        mapping = ColumnMapping(date="Date", reference="Ref", amount="Amount")
        assert mapping.is_debit_credit is False

    def test_debit_credit_mode(self):
        mapping = ColumnMapping(date="Date", description="Details", debit="Dr", credit="Cr")
        assert mapping.is_debit_credit is True

    def test_both_modes_rejected(self):
        with pytest.raises(ValidationError, match="not both"):
            ColumnMapping(date="Date", reference="Ref", amount="Amount", debit="Dr", credit="Cr")

    def test_no_amount_rejected(self):
        with pytest.raises(ValidationError, match="amount column"):
            ColumnMapping(date="Date", reference="Ref", debit="Dr")

    def test_date_required(self):
        with pytest.raises(ValidationError, match="date"):
            ColumnMapping(date="", reference="Ref", amount="Amount")

    def test_reference_or_description_required(self):
        with pytest.raises(ValidationError, match="reference or a description"):
            ColumnMapping(date="Date", amount="Amount")

    def test_from_roles(self):
        mapping = ColumnMapping.from_roles({"date": "D", "reference": "R", "amount": "A", "balance": ""})

        assert mapping.roles() == {
            "reference": "R",
            "amount": "A",
            "date": "D",
            "description": None,
            "debit": None,
            "credit": None,
            "balance": None,
        }

    def test_from_roles_unknown_role(self):
        with pytest.raises(ValidationError, match="Unknown column role"):
            ColumnMapping.from_roles({"date": "D", "reference": "R", "amount": "A", "payee": "P"})


def make_entry(category, reference="HAR149"):
    txn = Transaction(reference=reference, amount=Decimal("10.00"), date=date(2024, 1, 1), description="x")
    return ProcessedTransaction(transaction=txn, category=category)


class TestBatchResult:
    """Tests for BatchResult."""

    def test_add_routes_to_bucket(self):
        result = BatchResult()

        result.add(make_entry(ResultCategory.MATCHED))
        result.add(make_entry(ResultCategory.DUPLICATE))
        result.add(make_entry(ResultCategory.ERROR))

        assert len(result.matched) == 1
        assert len(result.duplicates) == 1
        assert len(result.errors) == 1
        assert result.total == 3
        assert result.summary()["total_processed"] == 3
        assert result.summary()["partial"] == 0

    def test_to_dict(self):
        result = BatchResult(skipped_rows=2, rejected_rows=[(4, "No positive amount found")])
        before = BalanceSnapshot(
            status=InvoiceStatus.UNPAID,
            amount_due=Decimal("10.00"),
            amount_paid=Decimal("0.00"),
            outstanding_balance=Decimal("10.00"),
            overpaid_amount=Decimal("0.00"),
        )
        txn = Transaction(reference="HAR149", amount=Decimal("10.00"), date=date(2024, 1, 1), description="x")
        result.add(ProcessedTransaction(transaction=txn, category=ResultCategory.MATCHED, before=before))

        data = result.to_dict()

        entry = data["results"]["matched"][0]
        assert entry["amount"] == "10.00"
        assert entry["date"] == "2024-01-01"
        assert entry["before"]["status"] == "Unpaid"
        assert entry["after"] is None
        assert data["skipped_rows"] == 2
        assert data["rejected_rows"] == [{"line": 4, "reason": "No positive amount found"}]
        assert set(data["results"]) == {c.value for c in ResultCategory}
