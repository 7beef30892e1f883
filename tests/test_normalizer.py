"""Tests for statement row normalization."""

import pytest
from datetime import date
from decimal import Decimal

from feerecon.domain.entities import ColumnMapping
from feerecon.domain.errors import ExtractionFailure
from feerecon.domain.normalizer import (
    extract_transaction,
    parse_rows,
    resolve_date,
    should_skip_row,
)
from feerecon.domain.source_reader import CSVSource

SINGLE = ColumnMapping(date="Date", reference="Reference", description="Description", amount="Amount")
SPLIT = ColumnMapping(date="Date", description="Description", debit="Debit", credit="Credit")


class TestShouldSkipRow:
    """Tests for should_skip_row."""

    def test_empty_row(self):
        assert should_skip_row({"Date": "", "Amount": "  "})

    def test_repeated_header(self):
        assert should_skip_row(
            {"Date": "Date", "Reference": "Reference", "Amount": "Amount", "Description": "Notes"}
        )

    @pytest.mark.parametrize("text", ["Opening Balance", "Closing balance", "TOTAL", "Statement summary"])
    def test_summary_rows(self, text):
        assert should_skip_row({"Date": "", "Description": text, "Amount": "100.00"})

    def test_payment_row_kept(self):
        assert not should_skip_row(
            {"Date": "2024-01-15", "Reference": "HAR149", "Description": "Fees", "Amount": "2500.00"}
        )


class TestExtractTransaction:
    """Tests for extract_transaction."""

    def test_single_amount_row(self):
        row = {"Date": "2024-01-15", "Reference": "HAR149", "Description": "School fees", "Amount": "R2,500.00"}

        txn = extract_transaction(row, SINGLE, line_number=2)

        assert txn.reference == "HAR149"
        assert txn.amount == Decimal("2500.00")
        assert txn.date == date(2024, 1, 15)
        assert txn.description == "School fees"
        assert txn.line_number == 2
        assert txn.date_inferred is False

    def test_negative_amount_folded_to_magnitude(self):
        row = {"Date": "2024-01-15", "Reference": "HAR149", "Description": "", "Amount": "(300.00)"}

        assert extract_transaction(row, SINGLE).amount == Decimal("300.00")

    def test_credit_column_only(self):
        row = {"Date": "15/01/2024", "Description": "EFT HAR149", "Debit": "", "Credit": "2 500.00"}

        txn = extract_transaction(row, SPLIT)

        assert txn.amount == Decimal("2500.00")
        assert txn.reference == "HAR149"
        assert txn.date == date(2024, 1, 15)

    def test_debit_row_rejected(self):
        row = {"Date": "16/01/2024", "Description": "Fees HAR149", "Debit": "15.00", "Credit": ""}

        with pytest.raises(ExtractionFailure, match="positive amount"):
            extract_transaction(row, SPLIT)

    def test_missing_reference_rejected(self):
        row = {"Date": "2024-01-15", "Reference": "", "Description": "", "Amount": "10.00"}

        with pytest.raises(ExtractionFailure, match="No reference"):
            extract_transaction(row, SINGLE)

    def test_bad_date_falls_back_to_today(self):
        row = {"Date": "sometime", "Reference": "HAR149", "Description": "", "Amount": "10.00"}

        txn = extract_transaction(row, SINGLE)

        assert txn.date == date.today()
        assert txn.date_inferred is True


def test_resolve_date_logs_fallback(caplog):
    with caplog.at_level("WARNING"):
        resolved, inferred = resolve_date("??", line_number=7)

    assert inferred is True
    assert resolved == date.today()
    assert "line 7" in caplog.text


def test_parse_rows_collects_diagnostics(fixtures_dir):
    source = CSVSource((fixtures_dir / "statement_debit_credit.csv").read_bytes())

    result = parse_rows(source, SPLIT)

    assert result.total_rows == 4
    assert result.skipped == 1
    assert [line for line, _ in result.rejected] == [4]
    assert [t.reference for t in result.transactions] == ["HAR149", "Smith"]
    assert [t.line_number for t in result.transactions] == [3, 5]
