"""Tests for the invoice matching cascade."""

import pytest
from datetime import date
from decimal import Decimal

from feerecon.domain.entities import InvoiceStatus
from feerecon.domain.matching import (
    STRATEGIES,
    InvoiceMatcher,
    contains_candidate,
    exact_candidate,
    padded_candidate,
    payer_name_candidate,
    trimmed_candidate,
)


class TestCandidates:
    """Candidate functions are pure."""

    def test_exact(self):
        assert exact_candidate("HAR149") == "HAR149"

    @pytest.mark.parametrize(
        "reference,expected",
        [("HAR20", "HAR020"), ("HAR2", "HAR002"), ("HAR149", None), ("Smith", None), ("12", None)],
    )
    def test_padded(self, reference, expected):
        assert padded_candidate(reference) == expected

    @pytest.mark.parametrize(
        "reference,expected",
        [("HAR020", "HAR20"), ("HAR000", "HAR0"), ("HAR20", None), ("Smith", None)],
    )
    def test_trimmed(self, reference, expected):
        assert trimmed_candidate(reference) == expected

    def test_contains_needs_three_characters(self):
        assert contains_candidate("R14") == "R14"
        assert contains_candidate("14") is None

    def test_payer_name(self):
        assert payer_name_candidate("Smith") == "Smith"
        assert payer_name_candidate("John  Smith") == "John Smith"
        assert payer_name_candidate("Sam") is None
        assert payer_name_candidate("Smith1") is None

    def test_strategy_order(self):
        assert [s.name for s in STRATEGIES] == [
            "exact",
            "zero_padded",
            "zero_trimmed",
            "contains",
            "payer_name",
        ]
        assert [s.name for s in STRATEGIES if s.needs_review] == ["payer_name"]


class TestInvoiceMatcher:
    """Cascade against the ledger."""

    def test_exact_case_insensitive(self, temp_db, seeded_ledger):
        match = InvoiceMatcher(temp_db).match("har149")

        assert match.invoice.id == seeded_ledger["HAR149"]
        assert match.strategy == "exact"
        assert match.needs_review is False

    def test_zero_padded(self, temp_db, seeded_ledger):
        match = InvoiceMatcher(temp_db).match("HAR20")

        assert match.invoice.id == seeded_ledger["HAR020"]
        assert match.strategy == "zero_padded"
        assert match.candidate == "HAR020"

    def test_zero_trimmed(self, temp_db, invoice_service):
        invoice_id = invoice_service.create_invoice("HAR7", Decimal("100.00"), date(2024, 1, 1))

        match = InvoiceMatcher(temp_db).match("HAR007")

        assert match.invoice.id == invoice_id
        assert match.strategy == "zero_trimmed"

    def test_contains(self, temp_db, seeded_ledger):
        match = InvoiceMatcher(temp_db).match("R14")

        assert match.invoice.id == seeded_ledger["HAR149"]
        assert match.strategy == "contains"

    def test_payer_name_flagged_for_review(self, temp_db, seeded_ledger):
        match = InvoiceMatcher(temp_db).match("Smith")

        assert match.invoice.id == seeded_ledger["HAR300"]
        assert match.strategy == "payer_name"
        assert match.needs_review is True

    def test_full_name(self, temp_db, seeded_ledger):
        match = InvoiceMatcher(temp_db).match("john smith")

        assert match.invoice.id == seeded_ledger["HAR300"]

    def test_no_match(self, temp_db, seeded_ledger):
        assert InvoiceMatcher(temp_db).match("ZZZ999") is None
        assert InvoiceMatcher(temp_db).match("") is None
        assert InvoiceMatcher(temp_db).match(None) is None

    def test_closed_invoices_ignored(self, temp_db, seeded_ledger):
        temp_db.update_invoice_balance(
            seeded_ledger["HAR149"],
            status=InvoiceStatus.PAID,
            amount_paid=Decimal("2500.00"),
            outstanding_balance=Decimal("0.00"),
            overpaid_amount=Decimal("0.00"),
        )

        assert InvoiceMatcher(temp_db).match("HAR149") is None

    def test_oldest_due_date_first(self, temp_db, invoice_service):
        later = invoice_service.create_invoice("FEE1001", Decimal("10.00"), date(2024, 6, 1))
        earlier = invoice_service.create_invoice("FEE1002", Decimal("10.00"), date(2024, 1, 1))

        match = InvoiceMatcher(temp_db).match("FEE100")

        assert match.invoice.id == earlier
        assert match.invoice.id != later
