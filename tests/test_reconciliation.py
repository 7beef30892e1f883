"""Tests for the invoice balance state machine."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from feerecon.domain.entities import BalanceSnapshot, Invoice, InvoiceStatus, ResultCategory
from feerecon.domain.errors import ValidationError
from feerecon.domain.reconciliation import apply_payment, check_balance_invariant


def make_invoice(amount_due="2500.00", amount_paid="0.00", status=InvoiceStatus.UNPAID):
    due = Decimal(amount_due)
    paid = Decimal(amount_paid)
    return Invoice(
        id=1,
        reference_number="HAR149",
        account_holder_id=None,
        amount_due=due,
        amount_paid=paid,
        outstanding_balance=due - paid,
        overpaid_amount=Decimal("0.00"),
        status=status,
        due_date=date(2024, 1, 31),
        created_at=datetime.now(UTC),
    )


class TestApplyPayment:
    """Tests for apply_payment."""

    def test_exact_payment(self):
        category, after = apply_payment(make_invoice(), Decimal("2500.00"))

        assert category is ResultCategory.MATCHED
        assert after.status is InvoiceStatus.PAID
        assert after.amount_paid == Decimal("2500.00")
        assert after.outstanding_balance == Decimal("0.00")
        assert after.overpaid_amount == Decimal("0.00")

    def test_overpayment(self):
        category, after = apply_payment(make_invoice(), Decimal("2600.00"))

        assert category is ResultCategory.OVERPAID
        assert after.status is InvoiceStatus.OVERPAID
        assert after.amount_paid == Decimal("2600.00")
        assert after.outstanding_balance == Decimal("0.00")
        assert after.overpaid_amount == Decimal("100.00")

    def test_partial_payment(self):
        category, after = apply_payment(make_invoice(), Decimal("1000.00"))

        assert category is ResultCategory.PARTIAL
        assert after.status is InvoiceStatus.PARTIAL
        assert after.amount_paid == Decimal("1000.00")
        assert after.outstanding_balance == Decimal("1500.00")

    def test_partial_then_settled(self):
        invoice = make_invoice(amount_paid="1000.00", status=InvoiceStatus.PARTIAL)

        category, after = apply_payment(invoice, Decimal("1500.00"))

        assert category is ResultCategory.MATCHED
        assert after.status is InvoiceStatus.PAID

    def test_overpaid_measured_against_total_due(self):
        invoice = make_invoice(amount_paid="2000.00", status=InvoiceStatus.PARTIAL)

        _, after = apply_payment(invoice, Decimal("800.00"))

        assert after.overpaid_amount == Decimal("300.00")
        assert after.amount_paid == Decimal("2800.00")

    def test_amounts_rounded_to_cents(self):
        invoice = make_invoice(amount_due="100.00")

        _, after = apply_payment(invoice, Decimal("33.335"))

        assert after.amount_paid == Decimal("33.34")
        assert after.outstanding_balance == Decimal("66.66")

    @pytest.mark.parametrize("status", [InvoiceStatus.PAID, InvoiceStatus.OVERPAID])
    def test_closed_invoice_rejected(self, status):
        with pytest.raises(ValidationError, match="cannot take payments"):
            apply_payment(make_invoice(status=status), Decimal("10.00"))

    @pytest.mark.parametrize("amount", ["0", "-5.00"])
    def test_non_positive_amount_rejected(self, amount):
        with pytest.raises(ValidationError, match="must be positive"):
            apply_payment(make_invoice(), Decimal(amount))


class TestBalanceInvariant:
    """Tests for check_balance_invariant."""

    def test_inconsistent_partial(self):
        balances = BalanceSnapshot(
            status=InvoiceStatus.PARTIAL,
            amount_due=Decimal("100.00"),
            amount_paid=Decimal("40.00"),
            outstanding_balance=Decimal("50.00"),
            overpaid_amount=Decimal("0.00"),
        )

        with pytest.raises(ValidationError, match="Inconsistent"):
            check_balance_invariant(balances)

    def test_inconsistent_overpaid(self):
        balances = BalanceSnapshot(
            status=InvoiceStatus.OVERPAID,
            amount_due=Decimal("100.00"),
            amount_paid=Decimal("150.00"),
            outstanding_balance=Decimal("0.00"),
            overpaid_amount=Decimal("40.00"),
        )

        with pytest.raises(ValidationError):
            check_balance_invariant(balances)
