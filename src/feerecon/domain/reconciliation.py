"""Invoice balance state machine.

Unpaid and Partial invoices accept payments; Paid and Overpaid are
terminal for matching. Every amount is rounded to cents after each
operation.
"""

from decimal import Decimal

from feerecon.domain.entities import (
    BalanceSnapshot,
    Invoice,
    InvoiceStatus,
    OPEN_INVOICE_STATUSES,
    ResultCategory,
)
from feerecon.domain.errors import ValidationError
from feerecon.utils.amount_parser import to_money

ZERO = Decimal("0.00")


def apply_payment(invoice: Invoice, amount: Decimal) -> tuple[ResultCategory, BalanceSnapshot]:
    """Compute an invoice's balances after receiving a payment.

    Args:
        invoice: Open (Unpaid or Partial) invoice
        amount: Positive payment amount

    Returns:
        Tuple of (result category, balances after the payment)

    Raises:
        ValidationError: If the invoice is closed or the amount is not positive
    """
    if invoice.status not in OPEN_INVOICE_STATUSES:
        raise ValidationError(
            f"Invoice {invoice.reference_number} is {invoice.status.value} and cannot take payments"
        )
    amount = to_money(amount)
    if amount <= ZERO:
        raise ValidationError(f"Payment amount must be positive, got {amount}")

    amount_due = to_money(invoice.amount_due)
    amount_paid = to_money(invoice.amount_paid)
    outstanding = to_money(amount_due - amount_paid)
    new_paid = to_money(amount_paid + amount)

    if amount == outstanding:
        status, category = InvoiceStatus.PAID, ResultCategory.MATCHED
        new_outstanding, overpaid = ZERO, ZERO
    elif amount > outstanding:
        # Measured against the total due so repeated overpayments accumulate
        status, category = InvoiceStatus.OVERPAID, ResultCategory.OVERPAID
        new_outstanding, overpaid = ZERO, to_money(new_paid - amount_due)
    else:
        status, category = InvoiceStatus.PARTIAL, ResultCategory.PARTIAL
        new_outstanding, overpaid = to_money(outstanding - amount), ZERO

    after = BalanceSnapshot(
        status=status,
        amount_due=amount_due,
        amount_paid=new_paid,
        outstanding_balance=new_outstanding,
        overpaid_amount=overpaid,
    )
    check_balance_invariant(after)
    return category, after


def check_balance_invariant(balances: BalanceSnapshot) -> None:
    """Raise ValidationError unless the balances are consistent."""
    if balances.status is InvoiceStatus.OVERPAID:
        consistent = (
            balances.outstanding_balance == ZERO
            and balances.overpaid_amount > ZERO
            and balances.overpaid_amount == balances.amount_paid - balances.amount_due
        )
    else:
        consistent = balances.amount_paid + balances.outstanding_balance == balances.amount_due
    if not consistent:
        raise ValidationError(f"Inconsistent invoice balances: {balances}")
