"""Tests for payment history queries."""

import pytest
from datetime import date
from decimal import Decimal

from feerecon.domain.entities import ResultCategory
from feerecon.domain.errors import ValidationError
from feerecon.domain.payment_history import PaymentHistoryService


@pytest.fixture
def history(temp_db):
    """Recorded transactions across January and February."""
    for ref, amount, day, status in [
        ("HAR149", "100.00", date(2024, 1, 5), ResultCategory.PARTIAL),
        ("HAR149", "200.00", date(2024, 1, 20), ResultCategory.MATCHED),
        ("ZZZ999", "50.00", date(2024, 2, 1), ResultCategory.UNMATCHED),
        ("HAR020", "75.00", date(2024, 2, 10), ResultCategory.PARTIAL),
    ]:
        temp_db.create_transaction_record(
            reference_number=ref, amount=Decimal(amount), payment_date=day, status=status
        )
    return PaymentHistoryService(temp_db)


def test_newest_first(history):
    page = history.list_transactions()

    assert [r.payment_date for r in page.records] == [
        date(2024, 2, 10),
        date(2024, 2, 1),
        date(2024, 1, 20),
        date(2024, 1, 5),
    ]
    assert page.total == 4
    assert page.total_pages == 1


def test_filters(history):
    assert history.list_transactions(status="partial").total == 2
    assert history.list_transactions(reference="har1").total == 2
    page = history.list_transactions(start_date=date(2024, 1, 10), end_date=date(2024, 2, 1))
    assert [r.reference_number for r in page.records] == ["ZZZ999", "HAR149"]


def test_pagination(history):
    page = history.list_transactions(page=2, limit=3)

    assert len(page.records) == 1
    assert page.records[0].payment_date == date(2024, 1, 5)
    assert page.total == 4
    assert page.total_pages == 2


@pytest.mark.parametrize(
    "kwargs",
    [
        {"status": "refunded"},
        {"page": 0},
        {"limit": 0},
        {"start_date": date(2024, 3, 1), "end_date": date(2024, 1, 1)},
    ],
)
def test_invalid_queries(history, kwargs):
    with pytest.raises(ValidationError):
        history.list_transactions(**kwargs)


def test_list_uploads(temp_db):
    service = PaymentHistoryService(temp_db)
    temp_db.create_upload_log("a.csv", {"total_processed": 2, "matched": 2})
    temp_db.create_upload_log("b.csv", {"total_processed": 1, "errors": 1})

    logs = service.list_uploads()

    assert [log.filename for log in logs] == ["b.csv", "a.csv"]
    assert logs[0].error_count == 1
    assert logs[1].matched_count == 2
    assert len(service.list_uploads(limit=1)) == 1
