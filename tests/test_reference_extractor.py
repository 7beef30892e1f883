"""Tests for payer reference extraction."""

import pytest

from feerecon.domain.reference_extractor import (
    REFERENCE_RULES,
    account_number,
    extract_reference,
    keyword_token,
    payer_name,
    structured_reference,
)


class TestRules:
    """Each rule on its own."""

    def test_account_number(self):
        assert account_number("Deposit 1234567 thanks") == "1234567"
        assert account_number("12345") is None
        assert account_number("123456789") is None

    def test_structured_reference(self):
        assert structured_reference("Payment ABC12 Jan") == "ABC12"
        assert structured_reference("fees har149") == "har149"
        assert structured_reference("HARMONY149") is None

    def test_keyword_token(self):
        assert keyword_token("Student: jsmith") == "jsmith"
        assert keyword_token("REF #A7") == "A7"
        assert keyword_token("no keyword here") is None

    def test_payer_name(self):
        assert payer_name("Smith Grade 5") == "Smith"
        assert payer_name("Mary Jones gr. 4") == "Mary Jones"
        assert payer_name("Thabo class 3B") == "Thabo"
        assert payer_name("Grade fees") is None

    def test_rule_order(self):
        assert REFERENCE_RULES == (account_number, structured_reference, keyword_token, payer_name)


class TestExtractReference:
    """Tests for extract_reference."""

    @pytest.mark.parametrize(
        "reference,description,expected",
        [
            ("HAR149", "School fees", "HAR149"),
            (None, "EFT Payment HAR149", "HAR149"),
            ("HAR149", "Student 1234567", "1234567"),
            ("", "Student: jsmith", "jsmith"),
            ("", "Smith Grade 5", "Smith"),
            ("XYZ", "", "XYZ"),
            (None, "Cash deposit", "Cash deposit"),
            ("  John  ", None, "John"),
        ],
    )
    def test_first_rule_wins(self, reference, description, expected):
        assert extract_reference(reference, description) == expected

    def test_empty_inputs(self):
        assert extract_reference(None, None) is None
        assert extract_reference("  ", "") is None
