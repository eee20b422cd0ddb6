"""Tests for the row validation chain."""

from datetime import date
from decimal import Decimal

import pytest

from etl.validators import (
    IdentifierMode,
    RejectReason,
    ValidatedRecord,
    build_check_chain,
    check_column_count,
    check_create_date,
    check_identifier,
    check_price,
    check_text_fields,
    parse_create_date,
    parse_price,
    validate_row,
)

CONTENT_CHAIN = build_check_chain(IdentifierMode.CONTENT)
IDENTIFIER_CHAIN = build_check_chain(IdentifierMode.IDENTIFIER)


def test_chain_order_is_fixed():
    assert CONTENT_CHAIN == [check_column_count, check_price, check_create_date, check_text_fields]
    assert IDENTIFIER_CHAIN == [
        check_column_count, check_identifier, check_price, check_create_date, check_text_fields,
    ]


def test_valid_row_is_normalized():
    outcome = validate_row(["7", "  Apple ", " Fruit", " 1.5 ", " 2024-01-31 "], CONTENT_CHAIN)

    assert outcome.accepted
    assert outcome.record == ValidatedRecord(
        identifier=None,
        name="Apple",
        category="Fruit",
        price=Decimal("1.50"),
        create_date=date(2024, 1, 31),
    )


def test_identifier_mode_keeps_caller_id():
    outcome = validate_row(["42", "Apple", "Fruit", "1.50", "2024-01-31"], IDENTIFIER_CHAIN)

    assert outcome.record.identifier == 42


def test_extra_columns_are_ignored():
    outcome = validate_row(["1", "Apple", "Fruit", "1.50", "2024-01-31", "extra", "more"], CONTENT_CHAIN)

    assert outcome.accepted


@pytest.mark.parametrize(
    "row, reason",
    [
        ([], RejectReason.TOO_FEW_COLUMNS),
        (["1", "Apple", "Fruit", "1.50"], RejectReason.TOO_FEW_COLUMNS),
        (["1", "Apple", "Fruit", "0", "2024-01-01"], RejectReason.BAD_PRICE),
        (["1", "Apple", "Fruit", "-3", "2024-01-01"], RejectReason.BAD_PRICE),
        (["1", "Apple", "Fruit", "abc", "2024-01-01"], RejectReason.BAD_PRICE),
        (["1", "Apple", "Fruit", "NaN", "2024-01-01"], RejectReason.BAD_PRICE),
        (["1", "Apple", "Fruit", "0.001", "2024-01-01"], RejectReason.BAD_PRICE),
        (["1", "Apple", "Fruit", "100000000", "2024-01-01"], RejectReason.BAD_PRICE),
        (["1", "Apple", "Fruit", "1e30", "2024-01-01"], RejectReason.BAD_PRICE),
        (["1", "Apple", "Fruit", "123456789012345678901234567890", "2024-01-01"], RejectReason.BAD_PRICE),
        (["1", "Apple", "Fruit", "-1e30", "2024-01-01"], RejectReason.BAD_PRICE),
        (["1", "Apple", "Fruit", "1.00", "2024/01/01"], RejectReason.BAD_DATE),
        (["1", "Apple", "Fruit", "1.00", "2024-1-1"], RejectReason.BAD_DATE),
        (["1", "Apple", "Fruit", "1.00", "2024-02-30"], RejectReason.BAD_DATE),
        (["1", "Apple", "Fruit", "1.00", "\u0662\u0660\u0662\u0664-01-01"], RejectReason.BAD_DATE),
        (["1", "Apple", "Fruit", "1.00", "2024-01-01T10:00:00"], RejectReason.BAD_DATE),
        (["1", "   ", "Fruit", "1.00", "2024-01-01"], RejectReason.BAD_TEXT),
        (["1", "Apple", "", "1.00", "2024-01-01"], RejectReason.BAD_TEXT),
        (["1", "A" * 256, "Fruit", "1.00", "2024-01-01"], RejectReason.BAD_TEXT),
    ],
)
def test_rejections(row, reason):
    outcome = validate_row(row, CONTENT_CHAIN)

    assert not outcome.accepted
    assert outcome.record is None
    assert outcome.reason is reason


@pytest.mark.parametrize("raw_id", ["abc", "0", "-1", "1.5", "+3", "", "2147483648", "\u0664\u0662"])
def test_identifier_rejections(raw_id):
    outcome = validate_row([raw_id, "Apple", "Fruit", "1.00", "2024-01-01"], IDENTIFIER_CHAIN)

    assert outcome.reason is RejectReason.BAD_IDENTIFIER


def test_content_mode_ignores_identifier_column():
    outcome = validate_row(["not-a-number", "Apple", "Fruit", "1.00", "2024-01-01"], CONTENT_CHAIN)

    assert outcome.accepted
    assert outcome.record.identifier is None


def test_first_failing_check_wins():
    # Bad price, bad date and empty name: price is checked first
    outcome = validate_row(["1", "", "", "0", "yesterday"], CONTENT_CHAIN)
    assert outcome.reason is RejectReason.BAD_PRICE

    # Bad date and empty name: date is checked before text fields
    outcome = validate_row(["1", "", "", "2.00", "yesterday"], CONTENT_CHAIN)
    assert outcome.reason is RejectReason.BAD_DATE


def test_short_rows_are_not_counted():
    assert not validate_row(["1", "Apple"], CONTENT_CHAIN).counted
    assert validate_row(["1", "Apple", "Fruit", "0", "2024-01-01"], CONTENT_CHAIN).counted
    assert validate_row(["1", "Apple", "Fruit", "1", "2024-01-01"], CONTENT_CHAIN).counted


def test_parse_price_rounds_half_up():
    assert parse_price("2.005") == Decimal("2.01")
    assert parse_price("2.004") == Decimal("2.00")
    assert parse_price("1e2") == Decimal("100.00")


def test_parse_create_date():
    assert parse_create_date("2024-02-29") == date(2024, 2, 29)
    assert parse_create_date("2023-02-29") is None
    assert parse_create_date("20240101") is None


def test_content_key():
    record = ValidatedRecord(None, "Apple", "Fruit", Decimal("1.50"), date(2024, 1, 1))

    assert record.content_key == ("Apple", "Fruit", Decimal("1.50"), date(2024, 1, 1))
