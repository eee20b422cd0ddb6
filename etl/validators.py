# WORKFLOW: Row validation for CSV price records.
# Used by: Ingestion pipeline, CLI ingest command
# Functions:
# 1. check_column_count() - Row has the id,name,category,price,create_date layout
# 2. check_identifier() - Caller-supplied id is a positive integer (identifier mode only)
# 3. check_price() - Price is a positive decimal that fits NUMERIC(10, 2)
# 4. check_create_date() - Date is exactly YYYY-MM-DD
# 5. check_text_fields() - Trimmed name and category are non-empty
# 6. build_check_chain() - Assemble the ordered chain for a dedup mode
# 7. validate_row() - Run the chain and return a tagged RowOutcome
#
# Validation flow: raw row -> checks in order (first failure wins) -> accepted record | rejection
# Rejections are plain values: no exception is raised and nothing is logged per row.

"""
Ordered predicate chain that turns raw CSV rows into validated price records.
"""

import re
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

REQUIRED_COLUMNS = 5
ID_COLUMN, NAME_COLUMN, CATEGORY_COLUMN, PRICE_COLUMN, DATE_COLUMN = range(REQUIRED_COLUMNS)

PRICE_QUANTUM = Decimal("0.01")
# NUMERIC(10, 2) holds at most 8 integer digits
MAX_PRICE = Decimal("99999999.99")
MAX_IDENTIFIER = 2**31 - 1
MAX_TEXT_LENGTH = 255

_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_IDENTIFIER_PATTERN = re.compile(r"[0-9]+")


class IdentifierMode(str, Enum):
    CONTENT = "content"
    IDENTIFIER = "identifier"


class RejectReason(str, Enum):
    TOO_FEW_COLUMNS = "too_few_columns"
    BAD_IDENTIFIER = "bad_identifier"
    BAD_PRICE = "bad_price"
    BAD_DATE = "bad_date"
    BAD_TEXT = "bad_text"


ContentKey = Tuple[str, str, Decimal, date]


@dataclass(frozen=True)
class ValidatedRecord:
    """A normalized row that passed every check."""
    identifier: Optional[int]
    name: str
    category: str
    price: Decimal
    create_date: date

    @property
    def content_key(self) -> ContentKey:
        return (self.name, self.category, self.price, self.create_date)


@dataclass(frozen=True)
class RowOutcome:
    """Result of validating one row: either a record or a rejection reason."""
    record: Optional[ValidatedRecord] = None
    reason: Optional[RejectReason] = None

    @property
    def accepted(self) -> bool:
        return self.record is not None

    @property
    def counted(self) -> bool:
        """Rows too short to carry a record are not counted as seen."""
        return self.reason is not RejectReason.TOO_FEW_COLUMNS


# A check inspects the raw row, stores any parsed value in ``parsed`` and
# returns a rejection reason, or None to let the row continue.
RowCheck = Callable[[Sequence[str], Dict[str, Any]], Optional[RejectReason]]


def check_column_count(row: Sequence[str], parsed: Dict[str, Any]) -> Optional[RejectReason]:
    if len(row) < REQUIRED_COLUMNS:
        return RejectReason.TOO_FEW_COLUMNS
    return None


def check_identifier(row: Sequence[str], parsed: Dict[str, Any]) -> Optional[RejectReason]:
    raw = row[ID_COLUMN].strip()
    if not _IDENTIFIER_PATTERN.fullmatch(raw):
        return RejectReason.BAD_IDENTIFIER
    identifier = int(raw)
    if identifier <= 0 or identifier > MAX_IDENTIFIER:
        return RejectReason.BAD_IDENTIFIER
    parsed["identifier"] = identifier
    return None


def parse_price(raw: str) -> Optional[Decimal]:
    """
    Parse a price into a two-decimal Decimal.

    Returns None for anything that is not a finite number in (0, MAX_PRICE].
    """
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return None
    if not value.is_finite() or value <= 0 or value > MAX_PRICE:
        return None
    value = value.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)
    if value <= 0 or value > MAX_PRICE:
        return None
    return value


def check_price(row: Sequence[str], parsed: Dict[str, Any]) -> Optional[RejectReason]:
    price = parse_price(row[PRICE_COLUMN])
    if price is None:
        return RejectReason.BAD_PRICE
    parsed["price"] = price
    return None


def parse_create_date(raw: str) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` date, returning None otherwise."""
    raw = raw.strip()
    if not _DATE_PATTERN.fullmatch(raw):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def check_create_date(row: Sequence[str], parsed: Dict[str, Any]) -> Optional[RejectReason]:
    create_date = parse_create_date(row[DATE_COLUMN])
    if create_date is None:
        return RejectReason.BAD_DATE
    parsed["create_date"] = create_date
    return None


def check_text_fields(row: Sequence[str], parsed: Dict[str, Any]) -> Optional[RejectReason]:
    name = row[NAME_COLUMN].strip()
    category = row[CATEGORY_COLUMN].strip()
    for value in (name, category):
        if not value or len(value) > MAX_TEXT_LENGTH:
            return RejectReason.BAD_TEXT
    parsed["name"] = name
    parsed["category"] = category
    return None


def build_check_chain(mode: IdentifierMode) -> List[RowCheck]:
    """
    Build the ordered check chain for a dedup mode.

    The order is part of the contract: column count, identifier (identifier
    mode only), price, date, then name/category.
    """
    chain: List[RowCheck] = [check_column_count]
    if IdentifierMode(mode) is IdentifierMode.IDENTIFIER:
        chain.append(check_identifier)
    chain.extend([check_price, check_create_date, check_text_fields])
    return chain


def validate_row(row: Sequence[str], chain: Sequence[RowCheck]) -> RowOutcome:
    """
    Run ``row`` through ``chain``, stopping at the first failing check.

    Args:
        row: Raw CSV fields
        chain: Checks from build_check_chain()

    Returns:
        RowOutcome carrying either the record or the rejection reason
    """
    parsed: Dict[str, Any] = {}
    for check in chain:
        reason = check(row, parsed)
        if reason is not None:
            return RowOutcome(reason=reason)

    return RowOutcome(record=ValidatedRecord(
        identifier=parsed.get("identifier"),
        name=parsed["name"],
        category=parsed["category"],
        price=parsed["price"],
        create_date=parsed["create_date"],
    ))
