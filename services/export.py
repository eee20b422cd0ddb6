# WORKFLOW: Filtered export of stored prices as a zipped CSV file.
# Used by: Price download endpoint, CLI export command
# Functions:
# 1. PriceFilter - Optional inclusive date and price bounds
# 2. build_price_query() - Translate the filter into a parameterized SELECT
# 3. fetch_prices() - Run the query ordered by id
# 4. serialize_prices_csv() - Render header + rows with fixed price/date formats
# 5. package_zip() - Wrap the CSV as the single member data.csv
# 6. export_prices_archive() - Filter -> query -> CSV -> zip bytes
#
# Export flow: Query params -> PriceFilter -> SELECT ... WHERE ... ORDER BY id -> CSV -> zip
# An empty result still produces an archive with the header row.

import csv
import io
import logging
import zipfile
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import BadInput, StorageFailure
from db.models import PriceRecord
from etl.validators import PRICE_QUANTUM

logger = logging.getLogger(__name__)

EXPORT_HEADER = ["id", "name", "category", "price", "create_date"]
EXPORT_MEMBER_NAME = "data.csv"
EXPORT_MEDIA_TYPE = "application/zip"


@dataclass(frozen=True)
class PriceFilter:
    """Inclusive bounds; a None bound imposes no constraint."""
    start: Optional[date] = None
    end: Optional[date] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None

    def validate(self) -> "PriceFilter":
        if self.start is not None and self.end is not None and self.start > self.end:
            raise BadInput(f"start ({self.start}) is after end ({self.end})")
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise BadInput(f"min ({self.min_price}) is greater than max ({self.max_price})")
        return self


def build_price_query(price_filter: PriceFilter) -> Select:
    """
    Build the SELECT for a filter.

    Each present bound adds one conjunctive predicate; results are ordered by
    id ascending.
    """
    conditions = []
    if price_filter.start is not None:
        conditions.append(PriceRecord.create_date >= price_filter.start)
    if price_filter.end is not None:
        conditions.append(PriceRecord.create_date <= price_filter.end)
    if price_filter.min_price is not None:
        conditions.append(PriceRecord.price >= price_filter.min_price)
    if price_filter.max_price is not None:
        conditions.append(PriceRecord.price <= price_filter.max_price)

    return select(PriceRecord).where(*conditions).order_by(PriceRecord.id)


def fetch_prices(db: Session, price_filter: PriceFilter) -> List[PriceRecord]:
    """Run the filtered query and return the matching records."""
    query = build_price_query(price_filter.validate())
    try:
        return list(db.execute(query).scalars().all())
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Price query failed: {e}")
        raise StorageFailure("Database query failed") from e


def format_price(value) -> str:
    """Format a price with exactly two decimal places."""
    return str(Decimal(str(value)).quantize(PRICE_QUANTUM))


def serialize_prices_csv(records: Iterable[PriceRecord]) -> str:
    """Render records as CSV text with the export header."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for record in records:
        writer.writerow([
            record.id,
            record.name,
            record.category,
            format_price(record.price),
            record.create_date.strftime("%Y-%m-%d"),
        ])
    return buffer.getvalue()


def package_zip(csv_text: str) -> bytes:
    """Package CSV text as the single member of a new zip archive."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(EXPORT_MEMBER_NAME, csv_text.encode("utf-8"))
    return buffer.getvalue()


def export_prices_archive(db: Session, price_filter: PriceFilter) -> bytes:
    """
    Export the filtered prices as zip bytes.

    Args:
        db: Database session
        price_filter: Optional inclusive bounds

    Returns:
        Zip archive containing data.csv
    """
    records = fetch_prices(db, price_filter)
    logger.info(f"Exporting {len(records)} price records")
    return package_zip(serialize_prices_csv(records))
