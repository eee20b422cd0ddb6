# WORKFLOW: Transactional persistence of validated price records.
# Used by: Ingestion pipeline
# Functions:
# 1. write() - Persist a batch using the policy of the deduplicator
# 2. _write_atomic() - Content mode: one transaction, all-or-nothing
# 3. _write_per_row() - Identifier mode: best-effort insert, one commit per row
# 4. store_statistics() - Aggregates over the whole store after commit
#
# Write flow (content mode): BEGIN -> for each record: exists? duplicate : insert -> COMMIT
# Any storage error rolls back the transaction and surfaces as StorageFailure;
# no partial batch is ever committed.

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Set

from sqlalchemy import distinct, func, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import StorageFailure
from db.models import PriceRecord
from etl.validators import PRICE_QUANTUM, IdentifierMode, ValidatedRecord

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    """Tallies for the records of one batch."""
    inserted: int = 0
    duplicates: int = 0
    inserted_price: Decimal = Decimal("0.00")
    categories: Set[str] = field(default_factory=set)

    def record_insert(self, record: ValidatedRecord) -> None:
        self.inserted += 1
        self.inserted_price += record.price
        self.categories.add(record.category)


@dataclass(frozen=True)
class StoreStatistics:
    """Aggregates over every persisted record."""
    total_items: int
    total_categories: int
    total_price: Decimal


class TransactionalWriter:
    """Persists validated records and reports store statistics."""

    def __init__(self, db: Session, deduplicator):
        self.db = db
        self.deduplicator = deduplicator

    def write(self, records: Iterable[ValidatedRecord]) -> WriteResult:
        """
        Persist ``records`` in order.

        Args:
            records: Validated records in file order, then row order

        Returns:
            WriteResult with inserted and duplicate counts

        Raises:
            StorageFailure: The store failed; nothing from this batch is committed
                in content mode
        """
        if self.deduplicator.mode is IdentifierMode.IDENTIFIER:
            return self._write_per_row(records)
        return self._write_atomic(records)

    def _insert(self, record: ValidatedRecord) -> None:
        values = {
            "name": record.name,
            "category": record.category,
            "price": record.price,
            "create_date": record.create_date,
        }
        if record.identifier is not None:
            values["id"] = record.identifier
        self.db.execute(insert(PriceRecord).values(**values))

    def _write_atomic(self, records: Iterable[ValidatedRecord]) -> WriteResult:
        result = WriteResult()
        try:
            for record in records:
                if self.deduplicator.is_duplicate(self.db, record):
                    result.duplicates += 1
                    continue
                self._insert(record)
                self.deduplicator.remember(record)
                result.record_insert(record)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Batch write failed, transaction rolled back: {e}")
            raise StorageFailure("Failed to persist price records") from e

        return result

    def _write_per_row(self, records: Iterable[ValidatedRecord]) -> WriteResult:
        result = WriteResult()
        for record in records:
            try:
                if self.deduplicator.is_duplicate(self.db, record):
                    result.duplicates += 1
                    continue
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Existence check failed for id {record.identifier}: {e}")
                raise StorageFailure("Failed to check for existing price records") from e

            self.deduplicator.remember(record)
            try:
                self._insert(record)
                self.db.commit()
            except IntegrityError:
                # Lost a race on the primary key
                self.db.rollback()
                result.duplicates += 1
                continue
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Insert failed for id {record.identifier}: {e}")
                raise StorageFailure("Failed to persist price records") from e
            result.record_insert(record)

        return result

    def store_statistics(self) -> StoreStatistics:
        """Count rows, distinct categories and total price across the whole store."""
        query = select(
            func.count(PriceRecord.id),
            func.count(distinct(PriceRecord.category)),
            func.coalesce(func.sum(PriceRecord.price), 0),
        )
        try:
            total_items, total_categories, total_price = self.db.execute(query).one()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to calculate statistics: {e}")
            raise StorageFailure("Failed to calculate statistics") from e

        return StoreStatistics(
            total_items=int(total_items),
            total_categories=int(total_categories),
            total_price=Decimal(str(total_price)).quantize(PRICE_QUANTUM),
        )
