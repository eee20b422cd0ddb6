# WORKFLOW: Ingestion pipeline for uploaded price archives.
# Used by: Price upload endpoint, CLI ingest command
# Functions:
# 1. build_batch() - Parse and validate every CSV member into an IngestionBatch
# 2. IngestionPipeline.ingest() - Extract -> batch -> dedup + write -> store statistics
# 3. create_ingestion_pipeline() - Factory bound to a request session
#
# Ingestion flow: Archive bytes -> CSV members -> rows -> validated records -> writer -> summary
# Row problems only change the counters; archive and storage problems abort the request.

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from etl.archive import ArchiveMember, extract_csv_members
from etl.parser import parse_member_rows
from etl.validators import IdentifierMode, RowOutcome, ValidatedRecord, build_check_chain, validate_row
from services.dedup import create_deduplicator
from services.writer import TransactionalWriter

logger = logging.getLogger(__name__)


@dataclass
class IngestionBatch:
    """Validated but uncommitted records of one upload, in file then row order."""
    records: List[ValidatedRecord] = field(default_factory=list)
    total_seen: int = 0
    rejected: int = 0

    def add(self, outcome: RowOutcome) -> None:
        if outcome.counted:
            self.total_seen += 1
        if outcome.accepted:
            self.records.append(outcome.record)
        else:
            self.rejected += 1


@dataclass(frozen=True)
class IngestionSummary:
    total_count: int
    duplicates_count: int
    inserted_count: int
    total_items: int
    total_categories: int
    total_price: Decimal

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_count": self.total_count,
            "duplicates_count": self.duplicates_count,
            "inserted_count": self.inserted_count,
            "total_items": self.total_items,
            "total_categories": self.total_categories,
            "total_price": self.total_price,
        }


def build_batch(members: Iterable[ArchiveMember], mode: IdentifierMode) -> IngestionBatch:
    """
    Parse and validate every member into one batch.

    Args:
        members: CSV members in archive order
        mode: Identifier mode, selects the check chain

    Returns:
        IngestionBatch with accepted records and the rows-seen tally
    """
    chain = build_check_chain(mode)
    batch = IngestionBatch()
    for member in members:
        for row in parse_member_rows(member):
            batch.add(validate_row(row, chain))
    return batch


class IngestionPipeline:
    """Runs one upload through extraction, validation, dedup and persistence."""

    def __init__(self, db: Session, mode: IdentifierMode = IdentifierMode.CONTENT):
        self.db = db
        self.mode = IdentifierMode(mode)

    def ingest(self, data: bytes, kind: Optional[str] = None) -> IngestionSummary:
        """
        Ingest an archive of CSV price files.

        Args:
            data: Raw archive bytes
            kind: ``"zip"`` (default) or ``"tar"``

        Returns:
            IngestionSummary for the batch and the whole store
        """
        members = extract_csv_members(data, kind)
        batch = build_batch(members, self.mode)

        writer = TransactionalWriter(self.db, create_deduplicator(self.mode))
        result = writer.write(batch.records)
        stats = writer.store_statistics()

        logger.info(
            f"Ingested {len(members)} CSV files in {self.mode.value} mode: "
            f"seen={batch.total_seen} rejected={batch.rejected} "
            f"inserted={result.inserted} duplicates={result.duplicates} "
            f"inserted_price={result.inserted_price} inserted_categories={len(result.categories)}"
        )

        return IngestionSummary(
            total_count=batch.total_seen,
            duplicates_count=result.duplicates,
            inserted_count=result.inserted,
            total_items=stats.total_items,
            total_categories=stats.total_categories,
            total_price=stats.total_price,
        )


def create_ingestion_pipeline(db: Session, mode: IdentifierMode = IdentifierMode.CONTENT) -> IngestionPipeline:
    """Create an ingestion pipeline bound to a database session."""
    return IngestionPipeline(db, mode)
