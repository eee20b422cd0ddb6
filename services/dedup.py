# WORKFLOW: Duplicate detection for validated price records.
# Used by: Transactional writer
# Policies:
# 1. ContentKeyDeduplicator - same (name, category, price, create_date) already stored
# 2. IdentifierKeyDeduplicator - same caller id seen earlier in the batch or already stored
# 3. create_deduplicator() - Pick the policy for the configured identifier mode
#
# Dedup flow: ValidatedRecord -> batch memory (identifier mode) -> store existence query
# Content-keyed checks run inside the writer's transaction, so rows written earlier in
# the same batch are visible to later checks.

from typing import Set

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from db.models import CONTENT_KEY_COLUMNS, PriceRecord
from etl.validators import IdentifierMode, ValidatedRecord


class ContentKeyDeduplicator:
    """Duplicate iff a stored record has the same content tuple."""

    mode = IdentifierMode.CONTENT

    def is_duplicate(self, db: Session, record: ValidatedRecord) -> bool:
        conditions = [
            getattr(PriceRecord, column) == value
            for column, value in zip(CONTENT_KEY_COLUMNS, record.content_key)
        ]
        query = select(exists().where(*conditions))
        return bool(db.execute(query).scalar())

    def remember(self, record: ValidatedRecord) -> None:
        # The store is the only memory in this policy
        return None


class IdentifierKeyDeduplicator:
    """Duplicate iff the caller id was seen earlier in this batch or is already stored."""

    mode = IdentifierMode.IDENTIFIER

    def __init__(self):
        self._seen: Set[int] = set()

    def is_duplicate(self, db: Session, record: ValidatedRecord) -> bool:
        if record.identifier in self._seen:
            return True
        query = select(exists().where(PriceRecord.id == record.identifier))
        return bool(db.execute(query).scalar())

    def remember(self, record: ValidatedRecord) -> None:
        self._seen.add(record.identifier)


def create_deduplicator(mode: IdentifierMode):
    """Create a fresh deduplicator; one instance per ingestion batch."""
    if IdentifierMode(mode) is IdentifierMode.IDENTIFIER:
        return IdentifierKeyDeduplicator()
    return ContentKeyDeduplicator()
