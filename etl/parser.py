# WORKFLOW: CSV parsing for archive members.
# Used by: Ingestion pipeline
# Functions:
# 1. decode_member() - Turn member bytes into text
# 2. parse_member_rows() - Yield data rows, discarding the header row
#
# Parse flow: ArchiveMember -> decode -> csv.reader -> drop header -> raw rows
# Rows are returned as-is; column counts and field formats are checked by the validators.

"""
CSV row parsing for extracted archive members.
"""

import csv
import io
import logging
from typing import List

from core.errors import ArchiveCorrupt
from etl.archive import ArchiveMember

logger = logging.getLogger(__name__)

# Oversized fields are rejected per row by the validators, not by the reader
FIELD_SIZE_LIMIT = 2**31 - 1
csv.field_size_limit(FIELD_SIZE_LIMIT)


def decode_member(member: ArchiveMember) -> str:
    """Decode member content as UTF-8, tolerating a BOM and replacing bad bytes."""
    return member.content.decode("utf-8-sig", errors="replace")


def parse_member_rows(member: ArchiveMember) -> List[List[str]]:
    """
    Parse one CSV member into data rows.

    The first row is always treated as a header and discarded, whatever it
    contains.

    Args:
        member: Extracted archive member

    Returns:
        Remaining rows as lists of raw string fields
    """
    reader = csv.reader(io.StringIO(decode_member(member), newline=""))
    try:
        rows = list(reader)
    except csv.Error as e:
        logger.error(f"Failed to parse CSV file {member.name}: {e}")
        raise ArchiveCorrupt(f"Unable to read csv file {member.name}: {e}") from e

    return rows[1:]
