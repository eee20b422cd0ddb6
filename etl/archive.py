# WORKFLOW: Archive extraction for uploaded price exports.
# Used by: Ingestion pipeline, CLI ingest command
# Functions:
# 1. normalize_archive_kind() - Resolve the declared archive kind (zip by default)
# 2. is_csv_member() - Select CSV members, skipping platform metadata files
# 3. extract_csv_members() - Read every selected member into memory
#
# Extraction flow: Raw bytes -> zip/tar reader -> CSV member selection -> ArchiveMember list
# Any structural problem fails the whole extraction; no partial list is returned.

"""
In-memory extraction of CSV members from zip and tar archives.
"""

import io
import logging
import posixpath
import tarfile
import zipfile
import zlib
from dataclasses import dataclass
from typing import List, Optional

from core.errors import ArchiveCorrupt, BadInput

logger = logging.getLogger(__name__)

ARCHIVE_KINDS = ("zip", "tar")
DEFAULT_ARCHIVE_KIND = "zip"


@dataclass(frozen=True)
class ArchiveMember:
    """A CSV file pulled out of an uploaded archive."""
    name: str
    content: bytes


def normalize_archive_kind(kind: Optional[str]) -> str:
    """
    Resolve the declared archive kind.

    Args:
        kind: Archive kind supplied by the caller, may be None or empty

    Returns:
        ``"zip"`` or ``"tar"``
    """
    if not kind or not kind.strip():
        return DEFAULT_ARCHIVE_KIND

    normalized = kind.strip().lower()
    if normalized not in ARCHIVE_KINDS:
        raise BadInput(f"Unsupported archive type: {kind!r} (expected one of {', '.join(ARCHIVE_KINDS)})")
    return normalized


def is_csv_member(name: str) -> bool:
    """Return True for ``*.csv`` members that are not ``._`` metadata files."""
    if posixpath.basename(name).startswith("._"):
        return False
    return name.lower().endswith(".csv")


def _extract_zip(data: bytes) -> List[ArchiveMember]:
    members = []
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        for info in archive.infolist():
            if info.is_dir() or not is_csv_member(info.filename):
                continue
            with archive.open(info) as stream:
                members.append(ArchiveMember(name=info.filename, content=stream.read()))
    return members


def _extract_tar(data: bytes) -> List[ArchiveMember]:
    members = []
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as archive:
        for info in archive:
            if not info.isreg() or not is_csv_member(info.name):
                continue
            stream = archive.extractfile(info)
            if stream is None:
                raise ArchiveCorrupt(f"Unable to read tar entry {info.name}")
            content = stream.read(info.size)
            if len(content) != info.size:
                raise ArchiveCorrupt(f"Truncated tar entry {info.name}")
            members.append(ArchiveMember(name=info.name, content=content))
    return members


def extract_csv_members(data: bytes, kind: Optional[str] = None) -> List[ArchiveMember]:
    """
    Extract CSV members from an in-memory archive.

    Args:
        data: Raw archive bytes
        kind: ``"zip"`` or ``"tar"``; defaults to zip when absent or empty

    Returns:
        List of ArchiveMember in archive order

    Raises:
        BadInput: Unknown archive kind
        ArchiveCorrupt: The archive or one of its selected entries is unreadable
    """
    archive_kind = normalize_archive_kind(kind)

    try:
        if archive_kind == "tar":
            members = _extract_tar(data)
        else:
            members = _extract_zip(data)
    except ArchiveCorrupt:
        raise
    except (zipfile.BadZipFile, zipfile.LargeZipFile, tarfile.TarError, zlib.error, EOFError, OSError) as e:
        logger.error(f"Failed to read {archive_kind} archive: {e}")
        raise ArchiveCorrupt(f"Unable to read {archive_kind} archive: {e}") from e

    logger.info(f"Extracted {len(members)} CSV files from {archive_kind} archive")
    return members
