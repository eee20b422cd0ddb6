# WORKFLOW: Error taxonomy for the ingestion and export pipelines.
# Used by: ETL extractor/parser, writer, export service, API exception handlers
# Errors:
# 1. BadInput - caller error, nothing touched (HTTP 400)
# 2. ArchiveCorrupt - unreadable zip/tar/csv structure, whole ingestion aborted (HTTP 422)
# 3. StorageFailure - transaction, query or scan error, transaction rolled back (HTTP 500)
#
# Malformed rows are not errors: the validator returns a rejected RowOutcome
# and the row only shows up in aggregate counts.

"""Price service exception hierarchy."""

from __future__ import annotations


class PriceServiceError(Exception):
    """Base exception for all price service failures."""


class BadInput(PriceServiceError):
    """Raised when the request itself is unusable (missing or unreadable upload, bad filters)."""


class ArchiveCorrupt(PriceServiceError):
    """Raised when an uploaded archive or one of its CSV members cannot be read."""


class StorageFailure(PriceServiceError):
    """Raised when the backing store fails; the in-flight transaction is rolled back."""
