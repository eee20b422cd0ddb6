# WORKFLOW: Price upload and download endpoints.
# Used by: Data providers uploading price archives, consumers downloading filtered prices
# Endpoints:
# 1. POST /prices - Upload a zip/tar archive of CSV files, returns ingestion summary
# 2. GET /prices - Download filtered prices as data.csv inside a zip archive
#
# Upload flow: multipart file -> bytes -> ingestion pipeline -> IngestSummaryResponse
# Download flow: query params -> PriceFilter -> export service -> application/zip body
# Domain errors (BadInput, ArchiveCorrupt, StorageFailure) are mapped to HTTP codes in api/main.py.

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from api.schemas.request import price_export_filter
from api.schemas.response import ErrorResponse, IngestSummaryResponse
from core.errors import BadInput
from db.session import get_db
from etl.archive import ARCHIVE_KINDS
from services.export import EXPORT_MEDIA_TYPE, PriceFilter, export_prices_archive
from services.ingestion import create_ingestion_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["prices"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def read_upload(file: Optional[UploadFile], max_bytes: int) -> bytes:
    """Read the whole upload into memory, enforcing the size limit."""
    if file is None:
        raise BadInput("no file uploaded")

    try:
        data = file.file.read(max_bytes + 1)
    except OSError as e:
        raise BadInput("unable to read uploaded file") from e

    if len(data) > max_bytes:
        raise BadInput(f"uploaded file exceeds {max_bytes} bytes")
    return data


@router.post("/prices", response_model=IngestSummaryResponse, responses=ERROR_RESPONSES)
def upload_prices(
    request: Request,
    file: Optional[UploadFile] = File(None, description="Archive of CSV price files"),
    archive_type: Optional[str] = Query(
        None, alias="type", description=f"Archive type ({' or '.join(ARCHIVE_KINDS)}), defaults to zip"
    ),
    db: Session = Depends(get_db),
):
    """
    Ingest an uploaded archive of CSV price files.

    Every CSV member is parsed, invalid rows are dropped, duplicates are
    counted, and the remaining rows are stored in one transaction.
    """
    app_settings = request.app.state.settings
    data = read_upload(file, app_settings.max_upload_bytes)

    logger.info(f"Price upload: file={file.filename}, type={archive_type or 'zip'}, bytes={len(data)}")

    pipeline = create_ingestion_pipeline(db, app_settings.identifier_mode)
    summary = pipeline.ingest(data, archive_type)
    return IngestSummaryResponse.from_summary(summary)


@router.get(
    "/prices",
    response_class=Response,
    responses={200: {"content": {EXPORT_MEDIA_TYPE: {}}}, **ERROR_RESPONSES},
)
def download_prices(
    price_filter: PriceFilter = Depends(price_export_filter),
    db: Session = Depends(get_db),
):
    """
    Download stored prices as a zip archive containing ``data.csv``.

    All bounds are optional and inclusive; rows are ordered by id.
    """
    content = export_prices_archive(db, price_filter)
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="data.zip"'},
    )
