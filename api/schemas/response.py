# WORKFLOW: Pydantic response schemas for the price endpoints.
# Used by: API response generation, testing
# Schemas include:
# 1. IngestSummaryResponse - Batch and store statistics after an upload
# 2. ErrorResponse - Body of 4xx/5xx responses
#
# Response flow: IngestionSummary -> Pydantic model -> JSON response

from pydantic import BaseModel, Field

from services.ingestion import IngestionSummary


class IngestSummaryResponse(BaseModel):
    total_count: int = Field(..., ge=0, description="Data rows seen across all CSV files")
    duplicates_count: int = Field(..., ge=0, description="Rows dropped as duplicates")
    inserted_count: int = Field(..., ge=0, description="Rows inserted by this upload")
    total_items: int = Field(..., ge=0, description="Records in the store after the upload")
    total_categories: int = Field(..., ge=0, description="Distinct categories in the store")
    total_price: float = Field(..., ge=0, description="Sum of all stored prices")

    @classmethod
    def from_summary(cls, summary: IngestionSummary) -> "IngestSummaryResponse":
        return cls(
            total_count=summary.total_count,
            duplicates_count=summary.duplicates_count,
            inserted_count=summary.inserted_count,
            total_items=summary.total_items,
            total_categories=summary.total_categories,
            total_price=float(summary.total_price),
        )


class ErrorResponse(BaseModel):
    error: str
