# WORKFLOW: Request parameter schemas for the price endpoints.
# Used by: FastAPI endpoints for request validation and documentation
# Schemas include:
# 1. price_export_filter() - Query parameters start/end/min/max -> PriceFilter
#
# Validation flow: HTTP request -> FastAPI/Pydantic parsing -> PriceFilter -> Export service
# Malformed dates or prices are rejected with 422 before any query runs.

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import Query

from services.export import PriceFilter


def price_export_filter(
    start: Optional[date] = Query(None, description="Earliest create_date (inclusive), YYYY-MM-DD"),
    end: Optional[date] = Query(None, description="Latest create_date (inclusive), YYYY-MM-DD"),
    min_price: Optional[Decimal] = Query(None, alias="min", description="Minimum price (inclusive)"),
    max_price: Optional[Decimal] = Query(None, alias="max", description="Maximum price (inclusive)"),
) -> PriceFilter:
    """Collect the optional export bounds into a PriceFilter."""
    return PriceFilter(start=start, end=end, min_price=min_price, max_price=max_price)
