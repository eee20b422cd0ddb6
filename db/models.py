# WORKFLOW: Database models for the price store.
# Used by: Transactional writer, deduplicator, export service, bootstrap
# Models represent:
# 1. prices - one row per accepted price record (create-only)
#
# Data flow: Archive -> CSV rows -> Validation -> Dedup -> prices -> CSV export
# Content-mode stores also carry a unique index over CONTENT_KEY_COLUMNS (see
# db/session.py init_db); identifier-mode stores key on id alone.

from sqlalchemy import Column, Date, Index, Integer, Numeric, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

CONTENT_KEY_COLUMNS = ("name", "category", "price", "create_date")
CONTENT_UNIQUE_INDEX = "uq_prices_content"


class PriceRecord(Base):
    __tablename__ = "prices"

    # Surrogate key in content mode, caller-supplied in identifier mode
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2, asdecimal=True), nullable=False)
    create_date = Column(Date, nullable=False)

    __table_args__ = (
        Index("idx_prices_create_date", "create_date"),
        Index("idx_prices_price", "price"),
    )

    def __repr__(self) -> str:
        return (
            f"PriceRecord(id={self.id!r}, name={self.name!r}, category={self.category!r}, "
            f"price={self.price!r}, create_date={self.create_date!r})"
        )
