# WORKFLOW: Command-line access to the price store.
# Used by: Operators loading archives without the HTTP API, local setup
# Commands:
# 1. init-db - Create the prices table and constraints
# 2. ingest - Run a local zip/tar archive through the ingestion pipeline
# 3. export - Write filtered prices to a local zip file
#
# CLI flow: argparse -> settings -> engine -> session -> same pipeline as the API -> exit code

"""
Command-line interface for ingesting and exporting price archives.
"""

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import settings  # noqa: E402
from core.errors import PriceServiceError  # noqa: E402
from core.logging_config import configure_logging  # noqa: E402
from db.session import create_db_engine, create_session_factory, init_db  # noqa: E402
from etl.archive import ARCHIVE_KINDS  # noqa: E402
from services.export import PriceFilter, export_prices_archive  # noqa: E402
from services.ingestion import create_ingestion_pipeline  # noqa: E402

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Price archive ingestion and export")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")

    ingest = subparsers.add_parser("ingest", help="Ingest a local archive of CSV files")
    ingest.add_argument("archive", type=Path, help="Path to a zip or tar archive")
    ingest.add_argument("--type", dest="archive_type", choices=ARCHIVE_KINDS, default=None,
                        help="Archive type (default: zip)")

    export = subparsers.add_parser("export", help="Export prices to a zip file")
    export.add_argument("output", type=Path, help="Destination .zip path")
    export.add_argument("--start", type=date.fromisoformat, default=None, help="Earliest create_date, YYYY-MM-DD")
    export.add_argument("--end", type=date.fromisoformat, default=None, help="Latest create_date, YYYY-MM-DD")
    export.add_argument("--min", dest="min_price", type=Decimal, default=None, help="Minimum price")
    export.add_argument("--max", dest="max_price", type=Decimal, default=None, help="Maximum price")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level, settings.json_logs, stream=sys.stderr)

    engine = create_db_engine(args.database_url or settings.database_url)
    try:
        init_db(engine, settings.identifier_mode)
        if args.command == "init-db":
            return 0

        SessionLocal = create_session_factory(engine)
        with SessionLocal() as db:
            if args.command == "ingest":
                pipeline = create_ingestion_pipeline(db, settings.identifier_mode)
                summary = pipeline.ingest(args.archive.read_bytes(), args.archive_type)
                print(json.dumps(summary.as_dict(), default=str, indent=2))
            else:
                price_filter = PriceFilter(
                    start=args.start, end=args.end,
                    min_price=args.min_price, max_price=args.max_price,
                )
                args.output.write_bytes(export_prices_archive(db, price_filter))
                logger.info(f"Wrote {args.output}")
        return 0

    except (PriceServiceError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
