"""Load the seed property catalog from CSV.

    python -m property_lister.ingest data/properties.csv

The first row is a header. Rows are created as system-owned properties; a row
that fails to parse or insert is logged and skipped.
"""
from pathlib import Path
from typing import Any, Dict, List, Tuple
import csv
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from property_lister.core.config import settings
from property_lister.core.database import Base, create_db_engine, create_session_factory, utcnow
from property_lister.core.logging import configure_logging
from property_lister.crud.property import properties as crud_property
from property_lister.models.property import SYSTEM_OWNER

logger = logging.getLogger(__name__)

DEFAULT_CSV_PATH = Path("data") / "properties.csv"

COLUMNS = (
    "id", "title", "type", "price", "state", "city", "area_sq_ft", "bedrooms", "bathrooms", "amenities",
    "furnished", "available_from", "listed_by", "tags", "color_theme", "rating", "is_verified", "listing_type",
)
INT_COLUMNS = {"price", "area_sq_ft", "bedrooms", "bathrooms"}

def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0

def _to_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0

def parse_row(row: List[str]) -> Dict[str, Any]:
    if len(row) < len(COLUMNS):
        raise ValueError(f"expected {len(COLUMNS)} columns, got {len(row)}")

    data: Dict[str, Any] = dict(zip(COLUMNS, row))
    for column in INT_COLUMNS:
        data[column] = _to_int(data[column])
    data["rating"] = _to_float(data["rating"])
    data["is_verified"] = data["is_verified"] == "True"
    data["amenities"] = data["amenities"].split("|")
    data["tags"] = data["tags"].split("|")

    now = utcnow()
    data.update(created_by=SYSTEM_OWNER, created_at=now, updated_at=now)
    return data

def ingest_csv(db: Session, csv_path: Path) -> Tuple[int, int]:
    """Insert every data row of ``csv_path``. Returns (inserted, failed)."""
    inserted = failed = 0
    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)
        for line, row in enumerate(reader, start=2):
            try:
                prop = crud_property.create(db, obj_in=parse_row(row))
            except ValueError as e:
                failed += 1
                logger.error(f"Failed to parse row {line}: {e}")
                continue
            except SQLAlchemyError as e:
                db.rollback()
                failed += 1
                logger.error(f"Failed to insert row {line}: {e}")
                continue
            inserted += 1
            logger.info(f"Inserted property ID {prop.id}")
    return inserted, failed

def main(argv: List[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging()
    csv_path = Path(argv[0]) if argv else DEFAULT_CSV_PATH

    if not csv_path.is_file():
        logger.error(f"CSV file not found: {csv_path.resolve()}")
        return 1

    engine = create_db_engine(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    db = create_session_factory(engine)()
    try:
        inserted, failed = ingest_csv(db, csv_path)
    finally:
        db.close()
        engine.dispose()

    logger.info(f"Ingested {inserted} properties from {csv_path} ({failed} failed)")
    return 0

if __name__ == "__main__":
    sys.exit(main())
