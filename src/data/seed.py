"""Demo data seeding for the in-memory record store.

Loads citizens, bills and a broadcast notification from the bundled
``demo_data.json`` and inserts them into the store.  Designed to run once
at application startup when ``seed_demo_data`` is enabled.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from src.models.records import Bill, Citizen, Notification
from src.services.admin import CITIZENS
from src.services.bills import BILLS
from src.services.notifications import NOTIFICATIONS

if TYPE_CHECKING:
    from src.services.store import RecordStore

logger = structlog.get_logger(__name__)

_DATA_DIR: Path = Path(__file__).resolve().parent / "demo"
_DEMO_DATA_PATH: Path = _DATA_DIR / "demo_data.json"


def load_demo_data(path: Path | None = None) -> dict[str, list[dict]]:
    """Read the demo data file; a missing or malformed file yields ``{}``."""
    file_path = path or _DEMO_DATA_PATH
    if not file_path.exists():
        logger.error("seed.file_not_found", path=str(file_path))
        return {}
    try:
        with file_path.open(encoding="utf-8") as fh:
            raw = json.load(fh)
    except json.JSONDecodeError:
        logger.error("seed.invalid_json", path=str(file_path), exc_info=True)
        return {}
    if not isinstance(raw, dict):
        logger.error("seed.unexpected_format", path=str(file_path), type=type(raw).__name__)
        return {}
    return raw


async def seed_demo_data(
    store: RecordStore,
    *,
    path: Path | None = None,
    demo_citizen_id: str | None = None,
) -> dict[str, int]:
    """Insert the demo rows into *store* and return per-table counts.

    Rows that fail validation are skipped with a warning.  Bills without an
    owner are attached to *demo_citizen_id*.
    """
    raw = load_demo_data(path)
    counts = {CITIZENS: 0, BILLS: 0, NOTIFICATIONS: 0}

    for table, model in ((CITIZENS, Citizen), (BILLS, Bill), (NOTIFICATIONS, Notification)):
        for entry in raw.get(table, []):
            if table == BILLS and demo_citizen_id and not entry.get("citizen_id"):
                entry = {**entry, "citizen_id": demo_citizen_id}
            try:
                row = model.model_validate(entry)
            except ValidationError:
                logger.warning("seed.invalid_row", table=table, exc_info=True)
                continue
            await store.insert(table, row.model_dump(mode="json"))
            counts[table] += 1

    logger.info("seed.complete", **counts)
    return counts
