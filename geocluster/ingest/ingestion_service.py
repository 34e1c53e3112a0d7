"""Load customer/subscription dumps into GeoRecord lists."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from geocluster.common.models import GeoRecord

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("csv", "json", "jsonl")

# Candidate column names, first match wins.
ID_COLUMNS = ("subscription_id", "id")
NAME_COLUMNS = ("customer_name", "name")
COORDINATE_COLUMNS = ("subscription_maps", "coordinates", "coord")
ADDRESS_COLUMNS = ("subscription_address", "address")
STATUS_COLUMNS = ("subscription_status", "status")


class IngestionService:
    """Read a record dump with pandas and map rows onto GeoRecord."""

    def __init__(self, records_path: str, format: str = "csv", limit: Optional[int] = None) -> None:
        if format not in SUPPORTED_FORMATS:
            raise ValueError(f"Unknown dataset format: {format!r} (expected one of {SUPPORTED_FORMATS})")
        self.records_path = records_path
        self.format = format
        self.limit = limit

    def load_frame(self) -> pd.DataFrame:
        if self.format == "csv":
            df = pd.read_csv(self.records_path, dtype=str, keep_default_na=False)
        else:
            df = pd.read_json(self.records_path, dtype=False, lines=self.format == "jsonl")
            df = df.astype(object).where(df.notna(), None)
        if self.limit:
            df = df.head(int(self.limit))
        logger.info("Loaded %d rows from %s", len(df), self.records_path)
        return df

    def load_records(self) -> List[GeoRecord]:
        return records_from_frame(self.load_frame())


def records_from_frame(df: pd.DataFrame) -> List[GeoRecord]:
    """Convert a DataFrame into GeoRecords; unknown columns become attributes."""

    if df.empty:
        return []
    id_col = _pick_column(df.columns, ID_COLUMNS)
    if id_col is None:
        raise ValueError(f"Record dump needs one of the id columns {ID_COLUMNS}.")
    name_col = _pick_column(df.columns, NAME_COLUMNS)
    coord_col = _pick_column(df.columns, COORDINATE_COLUMNS)
    address_col = _pick_column(df.columns, ADDRESS_COLUMNS)
    status_col = _pick_column(df.columns, STATUS_COLUMNS)
    known = {id_col, name_col, coord_col, address_col, status_col}
    extra_cols = [col for col in df.columns if col not in known]

    records = []
    missing_ids = 0
    for row in df.to_dict(orient="records"):
        record_id = _clean(row.get(id_col))
        if record_id is None or record_id == "":
            missing_ids += 1
            continue
        coordinates = _clean(row.get(coord_col)) if coord_col else None
        records.append(
            GeoRecord(
                id=str(record_id),
                name=str(_clean(row.get(name_col)) or "") if name_col else "",
                coordinates=str(coordinates) if coordinates is not None else None,
                address=_clean(row.get(address_col)) if address_col else None,
                status=_clean(row.get(status_col)) if status_col else None,
                attributes={col: _clean(row.get(col)) for col in extra_cols},
            )
        )
    if missing_ids:
        logger.warning("Skipped %d rows without an id", missing_ids)
    return records


def _pick_column(columns: Sequence[str], candidates: Sequence[str]) -> Optional[str]:
    for name in candidates:
        if name in columns:
            return name
    return None


def _clean(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        # JSON integer columns come back as floats once a null is present.
        if value.is_integer():
            return int(value)
    return value


def records_from_dicts(rows: Sequence[Dict[str, Any]]) -> List[GeoRecord]:
    """Shortcut for callers that already hold row dictionaries."""

    return records_from_frame(pd.DataFrame(list(rows)))
