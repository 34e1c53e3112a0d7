"""Persist clustering payloads for the dashboard and downstream consumers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from geocluster.common.models import Cluster


class Persistence:
    """Write JSON payloads and flat parquet tables into a folder."""

    def __init__(self, base_path: str) -> None:
        self.base_path = Path(base_path)

    def write(self, tables: Dict[str, pd.DataFrame]) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)
        for name, frame in tables.items():
            frame.to_parquet(self.base_path / f"{name}.parquet", index=False)

    def write_json(self, payloads: Dict[str, Any]) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)
        for name, payload in payloads.items():
            with open(self.base_path / f"{name}.json", "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2, default=str)


def clusters_frame(clusters: List[Cluster]) -> pd.DataFrame:
    """Flatten clusters to one row each; member samples stay in the JSON payload."""

    return pd.DataFrame(
        [{"id": c.id, "lat": c.lat, "lng": c.lng, "count": c.count} for c in clusters],
        columns=["id", "lat", "lng", "count"],
    )
