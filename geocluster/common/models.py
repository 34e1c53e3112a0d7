"""Dataclasses shared between the ingestion and clustering layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class GeoRecord:
    id: str
    name: str
    coordinates: Optional[str]
    address: Optional[str] = None
    status: Optional[str] = None
    attributes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Coordinate:
    """A parsed latitude/longitude pair inside the valid WGS84 range."""

    lat: float
    lng: float


@dataclass(frozen=True)
class BoundingBox:
    """Map viewport edges in degrees."""

    north: float
    south: float
    east: float
    west: float

    def to_dict(self) -> Dict[str, float]:
        return {"north": self.north, "south": self.south, "east": self.east, "west": self.west}


@dataclass
class Cluster:
    """Grid cell marker produced by the ClusterAggregator.

    ``lat``/``lng`` are the snapped grid values, not the mean of the members.
    """

    id: str
    lat: float
    lng: float
    count: int = 0
    items: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lat": self.lat,
            "lng": self.lng,
            "count": self.count,
            "items": [dict(item) for item in self.items],
        }
