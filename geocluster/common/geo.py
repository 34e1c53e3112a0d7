"""Geospatial helpers for viewport filtering and grid-based clustering."""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional, Tuple, Union

from .models import BoundingBox, Coordinate

SENTINEL_NO_LOCATION = "-"
BOUNDS_FIELDS = ("north", "south", "east", "west")
KEY_DECIMALS = 6

DIVIDE = "divide"
MULTIPLY = "multiply"
STRATEGIES = (DIVIDE, MULTIPLY)

# (min zoom, value) evaluated top-down; the first threshold <= zoom wins.
DIVIDE_CELL_SIZES: Tuple[Tuple[int, float], ...] = (
    (15, 0.001),
    (13, 0.005),
    (11, 0.01),
    (9, 0.02),
    (7, 0.05),
)
DIVIDE_FALLBACK = 0.1

MULTIPLY_PRECISIONS: Tuple[Tuple[int, float], ...] = (
    (16, 10000),
    (14, 1000),
    (12, 100),
    (10, 10),
    (8, 1),
)
MULTIPLY_FALLBACK = 0.1

_DECIMAL_PART = re.compile(r"^-?(?:[0-9]+\.?[0-9]*|\.[0-9]+)$")
_NUMERIC_STRING = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")

BoundsLike = Union[BoundingBox, Mapping[str, Any], None]


def parse_coordinate(raw: Any) -> Optional[Coordinate]:
    """Parse a ``"lat,lng"`` string, returning None for anything unusable."""

    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text or text == SENTINEL_NO_LOCATION:
        return None

    parts = text.split(",")
    if len(parts) != 2:
        return None
    lat_text, lng_text = parts[0].strip(), parts[1].strip()
    if not _DECIMAL_PART.match(lat_text) or not _DECIMAL_PART.match(lng_text):
        return None

    lat, lng = float(lat_text), float(lng_text)
    if lat < -90 or lat > 90 or lng < -180 or lng > 180:
        return None
    return Coordinate(lat=lat, lng=lng)


def is_numeric(value: Any) -> bool:
    """True for finite numbers and numeric strings such as ``"-6.2"``."""

    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        try:
            return math.isfinite(float(value))
        except OverflowError:
            return False
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        text = value.strip()
        return bool(_NUMERIC_STRING.match(text)) and math.isfinite(float(text))
    return False


def is_valid_bounds(box: BoundsLike) -> bool:
    """True when all four edges are present and numeric.

    Edge ordering is not checked, so an inverted box is still "valid".
    """

    if box is None:
        return False
    if isinstance(box, BoundingBox):
        return all(is_numeric(getattr(box, name)) for name in BOUNDS_FIELDS)
    if not isinstance(box, Mapping):
        return False
    return all(name in box and is_numeric(box[name]) for name in BOUNDS_FIELDS)


def bounds_from_mapping(raw: BoundsLike) -> Optional[BoundingBox]:
    """Coerce request input into a BoundingBox, or None when it is unusable."""

    if not is_valid_bounds(raw):
        return None
    if isinstance(raw, BoundingBox):
        return raw
    return BoundingBox(**{name: _to_float(raw[name]) for name in BOUNDS_FIELDS})


def _to_float(value: Any) -> float:
    return float(value.strip()) if isinstance(value, str) else float(value)


def in_bounds(coord: Coordinate, box: BoundingBox) -> bool:
    return box.south <= coord.lat <= box.north and box.west <= coord.lng <= box.east


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""

    magnitude = math.floor(abs(value) + 0.5)
    return -magnitude if value < 0 else magnitude


def resolution_for(zoom: int, strategy: str = DIVIDE) -> float:
    """Map a zoom level to a cell size (divide) or precision (multiply)."""

    if strategy == DIVIDE:
        table, fallback = DIVIDE_CELL_SIZES, DIVIDE_FALLBACK
    elif strategy == MULTIPLY:
        table, fallback = MULTIPLY_PRECISIONS, MULTIPLY_FALLBACK
    else:
        raise ValueError(f"Unknown resolution strategy: {strategy!r} (expected one of {STRATEGIES})")

    for threshold, value in table:
        if zoom >= threshold:
            return value
    return fallback


def format_key(lat: float, lng: float) -> str:
    return f"{lat:.{KEY_DECIMALS}f},{lng:.{KEY_DECIMALS}f}"


class GridSnapper:
    """Snaps coordinates onto a zoom-dependent grid."""

    def __init__(self, zoom: int, strategy: str = DIVIDE) -> None:
        self.zoom = int(zoom)
        self.strategy = strategy
        self.resolution = resolution_for(self.zoom, strategy)

    def snap(self, coord: Coordinate) -> Tuple[str, float, float]:
        """Return ``(key, lat, lng)`` of the grid cell containing ``coord``."""

        lat = self._snap_value(coord.lat)
        lng = self._snap_value(coord.lng)
        return format_key(lat, lng), lat, lng

    def _snap_value(self, value: float) -> float:
        if self.strategy == DIVIDE:
            snapped = round_half_away(value / self.resolution) * self.resolution
        else:
            snapped = round_half_away(value * self.resolution) / self.resolution
        # Trim float noise (e.g. -6.2000000000000002) and normalise -0.0.
        return round(snapped, KEY_DECIMALS) + 0.0
