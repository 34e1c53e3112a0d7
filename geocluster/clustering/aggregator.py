"""Viewport filtering and grid clustering that power the subscription map."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from geocluster.common.geo import (
    DIVIDE,
    BoundsLike,
    GridSnapper,
    bounds_from_mapping,
    in_bounds,
    parse_coordinate,
    resolution_for,
)
from geocluster.common.models import BoundingBox, Cluster, Coordinate, GeoRecord

logger = logging.getLogger(__name__)

DEFAULT_ZOOM = 10
MAX_CLUSTER_ITEMS = 5


class ClusterAggregator:
    """Turns raw GeoRecords into map clusters, points and viewport id sets.

    Every call is an independent pass over its input; nothing is cached
    between calls, so one instance can be shared across requests.
    """

    def __init__(
        self,
        strategy: str = DIVIDE,
        max_items: int = MAX_CLUSTER_ITEMS,
        summary_fields: Sequence[str] = (),
    ) -> None:
        resolution_for(DEFAULT_ZOOM, strategy)  # reject unknown strategies early
        self.strategy = strategy
        self.max_items = max(int(max_items), 0)
        self.summary_fields = tuple(summary_fields)

    def cluster(
        self,
        records: Iterable[GeoRecord],
        zoom: Optional[int] = None,
        bounds: BoundsLike = None,
        strategy: Optional[str] = None,
    ) -> List[Cluster]:
        """Bucket every located, in-viewport record into a zoom-sized grid cell."""

        snapper = GridSnapper(DEFAULT_ZOOM if zoom is None else zoom, strategy or self.strategy)
        clusters: Dict[str, Cluster] = {}
        for record, coord in self._located(records, bounds):
            key, lat, lng = snapper.snap(coord)
            cluster = clusters.get(key)
            if cluster is None:
                cluster = clusters[key] = Cluster(id=key, lat=lat, lng=lng)
            cluster.count += 1
            if len(cluster.items) < self.max_items:
                cluster.items.append(self.summarize(record))

        logger.debug(
            "Built %d clusters at zoom %s (%s, resolution %s)",
            len(clusters),
            snapper.zoom,
            snapper.strategy,
            snapper.resolution,
        )
        return list(clusters.values())

    def ids_in_bounds(self, records: Iterable[GeoRecord], bounds: BoundsLike) -> Set[str]:
        """Ids of records whose coordinates fall inside the viewport.

        Scans the whole candidate list on every call.
        """

        return {record.id for record, _ in self._located(records, bounds)}

    def map_points(self, records: Iterable[GeoRecord], bounds: BoundsLike = None) -> List[Dict[str, Any]]:
        """Flat marker payload: one entry per located, in-viewport record."""

        points = []
        for record, coord in self._located(records, bounds):
            point = self.summarize(record)
            point.update(lat=coord.lat, lng=coord.lng, coordinates=record.coordinates)
            points.append(point)
        return points

    def coordinate_stats(self, records: Iterable[GeoRecord]) -> Dict[str, int]:
        """Count records with and without a usable coordinate.

        ``without_coordinates`` covers the "-"/blank/missing sentinels and
        also malformed or out-of-range strings, since neither can be mapped.
        """

        total = located = 0
        for record in _require(records):
            total += 1
            if parse_coordinate(record.coordinates) is not None:
                located += 1
        return {"total": total, "with_coordinates": located, "without_coordinates": total - located}

    def summarize(self, record: GeoRecord) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"id": record.id, "name": record.name, "address": record.address}
        for name in self.summary_fields:
            summary[name] = record.attributes.get(name)
        return summary

    def _located(
        self, records: Iterable[GeoRecord], bounds: BoundsLike
    ) -> Iterator[Tuple[GeoRecord, Coordinate]]:
        box: Optional[BoundingBox] = bounds_from_mapping(bounds)
        skipped = 0
        for record in _require(records):
            coord = parse_coordinate(record.coordinates)
            if coord is None:
                skipped += 1
                continue
            if box is not None and not in_bounds(coord, box):
                continue
            yield record, coord
        if skipped:
            logger.debug("Skipped %d records without a usable coordinate", skipped)


def _require(records: Optional[Iterable[GeoRecord]]) -> Iterable[GeoRecord]:
    if records is None:
        raise TypeError("records must be an iterable of GeoRecord, not None")
    return records
