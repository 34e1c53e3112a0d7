"""Entry point for the batch clustering job."""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from geocluster.clustering.aggregator import ClusterAggregator
from geocluster.clustering.persistence import Persistence, clusters_frame
from geocluster.common.config import load_config
from geocluster.common.geo import BOUNDS_FIELDS, bounds_from_mapping
from geocluster.common.models import BoundingBox
from geocluster.ingest.ingestion_service import IngestionService
from geocluster.ingest.sources import StaticRecordSource

logger = logging.getLogger(__name__)


def parse_bounds_arg(values: Optional[Sequence[str]]) -> Optional[BoundingBox]:
    """Build a box from ``NORTH SOUTH EAST WEST``; anything unusable disables filtering."""

    if not values:
        return None
    if len(values) != len(BOUNDS_FIELDS):
        logger.warning("Ignoring --bounds %r: expected NORTH SOUTH EAST WEST", values)
        return None
    box = bounds_from_mapping(dict(zip(BOUNDS_FIELDS, values)))
    if box is None:
        logger.warning("Ignoring --bounds %r: edges must be numeric", values)
    return box


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Cluster subscription coordinates for map rendering.")
    parser.add_argument("--config", default="config/local.yaml", help="Path to YAML config.")
    parser.add_argument("--zoom", type=int, default=None, help="Map zoom level (defaults to config).")
    parser.add_argument(
        "--bounds",
        nargs=4,
        default=None,
        metavar=("NORTH", "SOUTH", "EAST", "WEST"),
        help="Viewport edges in degrees, e.g. --bounds -6 -7 107 106.",
    )
    parser.add_argument("--search", default=None, help="Free-text filter on name, id, email or phone.")
    parser.add_argument("--status", default=None, help="Subscription status to map (defaults to config).")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, config.logging.level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ingestion = IngestionService(
        config.dataset.records_path,
        format=config.dataset.format,
        limit=config.dataset.limit,
    )
    source = StaticRecordSource(
        ingestion,
        status=args.status or config.filters.status,
        search=args.search or config.filters.search,
    )
    records = source.load()
    if not records:
        raise RuntimeError("No candidate records available. Check dataset path and filters.")

    aggregator = ClusterAggregator(
        strategy=config.clustering.strategy,
        max_items=config.clustering.max_items,
        summary_fields=config.clustering.summary_fields,
    )
    zoom = args.zoom if args.zoom is not None else config.clustering.default_zoom
    bounds = parse_bounds_arg(args.bounds)
    if bounds is not None:
        logger.info("Restricting to viewport %s", bounds.to_dict())

    clusters = aggregator.cluster(records, zoom=zoom, bounds=bounds)
    points = aggregator.map_points(records, bounds)
    stats = aggregator.coordinate_stats(records)

    persistence = Persistence(config.output.base_path)
    persistence.write_json(
        {
            "clusters": [cluster.to_dict() for cluster in clusters],
            "map_points": points,
            "stats": stats,
        }
    )
    persistence.write({"clusters": clusters_frame(clusters)})
    logger.info(
        "Wrote %d clusters (%d points, %d without coordinates) to %s",
        len(clusters),
        len(points),
        stats["without_coordinates"],
        config.output.base_path,
    )


if __name__ == "__main__":
    main()
