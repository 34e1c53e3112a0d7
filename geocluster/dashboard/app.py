"""Streamlit map of clustered subscription locations."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List

import pandas as pd
import pydeck as pdk
import streamlit as st

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from geocluster.clustering.aggregator import ClusterAggregator
from geocluster.common.config import load_config
from geocluster.common.geo import STRATEGIES
from geocluster.common.models import BoundingBox, GeoRecord
from geocluster.ingest.ingestion_service import IngestionService
from geocluster.ingest.sources import filter_by_status, restrict_to_ids, search_records

CACHE_TTL = int(os.environ.get("GEOCLUSTER_UI_REFRESH_SECONDS", "60"))


@st.cache_data(ttl=CACHE_TTL)
def load_records(path: str, format: str, limit: int | None) -> List[GeoRecord]:
    if not Path(path).exists():
        return []
    return IngestionService(path, format=format, limit=limit).load_records()


def main() -> None:
    config_path = Path(os.environ.get("GEOCLUSTER_CONFIG", "config/local.yaml"))
    config = load_config(config_path)

    st.set_page_config(page_title="Subscription Map", layout="wide")
    st.title("Subscription Map")
    st.caption(f"Cache TTL: {CACHE_TTL}s (set GEOCLUSTER_UI_REFRESH_SECONDS to adjust).")
    if st.sidebar.button("Reload records"):
        st.cache_data.clear()

    records = load_records(config.dataset.records_path, config.dataset.format, config.dataset.limit)
    if not records:
        st.warning(f"No records found at {config.dataset.records_path}. Check `dataset.records_path`.")
        return

    statuses = sorted({r.status for r in records if r.status})
    default_status = config.filters.status if config.filters.status in statuses else None
    status = st.sidebar.selectbox(
        "Status",
        options=["All"] + statuses,
        index=(statuses.index(default_status) + 1) if default_status else 0,
    )
    search = st.sidebar.text_input("Search name, id, email or phone", value=config.filters.search or "")
    zoom = st.sidebar.slider("Zoom", 1, 18, value=config.clustering.default_zoom)
    strategy = st.sidebar.radio(
        "Grid strategy", options=list(STRATEGIES), index=STRATEGIES.index(config.clustering.strategy)
    )

    use_bounds = st.sidebar.checkbox("Restrict to viewport", value=False)
    bounds = None
    if use_bounds:
        north = st.sidebar.number_input("North", value=6.0, format="%.4f")
        south = st.sidebar.number_input("South", value=-11.0, format="%.4f")
        east = st.sidebar.number_input("East", value=141.0, format="%.4f")
        west = st.sidebar.number_input("West", value=95.0, format="%.4f")
        bounds = BoundingBox(north=north, south=south, east=east, west=west)
        if south > north or west > east:
            st.sidebar.warning("Inverted viewport: no point can match.")

    candidates = filter_by_status(records, None if status == "All" else status)
    candidates = search_records(candidates, search)

    aggregator = ClusterAggregator(
        strategy=strategy,
        max_items=config.clustering.max_items,
        summary_fields=config.clustering.summary_fields,
    )
    stats = aggregator.coordinate_stats(candidates)
    col1, col2, col3 = st.columns(3)
    col1.metric("Records", stats["total"])
    col2.metric("With coordinates", stats["with_coordinates"])
    col3.metric("Without coordinates", stats["without_coordinates"])

    clusters = aggregator.cluster(candidates, zoom=zoom, bounds=bounds)
    st.subheader(f"{len(clusters)} clusters at zoom {zoom}")
    if not clusters:
        st.info("No located records match the filters.")
        return

    cluster_df = pd.DataFrame(
        [
            {
                "id": c.id,
                "lat": c.lat,
                "lng": c.lng,
                "count": c.count,
                "sample": ", ".join(str(item["name"]) for item in c.items),
            }
            for c in clusters
        ]
    )
    layer = pdk.Layer(
        "ScatterplotLayer",
        data=cluster_df,
        get_position="[lng, lat]",
        get_radius="count",
        radius_scale=200,
        radius_min_pixels=4,
        radius_max_pixels=60,
        get_fill_color="[220, 60, 60, 160]",
        auto_highlight=True,
        pickable=True,
    )
    deck = pdk.Deck(
        map_style=None,
        initial_view_state=pdk.ViewState(
            latitude=config.dashboard.center_lat,
            longitude=config.dashboard.center_lng,
            zoom=config.dashboard.default_zoom,
        ),
        layers=[layer],
        tooltip={"text": "{id}\nRecords: {count}\n{sample}"},
    )
    st.pydeck_chart(deck)

    st.subheader("Records in view")
    in_view = restrict_to_ids(candidates, aggregator.ids_in_bounds(candidates, bounds))
    st.dataframe(
        pd.DataFrame(
            [
                {
                    "id": r.id,
                    "name": r.name,
                    "status": r.status,
                    "address": r.address,
                    "coordinates": r.coordinates,
                }
                for r in in_view
            ]
        ),
        use_container_width=True,
    )


if __name__ == "__main__":
    main()
