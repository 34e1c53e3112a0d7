import json
import logging

import pandas as pd
import pytest

from geocluster.clustering import cluster_job
from geocluster.clustering.persistence import Persistence, clusters_frame
from geocluster.common.models import BoundingBox, Cluster

CSV_DUMP = """subscription_id,customer_name,customer_phone,subscription_maps,subscription_status
S1,Andi,0811,"-6.2,106.8",cancel
S2,Budi,0812,"-6.2001,106.8001",cancel
S3,Citra,0813,"10,10",cancel
S4,Dewi,0814,-,cancel
S5,Eko,0815,"-6.2,106.8",suspend
"""


def test_parse_bounds_arg():
    assert cluster_job.parse_bounds_arg(["-6", "-7", "107", "106"]) == BoundingBox(
        north=-6, south=-7, east=107, west=106
    )
    assert cluster_job.parse_bounds_arg(None) is None
    assert cluster_job.parse_bounds_arg(["-6", "-7", "107"]) is None
    assert cluster_job.parse_bounds_arg(["a", "b", "c", "d"]) is None


def test_persistence_writes_json_and_parquet(tmp_path):
    persistence = Persistence(str(tmp_path / "out"))
    clusters = [Cluster(id="1.000000,2.000000", lat=1.0, lng=2.0, count=3, items=[{"id": "x"}])]

    persistence.write_json({"clusters": [c.to_dict() for c in clusters]})
    persistence.write({"clusters": clusters_frame(clusters)})

    saved = json.loads((tmp_path / "out" / "clusters.json").read_text(encoding="utf-8"))
    assert saved[0]["count"] == 3
    frame = pd.read_parquet(tmp_path / "out" / "clusters.parquet")
    assert frame["id"].tolist() == ["1.000000,2.000000"]


def test_cluster_job_end_to_end(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="geocluster.clustering.cluster_job")
    data = tmp_path / "subs.csv"
    data.write_text(CSV_DUMP, encoding="utf-8")
    out = tmp_path / "out"
    config = tmp_path / "config.yaml"
    config.write_text(
        "\n".join(
            [
                "dataset:",
                f"  records_path: {data}",
                "filters:",
                "  status: cancel",
                "clustering:",
                "  summary_fields: [customer_phone]",
                "output:",
                f"  base_path: {out}",
            ]
        ),
        encoding="utf-8",
    )

    cluster_job.main(["--config", str(config), "--zoom", "10", "--bounds", "-6", "-7", "107", "106"])

    assert "'north': -6.0" in caplog.text

    clusters = json.loads((out / "clusters.json").read_text(encoding="utf-8"))
    assert len(clusters) == 1
    assert clusters[0]["count"] == 2
    assert clusters[0]["items"][0]["customer_phone"] == "0811"
    stats = json.loads((out / "stats.json").read_text(encoding="utf-8"))
    assert stats == {"total": 4, "with_coordinates": 3, "without_coordinates": 1}
    points = json.loads((out / "map_points.json").read_text(encoding="utf-8"))
    assert [p["id"] for p in points] == ["S1", "S2"]


def test_cluster_job_fails_without_candidates(tmp_path):
    data = tmp_path / "subs.csv"
    data.write_text(CSV_DUMP, encoding="utf-8")
    config = tmp_path / "config.yaml"
    config.write_text(f"dataset:\n  records_path: {data}\nfilters:\n  status: dismantle\n", encoding="utf-8")

    with pytest.raises(RuntimeError):
        cluster_job.main(["--config", str(config)])


def test_bounds_flag_accepts_negative_decimals(tmp_path):
    data = tmp_path / "subs.csv"
    data.write_text(CSV_DUMP, encoding="utf-8")
    out = tmp_path / "out"
    config = tmp_path / "config.yaml"
    config.write_text(f"dataset:\n  records_path: {data}\noutput:\n  base_path: {out}\n", encoding="utf-8")

    cluster_job.main(["--config", str(config), "--bounds", "-6.15", "-6.25", "106.85", "106.75", "--zoom", "15"])

    points = json.loads((out / "map_points.json").read_text(encoding="utf-8"))
    assert sorted(p["id"] for p in points) == ["S1", "S2", "S5"]
