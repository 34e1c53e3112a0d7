import json

import pytest

from geocluster.ingest.ingestion_service import IngestionService, records_from_dicts
from geocluster.ingest.sources import (
    StaticRecordSource,
    filter_by_status,
    restrict_to_ids,
    search_records,
)

CSV_DUMP = """subscription_id,customer_name,customer_email,customer_phone,subscription_maps,subscription_address,subscription_status,serv_id
S1,Andi Wijaya,andi@example.com,0811,"-6.2,106.8",Jl. Sudirman,cancel,100
S2,Budi Santoso,budi@example.com,0812,-,Jl. Thamrin,cancel,101
S3,Citra Lestari,citra@example.com,0813,,Jl. Gatot,suspend,102
"""


def test_load_csv_records(tmp_path):
    path = tmp_path / "subs.csv"
    path.write_text(CSV_DUMP, encoding="utf-8")

    records = IngestionService(str(path)).load_records()

    assert [r.id for r in records] == ["S1", "S2", "S3"]
    first = records[0]
    assert first.name == "Andi Wijaya"
    assert first.coordinates == "-6.2,106.8"
    assert first.address == "Jl. Sudirman"
    assert first.status == "cancel"
    assert first.attributes["customer_phone"] == "0811"
    assert records[2].coordinates == ""


def test_load_jsonl_records_with_limit(tmp_path):
    path = tmp_path / "subs.jsonl"
    rows = [
        {"id": 1, "name": "A", "coordinates": "-6.2,106.8"},
        {"id": 2, "name": "B", "coordinates": None},
        {"id": 3, "name": "C", "coordinates": "1,1"},
    ]
    path.write_text("\n".join(json.dumps(row) for row in rows), encoding="utf-8")

    records = IngestionService(str(path), format="jsonl", limit=2).load_records()

    assert [r.id for r in records] == ["1", "2"]
    assert records[1].coordinates is None


def test_unknown_format_is_rejected():
    with pytest.raises(ValueError):
        IngestionService("subs.xml", format="xml")


def test_records_need_an_id_column():
    with pytest.raises(ValueError):
        records_from_dicts([{"name": "A", "coordinates": "1,1"}])


def test_status_and_search_filters():
    records = records_from_dicts(
        [
            {"id": "S1", "name": "Andi", "status": "cancel", "customer_email": "andi@example.com"},
            {"id": "S2", "name": "Budi", "status": "Cancel", "customer_phone": "0812"},
            {"id": "S3", "name": "Citra", "status": "suspend"},
        ]
    )

    assert [r.id for r in filter_by_status(records, "cancel")] == ["S1", "S2"]
    assert [r.id for r in filter_by_status(records, None)] == ["S1", "S2", "S3"]
    assert [r.id for r in search_records(records, "ANDI@")] == ["S1"]
    assert [r.id for r in search_records(records, "0812")] == ["S2"]
    assert [r.id for r in search_records(records, "s3")] == ["S3"]
    assert len(search_records(records, "  ")) == 3


def test_restrict_to_ids_keeps_listing_order():
    records = records_from_dicts([{"id": i, "name": str(i)} for i in range(5)])
    assert [r.id for r in restrict_to_ids(records, {"3", "1"})] == ["1", "3"]


def test_static_source_applies_filters(tmp_path):
    path = tmp_path / "subs.csv"
    path.write_text(CSV_DUMP, encoding="utf-8")

    source = StaticRecordSource(IngestionService(str(path)), status="cancel", search="budi")

    assert [r.id for r in source.load()] == ["S2"]


def test_json_ids_survive_null_rows(tmp_path):
    path = tmp_path / "subs.json"
    rows = [
        {"id": 1, "name": "A", "coordinates": "-6.2,106.8", "serv_id": 100},
        {"id": None, "name": "B", "coordinates": "-6.3,106.9", "serv_id": None},
        {"id": 3, "name": "C", "coordinates": "1,1", "serv_id": None},
    ]
    path.write_text(json.dumps(rows), encoding="utf-8")

    records = IngestionService(str(path), format="json").load_records()

    assert [r.id for r in records] == ["1", "3"]
    assert records[0].attributes["serv_id"] == 100
    assert records[1].attributes["serv_id"] is None
