"""Candidate selection applied by callers before clustering."""

from __future__ import annotations

import logging
from typing import Collection, Iterable, List, Optional

from geocluster.common.models import GeoRecord
from geocluster.ingest.ingestion_service import IngestionService

logger = logging.getLogger(__name__)

SEARCH_ATTRIBUTES = ("customer_email", "customer_phone", "email", "phone")


def filter_by_status(records: Iterable[GeoRecord], status: Optional[str]) -> List[GeoRecord]:
    """Keep records with the given status (case-insensitive); None keeps all."""

    if not status:
        return list(records)
    wanted = status.strip().lower()
    return [record for record in records if (record.status or "").strip().lower() == wanted]


def search_records(records: Iterable[GeoRecord], term: Optional[str]) -> List[GeoRecord]:
    """Case-insensitive substring match over name, id, email and phone."""

    if not term or not term.strip():
        return list(records)
    needle = term.strip().lower()
    matches = []
    for record in records:
        haystack = [record.name, record.id]
        haystack.extend(record.attributes.get(name) for name in SEARCH_ATTRIBUTES)
        if any(needle in str(value).lower() for value in haystack if value is not None):
            matches.append(record)
    return matches


def restrict_to_ids(records: Iterable[GeoRecord], ids: Collection[str]) -> List[GeoRecord]:
    """Cross-filter a listing by a viewport id set, keeping listing order."""

    return [record for record in records if record.id in ids]


class StaticRecordSource:
    """Loads a record dump and applies the configured candidate filters."""

    def __init__(
        self,
        ingestion: IngestionService,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> None:
        self.ingestion = ingestion
        self.status = status
        self.search = search

    def load(self) -> List[GeoRecord]:
        records = self.ingestion.load_records()
        candidates = search_records(filter_by_status(records, self.status), self.search)
        logger.info(
            "Selected %d of %d records (status=%s, search=%s)",
            len(candidates),
            len(records),
            self.status,
            self.search,
        )
        return candidates
