import sys
from pathlib import Path

import pytest

# Ensure the repository root (which contains the `geocluster` package) is importable in tests.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from geocluster.common.models import GeoRecord  # noqa: E402


@pytest.fixture
def jakarta_records():
    return [
        GeoRecord(id="1", name="Andi", coordinates="-6.2,106.8"),
        GeoRecord(id="2", name="Budi", coordinates="-6.2001,106.8001"),
        GeoRecord(id="3", name="Citra", coordinates="10,10"),
    ]


@pytest.fixture
def dirty_records():
    return [
        GeoRecord(id="a", name="No location", coordinates="-"),
        GeoRecord(id="b", name="Blank", coordinates=""),
        GeoRecord(id="c", name="Missing", coordinates=None),
        GeoRecord(id="d", name="Text", coordinates="abc,def"),
        GeoRecord(id="e", name="Too many", coordinates="1,2,3"),
        GeoRecord(id="f", name="Out of range", coordinates="91,0"),
        GeoRecord(id="g", name="Good", coordinates=" -6.9 , 107.6 "),
    ]
