import os
import sys
from datetime import datetime, timezone

import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from store.database import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)


def make_bin(bin_id, level, waste_type="General Waste", **extra):
    return {
        "binId": bin_id,
        "level": level,
        "type": waste_type,
        "location": {"latitude": 6.85, "longitude": 79.87, "address": f"Street {bin_id}"},
        "area": f"Area {bin_id}",
        **extra,
    }
