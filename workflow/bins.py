"""
BinWatch — Bin Lifecycle
=========================
  - Sensor ingest (upsert, auto-provision unseen identifiers)
  - Lookup / list / realtime snapshot
  - Admin seeding and collection confirmation
Bins are never deleted; deactivation is a status change.
"""
import logging
from datetime import datetime, timezone
from numbers import Real

from pydantic import ValidationError

from config.bins import sample_bin_documents
from config.settings import (
    AUTO_AREA, PLACEHOLDER_LOCATION, LOW_BATTERY_PCT,
    ROUTE_MIN_LEVEL, ROUTE_CRITICAL_LEVEL,
)
from fill_model.classifier import clamp_level
from store.errors import ValidationFailed, NotFound
from store.schemas import Bin, Location, SensorSample

log = logging.getLogger(__name__)

REALTIME_FIELDS = ("binId", "level", "distance", "location", "area", "status",
                   "sensorStatus", "lastUpdated", "sensorData")


def normalize_bin_id(bin_id):
    bin_id = (bin_id or "").strip().upper()
    if not bin_id:
        raise ValidationFailed("invalid_binId")
    return bin_id


def _is_number(value):
    return isinstance(value, Real) and not isinstance(value, bool)


def report_sensor_reading(store, bin_id, level, distance, timestamp=None,
                          battery=None, signal=None, sensor_status=None, now=None):
    """
    Apply one device reading to the bin record and return the stored bin.

    Level must be within [0, 100] and distance non-negative; anything else is
    rejected, never stored. Re-applying the same payload with the same `now`
    leaves identical state. Two devices writing the same bin: last write wins.
    """
    bin_id = normalize_bin_id(bin_id)
    if not _is_number(level) or level < 0 or level > 100:
        raise ValidationFailed("invalid_level")
    if not _is_number(distance) or distance < 0:
        raise ValidationFailed("invalid_distance")

    level = clamp_level(level)
    now = now or datetime.now(timezone.utc)

    sample = SensorSample(
        rawDistance=distance,
        calculatedLevel=level,
        timestamp=timestamp,
        batteryLevel=battery,
        signalStrength=signal,
    ).model_dump()
    low_battery = battery is not None and battery < LOW_BATTERY_PCT
    health = "warning" if sensor_status == "warning" or low_battery else "active"

    changes = {
        "level": level,
        "distance": distance,
        "lastUpdated": now,
        "sensorData": sample,
        "sensorStatus": health,
    }
    placeholder = Bin(
        binId=bin_id,
        location=Location(**PLACEHOLDER_LOCATION, address=f"Auto-created bin {bin_id}"),
        area=AUTO_AREA,
    ).model_dump()
    on_insert = {k: v for k, v in placeholder.items() if k not in changes and k != "binId"}

    doc = store.update("bin", {"binId": bin_id}, changes, upsert=True, on_insert=on_insert)

    log.info(f"[Ingest] {bin_id}: level={level}% distance={distance}cm")
    if level >= ROUTE_CRITICAL_LEVEL:
        log.error(f"[Ingest] CRITICAL: bin {bin_id} is {level}% full")
    elif level >= ROUTE_MIN_LEVEL:
        log.warning(f"[Ingest] WARNING: bin {bin_id} is {level}% full")
    if health == "warning":
        log.warning(f"[Ingest] Sensor warning on {bin_id} (battery={battery})")
    return doc


def list_bins(store):
    """Active bins only, ordered by identifier."""
    bins = store.find("bin", {"status": "active"})
    return sorted(bins, key=lambda b: b.get("binId", ""))


def get_bin(store, bin_id):
    doc = store.find_one("bin", {"binId": normalize_bin_id(bin_id)})
    if doc is None:
        raise NotFound("bin_not_found")
    return doc


def realtime_snapshot(store, bin_id):
    doc = get_bin(store, bin_id)
    return {k: doc.get(k) for k in REALTIME_FIELDS}


def create_bin(store, payload):
    """Admin seeding. A duplicate identifier raises Conflict."""
    try:
        model = Bin(**payload)
    except ValidationError as e:
        field = e.errors()[0]["loc"][0] if e.errors() and e.errors()[0]["loc"] else "bin"
        raise ValidationFailed(f"invalid_{field}")
    doc = model.model_dump()
    doc["lastUpdated"] = datetime.now(timezone.utc)
    created = store.insert("bin", doc)
    log.info(f"[Bins] Created {created['binId']} at {created['area']}")
    return created


def mark_collected(store, bin_id, now=None):
    """Crew confirmed the bin was emptied."""
    now = now or datetime.now(timezone.utc)
    doc = store.update("bin", {"binId": normalize_bin_id(bin_id)}, {"lastCollected": now})
    if doc is None:
        raise NotFound("bin_not_found")
    log.info(f"[Bins] Collection confirmed at {doc['binId']}")
    return doc


def seed_sample_bins(store):
    """Insert the sample registry into an empty bin collection."""
    if store.count("bin") > 0:
        return 0
    inserted = 0
    for doc in sample_bin_documents():
        create_bin(store, doc)
        inserted += 1
    return inserted


def sample_bins():
    """Static data served when the store is unreachable."""
    return [{**doc, "id": f"sample{i}"} for i, doc in enumerate(sample_bin_documents(), 1)]
