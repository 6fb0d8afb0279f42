"""
BinWatch — Sensor & Location Helpers
Raw ultrasonic samples → fill level, great-circle distance to a bin,
and the advice line shown to residents.
"""
import math

from config.settings import BIN_DEPTH_CM, SENSOR_MAX_DISTANCE_CM, RECOMMENDATIONS

EARTH_RADIUS_M = 6_371_000


def level_from_distance(distance_cm, depth_cm=BIN_DEPTH_CM, max_distance_cm=SENSOR_MAX_DISTANCE_CM):
    """
    Ultrasonic distance to the waste surface → fill percentage.

    No reading (None, zero or negative) and anything at or past the sensor's
    range count as empty.
    """
    if not distance_cm or distance_cm <= 0 or distance_cm >= max_distance_cm:
        return 0
    return int(max(0, min(100, round(100 - distance_cm / depth_cm * 100))))


def with_level(bin_doc):
    """Fill in `level` for a raw device sample that only carries `distance`."""
    if bin_doc.get("level") is not None or bin_doc.get("distance") is None:
        return bin_doc
    return {**bin_doc, "level": level_from_distance(bin_doc["distance"])}


def coordinates(bin_doc):
    """(lat, lng) from a Bin document or a flat device record, or None."""
    loc = bin_doc.get("location") or bin_doc
    lat, lng = loc.get("latitude"), loc.get("longitude")
    if lat is None or lng is None:
        return None
    return float(lat), float(lng)


def distance_m(lat1, lng1, lat2, lng2):
    """Haversine distance in whole meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return int(round(EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))))


def recommendation(level, waste_type="General Waste"):
    for band in RECOMMENDATIONS:
        if (level or 0) >= band["min"]:
            return band["text"].format(type=waste_type)
    return RECOMMENDATIONS[-1]["text"].format(type=waste_type)
