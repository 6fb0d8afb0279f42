"""
BinWatch — Sample Bin Registry
===============================
Dehiwala-Mount Lavinia collection points used to seed an empty store,
and served as-is whenever the store cannot be reached.
"""

SAMPLE_BINS = {
    "DHW001": {"lat": 6.8519, "lng": 79.8774, "address": "Dehiwala Center",  "level": 85, "type": "General Waste"},
    "DHW002": {"lat": 6.8500, "lng": 79.8800, "address": "Bus Station",      "level": 45, "type": "General Waste"},
    "DHW003": {"lat": 6.8540, "lng": 79.8750, "address": "Market Place",     "level": 90, "type": "Organic"},
    "DHW004": {"lat": 6.8560, "lng": 79.8720, "address": "Sports Ground",    "level": 25, "type": "Recyclable"},
    "DHW005": {"lat": 6.8530, "lng": 79.8790, "address": "Primary School",   "level": 30, "type": "General Waste"},
    "DHW006": {"lat": 6.8488, "lng": 79.8762, "address": "Hospital Area",    "level": 45, "type": "Medical Waste"},
}

SAMPLE_NOTICES = [
    {
        "title": "Garbage Collection Schedule",
        "content": "Monday to Wednesday: 6:00 PM collection time",
        "priority": "high",
        "type": "schedule",
    },
    {
        "title": "New Bins Installation",
        "content": "10 new waste bins have been installed in Dehiwala area",
        "priority": "medium",
        "type": "announcement",
    },
]

SAMPLE_ANALYTICS = {
    "bins": {
        "total": 6, "full": 2, "empty": 4, "averageLevel": 53,
        "tiers": {"AVAILABLE": 4, "HALF_FULL": 0, "FULL": 1, "CRITICAL": 1},
    },
    "reports": {"total": 0, "pending": 0, "resolved": 0},
    "note": "Sample data (database offline)",
}


def sample_bin_documents():
    """Registry entries shaped as Bin documents (no store ids)."""
    docs = []
    for bin_id, info in SAMPLE_BINS.items():
        docs.append({
            "binId": bin_id,
            "location": {
                "latitude": info["lat"],
                "longitude": info["lng"],
                "address": info["address"],
            },
            "area": info["address"],
            "level": info["level"],
            "distance": None,
            "type": info["type"],
            "status": "active",
        })
    return docs


if __name__ == "__main__":
    print(f"Total sample bins: {len(SAMPLE_BINS)}")
    for bid, info in SAMPLE_BINS.items():
        print(f"  {bid}: {info['address']} ({info['level']}%)")
