"""
BinWatch — Dashboard Aggregate
"""
from config.bins import SAMPLE_ANALYTICS
from config.settings import FULL_LEVEL, EMPTY_LEVEL, TIER_ORDER
from fill_model.classifier import classify, clamp_level


def dashboard(store):
    bins = store.find("bin", {"status": "active"})
    levels = [clamp_level(b.get("level", 0)) for b in bins]

    tiers = {tier: 0 for tier in TIER_ORDER}
    for level in levels:
        tiers[classify(level)["tier"]] += 1

    return {
        "bins": {
            "total": len(levels),
            "full": len([lv for lv in levels if lv >= FULL_LEVEL]),
            "empty": len([lv for lv in levels if lv < EMPTY_LEVEL]),
            "averageLevel": round(sum(levels) / len(levels)) if levels else 0,
            "tiers": tiers,
        },
        "reports": {
            "total": store.count("report"),
            "pending": store.count("report", {"status": "pending"}),
            "resolved": store.count("report", {"status": "resolved"}),
        },
    }


def sample_dashboard():
    return {k: (dict(v) if isinstance(v, dict) else v) for k, v in SAMPLE_ANALYTICS.items()}
