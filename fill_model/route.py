"""
BinWatch — Collection Route
Orders bins that need emptying by urgency for the collection crew.
"""
from config.settings import (
    ROUTE_MIN_LEVEL, ROUTE_CRITICAL_LEVEL,
    MEDICAL_BONUS, MINUTES_PER_STOP, MEDICAL_WASTE,
)


def urgency_score(bin_doc):
    """Fill level plus a flat bonus for medical waste."""
    bonus = MEDICAL_BONUS if bin_doc.get("type") == MEDICAL_WASTE else 0
    return bin_doc.get("level", 0) + bonus


def build_route(bins):
    """
    Filter bins at or above ROUTE_MIN_LEVEL and rank them by urgency.

    sorted() is stable, so equal scores keep their input order.
    An empty list means nothing to collect.
    """
    due = [b for b in bins if b.get("level", 0) >= ROUTE_MIN_LEVEL]
    ranked = sorted(due, key=urgency_score, reverse=True)

    route = []
    for order, bin_doc in enumerate(ranked, 1):
        route.append({
            **bin_doc,
            "order": order,
            "urgency": urgency_score(bin_doc),
            "estimatedTime": order * MINUTES_PER_STOP,
            "priority": "CRITICAL" if bin_doc.get("level", 0) >= ROUTE_CRITICAL_LEVEL else "HIGH",
        })
    return route
