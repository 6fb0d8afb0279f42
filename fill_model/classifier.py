"""
BinWatch — Fill-Level Classifier
Maps a clamped fill level to a tier, a display label and a color.
One table (config.settings.FILL_BANDS) for server analytics and client display.
"""
from config.settings import FILL_BANDS, TIER_ORDER


def clamp_level(value):
    """Round and clamp a raw level into [0, 100]."""
    return int(min(100, max(0, round(value))))


def classify(level):
    """
    Determine tier for a fill level. Inclusive lower bound wins.

    Raises ValueError for anything outside [0, 100]; callers clamp first.
    """
    if level is None or level < 0 or level > 100:
        raise ValueError(f"fill level out of range: {level!r}")
    for band in FILL_BANDS:
        if level >= band["min"]:
            return {"tier": band["tier"], "label": band["label"], "color": band["color"]}
    # unreachable: the lowest band starts at 0
    raise ValueError(f"no band for level {level!r}")


def tier_rank(tier):
    """Urgency rank of a tier, 0 = AVAILABLE."""
    return TIER_ORDER.index(tier)


def get_tier_color(tier):
    for band in FILL_BANDS:
        if band["tier"] == tier:
            return band["color"]
    return "#9E9E9E"
