"""
BinWatch — Settings & Thresholds
=================================
Every numeric threshold lives here. Environment overrides via .env.
Server analytics and client display read the same bands.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# ══════════════════════════════════════════════════════════════════════════════
# FILL-LEVEL BANDS (inclusive lower bound wins at every boundary)
# ══════════════════════════════════════════════════════════════════════════════
FILL_BANDS = [
    {"min": 90, "max": 100, "tier": "CRITICAL",  "label": "CRITICAL",  "color": "#D32F2F"},
    {"min": 80, "max": 89,  "tier": "FULL",      "label": "FULL",      "color": "#F44336"},
    {"min": 50, "max": 79,  "tier": "HALF_FULL", "label": "HALF FULL", "color": "#FF9800"},
    {"min": 0,  "max": 49,  "tier": "AVAILABLE", "label": "AVAILABLE", "color": "#4CAF50"},
]

TIER_ORDER = ["AVAILABLE", "HALF_FULL", "FULL", "CRITICAL"]

# ══════════════════════════════════════════════════════════════════════════════
# ALERT THRESHOLDS (rising-edge crossings between two polls)
# ══════════════════════════════════════════════════════════════════════════════
ALERT_THRESHOLDS = [
    {"kind": "CRITICAL_FULL", "level": 90, "severity": "high"},
    {"kind": "EMERGENCY",     "level": 95, "severity": "critical"},
]
SENSOR_WARNING_SEVERITY = "high"

ALERT_FEED_MAX = 10      # most-recent-N kept by the client
ALERT_TTL_SEC  = 30      # auto-expiry unless dismissed earlier

# ══════════════════════════════════════════════════════════════════════════════
# COLLECTION ROUTE
# ══════════════════════════════════════════════════════════════════════════════
ROUTE_MIN_LEVEL      = 80
ROUTE_CRITICAL_LEVEL = 90
MEDICAL_BONUS        = 20
MINUTES_PER_STOP     = 15
MEDICAL_WASTE        = "Medical Waste"

# ══════════════════════════════════════════════════════════════════════════════
# BIN DEFAULTS
# ══════════════════════════════════════════════════════════════════════════════
BIN_DEFAULT_CAPACITY = 240           # liters
BIN_MIN_CAPACITY     = 50

# Auto-provisioned bins (first reading from an unseen device)
PLACEHOLDER_LOCATION = {"latitude": 6.8519, "longitude": 79.8774}
AUTO_AREA            = "Auto-detected"

LOW_BATTERY_PCT = 15                 # below this the sensor is flagged

# Ultrasonic sensor geometry (sensor mounted at the lid, looking down)
BIN_DEPTH_CM            = 100
SENSOR_MAX_DISTANCE_CM  = 100    # at or beyond this the reading means empty

# Public-facing advice, first matching band wins
RECOMMENDATIONS = [
    {"min": 90, "text": "\uD83D\uDEA8 CRITICAL: {type} bin is full! Please find an alternative bin."},
    {"min": 70, "text": "\u26A0\uFE0F HIGH: {type} bin is almost full. Consider using another bin."},
    {"min": 50, "text": "\uD83D\uDCCA MEDIUM: {type} bin is half full. Still usable."},
    {"min": 0,  "text": "\u2705 GOOD: {type} bin has plenty of space available."},
]

# ══════════════════════════════════════════════════════════════════════════════
# REPORTS & NOTICES
# ══════════════════════════════════════════════════════════════════════════════
REPORT_TYPES = [
    "bin_full", "bin_damaged", "unsanitary_condition", "missing_bin",
    "collection_missed", "illegal_dumping", "other",
]
REPORT_STATUSES   = ["pending", "in_progress", "resolved", "rejected"]
REPORT_PRIORITIES = ["low", "medium", "high", "critical"]
REPORT_DESCRIPTION_MAX = 500

NOTICE_PRIORITIES = ["urgent", "high", "medium", "low"]   # most urgent first
NOTICE_TITLE_MAX   = 100
NOTICE_CONTENT_MAX = 1000

# ══════════════════════════════════════════════════════════════════════════════
# ANALYTICS
# ══════════════════════════════════════════════════════════════════════════════
FULL_LEVEL  = 80     # level >= 80 counts as full
EMPTY_LEVEL = 50     # level < 50 counts as empty

# ══════════════════════════════════════════════════════════════════════════════
# DOCUMENT STORE
# ══════════════════════════════════════════════════════════════════════════════
MONGODB_URI      = os.getenv("MONGODB_URI", "")
MONGODB_DB       = os.getenv("MONGODB_DB", "waste_management")
STORE_TIMEOUT_MS = int(os.getenv("STORE_TIMEOUT_MS", "5000"))

ADMIN_EMAIL    = os.getenv("ADMIN_EMAIL", "admin@dhmc.lk")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
ADMIN_NAME     = os.getenv("ADMIN_NAME", "System Admin")

# ══════════════════════════════════════════════════════════════════════════════
# SERVER
# ══════════════════════════════════════════════════════════════════════════════
SERVER_HOST = "0.0.0.0"
SERVER_PORT = int(os.getenv("PORT", "3002"))
API_PREFIX  = os.getenv("API_PREFIX", "/api")

# ══════════════════════════════════════════════════════════════════════════════
# CLIENT POLLING
# ══════════════════════════════════════════════════════════════════════════════
API_URL    = os.getenv("BINWATCH_API_URL", f"http://localhost:{SERVER_PORT}{API_PREFIX}")
DEVICE_URL = os.getenv("BINWATCH_DEVICE_URL", "http://172.20.10.14")

API_TIMEOUT_SEC    = 5
DEVICE_TIMEOUT_SEC = 3
WRITE_TIMEOUT_SEC  = 10

ADMIN_POLL_SEC  = 5      # admin dashboard: bins + reports
PUBLIC_POLL_SEC = 15     # public dashboard
