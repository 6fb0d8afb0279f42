"""
BinWatch — Crossing Alerts
Diffs two snapshots of the bin set and emits rising-edge alerts.
States: below → at/above a threshold fires once; staying above never re-fires.
"""
import threading
import time

from config.settings import (
    ALERT_THRESHOLDS, SENSOR_WARNING_SEVERITY,
    ALERT_FEED_MAX, ALERT_TTL_SEC,
)

SENSOR_WARNING = "SENSOR_WARNING"


def _index(bins):
    return {b.get("binId"): b for b in bins or [] if b.get("binId")}


def _location_of(bin_doc):
    loc = bin_doc.get("location") or {}
    return loc.get("address") or bin_doc.get("area") or ""


def _make_alert(bin_doc, kind, severity, emitted_at):
    bin_id = bin_doc["binId"]
    return {
        "id": f"{bin_id}_{int(emitted_at * 1000)}_{kind}",
        "binId": bin_id,
        "type": kind,
        "level": bin_doc.get("level", 0),
        "location": _location_of(bin_doc),
        "timestamp": emitted_at,
        "severity": severity,
    }


def evaluate_alerts(previous, current, now=None):
    """
    Compare two bin snapshots keyed by binId.

    Only bins present in both snapshots are considered. Each threshold fires
    independently, so 85 → 96 yields CRITICAL_FULL and EMERGENCY. A sensor
    warning on the current snapshot fires regardless of level movement.
    Pure: the same pair and the same `now` give the same alerts.
    """
    emitted_at = time.time() if now is None else now
    before = _index(previous)
    alerts = []

    for bin_id, cur in _index(current).items():
        old = before.get(bin_id)
        if old is None:
            continue

        old_level = old.get("level", 0)
        new_level = cur.get("level", 0)
        for threshold in ALERT_THRESHOLDS:
            if old_level < threshold["level"] <= new_level:
                alerts.append(_make_alert(cur, threshold["kind"], threshold["severity"], emitted_at))

        if cur.get("sensorStatus") == "warning":
            alerts.append(_make_alert(cur, SENSOR_WARNING, SENSOR_WARNING_SEVERITY, emitted_at))

    return alerts


class AlertFeed:
    """
    Bounded most-recent-first alert list held by the polling client.
    Every entry expires ALERT_TTL_SEC after emission unless dismissed first.
    Shared by the poll thread and the UI thread; every mutation holds the lock.
    """

    def __init__(self, max_items=ALERT_FEED_MAX, ttl=ALERT_TTL_SEC, clock=time.time):
        self.max_items = max_items
        self.ttl = ttl
        self._clock = clock
        self._alerts = []
        self._lock = threading.Lock()
        self.total_emitted = 0

    def push(self, alerts):
        with self._lock:
            for alert in alerts:
                self._alerts.insert(0, alert)
                self.total_emitted += 1
            del self._alerts[self.max_items:]

    def dismiss(self, alert_id):
        """Drop an alert early. Returns False if it was already gone."""
        with self._lock:
            before = len(self._alerts)
            self._alerts = [a for a in self._alerts if a["id"] != alert_id]
            return len(self._alerts) != before

    def _prune_locked(self, now):
        now = self._clock() if now is None else now
        self._alerts = [a for a in self._alerts if now - a["timestamp"] < self.ttl]

    def prune(self, now=None):
        with self._lock:
            self._prune_locked(now)

    def active(self, now=None):
        with self._lock:
            self._prune_locked(now)
            return list(self._alerts)

    def __len__(self):
        with self._lock:
            return len(self._alerts)
