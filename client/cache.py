"""
BinWatch — Dashboard Cache (client side)
==========================================
Owns the ephemeral copies of bins, reports and notices and the timer
thread that refreshes them. Never writes back to the store.

Fallback on a failed poll: last-known-good data, then static sample bins.
Alerts are evaluated only on fresh bin data from a provider.
"""
import logging
import threading
import time

from config.bins import sample_bin_documents
from config.settings import ADMIN_POLL_SEC, PUBLIC_POLL_SEC, FULL_LEVEL
from fill_model.alerts import AlertFeed, evaluate_alerts
from fill_model.classifier import classify, clamp_level
from fill_model.route import build_route
from fill_model.sensing import with_level, coordinates, distance_m, recommendation
from client.providers import ProviderChainExhausted, as_list, bin_sources, api_source

log = logging.getLogger(__name__)


class DashboardCache:

    def __init__(self, bin_chain=None, api_chain=None, interval=ADMIN_POLL_SEC,
                 feed=None, clock=time.time):
        self.bin_chain = bin_chain or bin_sources()
        self.api_chain = api_chain or api_source()
        self.interval = interval
        self.feed = feed or AlertFeed(clock=clock)
        self._clock = clock

        self.bins = []
        self.reports = []
        self.notices = []
        self.source = None
        self.connection = "idle"      # idle / live / error
        self.last_refresh = None
        self.updates = 0

        self._refresh_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread = None

    # ── Refresh ────────────────────────────────────────────────────────
    def refresh(self):
        """One poll of every resource. Never raises on transport failure."""
        with self._refresh_lock:
            self._refresh_bins()
            self._refresh_reports()
            self._refresh_notices()
            self.feed.prune(self._clock())
            self.last_refresh = self._clock()
            self.updates += 1

    def _refresh_bins(self):
        try:
            data, source = self.bin_chain.fetch("/bins")
        except ProviderChainExhausted as e:
            self.connection = "error"
            if self.bins:
                self.source = "cache"
                log.warning(f"[Cache] Bins unavailable, keeping {len(self.bins)} cached: {e}")
            else:
                self.bins = sample_bin_documents()
                self.source = "demo"
                log.warning("[Cache] Bins unavailable and nothing cached, using demo data")
            return

        fresh = [with_level(b) for b in as_list(data, "bins")]
        previous = [] if self.source == "demo" else self.bins
        alerts = evaluate_alerts(previous, fresh, now=self._clock())
        if alerts:
            self.feed.push(alerts)
            for a in alerts:
                log.warning(f"[Cache] ALERT {a['type']} for bin {a['binId']} ({a['level']}%)")
        self.bins = fresh
        self.source = source
        self.connection = "live"
        log.info(f"[Cache] {len(fresh)} bins synchronized from {source}")

    def _refresh_reports(self):
        try:
            data, _ = self.api_chain.fetch("/reports")
            self.reports = as_list(data, "reports")
        except ProviderChainExhausted as e:
            log.warning(f"[Cache] Reports unavailable, keeping {len(self.reports)} cached: {e}")

    def _refresh_notices(self):
        try:
            data, _ = self.api_chain.fetch("/notices")
            self.notices = as_list(data, "notices")
        except ProviderChainExhausted as e:
            log.warning(f"[Cache] Notices unavailable, keeping {len(self.notices)} cached: {e}")

    def invalidate(self):
        """Forget everything; the next refresh starts from scratch."""
        with self._refresh_lock:
            self.bins = []
            self.reports = []
            self.notices = []
            self.source = None
            self.connection = "idle"
            self.last_refresh = None

    # ── Derived views ──────────────────────────────────────────────────
    def bin_rows(self):
        """Bins annotated with tier, label and color for display."""
        return [{**b, **classify(clamp_level(b.get("level", 0)))} for b in self.bins]

    def collection_route(self):
        return build_route(self.bins)

    def nearest_bins(self, latitude, longitude, limit=3):
        """Closest bins to a resident, with distance and usage advice. Bins without coordinates are skipped."""
        nearby = []
        for b in self.bins:
            coords = coordinates(b)
            if coords is None:
                continue
            nearby.append({
                **b,
                "distanceM": distance_m(latitude, longitude, *coords),
                "recommendation": recommendation(clamp_level(b.get("level", 0)), b.get("type", "General Waste")),
            })
        nearby.sort(key=lambda b: b["distanceM"])
        return nearby[:limit]

    def stats(self):
        levels = [clamp_level(b.get("level", 0)) for b in self.bins]
        return {
            "total": len(levels),
            "critical": len([lv for lv in levels if classify(lv)["tier"] == "CRITICAL"]),
            "full": len([lv for lv in levels if lv >= FULL_LEVEL]),
            "available": len([lv for lv in levels if classify(lv)["tier"] == "AVAILABLE"]),
            "pendingReports": len([r for r in self.reports if r.get("status") == "pending"]),
            "liveAlerts": len(self.feed.active(self._clock())),
        }

    # ── Timer ──────────────────────────────────────────────────────────
    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="binwatch-poll")
        self._thread.start()
        log.info(f"[Cache] Polling started ({self.interval}s interval)")

    def stop(self, timeout=None):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None
        log.info("[Cache] Polling stopped")

    @property
    def running(self):
        return bool(self._thread and self._thread.is_alive())

    def _run(self):
        while not self._stop.is_set():
            try:
                self.refresh()
            except Exception:
                # a bad payload must not kill the polling thread
                log.exception("[Cache] Refresh error")
            self._stop.wait(self.interval)


def admin_dashboard():
    return DashboardCache(interval=ADMIN_POLL_SEC)


def public_dashboard():
    """Residents see the same data, refreshed less often and without the device fallback."""
    return DashboardCache(bin_chain=api_source(), interval=PUBLIC_POLL_SEC)
