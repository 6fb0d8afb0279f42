import time

from client.cache import DashboardCache, admin_dashboard, public_dashboard
from client.providers import ProviderChainExhausted

from conftest import make_bin


class FakeChain:
    """Scripted stand-in for a ProviderChain: one outcome per path per call."""

    def __init__(self, name="Admin API"):
        self.name = name
        self.outcomes = {}

    def serve(self, path, data):
        self.outcomes.setdefault(path, []).append(data)

    def fail(self, path):
        self.outcomes.setdefault(path, []).append(None)

    def fetch(self, path, params=None):
        queue = self.outcomes.get(path) or [None]
        data = queue.pop(0) if len(queue) > 1 else queue[0]
        if data is None:
            raise ProviderChainExhausted([(self.name, "down")])
        return data, self.name


class Clock:
    def __init__(self, t=1000.0):
        self.t = t

    def __call__(self):
        return self.t


def make_cache(bin_chain=None, api_chain=None, clock=None):
    api_chain = api_chain or FakeChain()
    api_chain.outcomes.setdefault("/reports", [[]])
    api_chain.outcomes.setdefault("/notices", [[]])
    return DashboardCache(bin_chain=bin_chain or FakeChain(), api_chain=api_chain,
                          interval=0.01, clock=clock or Clock())


def test_fresh_data_is_cached():
    bins = FakeChain()
    bins.serve("/bins", [make_bin("A", 40), make_bin("B", 85)])
    cache = make_cache(bins)
    cache.refresh()
    assert cache.source == "Admin API"
    assert cache.connection == "live"
    assert [b["binId"] for b in cache.bins] == ["A", "B"]
    assert cache.updates == 1


def test_failed_poll_keeps_last_known_good():
    bins = FakeChain()
    bins.serve("/bins", [make_bin("A", 40)])
    bins.fail("/bins")
    cache = make_cache(bins)
    cache.refresh()
    cache.refresh()
    assert cache.source == "cache"
    assert cache.connection == "error"
    assert [b["binId"] for b in cache.bins] == ["A"]


def test_nothing_cached_falls_back_to_demo():
    bins = FakeChain()
    bins.fail("/bins")
    cache = make_cache(bins)
    cache.refresh()
    assert cache.source == "demo"
    assert len(cache.bins) == 6
    assert len(cache.feed) == 0


def test_threshold_crossing_lands_in_feed():
    clock = Clock()
    bins = FakeChain()
    bins.serve("/bins", [make_bin("A", 85)])
    bins.serve("/bins", [make_bin("A", 96)])
    cache = make_cache(bins, clock=clock)
    cache.refresh()
    assert len(cache.feed) == 0
    cache.refresh()
    kinds = sorted(a["type"] for a in cache.feed.active(clock()))
    assert kinds == ["CRITICAL_FULL", "EMERGENCY"]
    assert cache.stats()["liveAlerts"] == 2

    clock.t += 31
    assert cache.stats()["liveAlerts"] == 0


def test_demo_data_never_raises_alerts():
    bins = FakeChain()
    bins.fail("/bins")
    bins.serve("/bins", [make_bin("DHW001", 99)])
    cache = make_cache(bins)
    cache.refresh()
    cache.refresh()
    assert cache.source == "Admin API"
    assert len(cache.feed) == 0


def test_reports_and_notices_keep_cache_on_failure():
    api = FakeChain()
    api.serve("/reports", [{"id": "r1", "status": "pending"}])
    api.fail("/reports")
    api.serve("/notices", {"notices": [{"id": "n1"}]})
    api.fail("/notices")
    cache = make_cache(api_chain=api)
    cache.refresh()
    cache.refresh()
    assert [r["id"] for r in cache.reports] == ["r1"]
    assert [n["id"] for n in cache.notices] == ["n1"]
    assert cache.stats()["pendingReports"] == 1


def test_derived_views():
    bins = FakeChain()
    bins.serve("/bins", [make_bin("A", 95), make_bin("B", 30), make_bin("C", 82, "Medical Waste")])
    cache = make_cache(bins)
    cache.refresh()
    rows = {r["binId"]: r["tier"] for r in cache.bin_rows()}
    assert rows == {"A": "CRITICAL", "B": "AVAILABLE", "C": "FULL"}
    assert [s["binId"] for s in cache.collection_route()] == ["C", "A"]
    stats = cache.stats()
    assert (stats["total"], stats["critical"], stats["full"], stats["available"]) == (3, 1, 2, 1)


def test_invalidate_clears_everything():
    bins = FakeChain()
    bins.serve("/bins", [make_bin("A", 40)])
    cache = make_cache(bins)
    cache.refresh()
    cache.invalidate()
    assert cache.bins == [] and cache.source is None and cache.connection == "idle"


def test_background_polling_starts_and_stops():
    bins = FakeChain()
    bins.serve("/bins", [make_bin("A", 40)])
    cache = make_cache(bins)
    cache.start()
    assert cache.running
    deadline = time.time() + 2
    while cache.updates < 2 and time.time() < deadline:
        time.sleep(0.01)
    cache.stop(timeout=1)
    assert not cache.running
    assert cache.updates >= 2


def test_dashboard_factories():
    admin = admin_dashboard()
    assert admin.interval == 5
    assert [p.name for p in admin.bin_chain.providers] == ["Admin API", "ESP32 Direct"]

    public = public_dashboard()
    assert public.interval == 15
    assert [p.name for p in public.bin_chain.providers] == ["Admin API"]
    assert not public.running


def test_raw_device_samples_get_a_level():
    bins = FakeChain("ESP32 Direct")
    bins.serve("/bins", {"binId": "DHW001", "distance": 8})
    cache = make_cache(bins)
    cache.refresh()
    assert cache.bins[0]["level"] == 92
    assert cache.bin_rows()[0]["tier"] == "CRITICAL"
    assert [s["binId"] for s in cache.collection_route()] == ["DHW001"]


def test_nearest_bins():
    near = make_bin("NEAR", 95)
    far = make_bin("FAR", 10)
    far["location"] = {"latitude": 6.90, "longitude": 79.90, "address": "Far Street"}
    nowhere = {"binId": "RAW", "level": 40}
    bins = FakeChain()
    bins.serve("/bins", [far, nowhere, near])
    cache = make_cache(bins)
    cache.refresh()

    result = cache.nearest_bins(6.85, 79.87, limit=5)
    assert [b["binId"] for b in result] == ["NEAR", "FAR"]
    assert result[0]["distanceM"] == 0
    assert result[0]["recommendation"].startswith("🚨 CRITICAL")
    assert len(cache.nearest_bins(6.85, 79.87, limit=1)) == 1
