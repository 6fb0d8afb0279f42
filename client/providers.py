"""
BinWatch — Data Source Fallback Chain
Named providers tried in order, each with its own timeout. First success wins.
"""
import logging

import requests

from config.settings import API_URL, DEVICE_URL, API_TIMEOUT_SEC, DEVICE_TIMEOUT_SEC

log = logging.getLogger(__name__)


class ProviderChainExhausted(Exception):
    """Every provider in the chain failed."""

    def __init__(self, failures):
        self.failures = failures  # [(provider name, reason)]
        super().__init__("All data sources failed: " + "; ".join(f"{n}: {r}" for n, r in failures))


class Provider:
    def __init__(self, name, base_url, timeout):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch(self, path, params=None):
        resp = requests.get(
            f"{self.base_url}{path}",
            params=params,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def __repr__(self):
        return f"Provider({self.name!r}, {self.base_url!r}, timeout={self.timeout})"


class ProviderChain:
    def __init__(self, providers):
        self.providers = list(providers)

    def fetch(self, path, params=None):
        """Return (data, provider name) from the first provider that answers."""
        failures = []
        for provider in self.providers:
            try:
                log.debug(f"[Providers] Trying {provider.name} for {path}")
                data = provider.fetch(path, params)
                log.info(f"[Providers] {path} served by {provider.name}")
                return data, provider.name
            except (requests.RequestException, ValueError) as e:
                log.warning(f"[Providers] {provider.name} failed for {path}: {e}")
                failures.append((provider.name, str(e)[:120]))
        raise ProviderChainExhausted(failures)


def as_list(data, key):
    """Accept a bare array, a {key: [...]} wrapper or a single object."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        if isinstance(data.get(key), list):
            return data[key]
        return [data]
    return []


def bin_sources():
    """Backend first, then the sensor node's own HTTP endpoint."""
    return ProviderChain([
        Provider("Admin API", API_URL, API_TIMEOUT_SEC),
        Provider("ESP32 Direct", DEVICE_URL, DEVICE_TIMEOUT_SEC),
    ])


def api_source():
    return ProviderChain([Provider("Admin API", API_URL, API_TIMEOUT_SEC)])
