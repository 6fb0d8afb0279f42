"""
BinWatch — Client Write Calls
Failures surface as ClientError carrying a message fit to show the user.
"""
import logging

import requests

from config.settings import API_URL, WRITE_TIMEOUT_SEC

log = logging.getLogger(__name__)

OFFLINE_MESSAGE = "Could not reach the server. Check your connection and try again."

FRIENDLY_ERRORS = {
    "invalid_credentials": "Email or password is incorrect.",
    "admin_required": "This account does not have admin access.",
    "user_exists": "An account with this email already exists.",
    "store_unavailable": "The service is temporarily unavailable. Please try again shortly.",
    "report_not_found": "This report no longer exists.",
}


class ClientError(Exception):
    def __init__(self, message, status=None, code=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class BinWatchClient:
    def __init__(self, base_url=API_URL, timeout=WRITE_TIMEOUT_SEC):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _call(self, method, path, body=None):
        url = f"{self.base_url}{path}"
        try:
            resp = requests.request(method, url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            log.error(f"[Client] {method} {path} failed: {e}")
            raise ClientError(OFFLINE_MESSAGE)

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not resp.ok:
            code = data.get("error") if isinstance(data, dict) else None
            message = FRIENDLY_ERRORS.get(code) or f"Request failed ({code or resp.status_code}). Please check the form and retry."
            log.warning(f"[Client] {method} {path} → {resp.status_code} {code}")
            raise ClientError(message, status=resp.status_code, code=code)
        return data

    # ── Auth ───────────────────────────────────────────────────────────
    def login(self, email, password, user_type="public"):
        return self._call("POST", "/auth/login",
                          {"email": email, "password": password, "userType": user_type})

    def register(self, email, password, name):
        return self._call("POST", "/auth/register",
                          {"email": email, "password": password, "name": name})

    # ── Reports / notices ──────────────────────────────────────────────
    def create_report(self, report_type, description, location=None, bin_id=None, reported_by=None):
        return self._call("POST", "/reports", {
            "reportType": report_type,
            "description": description,
            "location": location,
            "binId": bin_id,
            "reportedBy": reported_by,
        })

    def resolve_report(self, report_id, resolved_by):
        return self._call("PATCH", f"/reports/{report_id}/resolve", {"resolvedBy": resolved_by})

    def create_notice(self, title, content, admin_id, priority="medium"):
        return self._call("POST", "/notices", {
            "title": title, "content": content, "adminId": admin_id, "priority": priority,
        })

    # ── Devices ────────────────────────────────────────────────────────
    def report_reading(self, bin_id, level, distance, timestamp=None, battery=None):
        body = {"level": level, "distance": distance, "timestamp": timestamp}
        if battery is not None:
            body["battery"] = battery
        return self._call("POST", f"/bins/{bin_id}/update-level", body)
