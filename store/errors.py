"""
BinWatch — Error Taxonomy
Each error carries the short machine string returned under the `error` key.
"""


class BinWatchError(Exception):
    status_code = 500

    def __init__(self, code, message=None):
        super().__init__(message or code)
        self.code = code


class ValidationFailed(BinWatchError):
    status_code = 400


class Unauthorized(BinWatchError):
    status_code = 401


class Forbidden(BinWatchError):
    status_code = 403


class NotFound(BinWatchError):
    status_code = 404


class Conflict(BinWatchError):
    status_code = 409


class StoreUnavailable(BinWatchError):
    status_code = 503

    def __init__(self, message=None):
        super().__init__("store_unavailable", message)
