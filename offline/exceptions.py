"""
Errors of the offline layer (client side of the API).
"""

import requests


class NetworkError(Exception):
    """The request never got a response (offline, DNS, refused, timeout)."""

    default_message = "Unable to connect to server. Please check your internet connection."

    def __init__(self, message=None, cause=None):
        super().__init__(message or self.default_message)
        self.cause = cause


class QueueRejectedError(Exception):
    """A failed mutating request cannot be stored for replay (non-JSON body)."""

    status_code = 422
    default_message = "Request could not be queued offline. Only JSON payloads are supported."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class WorkerStateError(Exception):
    pass


class ApiError(Exception):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {}
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if isinstance(self.payload, dict):
            for key in ("message", "detail", "error"):
                if self.payload.get(key):
                    return str(self.payload[key])
        return f"HTTP {self.status_code}"


# Exceptions that mean "no response": these trigger queueing / cache fallback
NETWORK_EXCEPTIONS = (requests.ConnectionError, requests.Timeout)
