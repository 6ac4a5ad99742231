"""
ApiClient
---------
Explicit connection context for talking to the marketplace API.

Build one per session (base URL, bearer token, HTTP session, optional
OfflineWorker) and pass it to whatever needs the API. There is no module
level client and no ambient token lookup; with_token() returns a new
context instead of mutating this one.
"""

import logging
from dataclasses import dataclass

import requests

from .exceptions import NETWORK_EXCEPTIONS, ApiError, NetworkError

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "You are currently offline. Please check your internet connection."


@dataclass(frozen=True)
class QueuedRequest:
    """A mutation the worker stored for replay ("will sync when online")."""
    method: str
    url: str

    message = "Request queued - will sync when online."


class ApiClient:
    def __init__(self, base_url, token=None, session=None, worker=None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.worker = worker
        if session is None:
            session = worker.session if worker is not None else requests.Session()
        self.session = session

    def with_token(self, token):
        return ApiClient(self.base_url, token=token, session=self.session, worker=self.worker)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def request(self, method, endpoint, payload=None, headers=None):
        """
        Send one API call and return the decoded JSON body.

        Returns:
            the JSON payload, or a QueuedRequest if the worker stored the call

        Raises:
            ApiError: the server (or the worker) answered with a non-2xx status
            NetworkError: no response and no offline fallback
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        all_headers = {"Accept": "application/json"}
        if self.token:
            all_headers["Authorization"] = f"Bearer {self.token}"
        all_headers.update(headers or {})
        request = requests.Request(method.upper(), url, headers=all_headers, json=payload)

        try:
            if self.worker is not None:
                response = self.worker.fetch(request)
            else:
                response = self.session.send(request.prepare())
        except NETWORK_EXCEPTIONS as exc:
            logger.error("API request failed: %s %s (%s)", method, endpoint, exc)
            raise NetworkError(cause=exc) from exc

        body = _decode(response)
        if response.status_code == 202 and isinstance(body, dict) and body.get("queued"):
            return QueuedRequest(method=method.upper(), url=url)
        if response.status_code == 503 and isinstance(body, dict) and body.get("error") in ("offline", "network"):
            raise NetworkError(OFFLINE_MESSAGE)
        if not response.ok:
            raise ApiError(response.status_code, body)
        return body

    # ---------- bookings ----------

    def create_booking(self, data):
        return self.request("POST", "/bookings", data)

    def list_bookings(self):
        return self.request("GET", "/bookings")

    def booking_action(self, booking_id, action, version=None):
        headers = {"If-Match": str(version)} if version is not None else None
        return self.request("PUT", f"/bookings/{booking_id}/{action}", {}, headers=headers)

    # ---------- notifications ----------

    def list_notifications(self):
        return self.request("GET", "/notifications")

    def mark_notification_read(self, notification_id):
        return self.request("PUT", f"/notifications/{notification_id}/read", {})

    def mark_all_notifications_read(self):
        return self.request("PUT", "/notifications/read", {})


def _decode(response):
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {"message": response.text}
