"""
Small helpers shared by the cache router, the outbox and the worker.
"""

import json
from urllib.parse import urlsplit, urlunsplit

import requests
from requests.structures import CaseInsensitiveDict


def normalize_url(url) -> str:
    """Cache key: origin + path, query string and fragment stripped."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def origin_of(url) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def build_response(status_code, body=b"", headers=None, url=None, reason=None):
    """A requests.Response that did not come from the network."""
    response = requests.Response()
    response.status_code = status_code
    if isinstance(body, str):
        body = body.encode("utf-8")
    response._content = body
    response.headers = CaseInsensitiveDict(headers or {})
    response.url = url
    response.reason = reason
    response.encoding = "utf-8"
    return response


def json_response(status_code, payload, url=None):
    return build_response(
        status_code,
        json.dumps(payload),
        headers={"Content-Type": "application/json"},
        url=url,
    )


def text_response(status_code, text, url=None):
    return build_response(
        status_code,
        text,
        headers={"Content-Type": "text/plain"},
        url=url,
    )


def is_navigation(prepared) -> bool:
    headers = prepared.headers
    if headers.get("Sec-Fetch-Mode") == "navigate":
        return True
    return prepared.method == "GET" and "text/html" in (headers.get("Accept") or "")
