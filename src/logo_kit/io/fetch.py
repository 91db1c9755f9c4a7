"""Byte retrieval for logo references: HTTP(S), data URIs and local files."""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from threading import Lock
from urllib.parse import unquote_to_bytes, urlparse
from urllib.request import url2pathname

import requests
from requests import Session
from tenacity import (  # type: ignore[import-untyped]
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import FetchError

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_session_lock = Lock()
_session: Session | None = None


class RetryableHTTPStatusError(Exception):
    """Raised for HTTP status codes that should trigger a retry."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server returned status {status_code}")
        self.status_code = status_code


def _get_session() -> Session:
    """Return a shared requests session configured with default headers."""
    global _session
    if _session is None:
        with _session_lock:
            if _session is None:
                session = requests.Session()
                session.headers.update(
                    {
                        "User-Agent": _USER_AGENT,
                        "Accept": "image/*,*/*;q=0.8",
                    }
                )
                _session = session
    return _session


_retryer = Retrying(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=5),
    retry=retry_if_exception_type(
        (requests.Timeout, requests.ConnectionError, RetryableHTTPStatusError)
    ),
    before_sleep=before_sleep_log(logger, logging.DEBUG),
    reraise=True,
)


def _ensure_http_scheme(url: str) -> str:
    """Ensure *url* is qualified with an HTTP scheme, defaulting to https."""
    cleaned = url.strip()
    if not cleaned:
        return cleaned
    if cleaned.startswith(("http://", "https://")):
        return cleaned
    if cleaned.startswith("//"):
        return f"https:{cleaned}"
    parsed = urlparse(cleaned)
    if parsed.scheme:
        return cleaned
    return f"https://{cleaned}"


def _fetch_once(url: str, timeout: float) -> bytes:
    """Issue a single HTTP GET request and return the response body."""
    response = _get_session().get(url, timeout=timeout, allow_redirects=True)
    if 500 <= response.status_code < 600:
        raise RetryableHTTPStatusError(response.status_code)
    response.raise_for_status()
    return response.content


def fetch_bytes(url: str, timeout: float = _DEFAULT_TIMEOUT) -> bytes:
    """Return the raw bytes behind *url*.

    ``data:`` URIs are decoded in memory, ``file:`` URIs are read from disk and
    anything else is fetched over HTTP with retries for transient failures
    (timeouts, connection errors and 5xx responses). Raises
    :class:`~logo_kit.errors.FetchError` on any failure.
    """
    if not url or not url.strip():
        raise FetchError(url, "empty reference")
    value = url.strip()
    if value.startswith("data:"):
        return decode_data_uri(value)
    if value.startswith("file:"):
        return _read_file_uri(value)

    target_url = _ensure_http_scheme(value)
    try:
        return _retryer(lambda: _fetch_once(target_url, timeout))
    except RetryableHTTPStatusError as exc:
        logger.warning("Server error fetching %s: %s", target_url, exc)
        raise FetchError(url, str(exc)) from exc
    except requests.RequestException as exc:
        logger.warning("Request error fetching %s: %s", target_url, exc)
        raise FetchError(url, str(exc)) from exc


def decode_data_uri(uri: str) -> bytes:
    """Decode the payload of a ``data:`` URI."""
    try:
        header, data = uri.split(",", 1)
    except ValueError as exc:
        raise FetchError(uri, "malformed data URI") from exc
    if ";base64" in header:
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise FetchError(uri, "invalid base64 payload") from exc
    return unquote_to_bytes(data)


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Return *data* as a base64 ``data:`` URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _read_file_uri(uri: str) -> bytes:
    parsed = urlparse(uri)
    path = Path(url2pathname(parsed.path))
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FetchError(uri, str(exc)) from exc
