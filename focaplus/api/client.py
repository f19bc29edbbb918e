"""JSON-over-HTTP client for the FocaPlus backend.

Sends JSON bodies, attaches the stored bearer token and turns every
transport or HTTP failure into an ``ApiError``.  A 401 response means the
stored token is no longer valid, so it is cleared from the token store.
"""

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api/v1"
DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """A backend call failed.

    ``status`` is the HTTP status code, or ``None`` when the request never got
    a response (connection refused, timeout, unreadable body).
    """

    def __init__(self, message: str, status: Optional[int] = None,
                 url: str = "", body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.url = url
        self.body = body


def build_path(prefix: str, *segments: Any) -> str:
    """Append URL-quoted *segments* to *prefix* (``/a`` + ``b c`` -> ``/a/b%20c``)."""
    quoted = [urllib.parse.quote(str(s), safe="") for s in segments]
    return "/".join([prefix.rstrip("/")] + quoted)


class ApiClient:
    """Minimal REST client rooted at *base_url*."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = DEFAULT_TIMEOUT,
                 token_store=None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token_store = token_store  # TokenStore, optional

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, data: Any = None) -> Any:
        return self.request("POST", path, data)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def request(self, method: str, path: str, data: Any = None) -> Any:
        """Send a request and return the decoded JSON body (``None`` if empty)."""
        url = path if path.startswith("http") else self.base_url + path
        body = json.dumps(data).encode("utf-8") if data is not None else None
        req = urllib.request.Request(url, data=body, method=method, headers=self._headers())

        logger.debug("API request: %s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
                status = resp.status
        except urllib.error.HTTPError as exc:
            error_body = self._decode(exc.read(), url, strict=False)
            logger.warning("API error: %s %s -> %s %s", method, url, exc.code, exc.reason)
            if exc.code == 401:
                self._on_unauthorized()
            raise ApiError(
                f"{method} {url} failed with {exc.code}", status=exc.code,
                url=url, body=error_body,
            ) from exc
        except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError) as exc:
            logger.warning("API request failed: %s %s: %s", method, url, exc)
            raise ApiError(f"{method} {url} failed: {exc}", url=url) from exc

        logger.debug("API response: %s %s -> %s", method, url, status)
        return self._decode(raw, url)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        token = self.token_store.get_access_token() if self.token_store is not None else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _on_unauthorized(self) -> None:
        if self.token_store is not None:
            logger.info("Backend rejected the stored token; clearing login state")
            self.token_store.clear()

    @staticmethod
    def _decode(raw: bytes, url: str, strict: bool = True) -> Any:
        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            if not strict:
                return raw.decode("utf-8", errors="replace")
            raise ApiError(f"Invalid JSON from {url}", url=url) from exc
