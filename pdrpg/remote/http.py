"""
HTTP backend.

Talks to a local PDRPG service that exposes each command as
``POST {base_url}/invoke/{command}``. The request body is
``{"payload": {...}}``; the response is either ``{"ok": true, "data": ...}``
or ``{"ok": false, "error": "..." | {"message": ..., "code": ...}}``.

urllib is blocking, so each request runs in a worker thread and the event
loop only sees the await.
"""

import asyncio
import json
import logging
import urllib.error
import urllib.request
from typing import Any

from .base import RemoteBackend, RemoteCallError

logger = logging.getLogger(__name__)


class HttpBackend(RemoteBackend):
    """
    Client for the PDRPG local API.

    Default: http://127.0.0.1:3030/api
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:3030/api",
        timeout: float = 30,
        api_key: str | None = None,
    ):
        """
        Initialize HTTP backend.

        Args:
            base_url: API root (``/invoke/<command>`` is appended)
            timeout: Request timeout in seconds
            api_key: Optional bearer token
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key

    @property
    def name(self) -> str:
        return f"http:{self.base_url}"

    def _make_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _post(self, command: str, payload: dict | None) -> dict:
        """Blocking request; raises RemoteCallError on any transport failure."""
        url = f"{self.base_url}/invoke/{command}"
        req = urllib.request.Request(
            url,
            data=json.dumps({"payload": payload or {}}).encode("utf-8"),
            headers=self._make_headers(),
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            # Error bodies still carry the structured error when the server sent one
            try:
                body = json.loads(e.read().decode("utf-8"))
            except (ValueError, OSError):
                body = None
            if isinstance(body, dict) and "error" in body:
                raise RemoteCallError.from_payload(body["error"], command) from e
            raise RemoteCallError(f"HTTP {e.code} from {url}", command=command) from e
        except urllib.error.URLError as e:
            raise RemoteCallError(
                f"Cannot connect to {self.base_url}: {getattr(e, 'reason', e)}",
                command=command,
            ) from e
        except json.JSONDecodeError as e:
            raise RemoteCallError(f"Malformed response from {url}", command=command) from e

    async def invoke(self, command: str, payload: dict | None = None) -> Any:
        logger.debug(f"invoke {command} {payload!r}")
        body = await asyncio.to_thread(self._post, command, payload)

        if not isinstance(body, dict):
            raise RemoteCallError(f"Unexpected response for {command}", command=command)
        if not body.get("ok", False):
            raise RemoteCallError.from_payload(body.get("error"), command)
        return body.get("data")
