from __future__ import annotations

from typing import Any, Dict, Optional, Protocol


class HttpResponsePort(Protocol):
    status_code: int
    text: str


class HttpClientPort(Protocol):
    """The slice of requests.Session the connector relies on."""

    def get(self, url: str, *, timeout: Optional[float] = None, **kwargs: Any) -> HttpResponsePort:
        ...

    def post(
        self,
        url: str,
        *,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> HttpResponsePort:
        ...
