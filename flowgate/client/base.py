"""
Shared HTTP client utilities for the remote analysis engines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from flowgate.credentials import basic_auth_header


@dataclass
class APIError(Exception):
    """HTTP error from a remote analysis server."""

    status_code: int
    message: str
    response_text: str = ""

    def __str__(self) -> str:  # pragma: no cover
        return f"APIError(status_code={self.status_code}, message={self.message})"


class BaseHTTPClient:
    """
    Thin wrapper around httpx.Client with basic auth + consistent error handling.

    `transport` is passed straight to httpx so tests can use httpx.MockTransport.
    """

    def __init__(
        self,
        api_url: str,
        user_name: Optional[str] = None,
        password: Optional[str] = None,
        *,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.user_name = user_name

        final_headers: Dict[str, str] = {
            "Accept": "application/json",
        }
        if user_name:
            final_headers["Authorization"] = basic_auth_header(user_name, password)
        if headers:
            final_headers.update(headers)

        self._client = httpx.Client(
            base_url=self.api_url,
            timeout=timeout,
            headers=final_headers,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BaseHTTPClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _raw(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        return self._client.request(
            method,
            path,
            params=params,
            json=json,
            content=content,
            data=data,
            files=files,
            headers=headers,
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self._raw(method, path, **kwargs)
        if 200 <= resp.status_code < 300:
            return _decode(resp)

        message = f"Request failed: {method} {path}"
        response_text = resp.text or ""
        try:
            data = resp.json()
            if isinstance(data, dict):
                message = str(data.get("err_msg") or data.get("error") or data.get("detail") or data)
            else:
                message = str(data)
        except ValueError:
            pass

        raise APIError(status_code=resp.status_code, message=message, response_text=response_text)


def _decode(resp: httpx.Response) -> Any:
    # 204 No Content
    if resp.status_code == 204 or not resp.content:
        return None
    content_type = resp.headers.get("content-type", "")
    if "json" in content_type:
        return resp.json()
    try:
        return resp.json()
    except ValueError:
        return resp.text
