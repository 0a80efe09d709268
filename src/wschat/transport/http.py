"""
REST HTTP client for the chat server's JSON API.
"""

from typing import Any, Optional

import httpx

from wschat.errors import ChatClientError

DEFAULT_BASE_URL = "http://127.0.0.1:3000"


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/api",
            headers={"User-Agent": "wschat/0.1.0", "Accept": "application/json"},
            timeout=30.0,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def _auth_headers(self, authenticated: bool) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if authenticated and self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return
        details: Optional[dict[str, Any]] = None
        message = f"HTTP {resp.status_code}: {resp.text[:200]}"
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            message = body["error"]
            details = {"status_code": resp.status_code}
        raise ChatClientError("http_error", message, details)

    async def get(self, path: str, authenticated: bool = True) -> Any:
        resp = await self._client.get(path, headers=self._auth_headers(authenticated))
        self._raise_for_status(resp)
        return resp.json()

    async def post(
        self,
        path: str,
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
        authenticated: bool = True,
    ) -> Any:
        resp = await self._client.post(path, json=body, params=params, headers=self._auth_headers(authenticated))
        self._raise_for_status(resp)
        return resp.json()

    async def close(self) -> None:
        await self._client.aclose()
