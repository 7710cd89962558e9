"""Backend HTTP istemcisi - urllib3 havuzu üzerinde asenkron cephe.

- Bearer token ekleme
- 401 yanıtında tek seferlik token yenileme ve tekrar deneme
- JSON gövde kodlama/çözme

Her istek ayrı bir worker thread'de çalışır; böylece birden fazla istek
asyncio üzerinden eşzamanlı beklenebilir.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Any, Optional
from urllib.parse import urlencode

import urllib3

logger = logging.getLogger(__name__)


class StorageApiError(Exception):
    """Backend ile iletişimde oluşan tüm hataların tabanı."""
    pass


class TransportError(StorageApiError):
    """Bağlantı/zaman aşımı hatası."""
    pass


class HttpError(StorageApiError):
    """HTTP >= 400 yanıtı."""

    def __init__(self, status: int, message: str, payload: Any = None):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.payload = payload


class HttpClient:
    """get/post/put/patch/delete sunan, token yenilemeli JSON istemcisi."""

    REFRESH_PATH = "/api/auth/refresh-token"

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        timeout: float = 15.0,
        pool_manager: Optional[Any] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._access_token = access_token or None
        self._refresh_token = refresh_token or None
        self._token_lock = threading.Lock()
        # Test için enjekte edilebilir
        self._pool = pool_manager or urllib3.PoolManager()

    # --- Token yönetimi ---

    def set_base_url(self, url: str) -> None:
        self.base_url = url.rstrip("/")

    def set_tokens(self, access_token: Optional[str], refresh_token: Optional[str]) -> None:
        with self._token_lock:
            self._access_token = access_token or None
            self._refresh_token = refresh_token or None

    def clear_tokens(self) -> None:
        self.set_tokens(None, None)

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    # --- HTTP metodları ---

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Any = None) -> Any:
        return await self.request("POST", path, data=data)

    async def put(self, path: str, data: Any = None) -> Any:
        return await self.request("PUT", path, data=data)

    async def patch(self, path: str, data: Any = None) -> Any:
        return await self.request("PATCH", path, data=data)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        data: Any = None,
    ) -> Any:
        return await asyncio.to_thread(self._request_sync, method, path, params, data)

    # --- Senkron çekirdek ---

    def _request_sync(
        self, method: str, path: str, params: Optional[dict], data: Any
    ) -> Any:
        url = self._build_url(path, params)
        response = self._send(method, url, data)

        if response.status == 401 and self._refresh_token:
            logger.info("401 alındı, token yenileniyor: %s %s", method, path)
            if self._refresh():
                response = self._send(method, url, data)

        return self._decode(method, url, response)

    def _build_url(self, path: str, params: Optional[dict]) -> str:
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        if params:
            query = urlencode({k: v for k, v in params.items() if v is not None})
            if query:
                url = f"{url}?{query}"
        return url

    def _headers(self) -> dict:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    def _send(self, method: str, url: str, data: Any) -> Any:
        body = json.dumps(data).encode("utf-8") if data is not None else None
        try:
            return self._pool.request(
                method,
                url,
                body=body,
                headers=self._headers(),
                timeout=urllib3.Timeout(total=self.timeout),
                retries=False,
            )
        except urllib3.exceptions.HTTPError as e:
            logger.error("Bağlantı hatası [%s %s]: %s", method, url, e)
            raise TransportError(str(e)) from e

    def _decode(self, method: str, url: str, response: Any) -> Any:
        payload = None
        raw = response.data or b""
        if raw:
            try:
                payload = json.loads(raw.decode("utf-8"))
            except ValueError:
                payload = raw.decode("utf-8", errors="replace")

        if response.status >= 400:
            message = payload.get("message") if isinstance(payload, dict) else None
            logger.warning("HTTP %d [%s %s]", response.status, method, url)
            raise HttpError(response.status, message or "İstek başarısız", payload)
        return payload

    def _refresh(self) -> bool:
        """Refresh token ile yeni access token alır. Başarısızsa token'ları siler."""
        with self._token_lock:
            refresh_token = self._refresh_token
            if not refresh_token:
                return False
            try:
                response = self._send(
                    "POST",
                    f"{self.base_url}{self.REFRESH_PATH}",
                    {"refreshToken": refresh_token},
                )
                payload = json.loads((response.data or b"{}").decode("utf-8"))
            except (TransportError, ValueError) as e:
                logger.warning("Token yenileme hatası: %s", e)
                payload = None
                response = None

            if (
                response is not None
                and response.status < 400
                and isinstance(payload, dict)
                and payload.get("status") == "success"
                and payload.get("accessToken")
            ):
                self._access_token = payload["accessToken"]
                return True

            logger.warning("Token yenilenemedi, oturum token'ları temizlendi")
            self._access_token = None
            self._refresh_token = None
            return False
