"""Encryption gateway backed by an HTTP encryption service."""

from __future__ import annotations

import httpx

from hwmodctl.core.errors import EncryptionError


class HttpEncryptionGateway:
    """POSTs plaintext payloads to an encryption endpoint and returns the raw response body."""

    def __init__(
        self,
        url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 30.0,
    ) -> None:
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request_encryption(self, plaintext: str) -> bytes:
        try:
            response = await self._client.post(
                self.url,
                follow_redirects=True,
                content=plaintext.encode("utf-8"),
                headers={"Content-Type": "text/plain; charset=utf-8"},
            )
        except httpx.HTTPError as exc:
            raise EncryptionError(f"Encryption request to {self.url} failed: {exc}") from exc

        if response.status_code != 200:
            detail = response.text.strip() or response.reason_phrase
            raise EncryptionError(
                f"POST {self.url} -> {response.status_code}: {detail}"
            )
        return response.content
