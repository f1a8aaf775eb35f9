"""Block asset retrieval: fetch, encrypt, and store per-module block files."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

import httpx

from hwmodctl.core.errors import BlockFetchError
from hwmodctl.core.model import ModuleRequest
from hwmodctl.core.paths import DirectoryLayout
from hwmodctl.transports.base import EncryptionGateway

BLOCK_FILE_NAME = "block"
LOGGER = logging.getLogger(__name__)


def block_url(resource_url: str, request: ModuleRequest) -> str:
    # The path segment is the literal "block" regardless of key.
    return f"{resource_url}/{request.name}/files/block/{request.version}"


def _write_block(dest_dir: Path, payload: bytes) -> Path:
    dest_dir.mkdir(parents=True, exist_ok=True)
    out = dest_dir / BLOCK_FILE_NAME
    out.write_bytes(payload)
    return out


class BlockFetcher:
    """Best-effort fetcher for encrypted side-channel block assets.

    Each key is fetched independently; a failing key is logged and never
    affects its siblings or the caller. Concurrent fetches for the same
    module name are not serialized, the last write wins.
    """

    def __init__(self, client: httpx.AsyncClient, resource_url: str, layout: DirectoryLayout) -> None:
        self._client = client
        self.resource_url = resource_url
        self.layout = layout

    async def fetch_blocks(
        self,
        request: ModuleRequest,
        keys: Iterable[str],
        encryption: EncryptionGateway,
    ) -> None:
        await asyncio.gather(
            *(self._fetch_block_safely(request, key, encryption) for key in sorted(set(keys)))
        )

    async def _fetch_block_safely(
        self,
        request: ModuleRequest,
        key: str,
        encryption: EncryptionGateway,
    ) -> None:
        try:
            path = await self.fetch_block(request, key, encryption)
        except Exception as exc:
            LOGGER.warning(
                "Block '%s' for module %s failed: %s: %s",
                key,
                request.name,
                type(exc).__name__,
                exc,
            )
            return
        LOGGER.info("Block '%s' for module %s written to %s", key, request.name, path)

    async def fetch_block(
        self,
        request: ModuleRequest,
        key: str,
        encryption: EncryptionGateway,
    ) -> Path:
        url = block_url(self.resource_url, request)
        try:
            response = await self._client.get(url, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise BlockFetchError(f"GET {url} failed: {exc}") from exc
        if response.status_code != 200:
            raise BlockFetchError(f"GET {url} -> {response.status_code}")

        encrypted = await encryption.request_encryption(response.text)
        return await asyncio.to_thread(_write_block, self.layout.block_dir(request.name), encrypted)
