"""Service layer used by the CLI and the public API."""

from __future__ import annotations

import asyncio
import json
import logging

import httpx

from hwmodctl.core.blocks import BlockFetcher
from hwmodctl.core.errors import ConfigReadError, ModuleDownloadError, ModuleValidationError, SettingsError
from hwmodctl.core.extractor import ZipStreamExtractor
from hwmodctl.core.model import HardwareConfig, ModuleRequest
from hwmodctl.core.paths import DirectoryLayout
from hwmodctl.core.relocator import Relocator
from hwmodctl.core.settings import Settings
from hwmodctl.transports.base import EncryptionGateway

LOGGER = logging.getLogger(__name__)


class ModuleService:
    """Acquires hardware modules and reads back their installed descriptors.

    ``acquire`` is the only path that installs a module. Concurrent
    acquisitions of the same module name are not serialized against each
    other: the block file and the relocated directories are last-writer-wins.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client: httpx.AsyncClient | None = None,
        extractor: ZipStreamExtractor | None = None,
    ) -> None:
        self.settings = settings
        self.layout: DirectoryLayout = settings.layout
        self._client = client or httpx.AsyncClient(timeout=settings.timeout_s)
        self._owns_client = client is None
        self.extractor = extractor or ZipStreamExtractor()
        self.relocator = Relocator(self.layout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _resource_url(self) -> str:
        if not self.settings.resource_url:
            raise SettingsError(
                "No resource_url configured. Set it in the settings file or via HWMODCTL_RESOURCE_URL."
            )
        return self.settings.resource_url

    def module_url(self, request: ModuleRequest) -> str:
        return f"{self._resource_url()}/{request.name}/files/module/{request.version}"

    async def acquire(self, request: ModuleRequest, encryption: EncryptionGateway) -> HardwareConfig:
        if not request.name:
            raise ModuleValidationError("Module name must be present")

        url = self.module_url(request)
        LOGGER.info("hardware module download from %s", url)
        await self._download_and_extract(url)

        config = self.read_installed_config(request.name)

        blocks = BlockFetcher(self._client, self._resource_url(), self.layout)
        await asyncio.gather(
            blocks.fetch_blocks(request, self.settings.block_keys, encryption),
            self.relocator.relocate(),
        )

        config.mark_available()
        LOGGER.info("hardware module %s installed. config: %s", request.name, json.dumps(config.to_dict()))
        return config

    async def _download_and_extract(self, url: str) -> None:
        try:
            async with self._client.stream("GET", url, follow_redirects=True) as response:
                if response.status_code != 200:
                    raise ModuleDownloadError(f"GET {url} -> {response.status_code}")
                LOGGER.debug("hardware module zip extract into %s", self.layout.modules)
                await self.extractor.extract(response.aiter_bytes(), self.layout.modules)
        except httpx.HTTPError as exc:
            raise ModuleDownloadError(f"GET {url} failed: {exc}") from exc

    def read_installed_config(self, name: str) -> HardwareConfig:
        return read_config(self.layout, name)


def read_config(layout: DirectoryLayout, name: str) -> HardwareConfig:
    """Read ``<modules>/<name>.json``.

    Filesystem and text-decoding failures become ``ConfigReadError``; JSON syntax errors
    propagate as ``json.JSONDecodeError``.
    """
    if not name:
        raise ModuleValidationError("Module name must be present")

    path = layout.config_path(name)
    LOGGER.info("hardware module config path: %s", path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("hardware module config read failed. %s %s", type(exc).__name__, exc)
        raise ConfigReadError(f"Could not read module config {path}: {exc}") from exc

    doc = json.loads(content)
    if not isinstance(doc, dict):
        raise ConfigReadError(f"Module config {path} must contain an object at root")
    return HardwareConfig.from_document(name, doc)
