"""Stable public API for building tooling on top of hwmodctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

import httpx

from hwmodctl.core.errors import (
    BlockFetchError,
    ConfigReadError,
    EncryptionError,
    ExtractionError,
    HwmodctlError,
    ModuleDownloadError,
    ModuleValidationError,
    SettingsError,
    TransportError,
)
from hwmodctl.core.model import AVAILABLE, HardwareConfig, ModuleRequest
from hwmodctl.core.paths import DirectoryLayout
from hwmodctl.core.service import ModuleService
from hwmodctl.core.settings import Settings, load_settings
from hwmodctl.transports.base import EncryptionGateway
from hwmodctl.transports.http_encryption import HttpEncryptionGateway

__all__ = [
    "HwmodctlError",
    "SettingsError",
    "ModuleValidationError",
    "ExtractionError",
    "ConfigReadError",
    "BlockFetchError",
    "TransportError",
    "ModuleDownloadError",
    "EncryptionError",
    "AVAILABLE",
    "HardwareConfig",
    "ModuleRequest",
    "DirectoryLayout",
    "Settings",
    "load_settings",
    "EncryptionGateway",
    "HttpEncryptionGateway",
    "Client",
]


class Client:
    """Public client for acquiring hardware modules.

    A `Client` instance wraps settings, the HTTP client and the acquisition
    pipeline behind a stable API intended for third-party tools
    (GUI/TUI/services/scripts). Use it as an async context manager or call
    `aclose` when done.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._service = ModuleService(settings or load_settings(), client=client)

    @property
    def layout(self) -> DirectoryLayout:
        return self._service.layout

    async def acquire(self, name: str, version: str, encryption: EncryptionGateway) -> HardwareConfig:
        return await self._service.acquire(ModuleRequest(name=name, version=version), encryption)

    def installed_config(self, name: str) -> HardwareConfig:
        return self._service.read_installed_config(name)

    async def aclose(self) -> None:
        await self._service.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
