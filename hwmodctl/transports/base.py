"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol


class EncryptionGateway(Protocol):
    async def request_encryption(self, plaintext: str) -> bytes:
        """Encrypt an opaque payload and return the encrypted bytes."""
