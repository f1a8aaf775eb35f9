from __future__ import annotations

import asyncio

import httpx
import pytest

from hwmodctl.core.errors import EncryptionError
from hwmodctl.transports.http_encryption import HttpEncryptionGateway


def _encrypt(handler, plaintext: str) -> bytes:
    async def run() -> bytes:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            gateway = HttpEncryptionGateway("http://entry.test/encrypt", client=client)
            return await gateway.request_encryption(plaintext)

    return asyncio.run(run())


def test_plaintext_is_posted_and_body_returned() -> None:
    seen: list[tuple[str, bytes]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.content))
        return httpx.Response(200, content=b"\x01\x02\x03")

    assert _encrypt(handler, "block-source") == b"\x01\x02\x03"
    assert seen == [("POST", b"block-source")]


def test_error_status_raises_encryption_error() -> None:
    with pytest.raises(EncryptionError) as exc:
        _encrypt(lambda r: httpx.Response(500, text="upstream meltdown"), "x")
    assert "-> 500: upstream meltdown" in str(exc.value)


def test_transport_failure_raises_encryption_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(EncryptionError):
        _encrypt(handler, "x")


def test_redirect_is_followed_with_body() -> None:
    seen: list[tuple[str, bytes]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((str(request.url), request.content))
        if request.url.host == "entry.test":
            return httpx.Response(307, headers={"Location": "http://crypto.test/encrypt"})
        return httpx.Response(200, content=b"\x09")

    assert _encrypt(handler, "payload") == b"\x09"
    assert seen[-1] == ("http://crypto.test/encrypt", b"payload")
