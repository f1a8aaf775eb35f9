"""Streaming ZIP extraction for module archives."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable
from pathlib import Path, PurePosixPath

from stream_unzip import UnzipError, async_stream_unzip

from hwmodctl.core.errors import ExtractionError

LOGGER = logging.getLogger(__name__)


def _decode_member_name(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("cp437")


def _validate_member_path(member_name: str) -> PurePosixPath:
    normalized = member_name.replace("\\", "/")
    relative = PurePosixPath(normalized)
    if relative.is_absolute():
        raise ExtractionError(f"Unsafe absolute path in archive: {member_name}")
    if not relative.parts:
        raise ExtractionError(f"Empty path in archive: {member_name!r}")
    if any(part in {"", ".", ".."} for part in relative.parts):
        raise ExtractionError(f"Unsafe path in archive: {member_name}")
    return relative


class ZipStreamExtractor:
    """Writes ZIP entries under a target directory while the archive is still arriving."""

    def __init__(self, *, chunk_size: int = 65536) -> None:
        self.chunk_size = chunk_size

    async def extract(self, chunks: AsyncIterable[bytes], target: Path) -> list[Path]:
        """Decode ``chunks`` as a ZIP archive into ``target``.

        Returns the written file paths once every entry is flushed. Files
        written before a failure are left in place.
        """
        written: list[Path] = []
        try:
            target.mkdir(parents=True, exist_ok=True)
            async for raw_name, _size, unzipped_chunks in async_stream_unzip(
                chunks, chunk_size=self.chunk_size
            ):
                member_name = _decode_member_name(raw_name)
                is_dir = member_name.endswith(("/", "\\"))
                out = target.joinpath(*_validate_member_path(member_name).parts)

                if is_dir:
                    out.mkdir(parents=True, exist_ok=True)
                    async for _ in unzipped_chunks:
                        pass
                    continue

                out.parent.mkdir(parents=True, exist_ok=True)
                with out.open("wb") as handle:
                    async for chunk in unzipped_chunks:
                        await asyncio.to_thread(handle.write, chunk)
                LOGGER.debug("Extracted %s", out)
                written.append(out)
        except UnzipError as exc:
            raise ExtractionError(f"Malformed module archive: {type(exc).__name__}: {exc}") from exc
        except OSError as exc:
            raise ExtractionError(f"Could not write module archive into {target}: {exc}") from exc

        return written
