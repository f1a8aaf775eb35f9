"""Moves driver and firmware payloads out of the extracted module tree."""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from hwmodctl.core.model import RelocationPair
from hwmodctl.core.paths import DirectoryLayout

RELOCATED_DIRS: tuple[str, ...] = ("drivers", "firmwares")
LOGGER = logging.getLogger(__name__)


def relocation_pairs(layout: DirectoryLayout) -> tuple[RelocationPair, ...]:
    return tuple(
        RelocationPair(
            name=name,
            source=layout.modules / name,
            destination=layout.module_root / name,
        )
        for name in RELOCATED_DIRS
    )


def merge_move(src: Path, dst: Path) -> None:
    """Move every entry of ``src`` into ``dst``, replacing same-named files, then drop ``src``."""
    dst.mkdir(parents=True, exist_ok=True)
    for item in sorted(src.rglob("*")):
        out = dst / item.relative_to(src)
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
        else:
            out.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(item), str(out))
    shutil.rmtree(src)


class Relocator:
    def __init__(self, layout: DirectoryLayout) -> None:
        self.layout = layout

    async def relocate(self) -> None:
        """Relocate drivers and firmwares; failures are logged, never raised.

        Every pair runs to completion before this returns, even when a sibling fails.
        """
        pairs = relocation_pairs(self.layout)
        results = await asyncio.gather(
            *(self._relocate_pair(pair) for pair in pairs), return_exceptions=True
        )
        failed = False
        for pair, result in zip(pairs, results):
            if isinstance(result, Exception):
                failed = True
                LOGGER.warning("%s move failed. %s: %s", pair.name, type(result).__name__, result)
        if not failed:
            LOGGER.info("driver, firmware move finished")

    async def _relocate_pair(self, pair: RelocationPair) -> None:
        if not pair.source.is_dir():
            return
        LOGGER.info("%s move %s to %s", pair.name, pair.source, pair.destination)
        await asyncio.to_thread(merge_move, pair.source, pair.destination)
