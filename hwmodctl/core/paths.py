"""Directory layout for installed modules."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def default_module_root() -> Path:
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_data / "hwmodctl"


@dataclass(frozen=True)
class DirectoryLayout:
    module_root: Path

    @property
    def modules(self) -> Path:
        return self.module_root / "modules"

    @property
    def block_modules(self) -> Path:
        return self.module_root / "block_modules"

    def config_path(self, name: str) -> Path:
        return self.modules / f"{name}.json"

    def block_dir(self, name: str) -> Path:
        return self.block_modules / name
