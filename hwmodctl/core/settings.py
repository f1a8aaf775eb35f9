"""Settings loading and validation for hwmodctl."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from hwmodctl.core.errors import SettingsError
from hwmodctl.core.model import DEFAULT_BLOCK_KEYS
from hwmodctl.core.paths import DirectoryLayout, default_module_root

_DEFAULT_TIMEOUT_S = 30.0
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise SettingsError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class Settings:
    module_root: Path
    resource_url: str | None = None
    encryption_url: str | None = None
    timeout_s: float = _DEFAULT_TIMEOUT_S
    block_keys: tuple[str, ...] = DEFAULT_BLOCK_KEYS

    @property
    def layout(self) -> DirectoryLayout:
        return DirectoryLayout(self.module_root)


def settings_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "hwmodctl/config.yaml"


def _load_schema_validator() -> Any:
    schema_text = resources.files("hwmodctl.schemas").joinpath("settings.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"Could not read settings file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping at root")
    return loaded


def _apply_env_overrides(doc: dict[str, Any]) -> dict[str, Any]:
    overrides = {
        "resource_url": os.environ.get("HWMODCTL_RESOURCE_URL"),
        "module_root": os.environ.get("HWMODCTL_MODULE_ROOT"),
        "encryption_url": os.environ.get("HWMODCTL_ENCRYPTION_URL"),
    }
    merged = dict(doc)
    for key, value in overrides.items():
        if value:
            merged[key] = value
    return merged


def load_settings(path: Path | None = None) -> Settings:
    source = path or settings_path()
    doc: dict[str, Any] = {}
    if source.is_file():
        doc = _read_yaml(source)
    else:
        LOGGER.debug("No settings file at %s, using defaults", source)

    doc = _apply_env_overrides(doc)

    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        where = f" ({where})" if where else ""
        raise SettingsError(f"Settings validation failed for {source}{where}: {exc.message}") from exc

    module_root = Path(doc["module_root"]).expanduser() if "module_root" in doc else default_module_root()

    return Settings(
        module_root=module_root,
        resource_url=doc["resource_url"].rstrip("/") if doc.get("resource_url") else None,
        encryption_url=doc.get("encryption_url"),
        timeout_s=float(doc.get("timeout_s", _DEFAULT_TIMEOUT_S)),
        block_keys=tuple(doc.get("block_keys", DEFAULT_BLOCK_KEYS)),
    )
