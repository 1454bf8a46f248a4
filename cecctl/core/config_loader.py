"""Loading and validation of the YAML controller configuration."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError as SchemaValidationError, validators

from cecctl.core.address import normalize_physical_address, normalize_vendor_id
from cecctl.core.errors import ConfigError, ConfigLoadError, ValidationError
from cecctl.core.keymap import KeyTable
from cecctl.core.model import ControllerConfig

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# Key names such as "on"/"off" must stay strings.
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedConfig:
    config: ControllerConfig
    warnings: tuple[str, ...]
    source: Path | None


def _load_schema_validator() -> Any:
    schema_text = resources.files("cecctl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def default_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "cecctl/config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at root")
    return loaded


def _build_config(doc: dict[str, Any], source: Path) -> tuple[ControllerConfig, tuple[str, ...]]:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except SchemaValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    defaults = ControllerConfig()
    try:
        hi, mid, lo = normalize_vendor_id(doc.get("vendor_id", defaults.vendor_id))
        key_table = KeyTable(doc.get("key_overrides", {}))
    except ValidationError as exc:
        raise ConfigError(f"Invalid value in {source}: {exc}") from exc

    warnings = tuple(
        f"Key override '{name}' in {source} replaces a built-in key" for name in key_table.shadowed
    )
    for warning in warnings:
        LOGGER.warning(warning)

    config = ControllerConfig(
        binary=doc.get("binary", defaults.binary),
        target=doc.get("target", defaults.target),
        source=doc.get("source", defaults.source),
        physical_address=normalize_physical_address(
            doc.get("physical_address", defaults.physical_address)
        ),
        osd_name=doc.get("osd_name", defaults.osd_name),
        device_type=doc.get("device_type", defaults.device_type),
        vendor_id=(hi << 16) | (mid << 8) | lo,
        timeout_s=float(doc.get("timeout_s", defaults.timeout_s)),
        scan_timeout_s=float(doc.get("scan_timeout_s", defaults.scan_timeout_s)),
        hold_s=float(doc.get("hold_s", defaults.hold_s)),
        key_overrides=dict(key_table.overrides),
    )
    return config, warnings


def load_config(path: str | Path | None = None) -> LoadedConfig:
    """Load controller settings.

    An explicit *path* must exist. Without one, the XDG config file is used
    when present and built-in defaults otherwise.
    """
    if path is None:
        config_path = default_config_path()
        if not config_path.is_file():
            LOGGER.debug("No config file at %s; using defaults", config_path)
            return LoadedConfig(config=ControllerConfig(), warnings=(), source=None)
    else:
        config_path = Path(path)

    doc = _read_yaml(config_path)
    config, warnings = _build_config(doc, config_path)
    return LoadedConfig(config=config, warnings=warnings, source=config_path)
