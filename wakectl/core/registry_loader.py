"""Device registry loading and validation for the YAML devices file."""

from __future__ import annotations

import ipaddress
import json
import logging
import os
import re
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from wakectl.core.errors import RegistryLoadError, RegistryValidationError
from wakectl.core.model import Device, NetworkInfo, Permissions, PermittedUser, Registry

_MAC_RE = re.compile(r"^[0-9A-F]{2}([:-]?)[0-9A-F]{2}(?:\1[0-9A-F]{2}){4}$")
ENV_DEVICES_PATH = "WAKECTL_DEVICES"
LOGGER = logging.getLogger(__name__)


_INT_TAG = "tag:yaml.org,2002:int"
# YAML 1.1 ints minus base 60, so unquoted MACs like 10:20:30:40:50:59 stay strings.
_INT_RE = re.compile(
    r"""^(?:[-+]?0b[0-1_]+
    |[-+]?0[0-7_]+
    |[-+]?(?:0|[1-9][0-9_]*)
    |[-+]?0x[0-9a-fA-F_]+)$""",
    re.X,
)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in mappings if tag != _INT_TAG]
    for first_char, mappings in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
UniqueKeyLoader.add_implicit_resolver(_INT_TAG, _INT_RE, list("-+0123456789"))


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise RegistryValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedRegistry:
    registry: Registry
    source: Path | None
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("wakectl.schemas").joinpath("devices.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def default_devices_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "wakectl/devices.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RegistryLoadError(f"Could not read devices file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise RegistryValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise RegistryValidationError(f"Devices file {path} must contain a mapping at root")
    return loaded


def _normalize_mac(value: str, *, context: str) -> str:
    normalized = value.strip().upper()
    if not _MAC_RE.match(normalized):
        raise RegistryValidationError(f"{context} must be a 6-byte MAC address, got '{value}'")
    digits = normalized.replace(":", "").replace("-", "")
    return ":".join(digits[i : i + 2] for i in range(0, 12, 2))


def _normalize_ip(value: str, *, context: str) -> str:
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError as exc:
        raise RegistryValidationError(f"{context} must be an IP address, got '{value}'") from exc


def _build_device(doc: dict[str, Any]) -> Device:
    network_doc = doc.get("network", {})
    mac = network_doc.get("macAddress")
    ip = network_doc.get("ipAddress")
    network = NetworkInfo(
        mac_address=_normalize_mac(mac, context=f"{doc['id']}.network.macAddress") if mac else None,
        ip_address=_normalize_ip(ip, context=f"{doc['id']}.network.ipAddress") if ip else None,
    )

    users = tuple(
        PermittedUser(id=str(user["id"]), permissions=Permissions(**user.get("permissions", {})))
        for user in doc["permittedUsers"]
    )
    return Device(id=doc["id"], name=doc["name"], network=network, permitted_users=users)


def build_registry(doc: dict[str, Any], source: Path | str = "<memory>") -> Registry:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise RegistryValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    devices: list[Device] = []
    seen: set[str] = set()
    for device_doc in doc["devices"]:
        device = _build_device(device_doc)
        if device.id in seen:
            raise RegistryValidationError(f"Duplicate device id '{device.id}' in {source}")
        seen.add(device.id)
        devices.append(device)
    return Registry(devices=tuple(devices))


def _resolve_path(path: Path | str | None) -> tuple[Path, bool]:
    if path is not None:
        return Path(path), True
    env = os.environ.get(ENV_DEVICES_PATH)
    if env:
        return Path(env), True
    return default_devices_path(), False


def load_registry(path: Path | str | None = None) -> LoadedRegistry:
    """Load the devices file and return an immutable registry snapshot.

    The lookup order is the explicit `path`, then the WAKECTL_DEVICES
    environment variable, then $XDG_CONFIG_HOME/wakectl/devices.yaml. Only
    the last one may be absent, in which case the registry is empty.
    """
    resolved, explicit = _resolve_path(path)
    if not resolved.exists():
        if explicit:
            raise RegistryLoadError(f"Devices file {resolved} does not exist")
        warning = f"No devices file found at {resolved}; registry is empty"
        LOGGER.warning(warning)
        return LoadedRegistry(registry=Registry(), source=None, warnings=(warning,))

    registry = build_registry(_read_yaml(resolved), resolved)
    LOGGER.debug("Loaded %d device(s) from %s", len(registry), resolved)

    warnings: list[str] = []
    for device in registry.devices:
        if not device.permitted_users:
            warning = f"Device '{device.id}' has no permitted users and is unreachable"
            LOGGER.warning(warning)
            warnings.append(warning)

    return LoadedRegistry(registry=registry, source=resolved, warnings=tuple(warnings))
