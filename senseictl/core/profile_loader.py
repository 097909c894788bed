"""Profile loading and validation for YAML-based senseictl device profiles."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from senseictl.core.errors import ProfileLoadError, ProfileValidationError
from senseictl.core.model import DeviceIdentity, DeviceProfile

DEFAULT_PROFILE_ID = "sensei_raw"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ProfileValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedProfiles:
    profiles: dict[str, DeviceProfile]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("senseictl.schemas").joinpath("profile.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _profile_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "senseictl/profiles", xdg_data / "senseictl/profiles"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileLoadError(f"Could not read profile file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ProfileValidationError(f"Profile file {path} must contain a mapping at root")
    return loaded


def _parse_usb_id(value: str) -> int:
    return int(value.strip().lower().removeprefix("0x"), 16)


def _build_profile(doc: dict[str, Any], source: Path | Traversable, validator: Any) -> DeviceProfile:
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ProfileValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    vendor_id = _parse_usb_id(doc["vendor_id"])
    identities: list[DeviceIdentity] = []
    for product in doc["products"]:
        identity = DeviceIdentity(
            vendor_id=vendor_id,
            product_id=_parse_usb_id(product["product_id"]),
            name=product.get("name", ""),
        )
        if any(seen.product_id == identity.product_id for seen in identities):
            raise ProfileValidationError(
                f"{doc['id']}.products lists {identity} more than once"
            )
        identities.append(identity)

    return DeviceProfile(
        id=doc["id"],
        name=doc["name"],
        identities=tuple(identities),
        interface=int(doc.get("interface", 0)),
    )


def _iter_packaged_profile_paths() -> list[Traversable]:
    profile_root = resources.files("senseictl.profiles")
    return [item for item in profile_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_profile_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _profile_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def load_profiles() -> LoadedProfiles:
    """Load packaged profiles, then user profiles, which replace packaged ones by id."""
    validator = _load_schema_validator()
    profiles: dict[str, DeviceProfile] = {}
    warnings: list[str] = []

    for path in sorted(_iter_packaged_profile_paths(), key=lambda p: p.name):
        profile = _build_profile(_read_yaml(path), path, validator)
        profiles[profile.id] = profile

    for path in _iter_user_profile_paths():
        profile = _build_profile(_read_yaml(path), path, validator)
        if profile.id in profiles:
            warning = f"User profile '{profile.id}' overrides packaged profile"
            LOGGER.warning(warning)
            warnings.append(warning)
        profiles[profile.id] = profile

    return LoadedProfiles(profiles=profiles, warnings=tuple(warnings))
