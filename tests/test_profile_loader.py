from __future__ import annotations

from pathlib import Path

import pytest

from senseictl.core.errors import ProfileValidationError
from senseictl.core import profile_loader
from senseictl.core.profile_loader import load_profiles


def _write_profile(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_load_packaged_profile() -> None:
    loaded = load_profiles()
    assert "sensei_raw" in loaded.profiles
    profile = loaded.profiles["sensei_raw"]
    assert profile.interface == 0
    assert [(i.vendor_id, i.product_id) for i in profile.identities] == [
        (0x1038, 0x1369),
        (0x1038, 0x136F),
    ]
    assert loaded.warnings == ()


def test_invalid_product_id_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "senseictl" / "profiles" / "bad.yaml",
        """
id: bad_id
name: Bad Id
vendor_id: "1038"
products:
  - product_id: "xyz"
""",
    )

    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_missing_required_keys_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "senseictl" / "profiles" / "missing.yaml",
        """
id: missing
name: Missing
vendor_id: "1038"
""",
    )

    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_user_profile_overrides_packaged(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "data" / "senseictl" / "profiles" / "override.yaml",
        """
id: sensei_raw
name: User Override
vendor_id: "0x1038"
interface: 1
products:
  - product_id: "0x1370"
    name: Sensei Raw Frost Blue
  - product_id: "1369"
""",
    )

    loaded = load_profiles()
    profile = loaded.profiles["sensei_raw"]
    assert profile.name == "User Override"
    assert profile.interface == 1
    assert [i.product_id for i in profile.identities] == [0x1370, 0x1369]
    assert any("overrides" in warning for warning in loaded.warnings)


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "senseictl" / "profiles" / "dup.yaml",
        """
id: dup
name: Duplicate
name: Duplicate Again
vendor_id: "1038"
products:
  - product_id: "1369"
""",
    )

    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_duplicate_products_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "senseictl" / "profiles" / "twice.yaml",
        """
id: twice
name: Twice
vendor_id: "1038"
products:
  - product_id: "1369"
  - product_id: "0x1369"
""",
    )

    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_schema_validator_is_built_once_per_load(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name, product in (("first", "1370"), ("second", "1371")):
        _write_profile(
            tmp_path / "cfg" / "senseictl" / "profiles" / f"{name}.yaml",
            f"""
id: {name}
name: {name.title()}
vendor_id: "1038"
products:
  - product_id: "{product}"
""",
        )

    built: list[object] = []
    real_loader = profile_loader._load_schema_validator

    def counting_loader():
        validator = real_loader()
        built.append(validator)
        return validator

    monkeypatch.setattr(profile_loader, "_load_schema_validator", counting_loader)

    loaded = load_profiles()

    assert {"sensei_raw", "first", "second"} <= set(loaded.profiles)
    assert len(built) == 1
