from __future__ import annotations

import json
from pathlib import Path

import pytest

from regionsync.config import (
    DEFAULT_FLEET,
    DEFAULT_REGION_LISTS,
    RegionSyncConfig,
    build_region_lists,
    load_fleet,
    load_region_lists,
)
from regionsync.exceptions import RegionSyncConfigError
from regionsync.models.fleet import Aircraft, Fleet
from regionsync.regions import Region


def test_from_env_reads_credentials_and_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FR24_API_KEY", "fr24")
    monkeypatch.setenv("OPENCAGE_API_KEY", "oc")
    monkeypatch.setenv("CF_ACCOUNT_ID", "acct")
    monkeypatch.setenv("CF_API_TOKEN", "tok")
    monkeypatch.setenv("REGIONSYNC_TICK_INTERVAL", "30")
    monkeypatch.setenv("REGIONSYNC_REQUEST_TIMEOUT", "5.5")

    config = RegionSyncConfig.from_env()

    assert config.fr24_api_key == "fr24"
    assert config.opencage_api_key == "oc"
    assert config.has_gateway_credentials
    assert config.tick_interval == 30.0
    assert config.request_timeout == 5.5
    config.require_provider_keys()


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FR24_API_KEY", "from-env")
    monkeypatch.setenv("REGIONSYNC_TICK_INTERVAL", "30")

    config = RegionSyncConfig.from_env(fr24_api_key="explicit", tick_interval=5.0)

    assert config.fr24_api_key == "explicit"
    assert config.tick_interval == 5.0


def test_from_env_rejects_bad_number(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REGIONSYNC_TICK_INTERVAL", "soon")
    with pytest.raises(RegionSyncConfigError):
        RegionSyncConfig.from_env()


def test_require_provider_keys_names_missing_variable() -> None:
    with pytest.raises(RegionSyncConfigError, match="FR24_API_KEY"):
        RegionSyncConfig(opencage_api_key="oc").require_provider_keys()
    with pytest.raises(RegionSyncConfigError, match="OPENCAGE_API_KEY"):
        RegionSyncConfig(fr24_api_key="fr24").require_provider_keys()


def test_missing_cloudflare_field_disables_gateway() -> None:
    assert not RegionSyncConfig(cf_account_id="acct").has_gateway_credentials


def test_default_tables() -> None:
    assert "9V-SGC" in DEFAULT_FLEET
    assert Region.OVER_WATER not in DEFAULT_REGION_LISTS
    assert set(DEFAULT_REGION_LISTS) == set(Region.real_regions())
    assert DEFAULT_REGION_LISTS[Region.EU].is_configured
    assert not DEFAULT_REGION_LISTS[Region.ME].is_configured


def test_fleet_rejects_duplicates() -> None:
    with pytest.raises(RegionSyncConfigError, match="registration"):
        Fleet([Aircraft(registration="A", resolver_ip="1"), Aircraft(registration="A", resolver_ip="2")])
    with pytest.raises(RegionSyncConfigError, match="resolver IP"):
        Fleet([Aircraft(registration="A", resolver_ip="1"), Aircraft(registration="B", resolver_ip="1")])


def test_load_fleet(tmp_path: Path) -> None:
    path = tmp_path / "fleet.json"
    path.write_text(
        json.dumps(
            [
                {"registration": "9V-SGA", "resolver_ip": "10.0.1.1"},
                {"registration": " 9V-SGB ", "resolver_ip": "10.0.1.2"},
            ]
        ),
        encoding="utf-8",
    )

    fleet = load_fleet(path)

    assert fleet.registrations == ("9V-SGA", "9V-SGB")
    assert fleet.get("9V-SGB") == Aircraft(registration="9V-SGB", resolver_ip="10.0.1.2")


def test_load_fleet_invalid(tmp_path: Path) -> None:
    path = tmp_path / "fleet.json"
    path.write_text(json.dumps([{"registration": "9V-SGA"}]), encoding="utf-8")
    with pytest.raises(RegionSyncConfigError):
        load_fleet(path)
    with pytest.raises(RegionSyncConfigError):
        load_fleet(tmp_path / "missing.json")


def test_load_region_lists(tmp_path: Path) -> None:
    path = tmp_path / "lists.json"
    path.write_text(json.dumps({"eu": {"list_id": "abc", "name": "EU list"}}), encoding="utf-8")

    table = load_region_lists(path)

    assert table[Region.EU].list_id == "abc"
    with pytest.raises(TypeError):
        table[Region.NA] = table[Region.EU]  # type: ignore[index]


@pytest.mark.parametrize("code", ["OW", "MARS"])
def test_region_lists_reject_unknown_and_sentinel(code: str) -> None:
    with pytest.raises(RegionSyncConfigError):
        build_region_lists({code: {"list_id": "abc", "name": "x"}})
