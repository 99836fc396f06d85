"""Two-sided partial updates with independent failure handling."""

from __future__ import annotations

from types import MappingProxyType

import pytest
from _fakes import FakeTransport, Request, cf_error, cf_ok

from regionsync._transport import JsonResponse
from regionsync.config import RegionSyncConfig
from regionsync.exceptions import RegionSyncTransportError
from regionsync.membership import MembershipSynchronizer
from regionsync.models.fleet import RegionList
from regionsync.models.membership import (
    MembershipChange,
    MembershipDelta,
    MembershipOperation,
    MutationStatus,
)
from regionsync.regions import Region

CONFIG = RegionSyncConfig(
    cf_account_id="acct-1",
    cf_api_token="cf-token",
    cf_base_url="https://cf.test/client/v4",
)
LISTS = MappingProxyType(
    {
        Region.EU: RegionList(list_id="list-eu", name="SIA-rDNS-EU"),
        Region.NA: RegionList(list_id="list-na", name="SIA-rDNS-NA"),
        Region.ME: RegionList(list_id="REPLACE_WITH_ME_LIST_ID", name="SIA-rDNS-ME"),
    }
)
IP = "10.0.1.3"


def _move(old: Region, new: Region) -> MembershipDelta:
    return MembershipDelta(
        remove=MembershipChange(resolver_ip=IP, region=old),
        add=MembershipChange(resolver_ip=IP, region=new),
    )


@pytest.mark.asyncio
async def test_move_issues_remove_then_append_partial_updates() -> None:
    transport = FakeTransport()
    transport.on("PATCH", "/gateway/lists/", cf_ok())
    sync = MembershipSynchronizer(CONFIG, transport, LISTS)

    outcomes = await sync.apply(_move(Region.EU, Region.NA))

    assert [o.operation for o in outcomes] == [MembershipOperation.REMOVE, MembershipOperation.APPEND]
    assert all(o.status == MutationStatus.SUCCESS for o in outcomes)

    remove_call, append_call = transport.calls
    assert remove_call.method == "PATCH"
    assert remove_call.url == "https://cf.test/client/v4/accounts/acct-1/gateway/lists/list-eu"
    assert remove_call.json_body == {"name": "SIA-rDNS-EU", "remove": [IP]}
    assert remove_call.headers["Authorization"] == "Bearer cf-token"
    assert append_call.url.endswith("/gateway/lists/list-na")
    assert append_call.json_body == {"name": "SIA-rDNS-NA", "append": [{"value": IP}]}


@pytest.mark.asyncio
async def test_rejected_add_does_not_affect_successful_remove() -> None:
    transport = FakeTransport()
    transport.on("PATCH", "/list-eu", cf_ok())
    transport.on("PATCH", "/list-na", cf_error(code=10000, message="Authentication error"))
    sync = MembershipSynchronizer(CONFIG, transport, LISTS)

    remove, add = await sync.apply(_move(Region.EU, Region.NA))

    assert remove.status == MutationStatus.SUCCESS
    assert add.status == MutationStatus.REJECTED
    assert add.list_id == "list-na"
    assert "Authentication error" in (add.detail or "")


@pytest.mark.asyncio
async def test_failed_remove_still_attempts_add() -> None:
    transport = FakeTransport()
    transport.on("PATCH", "/list-eu", RegionSyncTransportError("connection reset", endpoint="/gateway/lists/list-eu"))
    transport.on("PATCH", "/list-na", cf_ok())
    sync = MembershipSynchronizer(CONFIG, transport, LISTS)

    remove, add = await sync.apply(_move(Region.EU, Region.NA))

    assert remove.status == MutationStatus.UNREACHABLE
    assert add.status == MutationStatus.SUCCESS
    assert len(transport.calls_to("PATCH")) == 2


@pytest.mark.asyncio
async def test_malformed_response_is_unreachable() -> None:
    transport = FakeTransport()
    transport.on("PATCH", "/list-na", JsonResponse(status=502, data={"html": "bad gateway"}))
    sync = MembershipSynchronizer(CONFIG, transport, LISTS)

    [outcome] = await sync.apply(MembershipDelta(add=MembershipChange(resolver_ip=IP, region=Region.NA)))

    assert outcome.status == MutationStatus.UNREACHABLE


@pytest.mark.asyncio
async def test_success_false_with_200_is_rejected() -> None:
    transport = FakeTransport()
    transport.on("PATCH", "/list-na", JsonResponse(status=200, data={"success": False, "errors": []}))
    sync = MembershipSynchronizer(CONFIG, transport, LISTS)

    [outcome] = await sync.apply(MembershipDelta(add=MembershipChange(resolver_ip=IP, region=Region.NA)))

    assert outcome.status == MutationStatus.REJECTED


@pytest.mark.asyncio
async def test_unconfigured_region_is_skipped_without_request() -> None:
    transport = FakeTransport()
    transport.on("PATCH", "/gateway/lists/", cf_ok())
    sync = MembershipSynchronizer(CONFIG, transport, LISTS)

    remove, add = await sync.apply(_move(Region.EU, Region.ME))

    assert remove.status == MutationStatus.SUCCESS
    assert add.status == MutationStatus.SKIPPED
    assert [c.url.rsplit("/", 1)[-1] for c in transport.calls] == ["list-eu"]


@pytest.mark.asyncio
async def test_region_missing_from_table_is_skipped() -> None:
    sync = MembershipSynchronizer(CONFIG, FakeTransport(), LISTS)
    outcome = await sync.add_member(MembershipChange(resolver_ip=IP, region=Region.LATAM))
    assert outcome.status == MutationStatus.SKIPPED


@pytest.mark.asyncio
async def test_sentinel_region_is_never_sent() -> None:
    transport = FakeTransport()
    sync = MembershipSynchronizer(CONFIG, transport, LISTS)

    outcome = await sync.remove_member(MembershipChange(resolver_ip=IP, region=Region.OVER_WATER))

    assert outcome.status == MutationStatus.SKIPPED
    assert transport.calls == []


@pytest.mark.asyncio
async def test_missing_credentials_skip_every_update() -> None:
    transport = FakeTransport()
    sync = MembershipSynchronizer(RegionSyncConfig(), transport, LISTS)

    outcomes = await sync.apply(_move(Region.EU, Region.NA))

    assert [o.status for o in outcomes] == [MutationStatus.SKIPPED, MutationStatus.SKIPPED]
    assert transport.calls == []


@pytest.mark.asyncio
async def test_empty_delta_issues_nothing() -> None:
    transport = FakeTransport()
    sync = MembershipSynchronizer(CONFIG, transport, LISTS)
    assert await sync.apply(MembershipDelta()) == []
    assert transport.calls == []


@pytest.mark.asyncio
async def test_only_patch_is_used() -> None:
    seen: list[str] = []

    def _record(request: Request) -> JsonResponse:
        seen.append(request.method)
        return cf_ok()

    transport = FakeTransport()
    transport.on("PATCH", "/gateway/lists/", _record)
    sync = MembershipSynchronizer(CONFIG, transport, LISTS)
    await sync.apply(_move(Region.NA, Region.EU))

    assert seen == ["PATCH", "PATCH"]
