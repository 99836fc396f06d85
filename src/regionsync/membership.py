"""Applies membership deltas to the Gateway lists.

A move is two independent partial updates, remove first and then add.
They are not transactional: each is attempted and reported on its own,
and a failure of one never prevents the other. Nothing is retried here.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from regionsync._api import gateway_lists as _lists_api
from regionsync._transport import Transport
from regionsync.config import RegionSyncConfig
from regionsync.exceptions import RegionSyncApiError, RegionSyncConfigError, RegionSyncTransportError
from regionsync.models.fleet import RegionList
from regionsync.models.membership import (
    MembershipChange,
    MembershipDelta,
    MembershipOperation,
    MutationOutcome,
    MutationStatus,
)
from regionsync.regions import Region

_logger = logging.getLogger(__name__)

_ListCall = Callable[[RegionSyncConfig, Transport, RegionList, str], Awaitable[Any]]


class MembershipSynchronizer:
    """Issue append/remove partial updates for one resolver IP at a time.

    Parameters
    ----------
    config : RegionSyncConfig
        Supplies the Cloudflare account and token.
    transport : Transport
        HTTP transport.
    region_lists : Mapping[Region, RegionList]
        Static region -> Gateway list table. A region without a configured
        list is a configuration error: its update is skipped, never created.
    """

    def __init__(
        self,
        config: RegionSyncConfig,
        transport: Transport,
        region_lists: Mapping[Region, RegionList],
    ) -> None:
        self._config = config
        self._transport = transport
        self._region_lists = region_lists

    def _outcome(
        self,
        operation: MembershipOperation,
        change: MembershipChange,
        status: MutationStatus,
        *,
        list_id: str | None = None,
        detail: str | None = None,
    ) -> MutationOutcome:
        return MutationOutcome(
            operation=operation,
            resolver_ip=change.resolver_ip,
            region=change.region,
            list_id=list_id,
            status=status,
            detail=detail,
        )

    async def _mutate(
        self,
        operation: MembershipOperation,
        change: MembershipChange,
        call: _ListCall,
        log_prefix: str,
    ) -> MutationOutcome:
        verb = "add to" if operation == MembershipOperation.APPEND else "remove from"

        if change.region.is_sentinel:
            _logger.warning("%sRefusing to %s the %s sentinel list", log_prefix, verb, change.region)
            return self._outcome(operation, change, MutationStatus.SKIPPED, detail="sentinel region has no list")

        region_list = self._region_lists.get(change.region)
        if region_list is None or not region_list.is_configured:
            _logger.warning(
                "%sSkipping %s %s list: no Gateway list configured for region",
                log_prefix,
                verb,
                change.region,
            )
            return self._outcome(operation, change, MutationStatus.SKIPPED, detail="no list configured")

        if not self._config.has_gateway_credentials:
            _logger.warning(
                "%sSkipping Gateway List update: missing CF_ACCOUNT_ID or CF_API_TOKEN",
                log_prefix,
            )
            return self._outcome(
                operation,
                change,
                MutationStatus.SKIPPED,
                list_id=region_list.list_id,
                detail="missing Cloudflare credentials",
            )

        try:
            await call(self._config, self._transport, region_list, change.resolver_ip)
        except RegionSyncApiError as exc:
            _logger.warning(
                "%sFailed to %s %s: %s errors=%s",
                log_prefix,
                verb,
                change.region,
                exc,
                exc.errors,
            )
            return self._outcome(
                operation,
                change,
                MutationStatus.REJECTED,
                list_id=region_list.list_id,
                detail=str(exc),
            )
        except (RegionSyncTransportError, RegionSyncConfigError) as exc:
            _logger.warning("%sError trying to %s %s: %s", log_prefix, verb, change.region, exc)
            return self._outcome(
                operation,
                change,
                MutationStatus.UNREACHABLE,
                list_id=region_list.list_id,
                detail=str(exc),
            )

        if operation == MembershipOperation.APPEND:
            _logger.info("%sAdded %s to %s list", log_prefix, change.resolver_ip, change.region)
        else:
            _logger.info("%sRemoved %s from %s list", log_prefix, change.resolver_ip, change.region)
        return self._outcome(operation, change, MutationStatus.SUCCESS, list_id=region_list.list_id)

    async def remove_member(self, change: MembershipChange, *, log_prefix: str = "") -> MutationOutcome:
        """Remove one resolver IP from one region list."""
        return await self._mutate(MembershipOperation.REMOVE, change, _lists_api.remove_from_list, log_prefix)

    async def add_member(self, change: MembershipChange, *, log_prefix: str = "") -> MutationOutcome:
        """Append one resolver IP to one region list."""
        return await self._mutate(MembershipOperation.APPEND, change, _lists_api.append_to_list, log_prefix)

    async def apply(self, delta: MembershipDelta, *, log_prefix: str = "") -> list[MutationOutcome]:
        """Apply *delta*: remove (if any), then add (if any).

        Returns one outcome per attempted side, in issue order.
        """
        outcomes: list[MutationOutcome] = []
        if delta.remove is not None:
            outcomes.append(await self.remove_member(delta.remove, log_prefix=log_prefix))
        if delta.add is not None:
            outcomes.append(await self.add_member(delta.add, log_prefix=log_prefix))
        return outcomes
