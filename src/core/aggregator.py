"""Multi-address aggregation service.

This module is integration-agnostic. It only relies on ports for the
address index, transaction store, and address validation, enabling other
index backends or frontends without changes here.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from core.address_set import resolve_address, resolve_addresses
from core.config import AggregationConfig, UpdateOptions
from core.deposits import DepositClassifier
from core.fan_out import collect_all
from core.models import AddressState, DepositRecord, PagedResult, TransactionSummary, Utxo
from core.paging import TransactionPager
from core.ports import AddressIndexPort, AddressValidatorPort, TransactionStorePort

LOGGER = logging.getLogger(__name__)

AddressInput = Union[str, Iterable[str], None]


class AddressAggregator:
    """Orchestrates address resolution, fan-out, paging, and deposits."""

    def __init__(
        self,
        index: AddressIndexPort,
        store: TransactionStorePort,
        validator: AddressValidatorPort,
        config: Optional[AggregationConfig] = None,
    ) -> None:
        self._index = index
        self._validator = validator
        self._config = config or AggregationConfig()
        self._pager = TransactionPager(store, self._config)
        self._classifier = DepositClassifier(index, store, self._config)

    # Single address lookups

    async def address_summary(
        self,
        address: str,
        ignore_cache: bool = False,
        include_tx_list: bool = True,
    ) -> AddressState:
        options = UpdateOptions(tx_limit=-1 if include_tx_list else 0, ignore_cache=ignore_cache)
        return await self._update(address, options)

    async def utxos(self, address: str, ignore_cache: bool = False) -> List[Utxo]:
        state = await self._update(address, UpdateOptions(only_unspent=True, ignore_cache=ignore_cache))
        return list(state.unspent)

    async def balance(self, address: str, ignore_cache: bool = False) -> int:
        return (await self._update(address, UpdateOptions(ignore_cache=ignore_cache))).balance_sat

    async def total_received(self, address: str, ignore_cache: bool = False) -> int:
        return (await self._update(address, UpdateOptions(ignore_cache=ignore_cache))).total_received_sat

    async def total_sent(self, address: str, ignore_cache: bool = False) -> int:
        return (await self._update(address, UpdateOptions(ignore_cache=ignore_cache))).total_sent_sat

    async def unconfirmed_balance(self, address: str, ignore_cache: bool = False) -> int:
        state = await self._update(address, UpdateOptions(ignore_cache=ignore_cache))
        return state.unconfirmed_balance_sat

    async def _update(self, raw_address: str, options: UpdateOptions) -> AddressState:
        address = resolve_address(raw_address, self._validator)
        return await self._index.update(address, options)

    # Multi address lookups

    async def utxos_for_addresses(self, addresses: AddressInput, ignore_cache: bool = False) -> List[Utxo]:
        """Concatenate every address's UTXOs, in address order."""

        resolved = resolve_addresses(addresses, self._validator)
        options = UpdateOptions(only_unspent=True, ignore_cache=ignore_cache)

        async def fetch(address: str) -> Sequence[Utxo]:
            return (await self._index.update(address, options)).unspent

        per_address = await collect_all(resolved, fetch, self._config.rpc_concurrency)
        return [utxo for unspent in per_address for utxo in unspent]

    async def list_transactions_for_addresses(
        self,
        addresses: AddressInput,
        from_index: Optional[int] = None,
        to_index: Optional[int] = None,
        ignore_cache: bool = False,
    ) -> PagedResult:
        resolved = resolve_addresses(addresses, self._validator)
        options = UpdateOptions(ignore_cache=ignore_cache, include_tx_info=True)

        async def fetch(address: str) -> Sequence[TransactionSummary]:
            return (await self._index.update(address, options)).transactions

        groups = await collect_all(resolved, fetch, self._config.rpc_concurrency)
        result = await self._pager.page(groups, from_index, to_index)
        LOGGER.info(
            "Listed %s-%s of %s transactions for %s addresses",
            result.from_index,
            result.to_index,
            result.total_items,
            len(resolved),
        )
        return result

    async def detect_deposits(
        self,
        addresses: AddressInput,
        excluded_txids: Iterable[str] = (),
    ) -> List[DepositRecord]:
        resolved = resolve_addresses(addresses, self._validator)
        deposits = await self._classifier.detect(resolved, excluded_txids)
        LOGGER.info("Found %s deposits across %s addresses", len(deposits), len(resolved))
        return deposits

    async def detect_deposits_for_request(self, request: Mapping) -> List[DepositRecord]:
        """Run deposit detection for a ``{addresses, ignoredTx}`` request body."""

        body = {"addresses": [], "ignoredTx": []}
        body.update(request or {})
        return await self.detect_deposits(body["addresses"] or [], body["ignoredTx"] or [])
