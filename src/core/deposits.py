"""Deposit classification (core domain)."""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from core.config import AggregationConfig, UpdateOptions
from core.errors import CollaboratorError, DepositDetectionError
from core.fan_out import every
from core.models import DepositRecord, TransactionDetail
from core.ports import AddressIndexPort, TransactionStorePort

LOGGER = logging.getLogger(__name__)


def classify_outputs(detail: TransactionDetail, address: str) -> List[DepositRecord]:
    """Return the deposits ``detail`` makes to ``address``.

    Matching logic:
    - Outputs that do not pay the address are ignored.
    - If the address also funds the transaction, paying it is change, so
      none of its outputs count.
    - Every other matching output is one deposit.
    """

    records: List[DepositRecord] = []
    is_spender = address in detail.input_addresses()
    for output in detail.vout:
        if len(output.addresses) > 1:
            LOGGER.info("More than one address for vout in tx %s", detail.txid)
        if address not in output.addresses:
            continue
        if is_spender:
            LOGGER.debug("Ignoring tx %s for %s: outgoing transaction", detail.txid, address)
            continue
        records.append(
            DepositRecord(
                tx_id=detail.txid,
                amount=output.value,
                confirmations=detail.confirmations,
                address=address,
                timestamp=detail.time,
            )
        )
    return records


class DepositClassifier:
    """Finds genuine incoming deposits across watched addresses.

    Unlike paging, this path is strict: any address or transaction that
    cannot be resolved fails the whole call and no partial list is
    returned.
    """

    def __init__(
        self,
        index: AddressIndexPort,
        store: TransactionStorePort,
        config: AggregationConfig,
    ) -> None:
        self._index = index
        self._store = store
        self._config = config

    async def detect(
        self,
        addresses: Sequence[str],
        excluded_txids: Iterable[str] = (),
    ) -> List[DepositRecord]:
        excluded = frozenset(excluded_txids)
        slots: Dict[int, List[DepositRecord]] = {}
        failed: List[str] = []

        async def check_address(position: Tuple[int, str]) -> bool:
            index, address = position
            records = await self._address_deposits(address, excluded)
            if records is None:
                failed.append(address)
                return False
            slots[index] = records
            return True

        passed = await every(
            list(enumerate(addresses)),
            check_address,
            self._config.deposit_address_concurrency,
        )
        if not passed:
            raise DepositDetectionError(failed)

        deposits: List[DepositRecord] = []
        for index in range(len(addresses)):
            deposits.extend(slots[index])
        return deposits

    async def _address_deposits(
        self,
        address: str,
        excluded: FrozenSet[str],
    ) -> Optional[List[DepositRecord]]:
        """Return the address's deposits, or None if any lookup failed."""

        try:
            state = await self._index.update(address, UpdateOptions())
        except CollaboratorError as exc:
            LOGGER.warning("Address update failed for %s: %s", address, exc)
            return None

        slots: Dict[int, List[DepositRecord]] = {}

        async def check_transaction(position: Tuple[int, str]) -> bool:
            index, txid = position
            if txid in excluded:
                LOGGER.debug("Ignoring excluded tx %s", txid)
                slots[index] = []
                return True
            try:
                detail = await self._store.fetch_by_id(txid)
            except CollaboratorError as exc:
                LOGGER.warning("Transaction %s for %s could not be fetched: %s", txid, address, exc)
                return False
            slots[index] = classify_outputs(detail, address)
            return True

        txids = [summary.txid for summary in state.transactions]
        passed = await every(
            list(enumerate(txids)),
            check_transaction,
            self._config.deposit_transaction_concurrency,
        )
        if not passed:
            return None

        records: List[DepositRecord] = []
        for index in range(len(txids)):
            records.extend(slots[index])
        return records
