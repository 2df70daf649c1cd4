"""Insight-compatible JSON response formatting.

Keeping serialization here prevents drift between entry points and keeps
responses shaped like the Insight API regardless of index backend.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

from core.models import (
    AddressState,
    DepositRecord,
    DoubleSpendPlaceholder,
    PagedResult,
    PageItem,
    TransactionDetail,
    Utxo,
)

SATOSHIS_PER_COIN = Decimal(100_000_000)


def _drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def format_transaction(detail: TransactionDetail) -> dict[str, Any]:
    """Echo the store payload, or rebuild the core fields when there is none."""

    if detail.raw:
        payload = dict(detail.raw)
    else:
        payload = {
            "txid": detail.txid,
            "confirmations": detail.confirmations,
            "time": detail.time,
            "vin": [_drop_none({"addr": vin.address}) for vin in detail.vin],
            "vout": [
                {
                    "n": n,
                    "value": str(vout.value),
                    "scriptPubKey": {"addresses": list(vout.addresses)},
                }
                for n, vout in enumerate(detail.vout)
            ],
        }
    if detail.first_seen_ts is not None:
        payload["firstSeenTs"] = detail.first_seen_ts
    return _drop_none(payload)


def format_placeholder(placeholder: DoubleSpendPlaceholder) -> dict[str, Any]:
    return _drop_none(
        {
            "txid": placeholder.txid,
            "possibleDoubleSpend": placeholder.possible_double_spend,
            "firstSeenTs": placeholder.first_seen_ts,
        }
    )


def format_page_item(item: PageItem) -> dict[str, Any]:
    if isinstance(item, DoubleSpendPlaceholder):
        return format_placeholder(item)
    return format_transaction(item)


def format_paged_result(result: PagedResult) -> dict[str, Any]:
    return {
        "totalItems": result.total_items,
        "from": result.from_index,
        "to": result.to_index,
        "items": [format_page_item(item) for item in result.items],
    }


def format_deposits(records: Iterable[DepositRecord]) -> list[dict[str, Any]]:
    return [
        {
            "txId": record.tx_id,
            "amount": str(record.amount),
            "confirmations": record.confirmations,
            "address": record.address,
            "timestamp": record.timestamp,
        }
        for record in records
    ]


def format_utxo(utxo: Utxo) -> dict[str, Any]:
    return _drop_none(
        {
            "address": utxo.address,
            "txid": utxo.txid,
            "vout": utxo.vout,
            "scriptPubKey": utxo.script_pub_key,
            "amount": float(utxo.amount),
            "satoshis": utxo.satoshis,
            "height": utxo.height,
            "confirmations": utxo.confirmations,
        }
    )


def format_utxos(utxos: Iterable[Utxo]) -> list[dict[str, Any]]:
    return [format_utxo(utxo) for utxo in utxos]


def _to_coins(satoshis: int) -> float:
    return float(Decimal(satoshis) / SATOSHIS_PER_COIN)


def format_address_state(state: AddressState, include_tx_list: bool = True) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "addrStr": state.address,
        "balance": _to_coins(state.balance_sat),
        "balanceSat": state.balance_sat,
        "totalReceived": _to_coins(state.total_received_sat),
        "totalReceivedSat": state.total_received_sat,
        "totalSent": _to_coins(state.total_sent_sat),
        "totalSentSat": state.total_sent_sat,
        "unconfirmedBalance": _to_coins(state.unconfirmed_balance_sat),
        "unconfirmedBalanceSat": state.unconfirmed_balance_sat,
        "unconfirmedTxApperances": state.unconfirmed_tx_appearances,
        "txApperances": state.tx_appearances,
    }
    if include_tx_list:
        payload["transactions"] = [summary.txid for summary in state.transactions]
    return payload
