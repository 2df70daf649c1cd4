"""Insight-API-to-core mapping adapter.

This keeps Insight JSON field names out of the core pipeline.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence

from core.models import (
    AddressState,
    TransactionDetail,
    TransactionInput,
    TransactionOutput,
    TransactionSummary,
    Utxo,
)


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal(0)
    try:
        # str() keeps float payloads from picking up binary noise.
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def parse_transaction_summary(entry: Any) -> TransactionSummary:
    """Map a history entry, either a bare txid or a ``{txid, ts, firstSeenTs}`` object."""

    if isinstance(entry, str):
        return TransactionSummary(txid=entry)
    return TransactionSummary(
        txid=str(entry["txid"]),
        first_seen_ts=_to_int(entry.get("firstSeenTs")),
        ts=_to_int(entry.get("ts")),
    )


def parse_utxo(entry: Mapping[str, Any]) -> Utxo:
    return Utxo(
        address=str(entry.get("address", "")),
        txid=str(entry["txid"]),
        vout=int(entry["vout"]),
        amount=_to_decimal(entry.get("amount")),
        satoshis=_to_int(entry.get("satoshis")),
        script_pub_key=entry.get("scriptPubKey"),
        confirmations=int(entry.get("confirmations") or 0),
        height=_to_int(entry.get("height")),
    )


def parse_utxos(payload: Sequence[Mapping[str, Any]]) -> tuple[Utxo, ...]:
    return tuple(parse_utxo(entry) for entry in payload or [])


def parse_address_state(payload: Mapping[str, Any], address: str) -> AddressState:
    """Build an AddressState from an ``/addr/{address}`` response."""

    transactions = payload.get("transactions") or []
    return AddressState(
        address=str(payload.get("addrStr") or address),
        balance_sat=int(payload.get("balanceSat") or 0),
        total_received_sat=int(payload.get("totalReceivedSat") or 0),
        total_sent_sat=int(payload.get("totalSentSat") or 0),
        unconfirmed_balance_sat=int(payload.get("unconfirmedBalanceSat") or 0),
        tx_appearances=int(payload.get("txApperances") or 0),
        unconfirmed_tx_appearances=int(payload.get("unconfirmedTxApperances") or 0),
        transactions=tuple(parse_transaction_summary(entry) for entry in transactions),
    )


def parse_transaction(payload: Mapping[str, Any]) -> TransactionDetail:
    """Build a TransactionDetail from a ``/tx/{txid}`` response."""

    vin = tuple(TransactionInput(address=entry.get("addr")) for entry in payload.get("vin") or [])
    vout = []
    for entry in payload.get("vout") or []:
        script = entry.get("scriptPubKey") or {}
        vout.append(
            TransactionOutput(
                addresses=tuple(script.get("addresses") or []),
                value=_to_decimal(entry.get("value")),
            )
        )

    return TransactionDetail(
        txid=str(payload["txid"]),
        confirmations=int(payload.get("confirmations") or 0),
        time=_to_int(payload.get("time")),
        vin=vin,
        vout=tuple(vout),
        first_seen_ts=_to_int(payload.get("firstSeenTs")),
        raw=dict(payload),
    )
