"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any index-specific payloads. All of them are request-scoped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class TransactionSummary:
    """Transaction id as reported by an address's history."""

    txid: str
    first_seen_ts: Optional[int] = None
    ts: Optional[int] = None

    @property
    def sort_ts(self) -> int:
        return self.first_seen_ts or self.ts or 0


@dataclass(frozen=True)
class TransactionInput:
    address: Optional[str]


@dataclass(frozen=True)
class TransactionOutput:
    addresses: Tuple[str, ...]
    value: Decimal


@dataclass(frozen=True)
class TransactionDetail:
    """Full transaction info as returned by the transaction store."""

    txid: str
    confirmations: int
    time: Optional[int]
    vin: Tuple[TransactionInput, ...]
    vout: Tuple[TransactionOutput, ...]
    first_seen_ts: Optional[int] = None
    # Untouched store payload, kept so responses can echo every field.
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def input_addresses(self) -> set[str]:
        return {vin.address for vin in self.vin if vin.address}


@dataclass(frozen=True)
class DoubleSpendPlaceholder:
    """Stand-in for a transaction that is indexed but no longer resolvable."""

    txid: str
    first_seen_ts: Optional[int] = None
    possible_double_spend: bool = True


PageItem = Union[TransactionDetail, DoubleSpendPlaceholder]


@dataclass(frozen=True)
class PagedResult:
    total_items: int
    from_index: int
    to_index: int
    items: Tuple[PageItem, ...]


@dataclass(frozen=True)
class Utxo:
    address: str
    txid: str
    vout: int
    amount: Decimal
    satoshis: Optional[int]
    script_pub_key: Optional[str]
    confirmations: int
    height: Optional[int] = None


@dataclass(frozen=True)
class AddressState:
    """Readable result of an address index update."""

    address: str
    balance_sat: int = 0
    total_received_sat: int = 0
    total_sent_sat: int = 0
    unconfirmed_balance_sat: int = 0
    tx_appearances: int = 0
    unconfirmed_tx_appearances: int = 0
    transactions: Tuple[TransactionSummary, ...] = ()
    unspent: Tuple[Utxo, ...] = ()


@dataclass(frozen=True)
class DepositRecord:
    """An incoming output paying a watched address."""

    tx_id: str
    amount: Decimal
    confirmations: int
    address: str
    timestamp: Optional[int]
