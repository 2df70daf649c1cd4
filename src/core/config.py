"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AggregationConfig:
    """Page size and concurrency ceilings for the aggregation pipeline."""

    max_batch_size: int = 100
    rpc_concurrency: int = 5
    deposit_address_concurrency: int = 2
    deposit_transaction_concurrency: int = 1


@dataclass(frozen=True)
class UpdateOptions:
    """Flags passed to the address index on every update call.

    tx_limit follows the index convention: -1 is unlimited, 0 suppresses
    the transaction list entirely.
    """

    tx_limit: int = -1
    only_unspent: bool = False
    ignore_cache: bool = False
    include_tx_info: bool = False
