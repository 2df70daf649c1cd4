"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the address index, transaction
store, and address validation so that the core can be reused with
different backends.
"""

from __future__ import annotations

from typing import Protocol

from core.config import UpdateOptions
from core.models import AddressState, TransactionDetail


class AddressValidatorPort(Protocol):
    """Address syntax validation required by the resolver."""

    def normalize(self, raw: str) -> str:
        """Return the canonical form of ``raw`` or raise ValueError."""
        ...


class AddressIndexPort(Protocol):
    """Address index operations required by the core pipeline."""

    async def update(self, address: str, options: UpdateOptions) -> AddressState:
        ...


class TransactionStorePort(Protocol):
    """Transaction detail lookups.

    Implementations must raise TransactionNotFound for unknown ids and
    CollaboratorError for anything else, never one in place of the other.
    """

    async def fetch_by_id(self, txid: str) -> TransactionDetail:
        ...
