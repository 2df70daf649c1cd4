"""Error types raised by the core pipeline."""

from __future__ import annotations

from typing import Sequence


class AggregationError(Exception):
    """Base class for every failure surfaced by txscope."""


class InvalidAddress(AggregationError):
    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"Invalid address {value!r}: {reason}")
        self.value = value
        self.reason = reason


class CollaboratorError(AggregationError):
    """The address index or transaction store failed."""


class TransactionNotFound(CollaboratorError):
    """The transaction store has no record of the requested id."""

    def __init__(self, txid: str) -> None:
        super().__init__(f"Transaction not found: {txid}")
        self.txid = txid


class FanOutError(AggregationError):
    """A collect-all fan-out had at least one failing worker."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Fan-out worker failed: {cause}")
        self.cause = cause


class DepositDetectionError(AggregationError):
    def __init__(self, failed_addresses: Sequence[str]) -> None:
        super().__init__(
            "Deposit detection failed for: " + ", ".join(failed_addresses)
            if failed_addresses
            else "Deposit detection failed"
        )
        self.failed_addresses = list(failed_addresses)
