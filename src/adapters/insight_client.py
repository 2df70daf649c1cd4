"""Insight API index adapter.

Implements both the core AddressIndexPort and TransactionStorePort over
an Insight-compatible HTTP API using httpx.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Optional, TypeVar

import httpx

from adapters.insight_mapper import parse_address_state, parse_transaction, parse_utxos
from core.config import UpdateOptions
from core.errors import CollaboratorError, TransactionNotFound
from core.models import AddressState, TransactionDetail

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _parse(parser: Callable[..., T], payload: Any, *args: Any, what: str) -> T:
    """Map a JSON body, reporting shape problems as collaborator failures."""

    try:
        return parser(payload, *args)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise CollaboratorError(f"Malformed index payload for {what}: {exc!r}") from exc


class InsightIndexClient:
    """Thin async wrapper around the Insight address and transaction endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        api_prefix: str = "/api",
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["X-Api-Key"] = api_key
        self._prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def update(self, address: str, options: UpdateOptions) -> AddressState:
        params: dict[str, str] = {}
        if options.ignore_cache:
            params["noCache"] = "1"

        if options.only_unspent:
            payload = await self._get(f"/addr/{address}/utxo", params)
            unspent = _parse(parse_utxos, payload, what=f"utxos of {address}")
            return AddressState(address=address, unspent=unspent)

        if options.tx_limit == 0:
            params["noTxList"] = "1"
        if options.include_tx_info:
            params["includeTxInfo"] = "1"
        payload = await self._get(f"/addr/{address}", params)
        state = _parse(parse_address_state, payload, address, what=f"address {address}")
        if options.tx_limit > 0:
            state = dataclasses.replace(state, transactions=state.transactions[: options.tx_limit])
        return state

    async def fetch_by_id(self, txid: str) -> TransactionDetail:
        payload = await self._get(f"/tx/{txid}", {}, not_found=txid)
        return _parse(parse_transaction, payload, what=f"transaction {txid}")

    async def _get(self, path: str, params: dict[str, str], not_found: Optional[str] = None) -> Any:
        url = f"{self._prefix}{path}"
        LOGGER.debug("Insight GET %s params=%s", url, params)
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise CollaboratorError(f"Index request failed for {url}: {exc}") from exc

        if response.status_code == 404 and not_found is not None:
            raise TransactionNotFound(not_found)
        if response.is_error:
            raise CollaboratorError(f"Index error {response.status_code} for {url}: {response.text[:200]}")
        try:
            return response.json()
        except ValueError as exc:
            raise CollaboratorError(f"Index returned invalid JSON for {url}") from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "InsightIndexClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
