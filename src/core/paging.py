"""Merge, dedup, sort, and page transaction histories (core domain).

The pipeline runs in a fixed order:
1) Flatten per-address summaries and dedup by txid
2) Resolve the [from, to) window against the dedup count
3) Sort newest first (first-seen time, then chain time, then txid)
4) Slice the window
5) Hydrate each id from the transaction store, substituting a
   double-spend placeholder for ids the store no longer knows
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.config import AggregationConfig
from core.errors import TransactionNotFound
from core.fan_out import collect_all
from core.models import (
    DoubleSpendPlaceholder,
    PagedResult,
    PageItem,
    TransactionSummary,
)
from core.ports import TransactionStorePort

LOGGER = logging.getLogger(__name__)


def dedup_summaries(groups: Iterable[Iterable[TransactionSummary]]) -> List[TransactionSummary]:
    """Flatten summary lists, keeping the first occurrence of each txid.

    A later duplicate only contributes timestamps the first one lacked.
    """

    merged: Dict[str, TransactionSummary] = {}
    for group in groups:
        for summary in group:
            existing = merged.get(summary.txid)
            if existing is None:
                merged[summary.txid] = summary
                continue
            if existing.first_seen_ts is None and summary.first_seen_ts is not None:
                existing = dataclasses.replace(existing, first_seen_ts=summary.first_seen_ts)
            if existing.ts is None and summary.ts is not None:
                existing = dataclasses.replace(existing, ts=summary.ts)
            merged[summary.txid] = existing
    return list(merged.values())


def resolve_window(
    total: int,
    from_index: Optional[int],
    to_index: Optional[int],
    max_batch_size: int,
) -> Tuple[int, int]:
    """Return a clamped [from, to) window with 0 <= from <= to <= total."""

    if from_index is None and to_index is None:
        from_index, to_index = 0, max_batch_size
    elif from_index is None:
        from_index = 0
    if to_index is None:
        to_index = from_index + max_batch_size
    elif to_index - from_index > max_batch_size:
        to_index = from_index + max_batch_size

    start = min(max(from_index, 0), total)
    end = min(max(to_index, 0), total)
    # An inverted request yields an empty page at `from`.
    return start, max(start, end)


def sort_summaries(summaries: Iterable[TransactionSummary]) -> List[TransactionSummary]:
    """Newest first; equal timestamps fall back to descending txid."""

    return sorted(summaries, key=lambda s: (s.sort_ts, s.txid), reverse=True)


class TransactionPager:
    """Turns per-address summary lists into one hydrated page."""

    def __init__(self, store: TransactionStorePort, config: AggregationConfig) -> None:
        self._store = store
        self._config = config

    async def page(
        self,
        groups: Iterable[Sequence[TransactionSummary]],
        from_index: Optional[int] = None,
        to_index: Optional[int] = None,
    ) -> PagedResult:
        summaries = dedup_summaries(groups)
        total = len(summaries)
        start, end = resolve_window(total, from_index, to_index, self._config.max_batch_size)
        window = sort_summaries(summaries)[start:end]

        items = await collect_all(window, self._hydrate, self._config.rpc_concurrency)
        return PagedResult(
            total_items=total,
            from_index=start,
            to_index=end,
            items=tuple(items),
        )

    async def _hydrate(self, summary: TransactionSummary) -> PageItem:
        try:
            detail = await self._store.fetch_by_id(summary.txid)
        except TransactionNotFound:
            # Indexed under an address but gone from the store, usually
            # because a conflicting transaction replaced it.
            LOGGER.info("Transaction %s no longer available, marking possible double spend", summary.txid)
            return DoubleSpendPlaceholder(txid=summary.txid, first_seen_ts=summary.first_seen_ts)

        if summary.first_seen_ts is not None and detail.first_seen_ts is None:
            detail = dataclasses.replace(detail, first_seen_ts=summary.first_seen_ts)
        return detail
