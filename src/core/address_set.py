"""Address list parsing (core domain)."""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

from core.errors import InvalidAddress
from core.ports import AddressValidatorPort

ADDRESS_SEPARATOR = ","


def split_address_list(raw: Union[str, Iterable[str], None]) -> List[str]:
    """Split a comma separated address string into raw entries.

    A blank string means "no addresses"; empty entries inside a non-blank
    list are kept so the validator rejects them.
    """

    if raw is None:
        return []
    if isinstance(raw, str):
        if not raw.strip():
            return []
        return [entry.strip() for entry in raw.split(ADDRESS_SEPARATOR)]
    return [str(entry).strip() for entry in raw]


def resolve_addresses(
    raw: Union[str, Iterable[str], None],
    validator: AddressValidatorPort,
) -> List[str]:
    """Validate every entry and return canonical addresses in input order.

    Resolution is all-or-nothing: the first malformed entry raises
    InvalidAddress. Repeated addresses are collapsed onto their first
    occurrence.
    """

    resolved: List[str] = []
    seen: set[str] = set()
    for entry in split_address_list(raw):
        address = _normalize(entry, validator)
        if address in seen:
            continue
        seen.add(address)
        resolved.append(address)
    return resolved


def resolve_address(raw: Optional[str], validator: AddressValidatorPort) -> str:
    """Validate a single address."""

    return _normalize((raw or "").strip(), validator)


def _normalize(entry: str, validator: AddressValidatorPort) -> str:
    if not entry:
        raise InvalidAddress(entry, "empty address")
    try:
        return validator.normalize(entry)
    except ValueError as exc:
        raise InvalidAddress(entry, str(exc)) from exc
