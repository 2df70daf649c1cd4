"""Bitcoin address validation adapter.

Implements the core AddressValidatorPort for Base58Check (P2PKH/P2SH)
and Bech32/Bech32m (segwit) addresses.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import base58

BASE58_ALPHABET = frozenset(base58.BITCOIN_ALPHABET.decode("ascii"))
BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
BECH32_CONST = 1
BECH32M_CONST = 0x2BC830A3

# P2PKH and P2SH version bytes per network.
VERSION_BYTES = {
    "mainnet": {0x00, 0x05},
    "testnet": {0x6F, 0xC4},
}
SEGWIT_HRPS = {
    "mainnet": "bc",
    "testnet": "tb",
}


def decode_base58check(value: str) -> bytes:
    """Decode a Base58Check string and return the payload without checksum."""

    for char in value:
        if char not in BASE58_ALPHABET:
            raise ValueError(f"invalid base58 character {char!r}")
    try:
        return base58.b58decode_check(value)
    except ValueError as exc:
        raise ValueError("checksum mismatch") from exc


def _bech32_polymod(values: Sequence[int]) -> int:
    generator = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i in range(5):
            if (top >> i) & 1:
                chk ^= generator[i]
    return chk


def _bech32_hrp_expand(hrp: str) -> List[int]:
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def bech32_decode(value: str) -> Tuple[str, List[int], int]:
    """Return (hrp, data without checksum, checksum constant)."""

    if value.lower() != value and value.upper() != value:
        raise ValueError("mixed case")
    value = value.lower()
    separator = value.rfind("1")
    if separator < 1 or separator + 7 > len(value) or len(value) > 90:
        raise ValueError("bad separator position or length")

    hrp = value[:separator]
    data: List[int] = []
    for char in value[separator + 1 :]:
        digit = BECH32_CHARSET.find(char)
        if digit < 0:
            raise ValueError(f"invalid bech32 character {char!r}")
        data.append(digit)

    const = _bech32_polymod(_bech32_hrp_expand(hrp) + data)
    if const not in (BECH32_CONST, BECH32M_CONST):
        raise ValueError("checksum mismatch")
    return hrp, data[:-6], const


def _convert_bits(data: Sequence[int], from_bits: int, to_bits: int) -> Optional[List[int]]:
    acc = 0
    bits = 0
    out: List[int] = []
    maxv = (1 << to_bits) - 1
    for value in data:
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        return None
    return out


class BitcoinAddressValidator:
    """Validate and canonicalize Bitcoin addresses for one or all networks."""

    def __init__(self, network: str = "mainnet") -> None:
        if network == "any":
            networks = list(VERSION_BYTES)
        elif network in VERSION_BYTES:
            networks = [network]
        else:
            raise ValueError(f"Unsupported network: {network}")
        self._versions = set().union(*(VERSION_BYTES[name] for name in networks))
        self._hrps = {SEGWIT_HRPS[name] for name in networks}

    def normalize(self, raw: str) -> str:
        lowered = raw.lower()
        if any(lowered.startswith(f"{hrp}1") for hrp in self._hrps):
            self._check_segwit(raw)
            return lowered
        self._check_base58(raw)
        return raw

    def _check_base58(self, raw: str) -> None:
        payload = decode_base58check(raw)
        if len(payload) != 21:
            raise ValueError("unexpected payload length")
        if payload[0] not in self._versions:
            raise ValueError("address is for a different network")

    def _check_segwit(self, raw: str) -> None:
        hrp, data, const = bech32_decode(raw)
        if hrp not in self._hrps or not data:
            raise ValueError("address is for a different network")
        version = data[0]
        program = _convert_bits(data[1:], 5, 8)
        if program is None or not 2 <= len(program) <= 40 or version > 16:
            raise ValueError("invalid witness program")
        if version == 0 and len(program) not in (20, 32):
            raise ValueError("invalid witness v0 program length")
        expected = BECH32_CONST if version == 0 else BECH32M_CONST
        if const != expected:
            raise ValueError("wrong checksum variant for witness version")
