from __future__ import annotations

import pytest

from adapters.bitcoin_address import BitcoinAddressValidator, decode_base58check


@pytest.mark.parametrize(
    "address",
    [
        "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa",
        "3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy",
        "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq",
        "bc1p0xlxvlhemja6c4dqv22uapctqupfhlxm9h8z3k2e72q4k9hcz7vqzk5jj0",
    ],
)
def test_mainnet_addresses_are_accepted(address: str) -> None:
    assert BitcoinAddressValidator("mainnet").normalize(address) == address


def test_bech32_is_canonicalized_to_lower_case() -> None:
    validator = BitcoinAddressValidator("mainnet")
    upper = "BC1QAR0SRRR7XFKVY5L643LYDNW9RE59GTZZWF5MDQ"
    assert validator.normalize(upper) == upper.lower()


@pytest.mark.parametrize(
    "address, message",
    [
        ("1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNb", "checksum mismatch"),
        ("1A1zP1eP5QGefi2DMPTfTL5SLmv7Divf0a", "invalid base58 character"),
        ("mipcBbFg9gMiCh81Kj8tqqdgoZub1ZJRfn", "different network"),
        ("bc1qw508d6qejxtdg4c5ppnnu3gytlqzgs2ue4e3k", "checksum mismatch"),
        ("bc1QAR0SRRR7XFKVY5L643LYDNW9RE59GTZZWF5MDQ", "mixed case"),
    ],
)
def test_invalid_mainnet_addresses(address: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        BitcoinAddressValidator("mainnet").normalize(address)


def test_testnet_and_any_networks() -> None:
    testnet = "mipcBbFg9gMiCh81Kj8tqqdgoZub1ZJRfn"
    assert BitcoinAddressValidator("testnet").normalize(testnet) == testnet
    assert BitcoinAddressValidator("any").normalize(testnet) == testnet
    with pytest.raises(ValueError):
        BitcoinAddressValidator("testnet").normalize("1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa")


def test_unknown_network_is_rejected() -> None:
    with pytest.raises(ValueError):
        BitcoinAddressValidator("signet")


def test_decode_base58check_returns_version_and_hash() -> None:
    payload = decode_base58check("1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa")
    assert len(payload) == 21
    assert payload[0] == 0


def test_decode_base58check_reports_bad_checksum() -> None:
    with pytest.raises(ValueError, match="checksum mismatch"):
        decode_base58check("1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNb")
