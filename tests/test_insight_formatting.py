from __future__ import annotations

import dataclasses
from decimal import Decimal

from adapters.insight_formatting import (
    format_address_state,
    format_deposits,
    format_paged_result,
    format_transaction,
    format_utxos,
)
from adapters.insight_mapper import (
    parse_address_state,
    parse_transaction,
    parse_transaction_summary,
    parse_utxos,
)
from core.models import (
    AddressState,
    DepositRecord,
    DoubleSpendPlaceholder,
    PagedResult,
    TransactionSummary,
)

TX_PAYLOAD = {
    "txid": "abc",
    "confirmations": 4,
    "time": 1_600_000_000,
    "vin": [{"addr": "X", "value": 1.2}, {"coinbase": "04ff"}],
    "vout": [
        {"n": 0, "value": "0.70000000", "scriptPubKey": {"addresses": ["A"]}},
        {"n": 1, "value": "0.49990000", "scriptPubKey": {}},
    ],
    "fees": 0.0001,
}


def test_parse_transaction_summary_accepts_both_shapes() -> None:
    assert parse_transaction_summary("abc") == TransactionSummary(txid="abc")
    assert parse_transaction_summary({"txid": "abc", "ts": 5, "firstSeenTs": 3}) == TransactionSummary(
        txid="abc", first_seen_ts=3, ts=5
    )


def test_parse_transaction_maps_inputs_and_outputs() -> None:
    detail = parse_transaction(TX_PAYLOAD)
    assert detail.input_addresses() == {"X"}
    assert detail.vin[1].address is None
    assert detail.vout[0].addresses == ("A",)
    assert detail.vout[0].value == Decimal("0.70000000")
    assert detail.vout[1].addresses == ()
    assert detail.first_seen_ts is None


def test_parse_address_state_and_utxos() -> None:
    state = parse_address_state(
        {
            "addrStr": "A",
            "balanceSat": 10,
            "totalReceivedSat": 30,
            "totalSentSat": 20,
            "unconfirmedBalanceSat": -1,
            "txApperances": 2,
            "transactions": ["t1", "t2"],
        },
        "A",
    )
    assert state.balance_sat == 10
    assert state.unconfirmed_balance_sat == -1
    assert [s.txid for s in state.transactions] == ["t1", "t2"]

    utxos = parse_utxos([{"address": "A", "txid": "t1", "vout": 1, "amount": 0.1, "satoshis": 10_000_000}])
    assert utxos[0].amount == Decimal("0.1")
    assert utxos[0].confirmations == 0


def test_format_transaction_echoes_payload_with_first_seen() -> None:
    detail = parse_transaction(TX_PAYLOAD)
    formatted = format_transaction(dataclasses.replace(detail, first_seen_ts=7))
    assert formatted["fees"] == 0.0001
    assert formatted["firstSeenTs"] == 7


def test_format_paged_result_with_placeholder() -> None:
    result = PagedResult(
        total_items=2,
        from_index=0,
        to_index=2,
        items=(DoubleSpendPlaceholder(txid="gone"), parse_transaction(TX_PAYLOAD)),
    )
    formatted = format_paged_result(result)
    assert formatted["totalItems"] == 2
    assert formatted["from"] == 0 and formatted["to"] == 2
    assert formatted["items"][0] == {"txid": "gone", "possibleDoubleSpend": True}
    assert formatted["items"][1]["txid"] == "abc"


def test_format_deposits_and_utxos() -> None:
    deposits = format_deposits(
        [DepositRecord(tx_id="t", amount=Decimal("0.5"), confirmations=1, address="A", timestamp=9)]
    )
    assert deposits == [{"txId": "t", "amount": "0.5", "confirmations": 1, "address": "A", "timestamp": 9}]

    utxos = format_utxos(parse_utxos([{"address": "A", "txid": "t1", "vout": 0, "amount": "0.25"}]))
    assert utxos == [{"address": "A", "txid": "t1", "vout": 0, "amount": 0.25, "confirmations": 0}]


def test_format_address_state_converts_to_coins() -> None:
    state = AddressState(address="A", balance_sat=150_000_000, transactions=(TransactionSummary(txid="t"),))
    formatted = format_address_state(state)
    assert formatted["balance"] == 1.5
    assert formatted["transactions"] == ["t"]
    assert "transactions" not in format_address_state(state, include_tx_list=False)
