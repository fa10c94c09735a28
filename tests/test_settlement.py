"""
Tests for settlement submission (web3 mocked, real eth_account signing).
"""

from unittest.mock import MagicMock

import pytest
from eth_account import Account

from renegade_sdk.match_types import SettlementTransaction
from renegade_sdk.settlement import SettlementError, submit_settlement_tx

PRIVATE_KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
SETTLEMENT_TX = SettlementTransaction(
    tx_type="eip1559",
    to="0x44f16ed65a5d6f6a4c9fc2b6ba4e7b4e3e5d1a2b",
    data="0xdeadbeef",
    value="0x10",
)


def mock_web3(status=1):
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.chain_id = 421614
    w3.eth.estimate_gas.return_value = 250_000
    w3.eth.gas_price = 10**8
    w3.eth.send_raw_transaction.return_value = b"\x11" * 32
    w3.eth.wait_for_transaction_receipt.return_value = {"status": status, "blockNumber": 99}
    return w3


def test_submit_signs_and_waits():
    w3 = mock_web3()
    tx_hash = submit_settlement_tx(w3, PRIVATE_KEY, SETTLEMENT_TX)

    assert tx_hash == "0x" + "11" * 32
    sent_tx = w3.eth.estimate_gas.call_args[0][0]
    assert sent_tx["from"] == Account.from_key("0x" + PRIVATE_KEY).address
    assert sent_tx["value"] == 16
    assert sent_tx["nonce"] == 7
    assert sent_tx["chainId"] == 421614
    w3.eth.send_raw_transaction.assert_called_once()
    w3.eth.wait_for_transaction_receipt.assert_called_once()


def test_no_wait():
    w3 = mock_web3()
    submit_settlement_tx(w3, PRIVATE_KEY, SETTLEMENT_TX, wait=False)
    w3.eth.wait_for_transaction_receipt.assert_not_called()


def test_reverted_receipt():
    w3 = mock_web3(status=0)
    with pytest.raises(SettlementError) as exc:
        submit_settlement_tx(w3, PRIVATE_KEY, SETTLEMENT_TX)
    assert exc.value.tx_hash == "0x" + "11" * 32
