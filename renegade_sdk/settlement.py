"""
Renegade SDK - Settlement

Submit an assembled match's settlement transaction on-chain.

Requirements:
    pip install web3 eth_account
"""

import logging
from typing import Optional

from eth_account import Account
from web3 import Web3

from .match_types import SettlementTransaction

log = logging.getLogger(__name__)

DEFAULT_RECEIPT_TIMEOUT_S = 120


class SettlementError(Exception):
    """Settlement transaction could not be submitted or reverted."""
    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


def connect(rpc_url: str) -> Web3:
    """
    Connect to an EVM RPC endpoint.

    Raises:
        SettlementError: endpoint unreachable
    """
    w3 = Web3(Web3.HTTPProvider(rpc_url))
    if not w3.is_connected():
        raise SettlementError(f"Failed to connect to RPC {rpc_url}")
    return w3


def build_transaction(w3: Web3, sender: str, settlement_tx: SettlementTransaction) -> dict:
    """Fill in nonce, chain id and gas for a settlement transaction."""
    tx = {
        "from": sender,
        "to": Web3.to_checksum_address(settlement_tx.to),
        "data": settlement_tx.data,
        "value": settlement_tx.value_wei(),
        "nonce": w3.eth.get_transaction_count(sender),
        "chainId": w3.eth.chain_id,
    }
    tx["gas"] = w3.eth.estimate_gas(tx)
    tx["gasPrice"] = w3.eth.gas_price
    return tx


def submit_settlement_tx(w3: Web3, private_key: str,
                         settlement_tx: SettlementTransaction,
                         wait: bool = True,
                         timeout: int = DEFAULT_RECEIPT_TIMEOUT_S) -> str:
    """
    Sign and broadcast a settlement transaction.

    Args:
        w3: Connected Web3 instance
        private_key: Hex private key of the submitting wallet
        settlement_tx: settlement_tx from an assembled match bundle
        wait: Wait for the receipt before returning
        timeout: Receipt wait timeout in seconds

    Returns:
        Transaction hash (0x-prefixed hex)

    Raises:
        SettlementError: transaction reverted
    """
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    account = Account.from_key(private_key)

    tx = build_transaction(w3, account.address, settlement_tx)
    signed_tx = account.sign_transaction(tx)
    tx_hash = w3.eth.send_raw_transaction(signed_tx.raw_transaction)
    tx_hex = Web3.to_hex(tx_hash)
    log.info(f"Settlement TX sent: {tx_hex}")

    if not wait:
        return tx_hex

    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    if receipt["status"] != 1:
        raise SettlementError(f"Settlement TX {tx_hex} reverted", tx_hex)

    log.info(f"Settlement TX confirmed in block {receipt['blockNumber']}")
    return tx_hex
