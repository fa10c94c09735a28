#!/usr/bin/env python3
"""
Renegade External Match - Example Script

Walks through the external match flow:
1. Request a quote for an order
2. Assemble the quote into a settlement bundle
3. Submit the settlement transaction on-chain

Requirements:
    pip install -e .

Usage:
    # Quote only
    python3 examples/external_match.py quote --side buy --quote-amount 20000000

    # Quote, assemble and submit
    python3 examples/external_match.py match --side buy --quote-amount 20000000 -y

    # Malleable match at a random base amount
    python3 examples/external_match.py malleable --side sell --base-amount 10000000000000000

    # Market info
    python3 examples/external_match.py depth --mint 0xc3414a7ef14aaaa9c4522dfc00a4e66e74e9c25a
    python3 examples/external_match.py tokens

Configuration:
    EXTERNAL_MATCH_KEY, EXTERNAL_MATCH_SECRET  API credentials
    PKEY                                       wallet private key (match / malleable)
    RPC_URL                                    EVM RPC endpoint
"""

import argparse
import asyncio
import json
import logging
import os
import random
import sys

from renegade_sdk import (
    ExternalMatchClient,
    ExternalMatchClientError,
    ExternalOrder,
    OrderSide,
    SettlementError,
    submit_settlement_tx,
)
from renegade_sdk.client import ARBITRUM_SEPOLIA_BASE_URL, BASE_SEPOLIA_BASE_URL
from renegade_sdk.settlement import connect

# ============ CONFIGURATION ============

CONFIG = {
    "arbitrum-sepolia": {
        "base_url": ARBITRUM_SEPOLIA_BASE_URL,
        "rpc_url": "https://sepolia-rollup.arbitrum.io/rpc",
        "quote_mint": "0xdf8d259c04020562717557f2b5a3cf28e92707d1",  # USDC
        "base_mint": "0xc3414a7ef14aaaa9c4522dfc00a4e66e74e9c25a",   # WETH
    },
    "base-sepolia": {
        "base_url": BASE_SEPOLIA_BASE_URL,
        "rpc_url": "https://sepolia.base.org",
        "quote_mint": "0xD9961Bb4Cb27192f8dAd20a662be081f546b0E74",  # USDC
        "base_mint": "0xb51a558c8E55DE1EE5391BDFe2aFA49968FC3B25",   # cbBTC
    },
}

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("external-match")

# ============ HELPERS ============

def build_order(args, network: dict) -> ExternalOrder:
    """Build the order from CLI arguments."""
    return ExternalOrder(
        quote_mint=args.quote_mint or network["quote_mint"],
        base_mint=args.base_mint or network["base_mint"],
        side=OrderSide.BUY if args.side == "buy" else OrderSide.SELL,
        base_amount=args.base_amount,
        quote_amount=args.quote_amount,
    )


def private_key_or_exit() -> str:
    key = os.getenv("PKEY", "")
    if not key:
        print("Error: Missing private key, set PKEY", file=sys.stderr)
        sys.exit(1)
    return key


def confirm(args, prompt: str) -> None:
    if args.yes:
        return
    answer = input(f"\n{prompt} [y/N]: ")
    if answer.lower() != "y":
        print("Aborted.")
        sys.exit(0)

# ============ COMMANDS ============

async def cmd_quote(client: ExternalMatchClient, args, network: dict) -> None:
    """Request a quote and print it."""
    quote = await client.request_quote(build_order(args, network))
    if quote is None:
        print("No quote available")
        return
    print(json.dumps(quote.to_dict(), indent=2))


async def cmd_match(client: ExternalMatchClient, args, network: dict) -> None:
    """Quote, assemble and submit."""
    log.info("Requesting quote...")
    quote = await client.request_quote(build_order(args, network))
    if quote is None:
        print("No quote available")
        return

    log.info("Assembling match...")
    bundle = await client.assemble_quote(quote)
    if bundle is None:
        print("No match available")
        return

    result = bundle.match_bundle
    print(f"Send:    {result.send.amount} of {result.send.mint}")
    print(f"Receive: {result.receive.amount} of {result.receive.mint}")
    print(f"Fees:    {result.fees.total()}")

    confirm(args, "Submit settlement transaction?")
    w3 = connect(os.getenv("RPC_URL", network["rpc_url"]))
    tx_hash = submit_settlement_tx(w3, private_key_or_exit(), result.settlement_tx)
    print(f"Transaction submitted: {tx_hash}")


async def cmd_malleable(client: ExternalMatchClient, args, network: dict) -> None:
    """Quote, assemble malleable, pick a base amount, submit."""
    quote = await client.request_quote(build_order(args, network))
    if quote is None:
        print("No quote available")
        return

    bundle = await client.assemble_malleable_quote(quote)
    if bundle is None:
        print("No match available")
        return

    min_base, max_base = bundle.base_bounds()
    print(f"Base bounds: {min_base} - {max_base}")

    base_amount = random.randint(min_base, max_base)
    bundle.set_base_amount(base_amount)
    print(f"Base amount:    {base_amount}")
    print(f"Send amount:    {bundle.send_amount()}")
    print(f"Receive amount: {bundle.receive_amount()}")

    confirm(args, "Submit settlement transaction?")
    w3 = connect(os.getenv("RPC_URL", network["rpc_url"]))
    tx_hash = submit_settlement_tx(w3, private_key_or_exit(), bundle.settlement_tx)
    print(f"Transaction submitted: {tx_hash}")


async def cmd_depth(client: ExternalMatchClient, args, network: dict) -> None:
    """Print order book depth for a base mint."""
    mint = args.mint or network["base_mint"]
    depth = await client.get_order_book_depth(mint)
    print(f"Price: {depth.price.price} (ts {depth.price.timestamp})")
    print(f"Buy:   {depth.buy.total_quantity} (${depth.buy.total_quantity_usd:,.2f})")
    print(f"Sell:  {depth.sell.total_quantity} (${depth.sell.total_quantity_usd:,.2f})")


async def cmd_tokens(client: ExternalMatchClient, args, network: dict) -> None:
    """Print supported tokens and prices."""
    tokens = await client.get_supported_tokens()
    prices = {p.base_token.lower(): p.price for p in await client.get_token_prices()}
    for token in tokens:
        price = prices.get(token.address.lower())
        print(f"{token.symbol:<8} {token.address}  {price if price is not None else '-'}")


COMMANDS = {
    "quote": cmd_quote,
    "match": cmd_match,
    "malleable": cmd_malleable,
    "depth": cmd_depth,
    "tokens": cmd_tokens,
}

# ============ MAIN ============

def main():
    parser = argparse.ArgumentParser(description="Renegade external match example")
    parser.add_argument("--network", choices=sorted(CONFIG), default="arbitrum-sepolia")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    for name in ("quote", "match", "malleable"):
        sub = subparsers.add_parser(name, help=f"{name} flow")
        sub.add_argument("--side", choices=["buy", "sell"], default="buy")
        sub.add_argument("--quote-mint", help="Quote token (default: network USDC)")
        sub.add_argument("--base-mint", help="Base token (default: network base token)")
        sub.add_argument("--base-amount", type=int, help="Base amount (atoms)")
        sub.add_argument("--quote-amount", type=int, help="Quote amount (atoms)")
        sub.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    depth_parser = subparsers.add_parser("depth", help="Order book depth")
    depth_parser.add_argument("--mint", help="Base token mint")

    subparsers.add_parser("tokens", help="Supported tokens and prices")

    args = parser.parse_args()
    if args.command not in COMMANDS:
        parser.print_help()
        sys.exit(1)

    network = CONFIG[args.network]
    try:
        client = ExternalMatchClient.from_env(network["base_url"])
    except ExternalMatchClientError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    async def run():
        async with client:
            await COMMANDS[args.command](client, args, network)

    try:
        asyncio.run(run())
    except (ExternalMatchClientError, SettlementError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
