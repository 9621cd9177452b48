"""
Check the reconciled status of a maker's or taker's limit orders.

Usage:
    python -m limit_orders.scripts.check_order_status --maker 0x...
    python -m limit_orders.scripts.check_order_status --taker 0x... --type P2P
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from limit_orders import construct_limit_order_handlers, get_settings
from limit_orders.enums import ORDER_TYPE_LIMIT, ORDER_TYPE_P2P

load_dotenv()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    role = parser.add_mutually_exclusive_group(required=True)
    role.add_argument("--maker", help="maker address")
    role.add_argument("--taker", help="taker address")
    parser.add_argument("--type", default=ORDER_TYPE_LIMIT, choices=[ORDER_TYPE_LIMIT, ORDER_TYPE_P2P])
    return parser.parse_args(argv)


async def run(args) -> int:
    settings = get_settings()
    handlers = construct_limit_order_handlers(settings)

    user_params = {"type": args.type}
    if args.maker:
        user_params["maker"] = args.maker
    else:
        user_params["taker"] = args.taker

    print("=" * 60)
    print(f"LIMIT ORDER STATUS CHECK (chain {settings.chain_id})")
    print("=" * 60)

    result = await handlers.get_limit_orders(user_params)

    if result.kind == "unknown":
        print(f"\nWARNING: on-chain status unavailable: {result.reason}")

    print(f"\n{len(result.orders)} order(s)\n")
    for order in result.orders:
        print(f"  {order.order_hash}")
        print(f"    status:        {order.status}")
        print(f"    taker:         {'anyone' if order.is_open_to_any_taker else order.taker}")
        print(f"    makerAmount:   {order.maker_amount}")
        filled = getattr(order, "amount_filled", None)
        if filled is not None:
            print(f"    amountFilled:  {filled}")
        for tx_hash in getattr(order, "transaction_hashes", None) or ():
            print(f"    tx:            {tx_hash}")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
