#
import asyncio

from trading.app.trade_api import create_trade_api
from utils import logger, load_cfg


async def show_catalogs(pair: str):
    cfg = load_cfg()
    cfg["trading"]["public_only"] = True

    async with await create_trade_api(cfg, logger) as api:
        logger.info(f"features: {api.features()}")
        logger.info(f"{len(api.currencies or {})} currencies, {len(api.markets or {})} markets cached")
        logger.info(f"market {pair}: {await api.market_info(pair)}")
        coin = pair.replace("-", "/").replace("_", "/").split("/")[0]
        logger.info(f"currency {coin}: {await api.currency_info(coin)}")


async def show_account(pair: str):
    cfg = load_cfg()

    async with await create_trade_api(cfg, logger) as api:
        balances = await api.get_balances()
        logger.info(f"balances: {balances}")

        orders = await api.get_open_orders(pair)
        if orders is None:
            logger.warning(f"orders for {pair} unavailable")
            return
        logger.info(f"{len(orders)} orders for {pair}")
        for o in orders[:20]:
            logger.info(f"{o.order_id} {o.side.value} {o.type.value} {o.status.value} amount={o.amount} price={o.price}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("--func", type=str, default="catalogs")
    parser.add_argument("--pair", type=str, default="BTC/USDT")

    args = parser.parse_args()
    if args.func == "catalogs":
        asyncio.run(show_catalogs(args.pair))
    elif args.func == "account":
        asyncio.run(show_account(args.pair))
    else:
        raise NotImplementedError
