# trading/services/reconcile_service.py
import asyncio
from typing import Any, Dict, List, Optional

from trading.errors import MalformedPairError, MalformedResponseError
from trading.models import CanonicalPair, Order
from trading.order_codes import ALL_ORDER_TYPES, PAGE_PARTITIONS, SIDE_CODES, map_side, map_status, map_type
from trading.pairs import normalize_pair
from trading.payloads import envelope_data, to_float, to_timestamp
from utils.logger import logger as default_logger


class ReconcileService:
    """
    Rebuilds a pair's order list from FameEX's partitioned order queries.

    FameEX only lists orders per side and per lifecycle bucket, and order
    records carry no execution price. One page therefore costs four list
    queries plus one transaction-details lookup per order; all of them share
    a semaphore so a full page does not open hundreds of requests at once.
    """

    def __init__(self,
                 api,
                 *,
                 order_page_size: int = 500,
                 max_order_pages: int = 50,
                 max_concurrency: int = 8,
                 logger=None) -> None:
        if max_order_pages < 1 or max_concurrency < 1:
            raise ValueError("max_order_pages and max_concurrency must be >= 1")
        self._api = api
        self._page_size = order_page_size
        self._max_pages = max_order_pages
        self._sem = asyncio.Semaphore(max_concurrency)
        self.log = logger or default_logger

    async def _limited(self, fn, *args):
        async with self._sem:
            return await fn(*args)

    @staticmethod
    async def _gather_or_cancel(coros):
        """gather() that cancels the remaining calls once one of them fails."""
        tasks = []
        try:
            for c in coros:
                tasks.append(asyncio.ensure_future(c))
            return await asyncio.gather(*tasks)
        except BaseException:
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def get_open_orders_page(self, pair: CanonicalPair, page_num: int = 1) -> Optional[List[Order]]:
        """
        One page of orders: uncompleted buy, uncompleted sell, completed buy,
        completed sell, in that order. Any failed request fails the page (None).
        """
        param_string = f"pair: {pair.pair_readable}, page_num: {page_num}"

        try:
            order_pages = await self._gather_or_cancel(
                self._limited(
                    self._api.get_orders,
                    pair.coin1,
                    pair.coin2,
                    SIDE_CODES[side],
                    ALL_ORDER_TYPES,
                    bucket.value,
                    page_num,
                    self._page_size,
                )
                for bucket, side in PAGE_PARTITIONS
            )
        except Exception as e:
            self.log.warning(f"API request get_open_orders_page({param_string}) failed. {e}")
            return None

        try:
            orders = [o for page in order_pages for o in self._orders_of(page)]
            details = await self._gather_or_cancel(
                self._limited(self._api.get_transaction_details, pair.coin1, pair.coin2, 1, 1, o["orderId"])
                for o in orders
            )
            return [self._to_order(pair, o, d) for o, d in zip(orders, details)]
        except Exception as e:
            self.log.warning(f"Error while processing get_open_orders_page({param_string}) request results: {e}")
            return None

    async def get_open_orders(self, pair: str) -> Optional[List[Order]]:
        """
        All orders of a pair, page by page, until the count reported by the
        transaction-details endpoint is reached.
        """
        param_string = f"pair: {pair}"

        try:
            coin_pair = normalize_pair(pair)
        except MalformedPairError as e:
            self.log.warning(f"get_open_orders({param_string}) rejected: {e}")
            return None

        try:
            resp = await self._api.get_transaction_details(coin_pair.coin1, coin_pair.coin2, 1, 1)
            limit = int(envelope_data(resp, dict, "transaction details")["total"])
        except Exception as e:
            self.log.warning(f"API request get_open_orders({param_string}) failed to read order total. {e}")
            return None

        all_orders: List[Order] = []
        page_num = 1
        while True:
            page = await self.get_open_orders_page(coin_pair, page_num)
            if page is None:
                return None
            all_orders.extend(page)

            if len(all_orders) >= limit:
                break
            if not page:
                self.log.warning(
                    f"get_open_orders({param_string}): page {page_num} is empty, "
                    f"stopping at {len(all_orders)} of {limit} orders"
                )
                break
            if page_num >= self._max_pages:
                self.log.warning(
                    f"get_open_orders({param_string}): reached {self._max_pages} pages, "
                    f"stopping at {len(all_orders)} of {limit} orders"
                )
                break
            page_num += 1

        return all_orders

    # ---- mapping ------------------------------------------------------------
    @staticmethod
    def _orders_of(page: Any) -> List[Dict[str, Any]]:
        orders = envelope_data(page, dict, "orders").get("orders")
        if orders is None:
            return []
        if not isinstance(orders, list):
            raise MalformedResponseError("orders is not a list", actual=type(orders).__name__)
        return orders

    @staticmethod
    def _to_order(pair: CanonicalPair, order: Dict[str, Any], detail: Any) -> Order:
        trades = envelope_data(detail, dict, "transaction details").get("trades") or []
        price = to_float(trades[0].get("price"), "price") if trades else None

        amount = to_float(order.get("money"), "money")
        executed = to_float(order.get("filledAmount"), "filledAmount")
        return Order(
            order_id=str(order["orderId"]),
            symbol=pair.pair_readable,
            symbol_plain=pair.pair_plain,
            price=price,
            side=map_side(order.get("side")),
            type=map_type(order.get("orderType")),
            timestamp=to_timestamp(order.get("createTime")),
            amount=amount,
            amount_executed=executed,
            # FameEX field semantics; negative while the order is still open
            amount_left=executed - amount,
            status=map_status(order.get("state")),
        )
