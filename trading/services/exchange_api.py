# trading/services/exchange_api.py
from typing import Any, Dict, Optional, Sequence

from infra import HttpPort


class ExchangeApi:
    """
    Thin FameEX endpoint wrapper. Every call returns the raw vendor envelope
    ({"data": ...}); shaping the payload is left to the services.
    """
    def __init__(self, http_client: HttpPort, endpoints) -> None:
        self._http = http_client
        self._ep = endpoints

    # ---- public -------------------------------------------------------------
    async def currencies(self) -> Dict[str, Any]:
        """GET public assets: {data: {coinId: {name, min_withdraw, ...}}}"""
        return await self._http.get_public(self._ep.public_assets)

    async def currencies_with_network(self) -> Dict[str, Any]:
        """GET currencies with chains: {data: {list: [{currency, currencyDetail}]}}"""
        return await self._http.get_public(self._ep.public_currencies)

    async def markets(self) -> Dict[str, Any]:
        """GET symbols: {data: [{pair, amountPrecision, pricePrecision}]}"""
        return await self._http.get_public(self._ep.public_markets)

    # ---- private ------------------------------------------------------------
    async def get_balances(self) -> Dict[str, Any]:
        """GET wallets: {data: [{walletType, list: [{currency, available, hold, total}]}]}"""
        return await self._http.get_private(self._ep.account_wallets)

    async def get_orders(self,
                         coin1: str,
                         coin2: str,
                         side: int,
                         order_types: Sequence[int],
                         state: int,
                         page_num: int,
                         page_size: int,
                         ) -> Dict[str, Any]:
        """POST order list: {data: {orders: [{orderId, side, orderType, state, ...}]}}"""
        body = {
            "base": coin1,
            "quote": coin2,
            "side": side,
            "orderTypes": list(order_types),
            "state": state,
            "pageNum": page_num,
            "pageSize": page_size,
        }
        return await self._http.post_private(self._ep.order_list, json_body=body)

    async def get_transaction_details(self,
                                      coin1: str,
                                      coin2: str,
                                      page_num: int,
                                      page_size: int,
                                      order_id: Optional[str] = None,
                                      ) -> Dict[str, Any]:
        """POST order deals: {data: {total, trades: [{price, ...}]}}"""
        body: Dict[str, Any] = {
            "base": coin1,
            "quote": coin2,
            "pageNum": page_num,
            "pageSize": page_size,
        }
        if order_id is not None:
            body["orderId"] = order_id
        return await self._http.post_private(self._ep.order_deals, json_body=body)
