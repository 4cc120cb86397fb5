from __future__ import annotations
import asyncio
from typing import Dict, Optional, Any, Union

from trading.enums import RefreshPolicy
from trading.errors import MalformedPairError, MalformedResponseError
from trading.models import CurrencyMetadata, MarketMetadata
from trading.networks import format_network_name
from trading.pairs import normalize_pair
from trading.payloads import envelope_data, to_float, to_flag
from utils.logger import logger as default_logger

EXCHANGE_NAME = "FameEX"

CurrencyMap = Dict[str, CurrencyMetadata]
MarketMap = Dict[str, MarketMetadata]


def _precision(decimals: int) -> float:
    """Step size for a number of decimals: 3 -> 0.001."""
    return round(10.0 ** -decimals, max(decimals, 0))


class MetadataService:
    """
    Owns the currency and market catalogs.

    Each catalog is a snapshot dict that is only ever swapped as a whole, and
    at most one refresh per catalog runs at a time. A caller arriving while a
    refresh runs gets None (RefreshPolicy.SKIP) or awaits that refresh
    (RefreshPolicy.WAIT). Nothing raises out of the public getters: failures
    are logged and come back as None.
    """
    def __init__(self,
                 api,
                 *,
                 on_refresh_in_flight: RefreshPolicy = RefreshPolicy.SKIP,
                 logger=None) -> None:
        self._api = api
        self._policy = on_refresh_in_flight
        self.log = logger or default_logger

        self._currencies: Optional[CurrencyMap] = None
        self._markets: Optional[MarketMap] = None
        self._currencies_refresh: Optional[asyncio.Future] = None
        self._markets_refresh: Optional[asyncio.Future] = None

    # ---- snapshots ----------------------------------------------------------
    @property
    def currencies(self) -> Optional[CurrencyMap]:
        return self._currencies

    @property
    def markets(self) -> Optional[MarketMap]:
        return self._markets

    @property
    def in_flight_currencies(self) -> bool:
        return self._currencies_refresh is not None

    @property
    def in_flight_markets(self) -> bool:
        return self._markets_refresh is not None

    # ---- currencies ---------------------------------------------------------
    async def get_currencies(self,
                             coin: Optional[str] = None,
                             force_update: bool = False,
                             ) -> Union[CurrencyMap, CurrencyMetadata, None]:
        """
        Cached currency catalog.

        - cache hit: full snapshot, or the entry for `coin` when given
        - refresh: full fresh map (never narrowed to `coin`)
        """
        if self._currencies_refresh is not None:
            return await self._on_busy(self._currencies_refresh, "currencies")

        if self._currencies is not None and not force_update:
            if coin is None:
                return self._currencies
            return self._currencies.get(str(coin).upper())

        # flag is set before the first suspension point, so concurrent callers see it
        self._currencies_refresh = asyncio.ensure_future(self._refresh_currencies(force_update))
        return await asyncio.shield(self._currencies_refresh)

    async def _refresh_currencies(self, force_update: bool) -> Optional[CurrencyMap]:
        try:
            try:
                currencies_data, with_networks = await asyncio.gather(
                    self._api.currencies(),
                    self._api.currencies_with_network(),
                )
            except Exception as e:
                self.log.warning(f"API request get_currencies() of {EXCHANGE_NAME} failed. {e}")
                return None

            try:
                result = self._parse_currencies(currencies_data, with_networks)
            except Exception as e:
                self.log.warning(f"Error while processing get_currencies() request: {e}")
                return None

            if result:
                self._currencies = result
                self.log.info(
                    f"{'Updated' if force_update else 'Received'} info about {len(result)} currencies on {EXCHANGE_NAME} exchange."
                )
            return result
        finally:
            self._currencies_refresh = None

    @staticmethod
    def _parse_currencies(currencies_data: Any, with_networks: Any) -> CurrencyMap:
        currencies = envelope_data(currencies_data, dict, "currencies")
        network_list = envelope_data(with_networks, dict, "currencies_with_network").get("list")
        if not isinstance(network_list, list):
            raise MalformedResponseError("currencies_with_network has no list", actual=type(network_list).__name__)

        networks_by_currency: Dict[str, list] = {}
        for row in network_list:
            detail = row.get("currencyDetail") or {}
            networks_by_currency[str(row["currency"]).upper()] = [format_network_name(n) for n in detail]

        result: CurrencyMap = {}
        for currency in currencies.values():
            symbol = str(currency["name"]).upper()
            result[symbol] = CurrencyMetadata(
                symbol=symbol,
                name=symbol,
                withdraw_enabled=to_flag(currency.get("can_withdraw")),
                deposit_enabled=to_flag(currency.get("can_deposit")),
                min_withdraw=to_float(currency.get("min_withdraw"), "min_withdraw"),
                max_withdraw=to_float(currency.get("max_withdraw"), "max_withdraw"),
                networks=networks_by_currency.get(symbol),
                id=currency.get("unified_cryptoasset_id"),
            )
        return result

    # ---- markets ------------------------------------------------------------
    async def get_markets(self,
                          pair: Optional[str] = None,
                          force_update: bool = False,
                          ) -> Union[MarketMap, MarketMetadata, None]:
        """
        Cached market catalog; `pair` in any spelling (BTC/USDT, btc-usdt, BTC_USDT).
        Same hit/refresh asymmetry as get_currencies().
        """
        if self._markets_refresh is not None:
            return await self._on_busy(self._markets_refresh, "markets")

        if self._markets is not None and not force_update:
            if pair is None:
                return self._markets
            try:
                key = normalize_pair(pair).pair_readable
            except MalformedPairError as e:
                self.log.warning(f"get_markets(pair: {pair}) rejected: {e}")
                return None
            return self._markets.get(key)

        self._markets_refresh = asyncio.ensure_future(self._refresh_markets(pair, force_update))
        return await asyncio.shield(self._markets_refresh)

    async def _refresh_markets(self, pair: Optional[str], force_update: bool) -> Optional[MarketMap]:
        param_string = f"pair: {pair}"
        try:
            try:
                payload = await self._api.markets()
            except Exception as e:
                self.log.warning(f"API request get_markets({param_string}) of {EXCHANGE_NAME} failed. {e}")
                return None

            try:
                result = self._parse_markets(payload)
            except Exception as e:
                self.log.warning(f"Error while processing get_markets({param_string}) request: {e}")
                return None

            if result:
                self._markets = result
                self.log.info(
                    f"{'Updated' if force_update else 'Received'} info about {len(result)} markets on {EXCHANGE_NAME} exchange."
                )
            return result
        finally:
            self._markets_refresh = None

    @staticmethod
    def _parse_markets(payload: Any) -> MarketMap:
        result: MarketMap = {}
        for market in envelope_data(payload, list, "markets"):
            pair = normalize_pair(market["pair"])
            amount_dec = int(market["amountPrecision"])
            price_dec = int(market["pricePrecision"])
            result[pair.pair_readable] = MarketMetadata(
                pair_readable=pair.pair_readable,
                pair_plain=pair.pair_plain,
                coin1=pair.coin1,
                coin2=pair.coin2,
                coin1_decimals=amount_dec,
                coin2_decimals=price_dec,
                coin1_precision=_precision(amount_dec),
                coin2_precision=_precision(price_dec),
            )
        return result

    # ---- helpers ------------------------------------------------------------
    async def _on_busy(self, refresh: asyncio.Future, what: str):
        if self._policy is RefreshPolicy.WAIT:
            return await asyncio.shield(refresh)
        self.log.debug(f"{what} refresh already in flight, returning nothing")
        return None
