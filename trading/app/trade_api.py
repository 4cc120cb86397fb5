# trading/app/trade_api.py
import asyncio
from typing import Any, Dict, Mapping, Optional, Union

from infra import HttpContainer
from trading.config import TradingSettings, make_settings_from_cfg
from trading.errors import MalformedPairError
from trading.models import CanonicalPair
from trading.pairs import normalize_pair
from trading.services.account_service import AccountService
from trading.services.endpoints import make_endpoints_from_cfg
from trading.services.exchange_api import ExchangeApi
from trading.services.metadata_service import MetadataService
from trading.services.reconcile_service import ReconcileService
from utils.logger import logger as default_logger


class TradeAPI:
    """
    Application-facing FameEX API.
    Catalog lookups, balances and order history in exchange-neutral terms;
    every call returns None instead of raising when FameEX is unavailable.
    """

    def __init__(self,
                 metadata_svc: MetadataService,
                 account_svc: AccountService,
                 reconcile_svc: ReconcileService,
                 logger=None,
                 *,
                 container: Optional[HttpContainer] = None,
                 ):
        self.metadata_svc = metadata_svc
        self.account_svc = account_svc
        self.reconcile_svc = reconcile_svc
        self.log = logger or default_logger
        self._container = container

    async def __aenter__(self) -> "TradeAPI":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._container is not None:
            await self._container.stop()

    async def warm_up(self) -> None:
        """Fill both catalogs."""
        await asyncio.gather(
            self.metadata_svc.get_currencies(),
            self.metadata_svc.get_markets(),
        )

    # ---- catalogs ----
    @property
    def markets(self):
        return self.metadata_svc.markets

    @property
    def currencies(self):
        return self.metadata_svc.currencies

    async def get_currencies(self, coin: Optional[str] = None, force_update: bool = False):
        return await self.metadata_svc.get_currencies(coin, force_update)

    async def get_markets(self, pair: Optional[str] = None, force_update: bool = False):
        return await self.metadata_svc.get_markets(pair, force_update)

    async def market_info(self, pair: str):
        """Market for a pair in BTC/USDT, BTC-USDT or BTC_USDT format."""
        return await self.metadata_svc.get_markets(pair)

    async def currency_info(self, coin: str):
        return await self.metadata_svc.get_currencies(coin)

    # ---- account ----
    async def get_balances(self, nonzero: bool = True):
        return await self.account_svc.get_balances(nonzero)

    # ---- orders ----
    async def get_open_orders_page(self, pair: Union[CanonicalPair, str], page_num: int = 1):
        if not isinstance(pair, CanonicalPair):
            try:
                pair = normalize_pair(pair)
            except MalformedPairError as e:
                self.log.warning(f"get_open_orders_page(pair: {pair}) rejected: {e}")
                return None
        return await self.reconcile_svc.get_open_orders_page(pair, page_num)

    async def get_open_orders(self, pair: str):
        return await self.reconcile_svc.get_open_orders(pair)

    @staticmethod
    def features() -> Dict[str, bool]:
        """Capabilities of the FameEX connector."""
        return {
            "getMarkets": True,
            "getCurrencies": True,
            "placeMarketOrder": True,
            "allowAmountForMarketBuy": False,
            "amountForMarketOrderNecessary": False,
            "getTradingFees": False,
            "getAccountTradeVolume": False,
            "selfTradeProhibited": False,
            "getFundHistory": True,
            "getFundHistoryImplemented": False,
            "supportCoinNetworks": True,
        }


def build_trade_api(api: ExchangeApi, settings: TradingSettings, logger=None,
                    *, container: Optional[HttpContainer] = None) -> TradeAPI:
    return TradeAPI(
        MetadataService(api, on_refresh_in_flight=settings.on_refresh_in_flight, logger=logger),
        AccountService(api, logger=logger),
        ReconcileService(
            api,
            order_page_size=settings.order_page_size,
            max_order_pages=settings.max_order_pages,
            max_concurrency=settings.max_concurrency,
            logger=logger,
        ),
        logger,
        container=container,
    )


async def create_trade_api(cfg: Mapping[str, Any],
                           logger=None,
                           *,
                           api_key: Optional[str] = None,
                           secret_key: Optional[str] = None,
                           passphrase: Optional[str] = None,
                           ) -> TradeAPI:
    """Composition root: cfg -> HttpClient -> ExchangeApi -> services -> TradeAPI."""
    settings = make_settings_from_cfg(cfg)
    endpoints = make_endpoints_from_cfg(cfg)
    container = await HttpContainer.start(
        cfg, logger,
        api_key=api_key or settings.api_key,
        secret_key=secret_key or settings.secret_key,
        passphrase=passphrase or settings.passphrase,
        public_only=settings.public_only,
    )
    trade_api = build_trade_api(ExchangeApi(container.http, endpoints), settings, logger, container=container)
    if settings.load_markets:
        await trade_api.warm_up()
    return trade_api
