from dataclasses import dataclass
from typing import Optional, List, Union
from trading.enums import Side, OrderType, OrderStatus


@dataclass(frozen=True)
class CanonicalPair:
    pair: str               # "BTC/USDT"
    pair_readable: str      # "BTC/USDT"
    pair_plain: str         # "BTC_USDT"
    coin1: str              # base
    coin2: str              # quote


@dataclass
class CurrencyMetadata:
    symbol: str                     # uppercase ticker, also the cache key
    name: str
    withdraw_enabled: bool
    deposit_enabled: bool
    min_withdraw: float
    max_withdraw: float
    networks: Optional[List[str]]   # canonical network codes; None if the exchange lists none
    id: Optional[int] = None        # unified_cryptoasset_id

    # not provided by FameEX
    status: Optional[str] = None
    comment: Optional[str] = None
    confirmations: Optional[int] = None
    withdrawal_fee: Optional[float] = None
    logo_url: Optional[str] = None
    exchange_address: Optional[str] = None
    decimals: Optional[int] = None
    precision: Optional[float] = None
    default_network: Optional[str] = None


@dataclass
class MarketMetadata:
    pair_readable: str
    pair_plain: str
    coin1: str
    coin2: str
    coin1_decimals: int         # amountPrecision
    coin2_decimals: int         # pricePrecision
    coin1_precision: float      # amount step, 10^-decimals
    coin2_precision: float      # price step

    # not provided by FameEX
    coin1_min_amount: Optional[float] = None
    coin1_max_amount: Optional[float] = None
    coin2_min_price: Optional[float] = None
    coin2_max_price: Optional[float] = None
    min_trade: Optional[float] = None
    status: Optional[str] = None


@dataclass
class Balance:
    code: str                 # coin ticker
    free: float               # available
    freezed: float            # hold
    total: float


@dataclass
class Order:
    order_id: str
    symbol: str                 # pair_readable
    symbol_plain: str           # pair_plain
    price: Optional[float]      # from the order's transaction details
    side: Side
    type: OrderType
    timestamp: Union[int, str, None]   # createTime, kept raw when not an integer
    amount: float
    amount_executed: float
    amount_left: float          # amount_executed - amount, as the exchange's fields imply
    status: OrderStatus
