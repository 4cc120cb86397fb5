from enum import Enum


class RefreshPolicy(Enum):
    # what a caller gets while a catalog refresh is already running
    SKIP = "skip"
    WAIT = "wait"


class Side(Enum):
    BUY = "buy"
    SELL = "sell"


class OrderType(Enum):
    LIMIT = "limit"
    MARKET = "market"
    TAKE_PROFIT_AND_STOP_LOSS = "take_profit_and_stop_loss"
    TRACKING_ORDER = "tracking_order"
    MAKER_ONLY = "maker_only"
    UNKNOWN = "unknown"


class OrderStatus(Enum):
    NEW = "new"
    PARTIALLY_FILLED = "part_filled"
    FILLED = "filled"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class LifecycleBucket(Enum):
    """Coarse open/closed filter accepted by the order list endpoint."""
    UNCOMPLETED = 7
    COMPLETED_OR_CANCELLED = 9
