# trading/order_codes.py
"""
FameEX order code tables.

The exchange speaks in small integers for sides, order types and order states.
Everything here maps those codes onto the enums in ``trading.enums``; every
lookup has an UNKNOWN default so foreign codes never raise.
"""
from typing import Any, Dict, Tuple

from trading.enums import LifecycleBucket, OrderStatus, OrderType, Side

SIDE_CODES: Dict[Side, int] = {
    Side.BUY: 1,
    Side.SELL: 2,
}

# order states as reported on each order record
STATE_NEW: Tuple[int, ...] = (1, 2)
STATE_PARTIALLY_FILLED = 3
STATE_FILLED = 4
STATE_CANCELLED: Tuple[int, ...] = (5, 6)

_STATUS_BY_CODE: Dict[int, OrderStatus] = {
    **{c: OrderStatus.NEW for c in STATE_NEW},
    STATE_PARTIALLY_FILLED: OrderStatus.PARTIALLY_FILLED,
    STATE_FILLED: OrderStatus.FILLED,
    **{c: OrderStatus.CANCELLED for c in STATE_CANCELLED},
}

_TYPE_BY_CODE: Dict[int, OrderType] = {
    1: OrderType.LIMIT,
    2: OrderType.MARKET,
    3: OrderType.TAKE_PROFIT_AND_STOP_LOSS,
    4: OrderType.TRACKING_ORDER,
    5: OrderType.MAKER_ONLY,
}

ALL_ORDER_TYPES: Tuple[int, ...] = tuple(_TYPE_BY_CODE)

# query partitions for one page, in result concatenation order
PAGE_PARTITIONS: Tuple[Tuple[LifecycleBucket, Side], ...] = (
    (LifecycleBucket.UNCOMPLETED, Side.BUY),
    (LifecycleBucket.UNCOMPLETED, Side.SELL),
    (LifecycleBucket.COMPLETED_OR_CANCELLED, Side.BUY),
    (LifecycleBucket.COMPLETED_OR_CANCELLED, Side.SELL),
)


def _lookup(table: Dict[int, Any], code: Any, default: Any) -> Any:
    if isinstance(code, bool):
        return default
    try:
        return table.get(code, default)
    except TypeError:  # unhashable
        return default


def map_status(code: Any) -> OrderStatus:
    """FameEX order state -> OrderStatus (UNKNOWN for anything unmapped)."""
    return _lookup(_STATUS_BY_CODE, code, OrderStatus.UNKNOWN)


def map_type(code: Any) -> OrderType:
    """FameEX order type -> OrderType (UNKNOWN for anything unmapped)."""
    return _lookup(_TYPE_BY_CODE, code, OrderType.UNKNOWN)


def map_side(code: Any) -> Side:
    return Side.BUY if code == SIDE_CODES[Side.BUY] else Side.SELL
