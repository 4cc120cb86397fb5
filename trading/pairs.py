import re

from trading.errors import MalformedPairError
from trading.models import CanonicalPair

_PAIR_SEP = re.compile(r"[-_/]")


def normalize_pair(pair: str) -> CanonicalPair:
    """
    Parse a pair in any of the accepted spellings into its canonical views.

    - btc-usdt / BTC_USDT / Btc/Usdt -> pair_readable="BTC/USDT", pair_plain="BTC_USDT"
    """
    if not isinstance(pair, str):
        raise MalformedPairError(f"Pair must be a string, got {pair!r}")

    parts = _PAIR_SEP.split(pair.strip().upper())
    if len(parts) != 2 or not all(parts):
        raise MalformedPairError(f"Cannot split pair {pair!r} into two coins")

    coin1, coin2 = parts
    return CanonicalPair(
        pair=f"{coin1}/{coin2}",
        pair_readable=f"{coin1}/{coin2}",
        pair_plain=f"{coin1}_{coin2}",
        coin1=coin1,
        coin2=coin2,
    )
