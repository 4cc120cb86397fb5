from dataclasses import dataclass
from typing import Any, Mapping, Optional
from trading.enums import RefreshPolicy


@dataclass
class TradingSettings:
    """Trading runtime configuration."""
    api_key: Optional[str] = None
    secret_key: Optional[str] = None
    passphrase: Optional[str] = None

    public_only: bool = False           # never sign; private endpoints are refused
    load_markets: bool = True           # warm currency/market caches on start

    order_page_size: int = 500          # FameEX max page size for order lists
    max_order_pages: int = 50           # hard stop for get_open_orders pagination
    max_concurrency: int = 8            # in-flight requests per order page

    on_refresh_in_flight: RefreshPolicy = RefreshPolicy.SKIP


def make_settings_from_cfg(cfg: Mapping[str, Any]) -> TradingSettings:
    creds = cfg.get("credentials") or {}
    trading_cfg = cfg.get("trading") or {}
    reconcile_cfg = cfg.get("reconcile") or {}
    cache_cfg = cfg.get("cache") or {}

    try:
        policy = RefreshPolicy(str(cache_cfg.get("on_refresh_in_flight", "skip")).lower())
    except ValueError as e:
        raise ValueError(f"Invalid cache.on_refresh_in_flight: {e}") from e

    return TradingSettings(
        api_key=creds.get("api_key") or None,
        secret_key=creds.get("secret_key") or None,
        passphrase=creds.get("passphrase") or None,
        public_only=bool(trading_cfg.get("public_only", False)),
        load_markets=bool(trading_cfg.get("load_markets", True)),
        order_page_size=int(reconcile_cfg.get("order_page_size", 500)),
        max_order_pages=int(reconcile_cfg.get("max_order_pages", 50)),
        max_concurrency=int(reconcile_cfg.get("max_concurrency", 8)),
        on_refresh_in_flight=policy,
    )
