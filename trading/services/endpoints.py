# trading/services/endpoints.py
from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass
class Endpoints:
    # REST paths; the host comes from cfg["fameex"]["rest_base"] and is read by HttpClient
    public_assets: str = "/v2/public/assets"
    public_currencies: str = "/api/v2/public/currencies"
    public_markets: str = "/api/v2/public/symbols"
    account_wallets: str = "/api/v1/account/wallets"
    order_list: str = "/api/v1/order/list"
    order_deals: str = "/api/v1/order/deals"


def make_endpoints_from_cfg(cfg: Mapping[str, Any]) -> Endpoints:
    try:
        fx_cfg = cfg["fameex"]
    except KeyError as e:
        raise ValueError(f"Invalid cfg missing key: {e}") from e

    known = {f.name for f in fields(Endpoints)}
    overrides = {k: v for k, v in (fx_cfg.get("endpoints") or {}).items() if k in known}
    return Endpoints(**overrides)
