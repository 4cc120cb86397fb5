# trading/services/account_service.py
from typing import Optional, List

from trading.errors import MalformedResponseError
from trading.models import Balance
from trading.payloads import envelope_data, to_float
from utils.logger import logger as default_logger

SPOT_WALLET = "spot"


class AccountService:
    """
    Account queries. FameEX returns every wallet (spot, futures, ...) in one
    response; only the spot wallet is reported.
    """
    def __init__(self, api, *, logger=None) -> None:
        self._api = api
        self.log = logger or default_logger

    async def get_balances(self, nonzero: bool = True) -> Optional[List[Balance]]:
        """Spot balances; with nonzero=True only coins with free or frozen funds."""
        param_string = f"nonzero: {nonzero}"

        try:
            resp = await self._api.get_balances()
        except Exception as e:
            self.log.warning(f"API request get_balances({param_string}) failed. {e}")
            return None

        try:
            wallets = envelope_data(resp, list, "wallets")
            spot = next((w for w in wallets if w.get("walletType") == SPOT_WALLET), None)
            if spot is None:
                raise MalformedResponseError("No spot wallet in response")

            balances = [
                Balance(
                    code=str(it["currency"]).upper(),
                    free=to_float(it.get("available"), "available"),
                    freezed=to_float(it.get("hold"), "hold"),
                    total=to_float(it.get("total"), "total"),
                )
                for it in (spot.get("list") or [])
            ]
        except Exception as e:
            self.log.warning(f"Error while processing get_balances({param_string}) request results: {resp}. {e}")
            return None

        if nonzero:
            return [b for b in balances if b.free or b.freezed]
        return balances
