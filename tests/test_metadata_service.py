import asyncio
from collections import Counter

import pytest

from trading.enums import RefreshPolicy
from trading.errors import TransportError
from trading.models import CurrencyMetadata, MarketMetadata
from trading.services.metadata_service import MetadataService


CURRENCIES = {
    "data": {
        "1": {"name": "btc", "min_withdraw": "0.001", "max_withdraw": "100",
              "can_withdraw": True, "can_deposit": True, "unified_cryptoasset_id": 1},
        "825": {"name": "usdt", "min_withdraw": "10", "max_withdraw": "1000000",
                "can_withdraw": True, "can_deposit": False, "unified_cryptoasset_id": 825},
    }
}

NETWORKS = {
    "data": {
        "list": [
            {"currency": "BTC", "currencyDetail": {"BTC": {}, "bsc": {}}},
            {"currency": "usdt", "currencyDetail": {"TRX": {}, "ETH": {}, "SOMECHAIN": {}}},
        ]
    }
}

MARKETS = {
    "data": [
        {"pair": "BTC_USDT", "amountPrecision": 6, "pricePrecision": 2},
        {"pair": "eth_usdt", "amountPrecision": 4, "pricePrecision": 0},
    ]
}


class FakeApi:
    def __init__(self, currencies=CURRENCIES, networks=NETWORKS, markets=MARKETS, gate=None):
        self.calls = Counter()
        self.currencies_payload = currencies
        self.networks_payload = networks
        self.markets_payload = markets
        self.gate = gate
        self.fail = False

    async def _respond(self, name, payload):
        self.calls[name] += 1
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if self.fail:
            raise TransportError("HTTP 599: Network error")
        return payload

    async def currencies(self):
        return await self._respond("currencies", self.currencies_payload)

    async def currencies_with_network(self):
        return await self._respond("currencies_with_network", self.networks_payload)

    async def markets(self):
        return await self._respond("markets", self.markets_payload)


@pytest.mark.asyncio
async def test_merge_currency_and_network_payloads(rec_log):
    svc = MetadataService(FakeApi(), logger=rec_log)
    result = await svc.get_currencies()

    assert set(result) == {"BTC", "USDT"}
    btc = result["BTC"]
    assert btc == CurrencyMetadata(
        symbol="BTC",
        name="BTC",
        withdraw_enabled=True,
        deposit_enabled=True,
        min_withdraw=0.001,
        max_withdraw=100.0,
        networks=["BTC", "BEP20"],
        id=1,
    )
    assert btc.precision is None and btc.withdrawal_fee is None and btc.confirmations is None
    # unmapped network ids are kept as-is
    assert result["USDT"].networks == ["TRC20", "ERC20", "SOMECHAIN"]
    assert result["USDT"].deposit_enabled is False
    assert svc.currencies is result
    assert any("Received info about 2 currencies" in m for m in rec_log.messages("INFO"))


@pytest.mark.asyncio
async def test_currency_without_network_entry(rec_log):
    api = FakeApi(networks={"data": {"list": []}})
    svc = MetadataService(api, logger=rec_log)
    result = await svc.get_currencies()
    assert result["BTC"].networks is None


@pytest.mark.asyncio
async def test_concurrent_calls_fetch_once(rec_log):
    gate = asyncio.Event()
    api = FakeApi(gate=gate)
    svc = MetadataService(api, logger=rec_log)

    tasks = [asyncio.create_task(svc.get_currencies()) for _ in range(5)]
    await asyncio.sleep(0)
    assert svc.in_flight_currencies
    gate.set()
    results = await asyncio.gather(*tasks)

    assert api.calls == Counter({"currencies": 1, "currencies_with_network": 1})
    assert set(results[0]) == {"BTC", "USDT"}


@pytest.mark.asyncio
async def test_wait_policy_survives_cancelled_owner(rec_log):
    gate = asyncio.Event()
    api = FakeApi(gate=gate)
    svc = MetadataService(api, on_refresh_in_flight=RefreshPolicy.WAIT, logger=rec_log)

    owner = asyncio.create_task(svc.get_currencies())
    waiter = asyncio.create_task(svc.get_currencies())
    await asyncio.sleep(0)
    owner.cancel()
    gate.set()

    assert set(await waiter) == {"BTC", "USDT"}
    with pytest.raises(asyncio.CancelledError):
        await owner
    assert set(svc.currencies) == {"BTC", "USDT"}


@pytest.mark.asyncio
async def test_wait_policy_survives_cancelled_markets_owner(rec_log):
    gate = asyncio.Event()
    api = FakeApi(gate=gate)
    svc = MetadataService(api, on_refresh_in_flight=RefreshPolicy.WAIT, logger=rec_log)

    owner = asyncio.create_task(svc.get_markets())
    waiter = asyncio.create_task(svc.get_markets())
    await asyncio.sleep(0)
    owner.cancel()
    gate.set()

    assert set(await waiter) == {"BTC/USDT", "ETH/USDT"}
    with pytest.raises(asyncio.CancelledError):
        await owner
    assert not svc.in_flight_markets
    # arriving during the refresh gives nothing, not a deferred value
    assert results[1:] == [None] * 4
    assert not svc.in_flight_currencies


@pytest.mark.asyncio
async def test_cache_hit_narrows_to_coin(rec_log):
    api = FakeApi()
    svc = MetadataService(api, logger=rec_log)
    await svc.get_currencies()

    btc = await svc.get_currencies("btc")
    assert isinstance(btc, CurrencyMetadata) and btc.symbol == "BTC"
    assert await svc.get_currencies("DOGE") is None
    assert await svc.get_currencies() is svc.currencies
    assert api.calls["currencies"] == 1


@pytest.mark.asyncio
async def test_force_update_refetches_and_returns_full_map(rec_log):
    api = FakeApi()
    svc = MetadataService(api, logger=rec_log)
    first = await svc.get_currencies()

    result = await svc.get_currencies("BTC", force_update=True)
    assert api.calls["currencies"] == 2
    assert api.calls["currencies_with_network"] == 2
    # a refresh is never narrowed
    assert set(result) == {"BTC", "USDT"}
    assert result is not first
    assert svc.currencies is result
    assert any("Updated info about 2 currencies" in m for m in rec_log.messages("INFO"))


@pytest.mark.asyncio
async def test_transport_failure_returns_none_and_clears_flag(rec_log):
    api = FakeApi()
    api.fail = True
    svc = MetadataService(api, logger=rec_log)

    assert await svc.get_currencies() is None
    assert not svc.in_flight_currencies
    assert svc.currencies is None
    assert any("get_currencies()" in m and "Network error" in m for m in rec_log.messages("WARNING"))

    api.fail = False
    assert set(await svc.get_currencies()) == {"BTC", "USDT"}


@pytest.mark.asyncio
async def test_malformed_payload_returns_none(rec_log):
    api = FakeApi(currencies={"data": [1, 2, 3]})
    svc = MetadataService(api, logger=rec_log)
    assert await svc.get_currencies() is None
    assert not svc.in_flight_currencies
    assert rec_log.messages("WARNING")


@pytest.mark.asyncio
async def test_bad_number_fails_whole_refresh(rec_log):
    bad = {"data": {"1": {"name": "btc", "min_withdraw": "n/a", "max_withdraw": "1",
                          "can_withdraw": True, "can_deposit": True}}}
    svc = MetadataService(FakeApi(currencies=bad), logger=rec_log)
    assert await svc.get_currencies() is None


@pytest.mark.asyncio
async def test_empty_result_keeps_previous_snapshot(rec_log):
    api = FakeApi()
    svc = MetadataService(api, logger=rec_log)
    snapshot = await svc.get_currencies()

    api.currencies_payload = {"data": {}}
    result = await svc.get_currencies(force_update=True)
    assert result == {}
    assert svc.currencies is snapshot


@pytest.mark.asyncio
async def test_wait_policy_shares_inflight_refresh(rec_log):
    gate = asyncio.Event()
    api = FakeApi(gate=gate)
    svc = MetadataService(api, on_refresh_in_flight=RefreshPolicy.WAIT, logger=rec_log)

    tasks = [asyncio.create_task(svc.get_currencies()) for _ in range(3)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*tasks)

    assert api.calls["currencies"] == 1
    assert all(r is results[0] for r in results)
    assert set(results[0]) == {"BTC", "USDT"}


@pytest.mark.asyncio
async def test_markets_refresh_and_narrowing(rec_log):
    api = FakeApi()
    svc = MetadataService(api, logger=rec_log)

    result = await svc.get_markets("btc-usdt")
    # refresh path returns the whole catalog
    assert set(result) == {"BTC/USDT", "ETH/USDT"}
    assert result["BTC/USDT"] == MarketMetadata(
        pair_readable="BTC/USDT",
        pair_plain="BTC_USDT",
        coin1="BTC",
        coin2="USDT",
        coin1_decimals=6,
        coin2_decimals=2,
        coin1_precision=0.000001,
        coin2_precision=0.01,
    )
    assert result["ETH/USDT"].coin2_precision == 1.0

    for spelling in ("BTC/USDT", "btc_usdt", "Btc-Usdt"):
        market = await svc.get_markets(spelling)
        assert market.pair_readable == "BTC/USDT"
    assert await svc.get_markets("XRP/USDT") is None
    assert await svc.get_markets() is svc.markets
    assert api.calls["markets"] == 1


@pytest.mark.asyncio
async def test_markets_malformed_pair_argument(rec_log):
    svc = MetadataService(FakeApi(), logger=rec_log)
    await svc.get_markets()
    assert await svc.get_markets("BTCUSDT") is None
    assert any("BTCUSDT" in m for m in rec_log.messages("WARNING"))


@pytest.mark.asyncio
async def test_markets_single_flight_and_force(rec_log):
    gate = asyncio.Event()
    api = FakeApi(gate=gate)
    svc = MetadataService(api, logger=rec_log)

    first = asyncio.create_task(svc.get_markets())
    second = asyncio.create_task(svc.get_markets())
    await asyncio.sleep(0)
    assert svc.in_flight_markets
    gate.set()
    assert set(await first) == {"BTC/USDT", "ETH/USDT"}
    assert await second is None

    await svc.get_markets(force_update=True)
    assert api.calls["markets"] == 2


@pytest.mark.asyncio
async def test_markets_failure(rec_log):
    api = FakeApi(markets={"data": [{"pair": "BTCUSDT", "amountPrecision": 1, "pricePrecision": 1}]})
    svc = MetadataService(api, logger=rec_log)
    assert await svc.get_markets() is None
    assert svc.markets is None
    assert not svc.in_flight_markets
