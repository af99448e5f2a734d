from dataclasses import replace

import httpx
import pytest

from defi_portfolio.errors import UpstreamFailure
from defi_portfolio.providers import alchemy as alchemy_module
from defi_portfolio.providers import coingecko as coingecko_module
from defi_portfolio.providers.alchemy import AlchemyProvider
from defi_portfolio.providers.coingecko import CoingeckoProvider
from defi_portfolio.services.balances import default_price_factory
from defi_portfolio.services.networks import SUPPORTED_NETWORKS


class _DummyResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("GET", "https://example.invalid")
            raise httpx.HTTPStatusError(
                "error",
                request=request,
                response=httpx.Response(self.status_code, request=request),
            )
        return None

    def json(self):
        return self._payload


class _DummyClient:
    requests = []
    responses = []

    def __init__(self, *_, **__):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def post(self, url, json, headers=None, timeout=None):
        _DummyClient.requests.append({"url": url, "json": json, "timeout": timeout})
        return _DummyClient.responses.pop(0)

    async def get(self, url, params=None, headers=None, timeout=None):
        _DummyClient.requests.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        return _DummyClient.responses.pop(0)


@pytest.fixture
def dummy_client(monkeypatch):
    _DummyClient.requests = []
    _DummyClient.responses = []
    monkeypatch.setattr(alchemy_module.httpx, "AsyncClient", _DummyClient)
    monkeypatch.setattr(coingecko_module.httpx, "AsyncClient", _DummyClient)
    return _DummyClient


def _polygon():
    return AlchemyProvider(replace(SUPPORTED_NETWORKS["polygon"], api_key="abc"))


@pytest.mark.asyncio
async def test_token_balances_keep_zero_entries(dummy_client):
    dummy_client.responses.append(_DummyResponse({
        "jsonrpc": "2.0",
        "id": 1,
        "result": {
            "address": "0xwallet",
            "tokenBalances": [
                {"contractAddress": "0xaaa", "tokenBalance": "0x0"},
                {"contractAddress": "0xbbb", "tokenBalance": "0x3e8"},
                {"contractAddress": "0xccc", "tokenBalance": None},
            ],
        },
    }))

    balances = await _polygon().get_token_balances("0xwallet")

    request = dummy_client.requests[0]
    assert request["url"] == "https://polygon-mainnet.g.alchemy.com/v2/abc"
    assert request["json"]["method"] == "alchemy_getTokenBalances"
    assert request["json"]["params"] == ["0xwallet"]
    assert [(b.contract_address, b.token_balance_hex) for b in balances] == [
        ("0xaaa", "0x0"),
        ("0xbbb", "0x3e8"),
        ("0xccc", "0x"),
    ]


@pytest.mark.asyncio
async def test_token_balances_rpc_error_raises(dummy_client):
    dummy_client.responses.append(_DummyResponse({"error": {"code": -32602, "message": "invalid address"}}))

    with pytest.raises(UpstreamFailure) as exc_info:
        await _polygon().get_token_balances("0xwallet")

    assert exc_info.value.provider == "alchemy"


@pytest.mark.asyncio
async def test_token_balances_http_error_raises(dummy_client):
    dummy_client.responses.append(_DummyResponse({}, status_code=503))

    with pytest.raises(UpstreamFailure):
        await _polygon().get_token_balances("0xwallet")


@pytest.mark.asyncio
async def test_http_error_message_masks_api_key(dummy_client):
    class _KeyEchoingResponse(_DummyResponse):
        def raise_for_status(self):
            request = httpx.Request("POST", "https://polygon-mainnet.g.alchemy.com/v2/abc")
            raise httpx.HTTPStatusError(
                f"Server error '503' for url '{request.url}'",
                request=request,
                response=httpx.Response(503, request=request),
            )

    dummy_client.responses.append(_KeyEchoingResponse({}))

    with pytest.raises(UpstreamFailure) as exc_info:
        await _polygon().get_token_balances("0xwallet")

    assert "/v2/abc" not in exc_info.value.message
    assert "/v2/***" in exc_info.value.message


@pytest.mark.asyncio
async def test_token_balances_null_contract_address_raises(dummy_client):
    dummy_client.responses.append(_DummyResponse({
        "result": {"tokenBalances": [{"contractAddress": None, "tokenBalance": "0x1"}]},
    }))

    with pytest.raises(UpstreamFailure) as exc_info:
        await _polygon().get_token_balances("0xwallet")

    assert exc_info.value.provider == "alchemy"


@pytest.mark.asyncio
async def test_token_metadata_normalized(dummy_client):
    dummy_client.responses.append(_DummyResponse({
        "result": {"decimals": 6, "name": " USD Coin ", "symbol": "USDC", "logo": None},
    }))

    metadata = await _polygon().get_token_metadata("0xbbb")

    assert dummy_client.requests[0]["json"]["method"] == "alchemy_getTokenMetadata"
    assert metadata.decimals == 6
    assert metadata.name == "USD Coin"
    assert metadata.symbol == "USDC"
    assert metadata.logo is None


@pytest.mark.asyncio
async def test_token_metadata_empty_result(dummy_client):
    dummy_client.responses.append(_DummyResponse({"result": None}))

    metadata = await _polygon().get_token_metadata("0xbbb")

    assert metadata.decimals is None
    assert metadata.symbol is None


@pytest.mark.asyncio
async def test_coingecko_prices_keyed_by_lowercase(dummy_client):
    dummy_client.responses.append(_DummyResponse({
        "0xAbC": {"usd": 2},
        "0xdef": {},
    }))
    provider = CoingeckoProvider(api_key="demo", base_url="https://cg.test/api/v3/")

    prices = await provider.get_token_prices(["0xabc", "0xdef", "0x123"])

    request = dummy_client.requests[0]
    assert request["url"] == "https://cg.test/api/v3/simple/token_price/ethereum"
    assert request["params"]["contract_addresses"] == "0xabc,0xdef,0x123"
    assert request["params"]["vs_currencies"] == "usd"
    assert request["headers"] == {"X-CG-Demo-API-Key": "demo"}
    assert prices == {"0xabc": 2.0}


@pytest.mark.asyncio
async def test_coingecko_empty_request_skips_http(dummy_client):
    prices = await CoingeckoProvider(api_key="").get_token_prices([])

    assert prices == {}
    assert dummy_client.requests == []


@pytest.mark.asyncio
async def test_coingecko_http_error_raises(dummy_client):
    dummy_client.responses.append(_DummyResponse({}, status_code=429))

    with pytest.raises(UpstreamFailure):
        await CoingeckoProvider(api_key="").get_token_prices(["0xabc"])


@pytest.mark.asyncio
async def test_coingecko_uses_configured_timeout(dummy_client):
    dummy_client.responses.append(_DummyResponse({"0xabc": {"usd": 1}}))

    await CoingeckoProvider(api_key="", timeout_s=7).get_token_prices(["0xabc"])

    assert dummy_client.requests[0]["timeout"] == 7


def test_default_price_factory_passes_timeout():
    provider = default_price_factory(SUPPORTED_NETWORKS["ethereum"], timeout_s=42)

    assert isinstance(provider, CoingeckoProvider)
    assert provider.platform == "ethereum"
    assert provider.timeout_s == 42
    assert default_price_factory(SUPPORTED_NETWORKS["ethereum"]).timeout_s == CoingeckoProvider.timeout_s
