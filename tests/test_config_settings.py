from defi_portfolio.config import Settings


def test_per_network_key_overrides_shared_key(monkeypatch):
    """A network-specific Alchemy key wins over the shared key."""

    monkeypatch.setenv("ALCHEMY_API_KEY", "shared")
    monkeypatch.setenv("ALCHEMY_NETWORK_KEYS", '{"polygon": "polygon-only"}')

    settings = Settings()

    assert settings.alchemy_key_for("polygon") == "polygon-only"
    assert settings.alchemy_key_for("ethereum") == "shared"


def test_missing_keys_resolve_to_empty(monkeypatch):
    monkeypatch.setenv("ALCHEMY_API_KEY", "")
    monkeypatch.setenv("ALCHEMY_NETWORK_KEYS", "{}")

    settings = Settings()

    assert settings.alchemy_key_for("ethereum") == ""
    assert settings.has_alchemy_key is False


def test_concurrency_defaults(monkeypatch):
    monkeypatch.delenv("MAX_CONCURRENT_REQUESTS", raising=False)
    monkeypatch.delenv("DEFAULT_CHAIN", raising=False)

    settings = Settings()

    assert settings.max_concurrent_requests == 10
    assert settings.default_chain == "ethereum"


def test_network_key_names_are_normalized(monkeypatch):
    monkeypatch.setenv("ALCHEMY_API_KEY", "shared")
    monkeypatch.setenv("ALCHEMY_NETWORK_KEYS", '{"Polygon": "polygon-only", " ARBITRUM ": "arb-only"}')

    settings = Settings()

    assert settings.alchemy_network_keys == {"polygon": "polygon-only", "arbitrum": "arb-only"}
    assert settings.alchemy_key_for("polygon") == "polygon-only"
    assert settings.alchemy_key_for("arbitrum") == "arb-only"
