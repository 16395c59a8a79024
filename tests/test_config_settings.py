import pytest
from pydantic import ValidationError

from tradebot.config import Settings


def test_encryption_key_legacy_alias(monkeypatch):
    """Wallet encryption key should load from the legacy ENCRYPTION_KEY variable."""

    monkeypatch.delenv("WALLET_ENCRYPTION_KEY", raising=False)
    monkeypatch.setenv("ENCRYPTION_KEY", "alias-from-legacy")

    settings = Settings(_env_file=None)

    assert settings.wallet_encryption_key == "alias-from-legacy"
    assert settings.has_encryption_key


def test_encryption_key_direct_env(monkeypatch):
    """The primary variable wins over the legacy alias."""

    monkeypatch.setenv("WALLET_ENCRYPTION_KEY", "primary-key")
    monkeypatch.setenv("ENCRYPTION_KEY", "alias-from-legacy")

    settings = Settings(_env_file=None)

    assert settings.wallet_encryption_key == "primary-key"


def test_rpc_override_only_for_configured_network(monkeypatch):
    monkeypatch.setenv("MONAD_RPC_URL", "http://localhost:8545")
    monkeypatch.delenv("MEGAETH_RPC_URL", raising=False)

    settings = Settings(_env_file=None)

    assert settings.rpc_override_for("monad") == "http://localhost:8545"
    assert settings.rpc_override_for("MEGAETH") is None


def test_swap_defaults(monkeypatch):
    monkeypatch.delenv("DEFAULT_SLIPPAGE_BPS", raising=False)

    settings = Settings(_env_file=None)

    assert settings.default_slippage_bps == 100
    assert settings.deadline_minutes == 20
    assert settings.gas_limit_multiplier == 1.2


def test_slippage_bounds_are_enforced(monkeypatch):
    monkeypatch.setenv("DEFAULT_SLIPPAGE_BPS", "9000")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
