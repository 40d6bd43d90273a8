"""
Tests for artdid.integrations.ledger.factory
==============================================
"""

import pytest

from artdid.core.config import LedgerConfig
from artdid.core.exceptions import ConfigurationError
from artdid.integrations.ledger import create_ledger_gateway
from artdid.integrations.ledger.contract import Web3LedgerGateway
from artdid.integrations.ledger.memory import InMemoryLedgerGateway


class TestCreateLedgerGateway:
    """Tests for backend selection."""

    def test_memory_backend(self) -> None:
        gateway = create_ledger_gateway(LedgerConfig(backend="memory"))
        assert isinstance(gateway, InMemoryLedgerGateway)
        assert gateway.caller_address == LedgerConfig().account

    def test_web3_backend(self) -> None:
        gateway = create_ledger_gateway(
            LedgerConfig(
                backend="web3",
                rpc_url="http://127.0.0.1:8545",
                contract_address="0x" + "1" * 40,
                private_key="0x" + "1" * 64,
            )
        )
        assert isinstance(gateway, Web3LedgerGateway)

    def test_web3_backend_without_settings_fails_fast(self) -> None:
        with pytest.raises(ConfigurationError):
            create_ledger_gateway(LedgerConfig(backend="web3"))

    def test_repr_names_backend(self) -> None:
        gateway = create_ledger_gateway(LedgerConfig())
        assert repr(gateway) == "InMemoryLedgerGateway(backend='memory')"

    def test_unknown_backend(self) -> None:
        config = LedgerConfig.model_construct(backend="fabric")
        with pytest.raises(ConfigurationError) as exc_info:
            create_ledger_gateway(config)
        assert exc_info.value.error_code == "UNKNOWN_LEDGER_BACKEND"
