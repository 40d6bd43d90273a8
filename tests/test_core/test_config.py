"""
Tests for artdid.core.config
==============================

These tests verify the configuration layer:
    - Defaults select the in-memory backends and the documented timeouts
    - Environment variables (ARTDID_*, nested with __) override defaults
    - YAML files are parsed and validated
    - The private key format is checked at startup
"""

from pathlib import Path

import pytest
import yaml

from artdid.core.config import (
    DEFAULT_FALLBACK_GATEWAYS,
    ContentStoreConfig,
    LedgerConfig,
    RegistryConfig,
    load_config,
)
from artdid.core.enums import ContentBackend, LedgerBackend
from artdid.core.exceptions import ConfigurationError


VALID_KEY = "0x" + "1" * 64


# =============================================================================
# Test: Default Configuration
# =============================================================================
class TestDefaultConfig:
    """Tests for default configuration values."""

    def test_default_config_creates_successfully(self) -> None:
        """RegistryConfig() should work with no arguments."""
        config = RegistryConfig()
        assert config.environment == "dev"
        assert config.log_level == "INFO"

    def test_default_service_identity(self) -> None:
        config = RegistryConfig()
        assert config.service_name == "ArtDID Registry API"
        assert config.metadata_standard == "Karen 1.0"

    def test_default_backends_are_in_memory(self) -> None:
        """Zero-config startup must not need a chain or an IPFS node."""
        config = RegistryConfig()
        assert config.ledger.backend == LedgerBackend.MEMORY
        assert config.content_store.backend == ContentBackend.MEMORY

    def test_default_retrieval_timeouts(self) -> None:
        """Primary source gets 5s, each fallback gets the tighter 3s."""
        store = ContentStoreConfig()
        assert store.primary_timeout_seconds == 5.0
        assert store.fallback_timeout_seconds == 3.0
        assert store.fallback_timeout_seconds < store.primary_timeout_seconds

    def test_default_fallback_gateway_order(self) -> None:
        store = ContentStoreConfig()
        assert list(store.fallback_gateways) == list(DEFAULT_FALLBACK_GATEWAYS)
        assert store.fallback_gateways[0] == "https://ipfs.io"

    def test_default_ledger_timeouts(self) -> None:
        ledger = LedgerConfig()
        assert ledger.request_timeout_seconds == 10
        assert ledger.confirmation_timeout_seconds == 120


# =============================================================================
# Test: Validation
# =============================================================================
class TestConfigValidation:
    """Tests for configuration validation rules."""

    def test_invalid_environment_rejected(self) -> None:
        with pytest.raises(Exception):
            RegistryConfig(environment="qa")

    def test_valid_private_key_accepted(self) -> None:
        ledger = LedgerConfig(private_key=VALID_KEY)
        assert ledger.private_key == VALID_KEY

    @pytest.mark.parametrize(
        "key",
        [
            "1" * 64,             # missing 0x prefix
            "0x" + "1" * 63,      # too short
            "0x" + "g" * 64,      # not hex
        ],
    )
    def test_malformed_private_key_rejected(self, key: str) -> None:
        """A key that is not 0x + 64 hex digits fails at startup."""
        with pytest.raises(Exception, match="Invalid private key configuration"):
            LedgerConfig(private_key=key)

    def test_private_key_is_optional(self) -> None:
        assert LedgerConfig().private_key is None

    def test_unknown_backend_rejected(self) -> None:
        with pytest.raises(Exception):
            LedgerConfig(backend="fabric")


# =============================================================================
# Test: Environment Variables
# =============================================================================
class TestEnvVarLoading:
    """Tests for environment variable configuration loading."""

    def test_env_var_overrides_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ARTDID_LOG_LEVEL", "DEBUG")
        assert RegistryConfig().log_level == "DEBUG"

    def test_nested_env_var_overrides_ledger(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """ARTDID_LEDGER__RPC_URL should reach config.ledger.rpc_url."""
        monkeypatch.setenv("ARTDID_LEDGER__RPC_URL", "http://besu:8545")
        assert RegistryConfig().ledger.rpc_url == "http://besu:8545"

    def test_nested_env_var_overrides_content_store(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ARTDID_CONTENT_STORE__BACKEND", "ipfs")
        assert RegistryConfig().content_store.backend == ContentBackend.IPFS


# =============================================================================
# Test: YAML Loading
# =============================================================================
class TestYamlLoading:
    """Tests for YAML configuration file loading."""

    def test_load_valid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "artdid.yaml"
        config_file.write_text(
            yaml.dump(
                {
                    "environment": "staging",
                    "metadata_standard": "Karen 2.0",
                    "content_store": {"gateway_url": "http://ipfs-node:8080"},
                }
            )
        )

        config = load_config(str(config_file))

        assert config.environment == "staging"
        assert config.metadata_standard == "Karen 2.0"
        assert config.content_store.gateway_url == "http://ipfs-node:8080"
        assert config.content_store.api_url == "http://127.0.0.1:5001"

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "artdid.yaml"
        config_file.write_text("")
        assert load_config(str(config_file)).environment == "dev"

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_malformed_yaml_raises_configuration_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "artdid.yaml"
        config_file.write_text("ledger: [unclosed")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(config_file))
        assert exc_info.value.error_code == "INVALID_CONFIG_FILE"

    def test_non_mapping_yaml_raises_configuration_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "artdid.yaml"
        config_file.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(str(config_file))

    def test_default_file_picked_up_from_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without a path, ./artdid.yaml is used when present."""
        (tmp_path / "artdid.yaml").write_text(yaml.dump({"log_level": "WARNING"}))
        monkeypatch.chdir(tmp_path)
        assert load_config().log_level == "WARNING"

    def test_no_file_falls_back_to_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config().service_name == "ArtDID Registry API"
