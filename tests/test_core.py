"""Tests for core module."""

import json
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from plugwise_hub.core.config import (
    Config,
    DiscoveryConfig,
    GatewayConfig,
    HubCredential,
    load_hub_credentials,
)
from plugwise_hub.core.exceptions import (
    AuthenticationError,
    NotConnectedError,
    PlugwiseHubError,
    ValidationError,
)
from plugwise_hub.core.utils import (
    detect_local_network,
    network_hosts,
    validate_ip,
    validate_network,
)


class TestConfig:
    """Test configuration management."""

    def test_default_config(self):
        """Test default configuration values."""
        config = Config()
        assert config.hubs_dir == Path("./hubs")
        assert config.devices_dir == Path("./devices")
        assert config.verbose is False
        assert config.credentials == []

    def test_timeout_regimes_are_independent(self):
        """Test operational and probe timeouts have separate defaults."""
        assert GatewayConfig().request_timeout == 10.0
        assert DiscoveryConfig().probe_timeout == 1.5

    def test_gateway_defaults(self):
        """Test default gateway login settings."""
        config = GatewayConfig()
        assert config.username == "smile"
        assert config.port == 80

    def test_from_missing_file(self, tmp_path):
        """Test a missing config file yields defaults."""
        config = Config.from_file(tmp_path / "missing.json")
        assert config.discovery.max_workers == 32

    def test_from_file(self, tmp_path):
        """Test loading nested sections and credentials from JSON."""
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "hubs_dir": "/tmp/hubs",
                    "discovery": {"probe_timeout": 0.5, "max_workers": 8, "bogus": 1},
                    "gateway": {"port": 8080},
                    "credentials": [{"password": "abcdefgh", "ip": "10.0.0.5"}, {"ip": "x"}],
                }
            )
        )

        config = Config.from_file(path)

        assert config.hubs_dir == Path("/tmp/hubs")
        assert config.discovery.probe_timeout == 0.5
        assert config.discovery.max_workers == 8
        assert not hasattr(config.discovery, "bogus")
        assert config.gateway.port == 8080
        assert config.credentials == [HubCredential("abcdefgh", "10.0.0.5")]

    def test_save_and_reload(self, tmp_path):
        """Test saved configuration loads back unchanged."""
        config = Config(credentials=[HubCredential("abcdefgh")])
        config.discovery.max_workers = 4
        path = tmp_path / "nested" / "config.json"

        config.save(path)
        loaded = Config.from_file(path)

        assert loaded.discovery.max_workers == 4
        assert loaded.credentials == [HubCredential("abcdefgh", None)]

    def test_merge_credentials_skips_known_passwords(self):
        """Test merging does not duplicate passwords."""
        config = Config(credentials=[HubCredential("aaa", "10.0.0.1")])
        config.merge_credentials([HubCredential("aaa"), HubCredential("bbb")])
        assert [c.password for c in config.credentials] == ["aaa", "bbb"]
        assert config.credentials[0].ip == "10.0.0.1"


class TestHubCredentials:
    """Test loading hub credentials from environment variables."""

    def test_load_hub_credentials(self):
        """Test HUBx and HUBxIP pairs are read."""
        env = {"HUB1": "aaa111bb", "HUB1IP": "10.0.0.5", "HUB3": "ccc333dd", "HUB11": "ignored"}
        creds = load_hub_credentials(env)
        assert creds == [
            HubCredential("aaa111bb", "10.0.0.5"),
            HubCredential("ccc333dd", None),
        ]

    def test_ip_without_password_ignored(self):
        """Test an IP without a password is not a credential."""
        assert load_hub_credentials({"HUB2IP": "10.0.0.9"}) == []


class TestValidation:
    """Test input validation functions."""

    def test_validate_ip_valid(self):
        """Test valid IP addresses."""
        assert str(validate_ip("192.168.1.1")) == "192.168.1.1"

    def test_validate_ip_invalid(self):
        """Test invalid IP addresses."""
        with pytest.raises(ValidationError):
            validate_ip("256.1.1.1")
        with pytest.raises(ValidationError):
            validate_ip("::1")

    def test_validate_network_valid(self):
        """Test valid network CIDR, host bits allowed."""
        assert str(validate_network("192.168.1.17/24")) == "192.168.1.0/24"

    def test_validate_network_invalid(self):
        """Test invalid network CIDR."""
        with pytest.raises(ValidationError):
            validate_network("192.168.1.0/33")
        with pytest.raises(ValidationError):
            validate_network("not.a.network")

    def test_network_hosts_slash_24(self):
        """Test a /24 yields its 254 host addresses."""
        hosts = network_hosts(validate_network("10.0.0.0/24"), max_hosts=1024)
        assert len(hosts) == 254
        assert hosts[0] == "10.0.0.1"
        assert hosts[-1] == "10.0.0.254"

    def test_network_hosts_single_address(self):
        """Test a /32 yields the address itself."""
        assert network_hosts(validate_network("10.0.0.5/32"), max_hosts=1024) == ["10.0.0.5"]

    def test_network_hosts_too_large(self):
        """Test oversized ranges are refused."""
        with pytest.raises(ValidationError):
            network_hosts(validate_network("10.0.0.0/16"), max_hosts=1024)


class TestLocalNetwork:
    """Test local network detection."""

    @patch("plugwise_hub.core.utils.get_interfaces")
    def test_detects_first_up_interface(self, mock_interfaces):
        """Test the /24 of the first usable interface is returned."""
        mock_interfaces.return_value = {
            "lo": {"ipv4": "127.0.0.1", "is_up": True},
            "eth1": {"ipv4": "10.1.2.3", "is_up": False},
            "wlan0": {"ipv4": "192.168.7.42", "is_up": True},
        }
        assert detect_local_network() == "192.168.7.0/24"

    @patch("plugwise_hub.core.utils.get_interfaces")
    def test_fallback_when_nothing_usable(self, mock_interfaces):
        """Test the fallback network is used without a usable interface."""
        mock_interfaces.return_value = {"lo": {"ipv4": "127.0.0.1", "is_up": True}}
        assert detect_local_network("10.9.8.0/24") == "10.9.8.0/24"

    @patch("plugwise_hub.core.utils.psutil")
    def test_get_interfaces_reads_psutil(self, mock_psutil):
        """Test psutil address and stats data are combined."""
        mock_psutil.net_if_addrs.return_value = {
            "eth0": [
                SimpleNamespace(family=SimpleNamespace(name="AF_INET"), address="10.0.0.2", netmask="255.255.255.0"),
                SimpleNamespace(family=SimpleNamespace(name="AF_PACKET"), address="aa:bb:cc:dd:ee:ff", netmask=None),
            ]
        }
        mock_psutil.net_if_stats.return_value = {"eth0": SimpleNamespace(isup=True)}

        assert detect_local_network() == "10.0.0.0/24"


class TestExceptions:
    """Test custom exceptions."""

    def test_base_exception(self):
        """Test base PlugwiseHubError formatting."""
        err = PlugwiseHubError("Test error", "Details")
        assert str(err) == "Test error: Details"

    def test_authentication_error_is_hub_error(self):
        """Test typed errors share the base class."""
        assert isinstance(AuthenticationError("Invalid credentials"), PlugwiseHubError)

    def test_not_connected_names_operation(self):
        """Test NotConnectedError mentions the operation."""
        err = NotConnectedError("get_devices")
        assert "get_devices" in str(err)
