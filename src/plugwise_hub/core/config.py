"""Configuration management for the Plugwise hub toolkit."""

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

MAX_ENV_HUBS = 10


@dataclass
class HubCredential:
    """A hub password, optionally with the address it was last seen at."""

    password: str
    ip: str | None = None

    def to_dict(self) -> dict:
        return {"password": self.password, "ip": self.ip}


@dataclass
class GatewayConfig:
    """Gateway HTTP configuration."""

    username: str = "smile"
    port: int = 80
    request_timeout: float = 10.0


@dataclass
class DiscoveryConfig:
    """Discovery scan configuration."""

    probe_timeout: float = 1.5
    max_workers: int = 32
    max_hosts: int = 1024
    fallback_network: str = "192.168.1.0/24"


@dataclass
class Config:
    """Main configuration for the Plugwise hub toolkit."""

    hubs_dir: Path = field(default_factory=lambda: Path("./hubs"))
    devices_dir: Path = field(default_factory=lambda: Path("./devices"))
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    credentials: list[HubCredential] = field(default_factory=list)
    verbose: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.hubs_dir, str):
            self.hubs_dir = Path(self.hubs_dir)
        if isinstance(self.devices_dir, str):
            self.devices_dir = Path(self.devices_dir)

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load configuration from JSON file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        config = cls()
        if "hubs_dir" in data:
            config.hubs_dir = Path(data["hubs_dir"])
        if "devices_dir" in data:
            config.devices_dir = Path(data["devices_dir"])
        if "verbose" in data:
            config.verbose = data["verbose"]

        if "gateway" in data:
            for key, value in data["gateway"].items():
                if hasattr(config.gateway, key):
                    setattr(config.gateway, key, value)

        if "discovery" in data:
            for key, value in data["discovery"].items():
                if hasattr(config.discovery, key):
                    setattr(config.discovery, key, value)

        for entry in data.get("credentials", []):
            if entry.get("password"):
                config.credentials.append(HubCredential(entry["password"], entry.get("ip")))

        return config

    def save(self, path: Path) -> None:
        """Save configuration to JSON file."""
        data = {
            "hubs_dir": str(self.hubs_dir),
            "devices_dir": str(self.devices_dir),
            "verbose": self.verbose,
            "gateway": {
                "username": self.gateway.username,
                "port": self.gateway.port,
                "request_timeout": self.gateway.request_timeout,
            },
            "discovery": {
                "probe_timeout": self.discovery.probe_timeout,
                "max_workers": self.discovery.max_workers,
                "max_hosts": self.discovery.max_hosts,
                "fallback_network": self.discovery.fallback_network,
            },
            "credentials": [c.to_dict() for c in self.credentials],
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    def merge_credentials(self, extra: list[HubCredential]) -> None:
        """Add credentials not already configured, matched by password."""
        known = {c.password for c in self.credentials}
        for cred in extra:
            if cred.password not in known:
                self.credentials.append(cred)
                known.add(cred.password)


def load_hub_credentials(environ: Mapping[str, str] | None = None) -> list[HubCredential]:
    """Read HUB1..HUB10 passwords and their optional HUBxIP addresses."""
    env = os.environ if environ is None else environ
    credentials: list[HubCredential] = []

    for i in range(1, MAX_ENV_HUBS + 1):
        password = env.get(f"HUB{i}")
        if password:
            credentials.append(HubCredential(password, env.get(f"HUB{i}IP") or None))

    return credentials


_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        config_path = Path(os.environ.get("PLUGWISE_HUB_CONFIG", ".plugwise-hub.json"))
        _config = Config.from_file(config_path)
        _config.merge_credentials(load_hub_credentials())
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
