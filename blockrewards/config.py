"""Configuration for the blockrewards service."""

from dataclasses import dataclass


@dataclass
class Config:
    """Service configuration."""

    network_config_path: str = ""
    preset: str = "mainnet"
    data_dir: str = "./data"
    host: str = "0.0.0.0"
    beacon_api_port: int = 5052
    metrics_port: int = 8008
    finalized_slot: int = 0
    log_level: str = "INFO"

    @property
    def network_name(self) -> str:
        return self.network_config_path or self.preset
