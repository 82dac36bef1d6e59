"""Long-running rewards service: Beacon API plus metrics."""

import asyncio
import logging
from typing import Optional

from .beacon_api import BeaconAPI
from .config import Config
from .metrics import metrics
from .spec.constants import get_preset
from .spec.network_config import NetworkConfig
from .store import Store
from .version import get_version

logger = logging.getLogger(__name__)


class RewardsService:
    """Serves block rewards for the blocks in a data directory."""

    def __init__(self, config: Config, network_config: NetworkConfig):
        self.config = config
        self.network_config = network_config
        self.store: Optional[Store] = None
        self.beacon_api: Optional[BeaconAPI] = None

    async def start(self) -> None:
        """Start the service."""
        logger.info("Starting blockrewards service")
        logger.info(f"Using preset: {self.config.preset}")

        metrics.start_metrics_server(self.config.metrics_port)
        metrics.set_service_info(
            version=get_version(),
            network=self.config.network_name,
            preset=get_preset(),
        )

        self.store = Store(self.config.data_dir, self.network_config)
        metrics.update_store_stats(self.store.count_blocks())

        self.beacon_api = BeaconAPI(
            self.store,
            self.network_config,
            host=self.config.host,
            port=self.config.beacon_api_port,
            finalized_slot=self.config.finalized_slot,
        )
        await self.beacon_api.start()

        logger.info(f"Serving rewards for {self.store.count_blocks()} stored blocks")

    async def stop(self) -> None:
        """Stop the service."""
        logger.info("Stopping blockrewards service")
        if self.beacon_api:
            await self.beacon_api.stop()
        if self.store:
            self.store.close()


async def run_service(config: Config, network_config: NetworkConfig) -> None:
    """Run the rewards service until cancelled."""
    service = RewardsService(config, network_config)

    try:
        await service.start()
        while True:
            await asyncio.sleep(1)
    except asyncio.CancelledError:
        pass
    finally:
        await service.stop()
