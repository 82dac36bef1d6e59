"""Beacon API HTTP server for block rewards."""

import logging
from typing import Optional
from aiohttp import web

from .utils import to_hex, error_response
from ..metrics.metrics import record_beacon_api_request
from ..rewards import CachedBeaconState, UnsupportedForkOperation, compute_block_rewards
from ..spec.forks import ForkName
from ..spec.network_config import NetworkConfig, get_config
from ..store import Store

logger = logging.getLogger(__name__)


class BlockIdError(ValueError):
    """Malformed block identifier."""


class BeaconAPI:
    """Beacon API server exposing the rewards of stored blocks."""

    def __init__(
        self,
        store: Store,
        config: Optional[NetworkConfig] = None,
        host: str = "0.0.0.0",
        port: int = 5052,
        finalized_slot: int = 0,
    ):
        self.store = store
        self.config = config or get_config()
        self.host = host
        self.port = port
        self.finalized_slot = finalized_slot
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self._setup_routes()

    def _setup_routes(self):
        """Set up API routes."""
        self.app.router.add_get("/eth/v1/node/health", self.get_health)
        self.app.router.add_get("/eth/v1/config/fork_schedule", self.get_fork_schedule)
        self.app.router.add_get("/eth/v1/beacon/rewards/blocks/{block_id}", self.get_block_rewards)

    async def start(self):
        """Start the API server."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info(f"Beacon API listening on {self.host}:{self.port}")

    async def stop(self):
        """Stop the API server."""
        if self.runner:
            await self.runner.cleanup()

    async def get_health(self, request: web.Request) -> web.Response:
        """GET /eth/v1/node/health"""
        record_beacon_api_request("health")
        return web.Response(status=200)

    async def get_fork_schedule(self, request: web.Request) -> web.Response:
        """GET /eth/v1/config/fork_schedule"""
        record_beacon_api_request("fork_schedule")
        forks = []
        previous_version = self.config.get_fork_version_for(ForkName.PHASE0)
        for fork, epoch in self.config.fork_schedule():
            current_version = self.config.get_fork_version_for(fork)
            forks.append({
                "previous_version": to_hex(previous_version),
                "current_version": to_hex(current_version),
                "epoch": str(epoch),
            })
            previous_version = current_version
        return web.json_response({"data": forks})

    async def get_block_rewards(self, request: web.Request) -> web.Response:
        """GET /eth/v1/beacon/rewards/blocks/{block_id}"""
        record_beacon_api_request("block_rewards")
        block_id = request.match_info["block_id"]

        try:
            root, signed_block = self._resolve_block_id(block_id)
        except BlockIdError as e:
            return error_response(400, str(e))
        if signed_block is None:
            return error_response(404, f"Block not found: {block_id}")

        state = self.store.get_pre_state(root)
        if state is None:
            return error_response(404, f"Pre-state not found for block {to_hex(root)}")

        block = signed_block.message
        pre_state = CachedBeaconState.from_state(state, self.config)
        try:
            rewards = await compute_block_rewards(block, pre_state)
        except UnsupportedForkOperation as e:
            logger.warning(f"Block rewards unavailable for block_id={block_id}: {e}")
            return error_response(400, str(e))
        except AssertionError as e:
            logger.error(f"Invalid block {to_hex(root)}: {e}")
            return error_response(500, f"Invalid block: {e}")

        return web.json_response({
            "execution_optimistic": False,
            "finalized": int(block.slot) <= self.finalized_slot,
            "data": rewards.to_json(),
        })

    def _resolve_block_id(self, block_id: str) -> tuple[Optional[bytes], Optional[object]]:
        """Resolve a block_id to (root, signed_block).

        Supports: "head", "genesis", "finalized", "0x..." (root), slot number.
        Returns (None, None) if not found.

        Raises:
            BlockIdError: If block_id is none of the above
        """
        if block_id == "head":
            root = self.store.get_head_root()
        elif block_id == "genesis":
            root = self.store.get_genesis_root()
        elif block_id == "finalized":
            return self._block_at_slot(self.finalized_slot)
        elif block_id.startswith("0x"):
            try:
                root = bytes.fromhex(block_id[2:])
            except ValueError:
                raise BlockIdError(f"Invalid block root: {block_id}") from None
            if len(root) != 32:
                raise BlockIdError(f"Invalid block root length: {block_id}")
        else:
            try:
                slot = int(block_id)
            except ValueError:
                raise BlockIdError(f"Invalid block id: {block_id}") from None
            if slot < 0:
                raise BlockIdError(f"Invalid block id: {block_id}")
            return self._block_at_slot(slot)

        if root is None:
            return None, None
        return root, self.store.get_block(root)

    def _block_at_slot(self, slot: int) -> tuple[Optional[bytes], Optional[object]]:
        found = self.store.get_block_by_slot(slot)
        if found is None:
            return None, None
        return found


__all__ = ["BeaconAPI", "BlockIdError"]
