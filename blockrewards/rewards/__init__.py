"""Proposer reward breakdown of beacon blocks."""

from .block_rewards import (
    BlockRewards,
    compute_block_rewards,
    compute_block_attestation_reward,
    compute_sync_aggregate_reward,
    compute_block_proposer_slashing_reward,
    compute_block_attester_slashing_reward,
    ATTESTATION_REWARD_HANDLERS,
)
from .cached_state import CachedBeaconState
from .exceptions import BlockRewardsError, UnsupportedForkOperation

__all__ = [
    "BlockRewards",
    "CachedBeaconState",
    "BlockRewardsError",
    "UnsupportedForkOperation",
    "compute_block_rewards",
    "compute_block_attestation_reward",
    "compute_sync_aggregate_reward",
    "compute_block_proposer_slashing_reward",
    "compute_block_attester_slashing_reward",
    "ATTESTATION_REWARD_HANDLERS",
]
