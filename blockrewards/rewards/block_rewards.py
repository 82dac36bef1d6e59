"""Proposer reward breakdown for a single block.

The proposer of a block is paid for the attestations it includes, for the
sync committee participation it aggregates, and the whole whistleblower
reward for each slashing it reports. Execution layer fees are not covered.

Reference: https://ethereum.github.io/beacon-APIs/#/Beacon/getBlockRewards
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from ..metrics.metrics import record_reward_computation, record_unsupported_fork
from ..spec.forks import ForkName
from ..spec.state_transition import process_attestations, get_attester_slashable_indices
from ..spec.state_transition.helpers.accessors import get_whistleblower_reward_quotient
from .cached_state import CachedBeaconState
from .exceptions import UnsupportedForkOperation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockRewards:
    """Rewards earned by a block's proposer, in Gwei."""

    proposer_index: int
    attestations: int
    sync_aggregate: int
    proposer_slashings: int
    attester_slashings: int

    @property
    def total(self) -> int:
        return self.attestations + self.sync_aggregate + self.proposer_slashings + self.attester_slashings

    def to_json(self) -> dict:
        """Beacon API representation: every value as a decimal string."""
        return {
            "proposer_index": str(self.proposer_index),
            "total": str(self.total),
            "attestations": str(self.attestations),
            "sync_aggregate": str(self.sync_aggregate),
            "proposer_slashings": str(self.proposer_slashings),
            "attester_slashings": str(self.attester_slashings),
        }


async def compute_block_rewards(block, pre_state: CachedBeaconState) -> BlockRewards:
    """Compute the proposer reward breakdown of a block.

    Args:
        block: BeaconBlock (the message, not the signed envelope)
        pre_state: State at the block's slot before the block is applied

    Raises:
        UnsupportedForkOperation: If the block is a phase0 block
    """
    start = time.perf_counter()
    fork = pre_state.get_fork_name(int(block.slot))

    try:
        attestations = compute_block_attestation_reward(block, pre_state)
    except UnsupportedForkOperation as e:
        record_unsupported_fork(e.fork.key, e.operation)
        raise

    rewards = BlockRewards(
        proposer_index=int(block.proposer_index),
        attestations=attestations,
        sync_aggregate=compute_sync_aggregate_reward(block, pre_state),
        proposer_slashings=compute_block_proposer_slashing_reward(block, pre_state),
        attester_slashings=compute_block_attester_slashing_reward(block, pre_state),
    )

    record_reward_computation(fork.key, time.perf_counter() - start, rewards.total)
    logger.debug(
        f"Block rewards at slot {int(block.slot)} ({fork.key}): proposer {rewards.proposer_index} "
        f"total={rewards.total} attestations={rewards.attestations} "
        f"sync_aggregate={rewards.sync_aggregate} proposer_slashings={rewards.proposer_slashings} "
        f"attester_slashings={rewards.attester_slashings}"
    )
    return rewards


def compute_block_attestation_reward(block, pre_state: CachedBeaconState) -> int:
    """Return the proposer reward for the attestations included in a block."""
    fork = pre_state.get_fork_name(int(block.slot))
    return ATTESTATION_REWARD_HANDLERS[fork](fork, block, pre_state)


def _phase0_attestation_reward(fork: ForkName, block, pre_state: CachedBeaconState) -> int:
    raise UnsupportedForkOperation(fork, "block attestation reward")


def _altair_attestation_reward(fork: ForkName, block, pre_state: CachedBeaconState) -> int:
    # Flags set while processing must not leak into the caller's pre-state
    state = pre_state.state.copy()
    return process_attestations(
        fork,
        state,
        block.body.attestations,
        verify_signatures=False,
        proposer_index=int(block.proposer_index),
    )


ATTESTATION_REWARD_HANDLERS: dict[ForkName, Callable[[ForkName, object, CachedBeaconState], int]] = {
    ForkName.PHASE0: _phase0_attestation_reward,
    ForkName.ALTAIR: _altair_attestation_reward,
    ForkName.BELLATRIX: _altair_attestation_reward,
    ForkName.CAPELLA: _altair_attestation_reward,
    ForkName.DENEB: _altair_attestation_reward,
    ForkName.ELECTRA: _altair_attestation_reward,
    ForkName.FULU: _altair_attestation_reward,
}

_missing = set(ForkName) - set(ATTESTATION_REWARD_HANDLERS)
if _missing:
    raise RuntimeError(
        f"No attestation reward handler for {sorted(f.key for f in _missing)}"
    )


def compute_sync_aggregate_reward(block, pre_state: CachedBeaconState) -> int:
    """Return the proposer reward for the sync aggregate of a block (0 before Altair)."""
    sync_aggregate = getattr(block.body, "sync_aggregate", None)
    if sync_aggregate is None:
        return 0

    participants = sum(1 for bit in sync_aggregate.sync_committee_bits if bit)
    return participants * math.floor(pre_state.sync_proposer_reward)


def compute_block_proposer_slashing_reward(block, pre_state: CachedBeaconState) -> int:
    """Return the whistleblower rewards for the proposer slashings of a block."""
    quotient = get_whistleblower_reward_quotient(pre_state.get_fork_name(int(block.slot)))
    reward = 0
    for proposer_slashing in block.body.proposer_slashings:
        offender = int(proposer_slashing.signed_header_1.message.proposer_index)
        reward += pre_state.effective_balance(offender) // quotient
    return reward


def compute_block_attester_slashing_reward(block, pre_state: CachedBeaconState) -> int:
    """Return the whistleblower rewards for the attester slashings of a block."""
    quotient = get_whistleblower_reward_quotient(pre_state.get_fork_name(int(block.slot)))
    reward = 0
    for attester_slashing in block.body.attester_slashings:
        for index in get_attester_slashable_indices(attester_slashing):
            reward += pre_state.effective_balance(index) // quotient
    return reward
