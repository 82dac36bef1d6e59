"""Pre-state wrapper with the values reward computation reads repeatedly."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..spec.forks import ForkName
from ..spec.network_config import NetworkConfig, get_config
from ..spec.state_transition.helpers.accessors import get_sync_proposer_reward

if TYPE_CHECKING:
    from ..spec.types import BeaconState

logger = logging.getLogger(__name__)


@dataclass
class CachedBeaconState:
    """A beacon state at a block's slot, before the block is applied.

    The wrapped state is never modified by reward computation.
    """

    state: "BeaconState"
    config: NetworkConfig
    sync_proposer_reward: int = 0
    _effective_balances: dict[int, int] = field(default_factory=dict, repr=False)

    @classmethod
    def from_state(cls, state: "BeaconState", config: Optional[NetworkConfig] = None) -> "CachedBeaconState":
        """Wrap a state, resolving its fork from its slot."""
        config = config or get_config()
        fork = config.get_fork_name(int(state.slot))

        sync_proposer_reward = 0
        if fork >= ForkName.ALTAIR:
            sync_proposer_reward = get_sync_proposer_reward(state)

        logger.debug(
            f"Prepared {fork.key} pre-state at slot {int(state.slot)}, "
            f"sync proposer reward {sync_proposer_reward}"
        )
        return cls(
            state=state,
            config=config,
            sync_proposer_reward=sync_proposer_reward,
        )

    def get_fork_name(self, slot: int) -> ForkName:
        return self.config.get_fork_name(slot)

    def effective_balance(self, index: int) -> int:
        """Return the effective balance of a validator in Gwei."""
        index = int(index)
        balance = self._effective_balances.get(index)
        if balance is None:
            balance = int(self.state.validators[index].effective_balance)
            self._effective_balances[index] = balance
        return balance
