"""Consensus spec subset needed to compute block rewards.

Note: The 'types' module must be imported after calling constants.set_preset()
to ensure SSZ types have correct sizes for the chosen preset.
"""

from . import constants
from .forks import ForkName
from .network_config import NetworkConfig, get_config, load_config, set_config

__all__ = ["constants", "ForkName", "NetworkConfig", "get_config", "load_config", "set_config"]
