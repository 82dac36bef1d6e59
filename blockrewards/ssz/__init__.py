"""SSZ serialization utilities and fork-aware file loading."""

import logging
from pathlib import Path
from typing import Optional

import snappy
from remerkleable.core import View

from ..spec.forks import ForkName
from ..spec.network_config import NetworkConfig, get_config

logger = logging.getLogger(__name__)

# Signed block: 4-byte offset of the message, 96-byte signature, then message.slot
SIGNED_BLOCK_SLOT_OFFSET = 100
# State: genesis_time (8) and genesis_validators_root (32), then slot
STATE_SLOT_OFFSET = 40


def read_ssz_file(path: str | Path) -> bytes:
    """Read serialized SSZ, decompressing .ssz_snappy files."""
    path = Path(path)
    data = path.read_bytes()
    if path.suffix == ".ssz_snappy":
        data = snappy.decompress(data)
    return data


def read_slot(data: bytes, offset: int) -> int:
    """Read the little-endian uint64 slot at a fixed offset."""
    if len(data) < offset + 8:
        raise ValueError(f"SSZ data too short to hold a slot: {len(data)} bytes")
    return int.from_bytes(data[offset:offset + 8], "little")


def decode_signed_block(data: bytes, config: Optional[NetworkConfig] = None) -> tuple[ForkName, View]:
    """Decode a signed beacon block, picking the container from its slot's fork."""
    from ..spec.types import get_fork_types

    config = config or get_config()
    slot = read_slot(data, SIGNED_BLOCK_SLOT_OFFSET)
    fork = config.get_fork_name(slot)
    signed_block = get_fork_types(fork).signed_block.decode_bytes(data)
    logger.debug(f"Decoded {fork.key} signed block at slot {slot}")
    return fork, signed_block


def decode_state(data: bytes, config: Optional[NetworkConfig] = None) -> tuple[ForkName, View]:
    """Decode a beacon state, picking the container from its slot's fork."""
    from ..spec.types import get_fork_types

    config = config or get_config()
    slot = read_slot(data, STATE_SLOT_OFFSET)
    fork = config.get_fork_name(slot)
    state = get_fork_types(fork).state.decode_bytes(data)
    logger.debug(f"Decoded {fork.key} state at slot {slot}")
    return fork, state


def load_signed_block(path: str | Path, config: Optional[NetworkConfig] = None) -> tuple[ForkName, View]:
    return decode_signed_block(read_ssz_file(path), config)


def load_state(path: str | Path, config: Optional[NetworkConfig] = None) -> tuple[ForkName, View]:
    return decode_state(read_ssz_file(path), config)


__all__ = [
    "read_ssz_file",
    "read_slot",
    "decode_signed_block",
    "decode_state",
    "load_signed_block",
    "load_state",
]
