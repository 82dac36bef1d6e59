"""Block operations used by the reward computation."""

from .attestation import process_attestations, process_attestation
from .attester_slashing import get_attester_slashable_indices

__all__ = [
    "process_attestations",
    "process_attestation",
    "get_attester_slashable_indices",
]
