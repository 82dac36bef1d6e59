"""Slice of the consensus state transition needed to attribute block rewards.

Only attestation processing runs; everything else about a block is read
directly from its body.
"""

from .block import process_attestations, get_attester_slashable_indices

__all__ = [
    "process_attestations",
    "get_attester_slashable_indices",
]
