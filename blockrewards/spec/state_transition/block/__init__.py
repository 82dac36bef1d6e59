"""Block processing functions used by the reward computation."""

from .operations import process_attestations, get_attester_slashable_indices

__all__ = [
    "process_attestations",
    "get_attester_slashable_indices",
]
