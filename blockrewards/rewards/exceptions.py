"""Exceptions for the block rewards module."""

from ..spec.forks import ForkName


class BlockRewardsError(Exception):
    """Base error for block reward computation."""


class UnsupportedForkOperation(BlockRewardsError):
    """A reward component cannot be computed for blocks of this fork."""

    def __init__(self, fork: ForkName, operation: str):
        self.fork = fork
        self.operation = operation
        super().__init__(f"Unsupported fork {fork.key} for {operation}")
