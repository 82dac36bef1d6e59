"""Hashing and BLS verification used when checking attestations."""

import hashlib
import logging
from typing import Sequence

from py_ecc.bls import G2ProofOfPossession as bls

logger = logging.getLogger(__name__)

G2_POINT_AT_INFINITY = b"\xc0" + b"\x00" * 95


def sha256(data: bytes) -> bytes:
    """Compute SHA256 hash."""
    return hashlib.sha256(data).digest()


def hash_tree_root(obj) -> bytes:
    """Compute the hash tree root of an SSZ object, or pass a 32-byte root through."""
    if isinstance(obj, bytes):
        if len(obj) == 32:
            return obj
        raise ValueError(f"Expected 32-byte root, got {len(obj)} bytes")

    if hasattr(obj, "hash_tree_root"):
        return bytes(obj.hash_tree_root())

    raise TypeError(f"Cannot compute hash_tree_root of {type(obj)}")


def fast_aggregate_verify(pubkeys: Sequence[bytes], message: bytes, signature: bytes) -> bool:
    """Verify an aggregate signature where all signers signed the same message.

    Implements eth_fast_aggregate_verify: with no pubkeys, the signature must
    be the G2 point at infinity.
    """
    if len(pubkeys) == 0:
        return signature == G2_POINT_AT_INFINITY
    try:
        return bls.FastAggregateVerify(list(pubkeys), message, signature)
    except (ValueError, AssertionError) as e:
        logger.debug(f"fast_aggregate_verify rejected malformed input: {e}")
        return False


bls_verify = fast_aggregate_verify


__all__ = [
    "sha256",
    "hash_tree_root",
    "fast_aggregate_verify",
    "bls_verify",
]
