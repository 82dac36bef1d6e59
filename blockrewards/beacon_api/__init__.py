"""Beacon API HTTP server."""

from .server import BeaconAPI, BlockIdError
from .utils import to_hex, error_response

__all__ = [
    "BeaconAPI",
    "BlockIdError",
    "to_hex",
    "error_response",
]
