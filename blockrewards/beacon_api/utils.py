"""Beacon API utility functions."""

from aiohttp import web


def to_hex(value, length: int = 0) -> str:
    """Convert a bytes or int value to hex string with 0x prefix."""
    if isinstance(value, bytes):
        return "0x" + value.hex()
    elif isinstance(value, int):
        if length > 0:
            return "0x" + format(value, f'0{length * 2}x')
        return hex(value)
    return str(value)


def error_response(status: int, message: str) -> web.Response:
    """Beacon API error body: {"code": status, "message": message}."""
    return web.json_response({"code": status, "message": message}, status=status)
