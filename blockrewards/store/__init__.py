"""Block and pre-state storage with SQLite persistence."""

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from ..spec.forks import ForkName
from ..spec.network_config import NetworkConfig, get_config

logger = logging.getLogger(__name__)


class Store:
    """SQLite-backed store for signed blocks and the pre-states of their rewards.

    Blocks are keyed by block root. The pre-state of a block (the state at
    the block's slot, before the block is applied) is keyed by the same root.
    Recently loaded blocks are kept in an in-memory cache.
    """

    def __init__(self, data_dir: Optional[str] = None, config: Optional[NetworkConfig] = None):
        self.data_dir = Path(data_dir) if data_dir else Path(".")
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config = config or get_config()

        self._block_cache: dict[bytes, object] = {}
        self._cache_limit = 128

        self._db_path = self.data_dir / "blocks.db"
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self) -> None:
        """Initialize SQLite database and tables."""
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")

        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS blocks (
                root BLOB PRIMARY KEY,
                slot INTEGER,
                fork TEXT,
                data BLOB
            );
            CREATE TABLE IF NOT EXISTS pre_states (
                block_root BLOB PRIMARY KEY,
                slot INTEGER,
                fork TEXT,
                data BLOB
            );
            CREATE INDEX IF NOT EXISTS idx_blocks_slot ON blocks(slot);
        """)
        self._conn.commit()
        logger.info(f"SQLite store initialized at {self._db_path}")

    def _fork_at(self, slot: int) -> ForkName:
        return self.config.get_fork_name(slot)

    def _decode_block(self, fork_key: str, data: bytes):
        from ..spec.types import get_fork_types
        return get_fork_types(ForkName.from_key(fork_key)).signed_block.decode_bytes(data)

    def _decode_state(self, fork_key: str, data: bytes):
        from ..spec.types import get_fork_types
        return get_fork_types(ForkName.from_key(fork_key)).state.decode_bytes(data)

    def save_block(self, root: bytes, signed_block) -> None:
        """Save a signed beacon block by root."""
        self._block_cache[root] = signed_block
        self._trim_cache(self._block_cache)

        slot = int(signed_block.message.slot)
        fork = self._fork_at(slot)
        self._conn.execute(
            "INSERT OR REPLACE INTO blocks (root, slot, fork, data) VALUES (?, ?, ?, ?)",
            (root, slot, fork.key, signed_block.encode_bytes())
        )
        self._conn.commit()
        logger.debug(f"Saved block: slot={slot}, fork={fork.key}, root={root.hex()[:16]}")

    def save_pre_state(self, block_root: bytes, state) -> None:
        """Save the pre-state used to compute the rewards of a block."""
        slot = int(state.slot)
        fork = self._fork_at(slot)
        self._conn.execute(
            "INSERT OR REPLACE INTO pre_states (block_root, slot, fork, data) VALUES (?, ?, ?, ?)",
            (block_root, slot, fork.key, state.encode_bytes())
        )
        self._conn.commit()
        logger.debug(f"Saved pre-state: slot={slot}, fork={fork.key}, block={block_root.hex()[:16]}")

    def get_block(self, root: bytes) -> Optional[object]:
        """Get a signed beacon block by root."""
        if root in self._block_cache:
            return self._block_cache[root]

        cursor = self._conn.cursor()
        cursor.execute("SELECT fork, data FROM blocks WHERE root = ?", (root,))
        row = cursor.fetchone()
        if row is None:
            return None

        block = self._decode_block(*row)
        self._block_cache[root] = block
        self._trim_cache(self._block_cache)
        return block

    def get_block_by_slot(self, slot: int) -> Optional[tuple[bytes, object]]:
        """Get (root, signed block) of the block at a slot (first match)."""
        cursor = self._conn.cursor()
        cursor.execute("SELECT root FROM blocks WHERE slot = ? LIMIT 1", (slot,))
        row = cursor.fetchone()
        if row is None:
            return None
        root = bytes(row[0])
        return root, self.get_block(root)

    def get_pre_state(self, block_root: bytes) -> Optional[object]:
        """Get the pre-state stored for a block."""
        cursor = self._conn.cursor()
        cursor.execute("SELECT fork, data FROM pre_states WHERE block_root = ?", (block_root,))
        row = cursor.fetchone()
        if row is None:
            return None
        return self._decode_state(*row)

    def get_head_root(self) -> Optional[bytes]:
        """Root of the stored block with the highest slot."""
        cursor = self._conn.cursor()
        cursor.execute("SELECT root FROM blocks ORDER BY slot DESC LIMIT 1")
        row = cursor.fetchone()
        return bytes(row[0]) if row else None

    def get_genesis_root(self) -> Optional[bytes]:
        """Root of the stored slot 0 block, if any."""
        cursor = self._conn.cursor()
        cursor.execute("SELECT root FROM blocks WHERE slot = 0 LIMIT 1")
        row = cursor.fetchone()
        return bytes(row[0]) if row else None

    def count_blocks(self) -> int:
        cursor = self._conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM blocks")
        return cursor.fetchone()[0]

    def _trim_cache(self, cache: dict, limit: Optional[int] = None) -> None:
        """Trim cache to limit size."""
        limit = limit or self._cache_limit
        while len(cache) > limit:
            oldest_key = next(iter(cache))
            del cache[oldest_key]

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.info("SQLite store closed")


__all__ = ["Store"]
