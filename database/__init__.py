"""Database module for the marketplace document store.

This module handles:
- The in-process asset and sale collections
- Loading and saving them as JSON documents
- Per-asset locks for check-and-update sequences
- Store lifecycle
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List

import aiofiles
import aiofiles.os
import backoff

from .exceptions import DatabaseError, PersistenceError

logger = logging.getLogger(__name__)


class MarketplaceStore:
    """Owns the asset and sale collections and their on-disk documents.

    Each collection is persisted as one JSON array, rewritten in full on every
    save. With no data directory the store lives purely in memory.
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        assets_file: str = 'assets.json',
        sales_file: str = 'sales.json',
        contract_address: Optional[str] = None
    ) -> None:
        self.data_dir = Path(data_dir) if data_dir else None
        self.assets_path = self.data_dir / assets_file if self.data_dir else None
        self.sales_path = self.data_dir / sales_file if self.data_dir else None
        self.assets: List[Dict[str, Any]] = []
        self.sales: List[Dict[str, Any]] = []
        self.contract_address = contract_address or None
        self._asset_locks: Dict[str, asyncio.Lock] = {}
        self._write_locks = {'assets': asyncio.Lock(), 'sales': asyncio.Lock()}

    @property
    def persistent(self) -> bool:
        return self.data_dir is not None

    def load(self) -> None:
        """Load both documents, starting fresh for any that are missing or unreadable."""
        if not self.persistent:
            return
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.assets = _load_document(self.assets_path)
        self.sales = _load_document(self.sales_path)
        logger.info(
            f"Loaded {len(self.assets)} assets and {len(self.sales)} sales from {self.data_dir}"
        )

    async def save_assets(self) -> bool:
        """Rewrite the assets document. Returns False if the write failed."""
        return await self._save('assets', self.assets_path, self.assets)

    async def save_sales(self) -> bool:
        """Rewrite the sales document. Returns False if the write failed."""
        return await self._save('sales', self.sales_path, self.sales)

    async def _save(self, document: str, path: Optional[Path], records: List[Dict[str, Any]]) -> bool:
        if path is None:
            return True

        async with self._write_locks[document]:
            try:
                payload = json.dumps(records, indent=2)
                tmp_path = path.with_suffix(path.suffix + '.tmp')
                async with aiofiles.open(tmp_path, 'w') as f:
                    await f.write(payload)
                await aiofiles.os.replace(tmp_path, path)
                return True
            except (OSError, TypeError, ValueError) as e:
                # Memory stays authoritative; disk may now lag behind
                logger.error(str(PersistenceError(document, str(e))))
                return False

    def find_asset(self, asset_id: str) -> Optional[Dict[str, Any]]:
        """Get an asset record by ID, or None."""
        return next((a for a in self.assets if a['id'] == asset_id), None)

    def sales_for_asset(self, asset_id: str) -> List[Dict[str, Any]]:
        return [s for s in self.sales if s['asset_id'] == asset_id]

    def lock_for(self, asset_id: str) -> asyncio.Lock:
        """Get the lock guarding read-check-write sequences on one asset."""
        lock = self._asset_locks.get(asset_id)
        if lock is None:
            lock = self._asset_locks[asset_id] = asyncio.Lock()
        return lock


@backoff.on_exception(backoff.expo, OSError, max_tries=3)
def _read_document(path: Path) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def _load_document(path: Path) -> List[Dict[str, Any]]:
    """Read one JSON array document, returning [] when it is absent or invalid."""
    if not path.exists():
        return []
    try:
        records = json.loads(_read_document(path))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load {path.name}, starting fresh: {e}")
        return []
    if not isinstance(records, list):
        logger.warning(f"{path.name} does not contain a list, starting fresh")
        return []
    return records


def init_db(settings: Optional[Dict[str, Any]] = None) -> MarketplaceStore:
    """Create and load a store from settings.

    Args:
        settings: Optional settings dict. If not provided, will use settings.conf.

    Returns:
        The loaded store
    """
    if settings is None:
        # Import here to avoid circular imports
        from config import settings_conf
        settings = settings_conf

    store = MarketplaceStore(
        data_dir=settings.get('data_dir') or None,
        assets_file=settings.get('assets_file', 'assets.json'),
        sales_file=settings.get('sales_file', 'sales.json'),
        contract_address=settings.get('contract_address') or None
    )
    store.load()
    if store.contract_address:
        logger.info(f"Using contract: {store.contract_address}")
    return store


async def close(store: MarketplaceStore) -> None:
    """Flush both documents before shutdown."""
    await store.save_assets()
    await store.save_sales()


# Export public interface
__all__ = ['MarketplaceStore', 'init_db', 'close', 'DatabaseError', 'PersistenceError']
