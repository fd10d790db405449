import asyncio
import logging
from typing import List, Optional
from sqlalchemy.orm import sessionmaker
from trade_indexer.storage import trade_store
from trade_indexer.utils.types import TradeRecord

log = logging.getLogger(__name__)


class PersistenceSink:
    """Async facade over the trade store.

    Each call runs one short session in a worker thread so the event loop
    keeps serving block tasks and sockets while the database works.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _read(self, fn, *args, **kwargs):
        with self.session_factory() as session:
            return fn(session, *args, **kwargs)

    def _save(self, checkpoint: Optional[int], records: List[TradeRecord]) -> int:
        with self.session_factory() as session:
            written = trade_store.bulk_upsert_records(session, records)
            if checkpoint is not None:
                trade_store.upsert_checkpoint(session, checkpoint)
            session.commit()
            return written

    # ── write side ─────────────────────────────────────────────────────
    async def save_batch(self, checkpoint: Optional[int], records: List[TradeRecord]) -> int:
        """Write records and the checkpoint in one transaction."""
        written = await asyncio.to_thread(self._save, checkpoint, records)
        log.info(f"Data saved successfully. Last checked block: {checkpoint}, records written: {written}")
        return written

    async def load_checkpoint(self) -> int:
        return await asyncio.to_thread(self._read, trade_store.load_checkpoint)

    # ── read side ──────────────────────────────────────────────────────
    async def find_page(
        self,
        *,
        token: Optional[str] = None,
        pool: Optional[str] = None,
        min_block: Optional[int] = None,
        page: int = 1,
        limit: int = 50,
    ) -> List[TradeRecord]:
        conditions = trade_store.build_filter(token=token, pool=pool, min_block=min_block)
        return await asyncio.to_thread(
            self._read, trade_store.find_records, conditions, skip=(page - 1) * limit, limit=limit
        )

    async def find_since(
        self,
        since_ms: int,
        *,
        token: Optional[str] = None,
        pool: Optional[str] = None,
        min_block: Optional[int] = None,
    ) -> List[TradeRecord]:
        conditions = trade_store.build_filter(token=token, pool=pool, min_block=min_block, since_ms=since_ms)
        return await asyncio.to_thread(self._read, trade_store.find_records, conditions)

    async def count(
        self,
        *,
        token: Optional[str] = None,
        pool: Optional[str] = None,
        min_block: Optional[int] = None,
    ) -> int:
        conditions = trade_store.build_filter(token=token, pool=pool, min_block=min_block)
        return await asyncio.to_thread(self._read, trade_store.count_records, conditions)

    async def total_volume(self, since_ms: Optional[int] = None) -> int:
        return await asyncio.to_thread(self._read, trade_store.sum_vtru_amount, since_ms)

    async def records_after_block(self, block_number: int) -> List[TradeRecord]:
        return await asyncio.to_thread(self._read, trade_store.find_records_after_block, block_number)

    async def latest_block_number(self) -> int:
        return await asyncio.to_thread(self._read, trade_store.latest_block_number)
