import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, Iterable, List, Optional
from trade_indexer.config.abis import ACTION_EVENT, POOL_CREATED_EVENT
from trade_indexer.config.settings import BLOCK_TIME_SECONDS, MAX_BLOCKS_TO_PROCESS
from trade_indexer.sources.indexer.normalizer import normalize_action_log
from trade_indexer.sources.indexer.registry import PoolRegistry
from trade_indexer.utils.log_utils import to_hex_str
from trade_indexer.utils.types import TradeRecord

log = logging.getLogger(__name__)

RecordListener = Callable[[List[TradeRecord]], Awaitable[None]]


class BlockScanner:
    """Checkpointed, batch-concurrent block scanner.

    Three positions are tracked separately:

    • `cursor`               – next block to dispatch; advanced per task.
    • `checkpoint`           – end of the last batch whose tasks all finished.
    • `persisted_checkpoint` – last checkpoint durably written with its records.

    A batch that fails rolls the cursor back to its start, so the next cycle
    retries the same blocks; records are keyed by `{tx_hash}_{log_index}` and
    re-processing is an idempotent overwrite.
    """

    def __init__(
        self,
        rpc,
        registry: PoolRegistry,
        sink,
        *,
        factory_addresses: Iterable[str] = (),
        block_time: float = BLOCK_TIME_SECONDS,
        max_batch: int = MAX_BLOCKS_TO_PROCESS,
    ):
        self.rpc = rpc
        self.registry = registry
        self.sink = sink
        self.factory_addresses = [a for a in factory_addresses if a]
        self.block_time = block_time
        self.max_batch = max_batch

        self.cursor = 0
        self.checkpoint = 0
        self.persisted_checkpoint = 0

        self._pending: Dict[str, TradeRecord] = {}
        self._listeners: List[RecordListener] = []
        self._stop = asyncio.Event()

    # ── lifecycle ──────────────────────────────────────────────────────
    def add_listener(self, listener: RecordListener) -> None:
        """Called with every batch of records right after it is persisted."""
        self._listeners.append(listener)

    async def load_checkpoint(self) -> int:
        self.checkpoint = await self.sink.load_checkpoint()
        self.persisted_checkpoint = self.checkpoint
        self.cursor = self.checkpoint
        log.info(f"Loaded data: Last checked block {self.checkpoint}")
        return self.checkpoint

    def stop(self) -> None:
        self._stop.set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def run(self) -> None:
        """Scan until `stop()`; then flush whatever is still pending."""
        log.info("🔄  Starting block scanner…")
        while not self._stop.is_set():
            started = time.monotonic()
            try:
                if await self.run_cycle():
                    continue                      # still behind head: go again now
            except Exception:
                log.exception("❌ Error in monitoring cycle")

            wait = max(self.block_time - (time.monotonic() - started), 0)
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=wait)
            except asyncio.TimeoutError:
                pass

        log.info("Scanner stopping, flushing pending records…")
        await self.flush(force=True)

    # ── one cycle ──────────────────────────────────────────────────────
    async def run_cycle(self) -> bool:
        """Process at most one batch. Returns True when still behind head."""
        latest = await self.rpc.get_latest_block_number()
        if self.checkpoint == 0:
            # no backfill: indexing starts at the head seen on first boot
            self.checkpoint = self.cursor = latest

        if latest <= self.checkpoint:
            log.debug(f"No new blocks. Current: {latest}, Last checked: {self.checkpoint}")
            if self._pending:
                await self.flush()
            return False

        log.info(f"Current latest block: {latest}, Last checked block: {self.checkpoint}")
        batch_start = self.checkpoint
        batch_size = min(latest - batch_start, self.max_batch)

        # phase 1: fetch blocks and register every pool the batch creates
        self.cursor = batch_start
        tasks = []
        for _ in range(batch_size):
            tasks.append(asyncio.create_task(self.scan_block_pools(self.cursor)))
            self.cursor += 1
        blocks = await self._gather_batch(tasks, batch_start)

        # phase 2: trades, against the pool set of the whole batch
        tasks = [
            asyncio.create_task(self.collect_block_actions(block))
            for block in blocks
            if block is not None
        ]
        await self._gather_batch(tasks, batch_start)

        self.checkpoint = self.cursor
        if self._pending:
            await self.flush()

        return latest > self.checkpoint

    async def _gather_batch(self, tasks: list, batch_start: int) -> list:
        results = await asyncio.gather(*tasks, return_exceptions=True)
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            self.cursor = batch_start
            log.error(f"{len(failures)}/{len(tasks)} blocks failed in batch starting at {batch_start}")
            raise failures[0]
        return results

    async def scan_block_pools(self, number: int):
        """Fetch one block and observe its PoolCreated events.

        Returns the block, or None when it has no transactions.
        """
        block = await self.rpc.get_block(number, full_transactions=True)
        if not block["transactions"]:
            return None

        created = await self.rpc.get_event_logs(
            POOL_CREATED_EVENT,
            block_hash=to_hex_str(block["hash"]),
            addresses=self.factory_addresses or None,
        )
        if created:
            self.registry.observe(created)
        return block

    async def collect_block_actions(self, block) -> int:
        """Stage the trade records of one block's Action events."""
        pools = self.registry.pools()
        if not pools:
            return 0

        events = await self.rpc.get_event_logs(
            ACTION_EVENT, block_hash=to_hex_str(block["hash"]), addresses=pools
        )
        for event in events:
            record = normalize_action_log(event, block["timestamp"], self.registry)
            self._pending[record.id] = record
        return len(events)

    async def process_block(self, number: int) -> int:
        """Both phases for a single block."""
        block = await self.scan_block_pools(number)
        if block is None:
            return 0
        return await self.collect_block_actions(block)

    # ── persistence ────────────────────────────────────────────────────
    async def flush(self, force: bool = False) -> bool:
        """Persist pending records with the current checkpoint.

        The pending set is only cleared once the write is confirmed; a failed
        write is logged and retried on the next successful cycle.
        """
        records = list(self._pending.values())
        if not records and not force:
            return True

        checkpoint = self.checkpoint
        try:
            await self.sink.save_batch(checkpoint, records)
        except Exception:
            log.exception(f"❌ Error saving {len(records)} records at checkpoint {checkpoint}")
            return False

        for record in records:
            self._pending.pop(record.id, None)
        self.persisted_checkpoint = max(self.persisted_checkpoint, checkpoint)

        if records:
            await self._notify(sorted(records, key=lambda r: (r.block_number, r.id)))
        return True

    async def _notify(self, records: List[TradeRecord]) -> None:
        for listener in self._listeners:
            try:
                await listener(records)
            except Exception:
                log.exception("❌ Record listener failed")
