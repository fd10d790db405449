from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from trade_indexer.api.historical import HistoricalQueryService
from trade_indexer.api.live import StoreTailer, SubscriptionHub
from trade_indexer.config.settings import FACTORY_ADDRESS, FACTORY_V2_ADDRESS, RPC_URL
from trade_indexer.sources.chain.client import RpcClient, get_rpc_client
from trade_indexer.sources.indexer.registry import PoolRegistry
from trade_indexer.sources.indexer.scanner import BlockScanner
from trade_indexer.storage.db import get_engine, get_session_factory
from trade_indexer.storage.sink import PersistenceSink
from trade_indexer.storage.trade_store import create_indexes

log = logging.getLogger(__name__)

MODES = ("index", "serve")


@dataclass
class Runtime:
    sink: PersistenceSink
    hub: SubscriptionHub
    service: HistoricalQueryService
    registry: PoolRegistry
    rpc: Optional[RpcClient] = None
    scanner: Optional[BlockScanner] = None
    tailer: Optional[StoreTailer] = None
    _tasks: list = field(default_factory=list)

    async def start(self) -> None:
        if self.scanner is not None:
            self._tasks.append(asyncio.create_task(self.scanner.run(), name="block-scanner"))
        if self.tailer is not None:
            self._tasks.append(asyncio.create_task(self.tailer.run(), name="store-tailer"))

    async def stop(self) -> None:
        """Stop background loops (the scanner flushes on exit), then close sockets."""
        log.info("Shutting down gracefully...")
        if self.scanner is not None:
            self.scanner.stop()
        if self.tailer is not None:
            self.tailer.stop()
        results = await asyncio.gather(*self._tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                log.error(f"Background task ended with error: {result!r}")
        self._tasks.clear()

        await self.hub.close()
        if self.rpc is not None:
            log.info(f"Total API calls made: {self.rpc.call_count}")


def factory_addresses() -> list[str]:
    return [address for address in (FACTORY_ADDRESS, FACTORY_V2_ADDRESS) if address]


async def build_runtime(mode: str = "index") -> Runtime:
    """Acquire every startup resource; any failure here is fatal."""
    if mode not in MODES:
        raise ValueError(f"Unsupported mode: {mode}")
    factories = factory_addresses()
    if mode == "index" and not factories:
        raise ValueError("FACTORY_ADDRESS must be set to run the indexer")

    await asyncio.to_thread(create_indexes, get_engine())
    sink = PersistenceSink(get_session_factory())
    rpc = await get_rpc_client(RPC_URL)

    registry = PoolRegistry()
    for factory in factories:
        await registry.bulk_load(rpc, factory)

    hub = SubscriptionHub()
    service = HistoricalQueryService(sink, registry=registry, rpc=rpc)
    runtime = Runtime(sink=sink, hub=hub, service=service, registry=registry, rpc=rpc)

    if mode == "index":
        scanner = BlockScanner(rpc, registry, sink, factory_addresses=factories)
        await scanner.load_checkpoint()
        scanner.add_listener(hub.publish_records)
        runtime.scanner = scanner
    else:
        runtime.tailer = StoreTailer(sink, hub)
    return runtime
