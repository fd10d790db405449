import asyncio
import json
import logging
from typing import List, Protocol, Set
from trade_indexer.config.settings import LIVE_POLL_SECONDS
from trade_indexer.utils.types import TradeRecord

log = logging.getLogger(__name__)


class Channel(Protocol):
    async def send_text(self, data: str) -> None: ...


def update_message(record: TradeRecord) -> str:
    return json.dumps({"type": "update", "data": record.to_document()})


class SubscriptionHub:
    """Open subscriber channels and fire-and-forget fan-out.

    There is no per-subscriber buffer: a channel that is closed or failing
    simply misses updates and is dropped from the set.
    """

    def __init__(self):
        self._channels: Set[Channel] = set()

    def __len__(self) -> int:
        return len(self._channels)

    def connect(self, channel: Channel) -> None:
        self._channels.add(channel)
        log.info(f"New client connected ({len(self._channels)} open)")

    def disconnect(self, channel: Channel) -> None:
        self._channels.discard(channel)
        log.info(f"Client disconnected ({len(self._channels)} open)")

    async def broadcast(self, message: str) -> int:
        """Send one message to every open channel; returns deliveries."""
        channels = list(self._channels)
        if not channels:
            return 0
        results = await asyncio.gather(
            *(channel.send_text(message) for channel in channels), return_exceptions=True
        )
        delivered = 0
        for channel, result in zip(channels, results):
            if isinstance(result, BaseException):
                log.warning(f"Dropping subscriber after failed send: {result}")
                self._channels.discard(channel)
            else:
                delivered += 1
        return delivered

    async def close(self) -> None:
        """Close every open channel; used once at shutdown."""
        channels, self._channels = list(self._channels), set()
        for channel in channels:
            close = getattr(channel, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                log.debug(f"Channel already closed: {e}")
        if channels:
            log.info(f"Closed {len(channels)} subscriber connections")

    async def publish_records(self, records: List[TradeRecord]) -> None:
        for record in records:
            log.debug(f"Relevant transaction detected: hash = {record.hash}, blockNumber = {record.block_number}")
            await self.broadcast(update_message(record))


class StoreTailer:
    """Live feed for an API process that runs without the scanner.

    Polls the store for records above the highest block already pushed and
    publishes them through the hub. Starts from the newest stored block so
    connecting clients do not receive a replay of history.
    """

    def __init__(self, sink, hub: SubscriptionHub, poll_seconds: float = LIVE_POLL_SECONDS):
        self.sink = sink
        self.hub = hub
        self.poll_seconds = poll_seconds
        self.last_block = 0
        self._stop = asyncio.Event()

    def stop(self) -> None:
        self._stop.set()

    async def poll_once(self) -> int:
        records = await self.sink.records_after_block(self.last_block)
        if records:
            await self.hub.publish_records(records)
            self.last_block = max(r.block_number for r in records)
            log.info(f"Processed {len(records)} new transactions")
        return len(records)

    async def run(self) -> None:
        self.last_block = await self.sink.latest_block_number()
        log.info(f"Tailing store for new transactions since block {self.last_block}…")
        while not self._stop.is_set():
            try:
                await self.poll_once()
            except Exception:
                log.exception("Error during polling")
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.poll_seconds)
            except asyncio.TimeoutError:
                pass
