from __future__ import annotations

import asyncio
import json
import logging
import time
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError
from web3 import Web3

from trade_indexer.config.settings import (
    DEFAULT_PAGE_SIZE,
    HISTORY_START_BLOCK,
    MAX_PAGE_SIZE,
    VOLUME_WINDOW_MS,
)

log = logging.getLogger(__name__)


class HistoricalRequest(BaseModel):
    type: Literal["getHistorical"]
    tokenAddress: Optional[str] = None
    poolAddress: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


def format_ether(wei: int) -> str:
    return format(Decimal(Web3.from_wei(int(wei), "ether")), "f")


class HistoricalQueryService:
    """Read side for clients: paged history, 24h window, totals, metrics."""

    def __init__(self, sink, registry=None, rpc=None, history_start_block: int = HISTORY_START_BLOCK):
        self.sink = sink
        self.registry = registry
        self.rpc = rpc
        self.history_start_block = history_start_block

    async def historical(
        self,
        token: Optional[str] = None,
        pool: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> dict:
        scope = {"token": token, "pool": pool, "min_block": self.history_start_block}
        since = int(time.time() * 1000) - VOLUME_WINDOW_MS

        records, records_24h, total = await asyncio.gather(
            self.sink.find_page(page=page, limit=limit, **scope),
            self.sink.find_since(since, **scope),
            self.sink.count(**scope),
        )
        log.info(
            f"Fetched {len(records)} transactions (page {page}, token={token}, pool={pool}), total {total}"
        )
        return {
            "type": "historical",
            "data": [r.to_document() for r in records],
            "data24h": [r.to_document() for r in records_24h],
            "page": page,
            "totalCount": total,
        }

    async def liquidity(self) -> int:
        """Sum of every registered pool's native balance, read live."""
        if self.rpc is None or self.registry is None:
            return 0
        balances = await asyncio.gather(*(self.rpc.get_balance(pool) for pool in self.registry.pools()))
        return sum(balances)

    async def metrics(self) -> dict:
        since = int(time.time() * 1000) - VOLUME_WINDOW_MS
        volume, volume24, liquidity = await asyncio.gather(
            self.sink.total_volume(),
            self.sink.total_volume(since),
            self.liquidity(),
        )
        return {
            "volume": format_ether(volume),
            "volume24": format_ether(volume24),
            "liquidity": format_ether(liquidity),
        }

    async def handle_message(self, raw: str) -> Optional[dict]:
        """Answer one inbound socket message; None for anything unusable."""
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError):
            log.warning(f"Ignoring malformed message: {raw!r:.200}")
            return None
        if not isinstance(payload, dict) or payload.get("type") != "getHistorical":
            log.warning(f"Ignoring unsupported message type: {str(payload)[:200]}")
            return None
        try:
            request = HistoricalRequest(**payload)
        except ValidationError as e:
            log.warning(f"Ignoring invalid getHistorical request: {e.errors()}")
            return None
        return await self.historical(
            token=request.tokenAddress,
            pool=request.poolAddress,
            page=request.page,
            limit=request.limit,
        )
