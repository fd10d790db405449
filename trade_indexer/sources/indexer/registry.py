import asyncio
import logging
from typing import Dict, Iterable, List, Optional
from trade_indexer.config.abis import FACTORY_ABI

log = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40


def canonical(address: Optional[str]) -> Optional[str]:
    if address is None:
        return None
    return str(address).strip().lower()


class PoolRegistry:
    """Pool ↔ token mapping kept as two mutually inverse lookup tables.

    Bulk-loaded from the factory at startup, then grown incrementally from
    PoolCreated events seen while scanning. A pair is only inserted when
    neither side is known yet, so an entry is never overwritten and both
    tables always agree. Lookups are pure dictionary reads.
    """

    def __init__(self):
        self._pool_by_token: Dict[str, str] = {}
        self._token_by_pool: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._token_by_pool)

    def lookup_pool(self, token: str) -> Optional[str]:
        return self._pool_by_token.get(canonical(token))

    def lookup_token(self, pool: str) -> Optional[str]:
        return self._token_by_pool.get(canonical(pool))

    def pools(self) -> List[str]:
        return list(self._token_by_pool)

    def tokens(self) -> List[str]:
        return list(self._pool_by_token)

    def add(self, pool: str, token: str) -> bool:
        """Insert one pair; first writer wins. Returns True if it was new."""
        pool, token = canonical(pool), canonical(token)
        if not pool or not token or pool == ZERO_ADDRESS:
            return False

        known_token = self._token_by_pool.get(pool)
        known_pool = self._pool_by_token.get(token)
        if known_token is None and known_pool is None:
            self._pool_by_token[token] = pool
            self._token_by_pool[pool] = token
            return True

        if known_token != token or known_pool != pool:
            log.warning(
                f"Ignoring conflicting pool mapping pool={pool} token={token} "
                f"(known token={known_token}, known pool={known_pool})"
            )
        return False

    def observe(self, pool_created_events: Iterable) -> int:
        """Feed decoded PoolCreated events; returns how many pools were new."""
        added = 0
        for event in pool_created_events:
            args = event["args"]
            if self.add(args["pool"], args["token"]):
                added += 1
                log.info(f"🆕 New pool {canonical(args['pool'])} for token {canonical(args['token'])}")
        return added

    async def bulk_load(self, rpc, factory_address: str) -> int:
        """Enumerate every token of a factory and register its pool."""
        tokens = await rpc.read_contract_value(factory_address, FACTORY_ABI, "getAllTokens")
        pools = await asyncio.gather(
            *(rpc.read_contract_value(factory_address, FACTORY_ABI, "getPool", token) for token in tokens)
        )
        added = sum(1 for token, pool in zip(tokens, pools) if self.add(pool, token))
        log.info(f"Loaded {added} pools from factory {canonical(factory_address)} ({len(tokens)} tokens)")
        return added
