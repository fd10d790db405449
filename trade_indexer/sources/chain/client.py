from web3 import AsyncWeb3, AsyncHTTPProvider, Web3
import backoff
import logging
from typing import Any, Dict, Iterable, List, Optional
from trade_indexer.config.settings import CHAIN_ID, RPC_MAX_TRIES, RPC_TIMEOUT_SECONDS
from trade_indexer.sources.chain.events import decode_event_logs, event_topic

logger = logging.getLogger(__name__)

# Cache of RPC clients per RPC URL
_rpc_clients: Dict[str, "RpcClient"] = {}


class RpcClient:
    """Retry-wrapped read access to the chain.

    Every method retries with exponential backoff and only surfaces the
    error once `RPC_MAX_TRIES` attempts have failed. `call_count` counts
    every request actually sent, retries included.
    """

    def __init__(self, w3: AsyncWeb3):
        self.w3 = w3
        self.call_count = 0

    @backoff.on_exception(backoff.expo, Exception, max_tries=RPC_MAX_TRIES, jitter=None)
    async def get_latest_block_number(self) -> int:
        self.call_count += 1
        return int(await self.w3.eth.block_number)

    @backoff.on_exception(backoff.expo, Exception, max_tries=RPC_MAX_TRIES, jitter=None)
    async def get_block(self, number: int, full_transactions: bool = True):
        self.call_count += 1
        return await self.w3.eth.get_block(number, full_transactions=full_transactions)

    @backoff.on_exception(backoff.expo, Exception, max_tries=RPC_MAX_TRIES, jitter=None)
    async def get_event_logs(
        self,
        event_abi: dict,
        *,
        block_hash: Optional[Any] = None,
        from_block: Optional[int] = None,
        to_block: Optional[int] = None,
        addresses: Optional[Iterable[str]] = None,
    ) -> List:
        """Fetch and decode logs of one event, scoped by block hash or range."""
        params: Dict[str, Any] = {"topics": [event_topic(event_abi)]}
        if block_hash is not None:
            params["blockHash"] = block_hash
        else:
            params["fromBlock"] = from_block
            params["toBlock"] = to_block if to_block is not None else "latest"
        if addresses is not None:
            params["address"] = [Web3.to_checksum_address(a) for a in addresses]

        self.call_count += 1
        raw_logs = await self.w3.eth.get_logs(params)
        return decode_event_logs(self.w3.codec, event_abi, raw_logs)

    @backoff.on_exception(backoff.expo, Exception, max_tries=RPC_MAX_TRIES, jitter=None)
    async def read_contract_value(self, address: str, abi: list, function_name: str, *args) -> Any:
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        self.call_count += 1
        return await getattr(contract.functions, function_name)(*args).call()

    @backoff.on_exception(backoff.expo, Exception, max_tries=RPC_MAX_TRIES, jitter=None)
    async def get_balance(self, address: str) -> int:
        self.call_count += 1
        return int(await self.w3.eth.get_balance(Web3.to_checksum_address(address)))


class ChainIdMismatch(RuntimeError):
    """The RPC endpoint serves a different chain than configured."""


@backoff.on_exception(
    backoff.expo,
    Exception,
    max_tries=RPC_MAX_TRIES,
    jitter=None,
    giveup=lambda e: isinstance(e, ChainIdMismatch),
)
async def _create_rpc_client(rpc_url: str, chain_id: int = CHAIN_ID) -> RpcClient:
    logger.info(f"Connecting to RPC: {rpc_url}")
    w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": RPC_TIMEOUT_SECONDS}))

    if not await w3.is_connected():
        raise ConnectionError(f"Failed to connect to RPC: {rpc_url}")

    remote_chain_id = int(await w3.eth.chain_id)
    if remote_chain_id != chain_id:
        raise ChainIdMismatch(f"RPC {rpc_url} serves chain {remote_chain_id}, expected {chain_id}")

    logger.info(f"Connected to {rpc_url} (chain {remote_chain_id}) ✅")
    return RpcClient(w3)


async def get_rpc_client(rpc_url: str) -> RpcClient:
    """Returns a cached or newly created RPC client for a given RPC URL."""
    if rpc_url not in _rpc_clients:
        _rpc_clients[rpc_url] = await _create_rpc_client(rpc_url)
    return _rpc_clients[rpc_url]
