# Test doubles for the chain client and subscriber sockets, plus record builders.
import asyncio
from hexbytes import HexBytes
from web3.datastructures import AttributeDict
from trade_indexer.utils.types import TradeRecord

POOL = "0x" + "aa" * 20
TOKEN = "0x" + "bb" * 20
CLIENT = "0x" + "cc" * 20
FACTORY = "0x" + "ff" * 20


def block_hash(number: int) -> str:
    return "0x" + format(number, "064x")


def make_block(number: int, timestamp: int = 1_700_000_000, tx_count: int = 1) -> AttributeDict:
    return AttributeDict({
        "number": number,
        "hash": HexBytes(block_hash(number)),
        "timestamp": timestamp,
        "transactions": [f"tx-{number}-{i}" for i in range(tx_count)],
    })


def action_event(
    block_number: int,
    tx_hash: str,
    log_index: int = 0,
    pool: str = POOL,
    initiator: str = CLIENT,
    action_type: int = 0,
    token_amount: int = 123,
    vtru_amount: int = 456,
) -> AttributeDict:
    return AttributeDict({
        "event": "Action",
        "address": pool,
        "blockNumber": block_number,
        "transactionHash": tx_hash,
        "logIndex": log_index,
        "args": AttributeDict({
            "token": TOKEN,
            "initiator": initiator,
            "tokenAmount": token_amount,
            "vtruAmount": vtru_amount,
            "actionType": action_type,
        }),
    })


def pool_created_event(pool: str, token: str, factory: str = FACTORY) -> AttributeDict:
    return AttributeDict({
        "event": "PoolCreated",
        "address": factory,
        "args": AttributeDict({"creator": CLIENT, "pool": pool, "token": token}),
    })


class FakeRpc:
    """In-memory chain with the same async surface as RpcClient."""

    def __init__(self, latest: int = 0):
        self.latest = latest
        self.blocks = {}                # number -> block
        self.logs = {}                  # (event name, block hash) -> [event]
        self.contract_values = {}       # (function name, *args) -> value
        self.balances = {}              # lowercase address -> wei
        self.fail_blocks = set()
        self.fetched = []
        self.call_count = 0
        self.in_flight = 0
        self.max_in_flight = 0

    def add_block(self, number: int, timestamp: int = 1_700_000_000, actions=(), created=()):
        self.blocks[number] = make_block(number, timestamp)
        if actions:
            self.logs[("Action", block_hash(number))] = list(actions)
        if created:
            self.logs[("PoolCreated", block_hash(number))] = list(created)

    async def get_latest_block_number(self) -> int:
        self.call_count += 1
        return self.latest

    async def get_block(self, number: int, full_transactions: bool = True):
        self.call_count += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if number in self.fail_blocks:
                raise ConnectionError(f"block {number} unavailable")
            self.fetched.append(number)
            return self.blocks.get(number) or make_block(number, tx_count=0)
        finally:
            self.in_flight -= 1

    async def get_event_logs(self, event_abi, *, block_hash=None, from_block=None, to_block=None, addresses=None):
        self.call_count += 1
        events = self.logs.get((event_abi["name"], block_hash), [])
        if addresses is not None:
            allowed = {a.lower() for a in addresses}
            events = [e for e in events if e["address"].lower() in allowed]
        return events

    async def read_contract_value(self, address, abi, function_name, *args):
        self.call_count += 1
        return self.contract_values[(function_name, *args)]

    async def get_balance(self, address: str) -> int:
        self.call_count += 1
        return self.balances.get(address.lower(), 0)


class FakeChannel:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []
        self.closed = False

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    async def close(self) -> None:
        self.closed = True


POOL_2 = "0x" + "a2" * 20
TOKEN_2 = "0x" + "b2" * 20


def make_record(block: int, log_index: int = 0, pool=POOL, token=TOKEN, vtru="1000", timestamp=None) -> TradeRecord:
    tx_hash = "0x" + format(block, "064x")
    return TradeRecord(
        id=f"{tx_hash}_{log_index}",
        token=token,
        hash=tx_hash,
        block_number=block,
        pool=pool,
        client=CLIENT,
        action="buy",
        token_amount="1",
        vtru_amount=vtru,
        timestamp=timestamp if timestamp is not None else block * 1000,
    )
