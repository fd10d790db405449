# normalizer.py
# --------------------------------------------------------------
# Decoded pool Action event → TradeRecord
# --------------------------------------------------------------
from trade_indexer.sources.indexer.registry import PoolRegistry, canonical
from trade_indexer.utils.log_utils import to_hex_str
from trade_indexer.utils.types import TradeRecord

BUY_ACTION = 0


def classify_action(action_type: int) -> str:
    # Two-way only: any code other than 0 is recorded as a sell.
    return "buy" if int(action_type) == BUY_ACTION else "sell"


def record_id(tx_hash: str, log_index: int) -> str:
    return f"{tx_hash}_{int(log_index)}"


def normalize_action_log(event, block_timestamp: int, registry: PoolRegistry) -> TradeRecord:
    """
    Build the canonical trade record for one decoded Action log.

    ── token comes from the registry; an unregistered pool gives token=None
       instead of dropping the record.
    ── amounts leave here as decimal strings so no precision is lost on the
       way to the store.
    """
    args = event["args"]
    tx_hash = to_hex_str(event["transactionHash"])
    pool = canonical(event["address"])

    return TradeRecord(
        id=record_id(tx_hash, event["logIndex"]),
        token=registry.lookup_token(pool),
        hash=tx_hash,
        block_number=int(event["blockNumber"]),
        pool=pool,
        client=canonical(args["initiator"]),
        action=classify_action(args["actionType"]),
        token_amount=str(int(args["tokenAmount"])),
        vtru_amount=str(int(args["vtruAmount"])),
        timestamp=int(block_timestamp) * 1000,
    )
