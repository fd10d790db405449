from typing import Any, Dict, NamedTuple, Optional

from trade_indexer.utils.log_utils import sanitize_value


class TradeRecord(NamedTuple):
    """One buy or sell against a pool, as stored and pushed to subscribers.

    `id` is `{tx_hash}_{log_index}`, so replaying a log always yields the
    same key and the same content. Amounts are decimal strings (wei).
    """
    id: str
    token: Optional[str]
    hash: str
    block_number: int
    pool: str
    client: str
    action: str                 # "buy" | "sell"
    token_amount: str
    vtru_amount: str
    timestamp: int              # ms, from the containing block

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "token": self.token,
            "hash": self.hash,
            "blockNumber": self.block_number,
            "pool": self.pool,
            "client": self.client,
            "action": self.action,
            "tokenAmount": self.token_amount,
            "vtruAmount": self.vtru_amount,
            "timestamp": self.timestamp,
        }


class DecodedCall(NamedTuple):
    function_name: str
    params: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"functionName": self.function_name, "params": sanitize_value(self.params)}
