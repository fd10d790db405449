# trade_indexer/utils/log_utils.py
from web3 import Web3
from web3.datastructures import AttributeDict
from hexbytes import HexBytes
from typing import Any, Iterator, List

def to_hex_str(value: Any) -> str:
    """HexBytes / bytes / str → lowercase 0x-prefixed string."""
    if isinstance(value, (bytes, bytearray, HexBytes)):
        return Web3.to_hex(bytes(value))
    value = str(value).lower()
    return value if value.startswith("0x") else "0x" + value

def sanitize_value(value: Any) -> Any:
    """Recursively convert Web3 / eth-abi values to JSON-safe ones."""
    if isinstance(value, (bytes, bytearray, HexBytes)):
        return Web3.to_hex(bytes(value))
    if isinstance(value, (AttributeDict, dict)):
        return {k: sanitize_value(v) for k, v in dict(value).items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_value(v) for v in value]
    return value

def chunked(rows: List[Any], size: int) -> Iterator[List[Any]]:
    """Yield consecutive slices of at most `size` rows."""
    for i in range(0, len(rows), size):
        yield rows[i : i + size]
