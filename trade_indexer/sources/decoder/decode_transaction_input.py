# decode_transaction_input.py
# --------------------------------------------------------------
# Best-effort classification of raw call data.
#
#   1. web3 contract decode, one COMMON_ABI entry at a time
#   2. eth-abi decode in non-strict mode (tolerates dirty padding)
#   3. 4-byte selector table (name only, no params)
#   4. "Unknown (<selector>)"
# --------------------------------------------------------------
from typing import Callable, Dict, List, Optional, Sequence, Union
from eth_abi import decode as abi_decode
from eth_utils import function_signature_to_4byte_selector, to_bytes
from web3 import Web3
import logging
from trade_indexer.config.abis import COMMON_ABI
from trade_indexer.config.function_signatures import FUNCTION_SIGNATURES
from trade_indexer.sources.chain.events import abi_signature, abi_type
from trade_indexer.utils.types import DecodedCall

log = logging.getLogger(__name__)

Decoder = Callable[[str], Optional[DecodedCall]]

_w3 = Web3()


def _build_contracts(abi: List[dict]) -> list:
    contracts = []
    for entry in abi:
        if entry.get("type") != "function":
            continue
        try:
            contracts.append(_w3.eth.contract(abi=[entry]))
        except Exception as e:
            log.warning(f"Failed to create interface for ABI entry {entry.get('name')}: {e}")
    return contracts


def _build_selector_index(abi: List[dict]) -> Dict[bytes, dict]:
    index = {}
    for entry in abi:
        if entry.get("type") == "function":
            index[function_signature_to_4byte_selector(abi_signature(entry))] = entry
    return index


_CONTRACTS = _build_contracts(COMMON_ABI)
_SELECTOR_INDEX = _build_selector_index(COMMON_ABI)


def normalize_call_data(data: Union[str, bytes, bytearray]) -> str:
    """bytes / hex string → lowercase 0x-prefixed hex string."""
    if isinstance(data, (bytes, bytearray)):
        return Web3.to_hex(bytes(data))
    data = data.strip().lower()
    return data if data.startswith("0x") else "0x" + data


def selector_of(data: str) -> str:
    return data[:10]


# ---------------------------------------------------------------------------
# strategies: each returns a DecodedCall or None, never raises
# ---------------------------------------------------------------------------

def decode_with_contract_abi(data: str) -> Optional[DecodedCall]:
    for contract in _CONTRACTS:
        try:
            func, params = contract.decode_function_input(data)
        except Exception:
            continue                                    # this interface didn't match
        return DecodedCall(func.fn_name, dict(params))
    return None


def decode_with_eth_abi(data: str) -> Optional[DecodedCall]:
    try:
        raw = to_bytes(hexstr=data)
        entry = _SELECTOR_INDEX.get(raw[:4])
        if entry is None:
            return None
        inputs = entry.get("inputs", [])
        values = abi_decode([abi_type(p) for p in inputs], raw[4:], strict=False)
    except Exception:
        return None
    return DecodedCall(entry["name"], {p["name"]: v for p, v in zip(inputs, values)})


def decode_with_selector_table(data: str) -> Optional[DecodedCall]:
    name = FUNCTION_SIGNATURES.get(selector_of(data))
    if name is None:
        return None
    return DecodedCall(name, {})


DECODERS: Sequence[Decoder] = (
    decode_with_contract_abi,
    decode_with_eth_abi,
    decode_with_selector_table,
)


def decode_transaction_input(
    data: Union[str, bytes, bytearray],
    decoders: Sequence[Decoder] = DECODERS,
) -> DecodedCall:
    """Describe raw call data as {functionName, params}; never raises."""
    try:
        data = normalize_call_data(data)
        for decoder in decoders:
            result = decoder(data)
            if result is not None:
                return result
        return DecodedCall(f"Unknown ({selector_of(data)})", {})
    except Exception as e:
        log.error(f"Error decoding transaction input: {e}")
        return DecodedCall("Decoding Error", {})
