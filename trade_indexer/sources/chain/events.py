from typing import Dict, List
from eth_utils import event_signature_to_log_topic, encode_hex
from web3._utils.events import get_event_data


def abi_type(param: Dict) -> str:
    """Canonical ABI type string, expanding tuple components."""
    kind = param["type"]
    if kind.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in param.get("components", []))
        return f"({inner}){kind[len('tuple'):]}"
    return kind


def abi_signature(entry: Dict) -> str:
    """`name(type1,type2,…)` for a function or event ABI entry."""
    return f"{entry['name']}({','.join(abi_type(p) for p in entry.get('inputs', []))})"


def event_topic(event_abi: Dict) -> str:
    """0x-prefixed topic0 for an event ABI entry."""
    return encode_hex(event_signature_to_log_topic(abi_signature(event_abi)))


def decode_event_logs(codec, event_abi: Dict, raw_logs: List) -> List:
    """Decode raw logs against one event ABI → AttributeDicts with `args`."""
    return [get_event_data(codec, event_abi, log) for log in raw_logs]
