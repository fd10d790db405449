# Launchpad factory: enumerates tokens and announces new pools.
FACTORY_ABI = [
    { "type": "function", "name": "getAllTokens", "inputs": [],
      "outputs": [ { "name": "", "type": "address[]" } ], "stateMutability": "view" },
    { "type": "function", "name": "getPool",
      "inputs": [ { "name": "tokenAddress", "type": "address" } ],
      "outputs": [ { "name": "", "type": "address" } ], "stateMutability": "view" },
    { "type": "event", "name": "PoolCreated", "anonymous": False,
      "inputs": [
          { "name": "creator", "type": "address", "indexed": True },
          { "name": "pool",    "type": "address", "indexed": False },
          { "name": "token",   "type": "address", "indexed": False },
      ] },
]

# Bonding-curve pool: one Action event per buy / sell.
POOL_ABI = [
    { "type": "event", "name": "Action", "anonymous": False,
      "inputs": [
          { "name": "token",       "type": "address", "indexed": True },
          { "name": "initiator",   "type": "address", "indexed": True },
          { "name": "tokenAmount", "type": "uint256", "indexed": False },
          { "name": "vtruAmount",  "type": "uint256", "indexed": False },
          { "name": "actionType",  "type": "uint8",   "indexed": False },
      ] },
]


def find_entry(abi: list, name: str, kind: str = "event") -> dict:
    for entry in abi:
        if entry.get("type") == kind and entry.get("name") == name:
            return entry
    raise KeyError(f"{kind} {name} not found in ABI")


POOL_CREATED_EVENT = find_entry(FACTORY_ABI, "PoolCreated")
ACTION_EVENT = find_entry(POOL_ABI, "Action")


def _fn(name: str, *inputs: tuple, payable: bool = False) -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [],
        "stateMutability": "payable" if payable else "nonpayable",
    }


# Interfaces the transaction-input decoder recognises with full parameters.
COMMON_ABI = [
    # ERC-20
    _fn("transfer", ("to", "address"), ("amount", "uint256")),
    _fn("approve", ("spender", "address"), ("amount", "uint256")),
    _fn("transferFrom", ("from", "address"), ("to", "address"), ("amount", "uint256")),
    # wrapped native coin
    _fn("deposit", payable=True),
    _fn("withdraw", ("amount", "uint256")),
    # Uniswap V2 style router
    _fn("swapExactTokensForTokens", ("amountIn", "uint256"), ("amountOutMin", "uint256"),
        ("path", "address[]"), ("to", "address"), ("deadline", "uint256")),
    _fn("swapTokensForExactTokens", ("amountOut", "uint256"), ("amountInMax", "uint256"),
        ("path", "address[]"), ("to", "address"), ("deadline", "uint256")),
    _fn("swapExactETHForTokens", ("amountOutMin", "uint256"), ("path", "address[]"),
        ("to", "address"), ("deadline", "uint256"), payable=True),
    _fn("swapTokensForExactETH", ("amountOut", "uint256"), ("amountInMax", "uint256"),
        ("path", "address[]"), ("to", "address"), ("deadline", "uint256")),
    _fn("swapExactTokensForETH", ("amountIn", "uint256"), ("amountOutMin", "uint256"),
        ("path", "address[]"), ("to", "address"), ("deadline", "uint256")),
    _fn("swapETHForExactTokens", ("amountOut", "uint256"), ("path", "address[]"),
        ("to", "address"), ("deadline", "uint256"), payable=True),
    _fn("addLiquidity", ("tokenA", "address"), ("tokenB", "address"),
        ("amountADesired", "uint256"), ("amountBDesired", "uint256"),
        ("amountAMin", "uint256"), ("amountBMin", "uint256"),
        ("to", "address"), ("deadline", "uint256")),
    _fn("addLiquidityETH", ("token", "address"), ("amountTokenDesired", "uint256"),
        ("amountTokenMin", "uint256"), ("amountETHMin", "uint256"),
        ("to", "address"), ("deadline", "uint256"), payable=True),
    _fn("removeLiquidity", ("tokenA", "address"), ("tokenB", "address"),
        ("liquidity", "uint256"), ("amountAMin", "uint256"), ("amountBMin", "uint256"),
        ("to", "address"), ("deadline", "uint256")),
    _fn("removeLiquidityETH", ("token", "address"), ("liquidity", "uint256"),
        ("amountTokenMin", "uint256"), ("amountETHMin", "uint256"),
        ("to", "address"), ("deadline", "uint256")),
    # launchpad factory
    _fn("createPoolWithToken", ("_name", "string"), ("_ticker", "string"), ("_uri", "string"),
        ("_amount", "uint256"), ("_value", "uint256"), payable=True),
]
