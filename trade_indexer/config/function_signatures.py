# 4-byte selector → human readable name, for calls we know by name only.
# Keys are the first 10 characters of the call data ("0x" + 8 hex digits);
# "0x" is a plain value transfer with empty call data.
FUNCTION_SIGNATURES = {
    "0x":         "transfer",
    "0x4982e3b7": "unwrapAll",
    "0x60806040": "createContract",
    "0x8129fc1c": "initialize",
    "0x9d54ded8": "roulette",
    "0xa694fc3a": "stake",
    "0xa9059cbb": "transfer",
    "0x095ea7b3": "approve",
    "0x23b872dd": "transferFrom",
    "0xd46eb119": "wrap",
    "0x2e17de78": "unstake",
    "0xa1705d06": "flipit",
    "0xb88a802f": "claimreward",
    "0x464faccc": "minttokens",
    "0x47cff018": "createvault",
    "0xc3de453d": "bridge",
    "0x2f2ff15d": "grantrole",
    "0x2195995c": "removeliquiditywithpermit",
    "0xbaa2abde": "removeliquidity",
    "0x02751cec": "removeliquidityeth",
    "0xfc8b7cc1": "initiateotctrade",
    "0x2def6620": "unstake",
    "0xa82ba76f": "buyNFT",
    "0x4d31dd96": "issuevibeNFT",
    "0x2f57ee41": "stake",
    "0xf2fde38b": "transferownership",
    "0x35ed71a8": "setswapstatus",
    "0xe6d22501": "stake",
    "0x49374246": "consign",
    "0x4bfe11a5": "consign",
    "0x31df7a62": "claimstudio",
    "0x8f751b35": "addlicense",
    "0xefd0cbf9": "mintpublic",
    "0xe7a33822": "seal",
    "0x2b416e94": "unseal",
    "0x3f2e909c": "createtransfer",
    "0x5f832177": "canceltransfer",
    "0x0cac54ed": "claimtransfer",
    "0xb209e7c2": "remholder",
    "0xd0e30db0": "deposit",
    "0x2e1a7d4d": "withdraw",
    "0x13495af1": "newholder",
    "0x9d5c6e07": "batchmintboosters",
    "0xee3178dc": "claimrevsharebyowner",
    "0xac9650d8": "multicall",
    "0xe8e33700": "addliquidity",
    "0xf305d719": "addliquidityeth",
    "0x38ed1739": "swapExactTokensForTokens",
    "0x8803dbee": "swapTokensForExactTokens",
    "0x7ff36ab5": "swapExactETHForTokens",
    "0x4a25d94a": "swapTokensForExactETH",
    "0x18cbafe5": "swapExactTokensForETH",
    "0xfb3bdb41": "swapETHForExactTokens",
    "0xad05f1b4": "listNFT",
    "0x305a67a8": "cancellisting",
    "0x1e83409a": "claim",
}
