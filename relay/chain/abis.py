"""Minimal contract ABIs: only the functions and events the relay touches."""


OPEN_ST_VALUE_ABI = [
    {
        "type": "function",
        "name": "processStaking",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_stakingIntentHash", "type": "bytes32"}],
        "outputs": [{"name": "stakeAddress", "type": "address"}],
    },
]

OPEN_ST_UTILITY_ABI = [
    {
        "type": "function",
        "name": "processMinting",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_stakingIntentHash", "type": "bytes32"}],
        "outputs": [{"name": "tokenAddress", "type": "address"}],
    },
    {
        "type": "function",
        "name": "registeredTokens",
        "stateMutability": "view",
        "inputs": [{"name": "", "type": "bytes32"}],
        "outputs": [
            {"name": "token", "type": "address"},
            {"name": "registrar", "type": "address"},
        ],
    },
    {
        "type": "event",
        "name": "StakingIntentConfirmed",
        "anonymous": False,
        "inputs": [
            {"name": "_uuid", "type": "bytes32", "indexed": True},
            {"name": "_stakingIntentHash", "type": "bytes32", "indexed": True},
            {"name": "_staker", "type": "address", "indexed": False},
            {"name": "_beneficiary", "type": "address", "indexed": False},
            {"name": "_amountST", "type": "uint256", "indexed": False},
            {"name": "_amountUT", "type": "uint256", "indexed": False},
            {"name": "_expirationHeight", "type": "uint256", "indexed": False},
        ],
    },
]

BRANDED_TOKEN_ABI = [
    {
        "type": "function",
        "name": "claim",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_beneficiary", "type": "address"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
]
