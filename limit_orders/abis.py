"""Minimal AugustusRFQ ABI fragments used by the SDK."""

_ORDER_TUPLE = {
    "components": [
        {"internalType": "uint256", "name": "nonceAndMeta", "type": "uint256"},
        {"internalType": "uint128", "name": "expiry", "type": "uint128"},
        {"internalType": "address", "name": "makerAsset", "type": "address"},
        {"internalType": "address", "name": "takerAsset", "type": "address"},
        {"internalType": "address", "name": "maker", "type": "address"},
        {"internalType": "address", "name": "taker", "type": "address"},
        {"internalType": "uint256", "name": "makerAmount", "type": "uint256"},
        {"internalType": "uint256", "name": "takerAmount", "type": "uint256"},
    ],
    "internalType": "struct AugustusRFQ.Order",
    "name": "order",
    "type": "tuple",
}

# View call for remaining balances, one maker per call
RemainingBalanceABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "maker", "type": "address"},
            {"internalType": "bytes32[]", "name": "orderHashes", "type": "bytes32[]"},
        ],
        "name": "getRemainingOrderBalance",
        "outputs": [
            {"internalType": "uint256[]", "name": "remainingBalances", "type": "uint256[]"}
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

# Without OrderFilledNFT event for now
OrderEventsABI = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "bytes32", "name": "orderHash", "type": "bytes32"},
            {"indexed": True, "internalType": "address", "name": "maker", "type": "address"},
        ],
        "name": "OrderCancelled",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "bytes32", "name": "orderHash", "type": "bytes32"},
            {"indexed": True, "internalType": "address", "name": "maker", "type": "address"},
            {"indexed": False, "internalType": "address", "name": "makerAsset", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "makerAmount", "type": "uint256"},
            {"indexed": True, "internalType": "address", "name": "taker", "type": "address"},
            {"indexed": False, "internalType": "address", "name": "takerAsset", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "takerAmount", "type": "uint256"},
        ],
        "name": "OrderFilled",
        "type": "event",
    },
]

CancelOrderABI = [
    {
        "inputs": [{"internalType": "bytes32", "name": "orderHash", "type": "bytes32"}],
        "name": "cancelOrder",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "bytes32[]", "name": "orderHashes", "type": "bytes32[]"}],
        "name": "cancelOrders",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

FillOrderABI = [
    {
        "inputs": [
            _ORDER_TUPLE,
            {"internalType": "bytes", "name": "signature", "type": "bytes"},
        ],
        "name": "fillOrder",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            _ORDER_TUPLE,
            {"internalType": "bytes", "name": "signature", "type": "bytes"},
            {"internalType": "uint256", "name": "takerTokenFillAmount", "type": "uint256"},
        ],
        "name": "partialFillOrder",
        "outputs": [
            {"internalType": "uint256", "name": "makerTokenFilledAmount", "type": "uint256"}
        ],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]
