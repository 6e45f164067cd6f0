NULL_ADDRESS = "0x0000000000000000000000000000000000000000"

# consensus application message types
MESSAGE_TYPE_DATA = 0
MESSAGE_TYPE_DEPOSIT = 1

# consensus application transaction types
TRANSACTION_VALIDATE_DATA = 0

PRICE_WIDTH = 4
TIMESTAMP_WIDTH = 8

STAKED_EVENT_ABI = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "account", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"},
        ],
        "name": "Staked",
        "type": "event",
    }
]

TRANSFER_EVENT_ABI = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "from", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "to", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "value", "type": "uint256"},
        ],
        "name": "Transfer",
        "type": "event",
    }
]
