# trading/networks.py
# Vendor network identifiers -> canonical network codes.
from typing import Dict, Optional

NETWORKS: Dict[str, Dict[str, str]] = {
    "ERC20": {"code": "ERC20", "name": "Ethereum"},
    "ETH": {"code": "ERC20", "name": "Ethereum"},
    "ETHEREUM": {"code": "ERC20", "name": "Ethereum"},
    "TRC20": {"code": "TRC20", "name": "Tron"},
    "TRX": {"code": "TRC20", "name": "Tron"},
    "TRON": {"code": "TRC20", "name": "Tron"},
    "BEP20": {"code": "BEP20", "name": "BNB Smart Chain"},
    "BSC": {"code": "BEP20", "name": "BNB Smart Chain"},
    "BEP2": {"code": "BEP2", "name": "BNB Beacon Chain"},
    "BTC": {"code": "BTC", "name": "Bitcoin"},
    "BITCOIN": {"code": "BTC", "name": "Bitcoin"},
    "SOL": {"code": "SOL", "name": "Solana"},
    "SOLANA": {"code": "SOL", "name": "Solana"},
    "MATIC": {"code": "MATIC", "name": "Polygon"},
    "POLYGON": {"code": "MATIC", "name": "Polygon"},
    "ARBITRUM": {"code": "ARBITRUM", "name": "Arbitrum One"},
    "ARB": {"code": "ARBITRUM", "name": "Arbitrum One"},
    "OPTIMISM": {"code": "OPTIMISM", "name": "Optimism"},
    "OP": {"code": "OPTIMISM", "name": "Optimism"},
    "AVAXC": {"code": "AVAX-C-CHAIN", "name": "Avalanche C-Chain"},
    "AVAX-C": {"code": "AVAX-C-CHAIN", "name": "Avalanche C-Chain"},
    "TON": {"code": "TON", "name": "The Open Network"},
    "LTC": {"code": "LTC", "name": "Litecoin"},
    "DOGE": {"code": "DOGE", "name": "Dogecoin"},
    "XRP": {"code": "XRP", "name": "XRP Ledger"},
    "ADA": {"code": "ADA", "name": "Cardano"},
    "DOT": {"code": "DOT", "name": "Polkadot"},
    "ATOM": {"code": "ATOM", "name": "Cosmos"},
    "KLAY": {"code": "KLAY", "name": "Klaytn"},
    "BASE": {"code": "BASE", "name": "Base"},
}


def format_network_name(network: Optional[str]) -> Optional[str]:
    """Canonical code for a vendor network id, or the id itself when unmapped."""
    if not network:
        return network
    entry = NETWORKS.get(str(network).upper())
    return entry["code"] if entry else network
