"""Fixed seed topology loaded when an engine is built without explicit data."""

from __future__ import annotations

from typing import List

from .model import Connector, Ledger
from .types import ConnectorData, LedgerData

LEDGER_TABLE: List[LedgerData] = [
    {
        "id": "xrpl",
        "name": "XRP Ledger",
        "symbol": "XRPL",
        "type": "public",
        "domain": "on-ledger",
        "settlement": "native",
        "supports_ilp_adapter": True,
        "native_asset": "XRP",
        "consensus": "Federated Byzantine Agreement",
        "finality_seconds": 4,
        "tps_estimate": 1500,
        "risk_flags": [],
        "metadata": {
            "website": "https://xrpl.org",
            "explorer": "https://livenet.xrpl.org",
            "documentation": "https://xrpl.org/docs",
        },
        "position": {"x": 0, "y": 0, "z": 0},
        "mass": 100,
    },
    {
        "id": "ethereum",
        "name": "Ethereum",
        "symbol": "ETH",
        "type": "public",
        "domain": "on-ledger",
        "settlement": "native",
        "supports_ilp_adapter": True,
        "native_asset": "ETH",
        "consensus": "Proof of Stake",
        # economic finality
        "finality_seconds": 900,
        "tps_estimate": 30,
        "risk_flags": ["smart_contract"],
        "metadata": {
            "website": "https://ethereum.org",
            "explorer": "https://etherscan.io",
        },
        "position": {"x": 50, "y": 30, "z": 0},
        "mass": 80,
    },
    {
        "id": "bitcoin",
        "name": "Bitcoin",
        "symbol": "BTC",
        "type": "public",
        "domain": "on-ledger",
        "settlement": "native",
        # requires Lightning
        "supports_ilp_adapter": False,
        "native_asset": "BTC",
        "consensus": "Proof of Work",
        "finality_seconds": 3600,
        "tps_estimate": 7,
        "risk_flags": ["liquidity"],
        "metadata": {
            "website": "https://bitcoin.org",
            "explorer": "https://blockstream.info",
        },
        "position": {"x": -60, "y": 20, "z": 0},
        "mass": 90,
    },
    {
        "id": "lightning",
        "name": "Lightning Network",
        "symbol": "LN",
        "type": "public",
        "domain": "hybrid",
        "settlement": "native",
        "supports_ilp_adapter": True,
        "native_asset": "BTC",
        "consensus": "Channel State",
        "finality_seconds": 1,
        "tps_estimate": 1_000_000,
        "risk_flags": ["liquidity", "counterparty"],
        "position": {"x": -40, "y": 40, "z": 10},
        "mass": 40,
    },
    {
        "id": "solana",
        "name": "Solana",
        "symbol": "SOL",
        "type": "public",
        "domain": "on-ledger",
        "settlement": "native",
        "supports_ilp_adapter": True,
        "native_asset": "SOL",
        "consensus": "Proof of History + PoS",
        "finality_seconds": 0.4,
        "tps_estimate": 65000,
        "risk_flags": ["centralized"],
        "position": {"x": 40, "y": -40, "z": 0},
        "mass": 50,
    },
    {
        "id": "polygon",
        "name": "Polygon",
        "symbol": "MATIC",
        "type": "public",
        "domain": "on-ledger",
        "settlement": "native",
        "supports_ilp_adapter": True,
        "native_asset": "MATIC",
        "consensus": "Proof of Stake",
        "finality_seconds": 2,
        "tps_estimate": 7000,
        "risk_flags": ["smart_contract", "bridge_risk"],
        "position": {"x": 60, "y": 10, "z": 0},
        "mass": 35,
    },
    {
        "id": "swift",
        "name": "SWIFT Network",
        "symbol": "SWIFT",
        "type": "permissioned",
        "domain": "off-ledger",
        "settlement": "custodial",
        "supports_ilp_adapter": False,
        "native_asset": "USD",
        "consensus": "Centralized",
        "finality_seconds": 86400,
        "tps_estimate": 50,
        "risk_flags": ["custodial", "regulatory", "centralized"],
        "position": {"x": -30, "y": -50, "z": 0},
        "mass": 70,
    },
    {
        "id": "fedwire",
        "name": "Fedwire",
        "symbol": "FED",
        "type": "permissioned",
        "domain": "off-ledger",
        "settlement": "custodial",
        "supports_ilp_adapter": False,
        "native_asset": "USD",
        "consensus": "Centralized (Fed)",
        "finality_seconds": 1,
        "tps_estimate": 100,
        "risk_flags": ["custodial", "regulatory", "centralized"],
        "position": {"x": -50, "y": -30, "z": 0},
        "mass": 60,
    },
    {
        "id": "ripple_odl",
        "name": "Ripple Payments (ODL)",
        "symbol": "ODL",
        "type": "permissioned",
        "domain": "hybrid",
        "settlement": "native",
        "supports_ilp_adapter": True,
        "native_asset": "XRP",
        "consensus": "XRPL-backed",
        "finality_seconds": 4,
        "tps_estimate": 1500,
        "risk_flags": ["regulatory"],
        "position": {"x": 15, "y": 15, "z": 5},
        "mass": 45,
    },
]

CONNECTOR_TABLE: List[ConnectorData] = [
    {
        "id": "conn-xrpl-eth",
        "name": "XRPL-Ethereum Bridge",
        "from": "xrpl",
        "to": "ethereum",
        "asset_pairs": [
            {"from": "XRP", "to": "WXRP", "rate": 1, "spread_bps": 10},
            {"from": "USD", "to": "USDC", "rate": 1, "spread_bps": 5},
        ],
        "liquidity": "live",
        "liquidity_depth": 5_000_000,
        "trust_score": 0.7,
        "latency_ms": 15000,
        "settlement": "bridge",
        "risk_flags": ["bridge_risk", "smart_contract"],
        "claims": [
            {
                "id": "claim-001",
                "source": "Peersyst",
                "statement": "EVM Sidechain provides native bridge functionality",
                "timestamp": "2024-01-15T00:00:00Z",
                "verified": True,
                "evidence": "https://evm-sidechain.xrpl.org",
            }
        ],
        "operator": "Peersyst / Ripple",
        "fee_bps": 10,
        "uptime_percent": 99.5,
    },
    {
        "id": "conn-xrpl-odl",
        "name": "XRPL Native ODL",
        "from": "xrpl",
        "to": "ripple_odl",
        "asset_pairs": [
            {"from": "XRP", "to": "XRP", "rate": 1, "spread_bps": 0},
            {"from": "USD", "to": "USD", "rate": 1, "spread_bps": 2},
        ],
        "liquidity": "live",
        "liquidity_depth": 100_000_000,
        "trust_score": 0.95,
        "latency_ms": 4000,
        "settlement": "escrow",
        "risk_flags": ["regulatory"],
        "operator": "Ripple",
        "fee_bps": 2,
        "uptime_percent": 99.9,
    },
    {
        "id": "conn-xrpl-sol",
        "name": "XRPL-Solana Connector",
        "from": "xrpl",
        "to": "solana",
        "asset_pairs": [{"from": "XRP", "to": "XRP-SOL", "spread_bps": 50}],
        "liquidity": "simulated",
        "liquidity_depth": 100_000,
        "trust_score": 0.4,
        "latency_ms": 5000,
        "settlement": "htlc",
        "risk_flags": ["experimental", "unverified", "smart_contract"],
        "claims": [
            {
                "id": "claim-002",
                "source": "Community",
                "statement": "Experimental connector via Wormhole",
                "timestamp": "2024-06-01T00:00:00Z",
                "verified": False,
            }
        ],
        "fee_bps": 50,
        "uptime_percent": 85,
    },
    {
        "id": "conn-ln-btc",
        "name": "Lightning-Bitcoin Channel",
        "from": "lightning",
        "to": "bitcoin",
        "asset_pairs": [{"from": "BTC", "to": "BTC", "rate": 1, "spread_bps": 0}],
        "liquidity": "live",
        "liquidity_depth": 50_000_000,
        "trust_score": 0.9,
        # on-chain settlement
        "latency_ms": 3_600_000,
        "settlement": "htlc",
        "risk_flags": ["liquidity"],
        "operator": "Network",
        "fee_bps": 1,
        "uptime_percent": 99.9,
    },
    {
        "id": "conn-eth-polygon",
        "name": "Polygon Bridge",
        "from": "ethereum",
        "to": "polygon",
        "asset_pairs": [
            {"from": "ETH", "to": "WETH", "rate": 1, "spread_bps": 5},
            {"from": "USDC", "to": "USDC", "rate": 1, "spread_bps": 2},
        ],
        "liquidity": "live",
        "liquidity_depth": 500_000_000,
        "trust_score": 0.85,
        "latency_ms": 30000,
        "settlement": "bridge",
        "risk_flags": ["bridge_risk", "smart_contract"],
        "operator": "Polygon Labs",
        "fee_bps": 5,
        "uptime_percent": 99.8,
    },
    {
        "id": "conn-swift-fed",
        "name": "SWIFT-Fedwire Settlement",
        "from": "swift",
        "to": "fedwire",
        "asset_pairs": [{"from": "USD", "to": "USD", "rate": 1, "spread_bps": 0}],
        "liquidity": "live",
        "liquidity_depth": 10_000_000_000,
        "trust_score": 0.99,
        "latency_ms": 86_400_000,
        "settlement": "api",
        "risk_flags": ["custodial", "centralized"],
        "operator": "Federal Reserve",
        "fee_bps": 25,
        "uptime_percent": 99.99,
    },
    {
        "id": "conn-odl-swift",
        "name": "Ripple-SWIFT Corridor",
        "from": "ripple_odl",
        "to": "swift",
        "asset_pairs": [
            {"from": "USD", "to": "USD", "rate": 1, "spread_bps": 10},
            {"from": "XRP", "to": "USD", "spread_bps": 20},
        ],
        "liquidity": "live",
        "liquidity_depth": 1_000_000_000,
        "trust_score": 0.8,
        "latency_ms": 3000,
        "settlement": "api",
        "risk_flags": ["regulatory", "custodial"],
        "claims": [
            {
                "id": "claim-003",
                "source": "Ripple",
                "statement": "Direct integration with major banks via SWIFT gpi",
                "timestamp": "2024-03-01T00:00:00Z",
                "verified": True,
                "evidence": "https://ripple.com/solutions",
            }
        ],
        "operator": "Ripple",
        "fee_bps": 10,
        "uptime_percent": 99.5,
    },
]


def seed_ledgers() -> List[Ledger]:
    """Return fresh :class:`Ledger` objects for the seed table."""

    return [Ledger.from_dict(row) for row in LEDGER_TABLE]


def seed_connectors() -> List[Connector]:
    """Return fresh :class:`Connector` objects for the seed table."""

    return [Connector.from_dict(row) for row in CONNECTOR_TABLE]
