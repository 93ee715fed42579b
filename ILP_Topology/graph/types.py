from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, TypedDict


class LedgerType(str, Enum):
    PUBLIC = "public"
    PERMISSIONED = "permissioned"
    PRIVATE = "private"


class LedgerDomain(str, Enum):
    ON_LEDGER = "on-ledger"
    OFF_LEDGER = "off-ledger"
    HYBRID = "hybrid"


class SettlementType(str, Enum):
    NATIVE = "native"
    WRAPPED = "wrapped"
    SYNTHETIC = "synthetic"
    CUSTODIAL = "custodial"


class RiskFlag(str, Enum):
    REGULATORY = "regulatory"
    LIQUIDITY = "liquidity"
    CUSTODIAL = "custodial"
    UNVERIFIED = "unverified"
    EXPERIMENTAL = "experimental"
    COUNTERPARTY = "counterparty"
    CENTRALIZED = "centralized"
    BRIDGE_RISK = "bridge_risk"
    SMART_CONTRACT = "smart_contract"
    GOVERNANCE = "governance"
    ORACLE_DEPENDENCY = "oracle_dependency"


class LiquidityStatus(str, Enum):
    LIVE = "live"
    SIMULATED = "simulated"
    UNKNOWN = "unknown"
    DEPLETED = "depleted"


class SettlementMechanism(str, Enum):
    ESCROW = "escrow"
    HTLC = "htlc"
    ATOMIC_SWAP = "atomic_swap"
    API = "api"
    BRIDGE = "bridge"
    MULTISIG = "multisig"


class ObservationType(str, Enum):
    TRANSACTION = "transaction"
    LIQUIDITY = "liquidity"
    UPTIME = "uptime"
    LATENCY = "latency"
    FAILURE = "failure"


class CorridorStatus(str, Enum):
    ACTIVE = "active"
    EXPERIMENTAL = "experimental"
    FOGGED = "fogged"
    INACTIVE = "inactive"
    DEPRECATED = "deprecated"


class Lens(str, Enum):
    """Display filter selector. Has no effect on graph computation."""

    DOMAIN = "domain"
    TRUST = "trust"
    HEAT = "heat"
    FOG = "fog"
    FLOW = "flow"


class OODAPhase(str, Enum):
    OBSERVE = "observe"
    ORIENT = "orient"
    DECIDE = "decide"
    ACT = "act"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


# Typed mappings for the literal seed table

ClaimData = TypedDict(
    "ClaimData",
    {
        "id": str,
        "source": str,
        "statement": str,
        "timestamp": str,
        "verified": bool,
        "evidence": str,
    },
    total=False,
)

AssetPairData = TypedDict(
    "AssetPairData",
    {"from": str, "to": str, "rate": float, "spread_bps": float},
    total=False,
)

LedgerData = TypedDict(
    "LedgerData",
    {
        "id": str,
        "name": str,
        "symbol": str,
        "type": str,
        "domain": str,
        "settlement": str,
        "supports_ilp_adapter": bool,
        "native_asset": str,
        "consensus": str,
        "finality_seconds": float,
        "tps_estimate": float,
        "risk_flags": List[str],
        "metadata": Dict[str, str],
        "position": Dict[str, float],
        "mass": float,
    },
    total=False,
)

ConnectorData = TypedDict(
    "ConnectorData",
    {
        "id": str,
        "name": str,
        "from": str,
        "to": str,
        "asset_pairs": List[AssetPairData],
        "liquidity": str,
        "liquidity_depth": float,
        "trust_score": float,
        "latency_ms": float,
        "settlement": str,
        "risk_flags": List[str],
        "claims": List[ClaimData],
        "observations": List[Dict[str, Any]],
        "operator": str,
        "fee_bps": float,
        "min_amount": float,
        "max_amount": float,
        "uptime_percent": float,
        "last_active": str,
    },
    total=False,
)
