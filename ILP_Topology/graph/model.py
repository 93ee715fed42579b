"""Entity dataclasses for the connector topology."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .types import (
    AssetPairData,
    ClaimData,
    Complexity,
    ConnectorData,
    CorridorStatus,
    LedgerData,
    LedgerDomain,
    LedgerType,
    Lens,
    LiquidityStatus,
    ObservationType,
    OODAPhase,
    RiskFlag,
    SettlementMechanism,
    SettlementType,
)


def utc_now() -> str:
    """Return the current UTC time as an ISO 8601 string."""

    return datetime.now(timezone.utc).isoformat()


def _flags(values) -> List[RiskFlag]:
    return [RiskFlag(v) for v in values or ()]


@dataclass
class Ledger:
    """A value-settlement network. ``mass`` and ``position`` are derived."""

    id: str
    name: str
    type: LedgerType
    domain: LedgerDomain
    settlement: SettlementType
    supports_ilp_adapter: bool
    native_asset: str
    consensus: str
    finality_seconds: float
    tps_estimate: float
    risk_flags: List[RiskFlag] = field(default_factory=list)
    symbol: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    mass: float = 0.0

    @classmethod
    def from_dict(cls, data: LedgerData) -> "Ledger":
        pos = data.get("position", {})
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            type=LedgerType(data.get("type", "public")),
            domain=LedgerDomain(data.get("domain", "on-ledger")),
            settlement=SettlementType(data.get("settlement", "native")),
            supports_ilp_adapter=bool(data.get("supports_ilp_adapter", False)),
            native_asset=data.get("native_asset", ""),
            consensus=data.get("consensus", ""),
            finality_seconds=float(data.get("finality_seconds", 0.0)),
            tps_estimate=float(data.get("tps_estimate", 0.0)),
            risk_flags=_flags(data.get("risk_flags")),
            symbol=data.get("symbol"),
            metadata=dict(data.get("metadata", {})),
            position=(
                float(pos.get("x", 0.0)),
                float(pos.get("y", 0.0)),
                float(pos.get("z", 0.0)),
            ),
            mass=float(data.get("mass", 0.0)),
        )


@dataclass(frozen=True)
class AssetPair:
    source: str
    target: str
    rate: Optional[float] = None
    spread_bps: Optional[float] = None

    @classmethod
    def from_dict(cls, data: AssetPairData) -> "AssetPair":
        return cls(data["from"], data["to"], data.get("rate"), data.get("spread_bps"))


@dataclass
class Claim:
    """An asserted fact about a connector, optionally backed by evidence."""

    id: str
    source: str
    statement: str
    timestamp: str
    verified: bool = False
    evidence: Optional[str] = None

    @classmethod
    def from_dict(cls, data: ClaimData) -> "Claim":
        return cls(
            id=data["id"],
            source=data.get("source", ""),
            statement=data.get("statement", ""),
            timestamp=data.get("timestamp", ""),
            verified=bool(data.get("verified", False)),
            evidence=data.get("evidence"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Observation:
    """A timestamped telemetry sample about a connector."""

    id: str
    type: ObservationType
    timestamp: str
    data: Dict[str, Any]
    confidence: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Observation":
        return cls(
            id=data["id"],
            type=ObservationType(data["type"]),
            timestamp=data.get("timestamp", ""),
            data=dict(data.get("data", {})),
            confidence=float(data.get("confidence", 0.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "timestamp": self.timestamp,
            "data": dict(self.data),
            "confidence": self.confidence,
        }


@dataclass
class Connector:
    """A directed, trust- and liquidity-bearing edge between two ledgers.

    ``source`` and ``target`` hold ledger ids; connectors never reference
    :class:`Ledger` objects directly.
    """

    id: str
    name: str
    source: str
    target: str
    liquidity: LiquidityStatus
    trust_score: float
    latency_ms: float
    settlement: SettlementMechanism
    asset_pairs: List[AssetPair] = field(default_factory=list)
    liquidity_depth: float = 0.0
    risk_flags: List[RiskFlag] = field(default_factory=list)
    claims: List[Claim] = field(default_factory=list)
    observations: List[Observation] = field(default_factory=list)
    fee_bps: float = 0.0
    uptime_percent: Optional[float] = None
    operator: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    last_active: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.trust_score <= 1.0:
            raise ValueError(
                f"connector {self.id}: trust_score {self.trust_score} outside [0, 1]"
            )

    @classmethod
    def from_dict(cls, data: ConnectorData) -> "Connector":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            source=data["from"],
            target=data["to"],
            liquidity=LiquidityStatus(data.get("liquidity", "unknown")),
            trust_score=float(data.get("trust_score", 0.0)),
            latency_ms=float(data.get("latency_ms", 0.0)),
            settlement=SettlementMechanism(data.get("settlement", "api")),
            asset_pairs=[AssetPair.from_dict(p) for p in data.get("asset_pairs", [])],
            liquidity_depth=float(data.get("liquidity_depth", 0.0)),
            risk_flags=_flags(data.get("risk_flags")),
            claims=[Claim.from_dict(c) for c in data.get("claims", [])],
            observations=[
                Observation.from_dict(o) for o in data.get("observations", [])
            ],
            fee_bps=float(data.get("fee_bps", 0.0)),
            uptime_percent=data.get("uptime_percent"),
            operator=data.get("operator"),
            min_amount=data.get("min_amount"),
            max_amount=data.get("max_amount"),
            last_active=data.get("last_active"),
        )

    @property
    def has_verification(self) -> bool:
        """``True`` when any claim is verified or any observation exists."""

        return any(c.verified for c in self.claims) or bool(self.observations)


@dataclass
class Corridor:
    """Display projection of one connector's health. Always derived."""

    id: str
    connector_id: str
    from_ledger: str
    to_ledger: str
    status: CorridorStatus
    thickness: float
    glow: float
    risk_fog: List[RiskFlag] = field(default_factory=list)
    volume_24h: float = 0.0
    tx_count_24h: int = 0
    avg_settlement_time_ms: Optional[float] = None
    success_rate: Optional[float] = None
    bidirectional: bool = True
    is_preferred_route: bool = False
    alternative_corridors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RouteHop:
    corridor_id: str
    connector_id: str
    from_ledger: str
    to_ledger: str
    estimated_fee_bps: float
    estimated_latency_ms: float


@dataclass(frozen=True)
class Route:
    """Immutable result of a route computation.

    Routes are not re-validated after creation; recompute to observe
    current corridor state.
    """

    id: str
    from_ledger: str
    to_ledger: str
    hops: Tuple[RouteHop, ...]
    total_fee_bps: float
    total_latency_ms: float
    risk_score: float
    liquidity_available: float
    amount: float = 0.0
    created_at: str = ""

    @property
    def via(self) -> Tuple[str, ...]:
        """Intermediate ledger ids, empty for a direct route."""

        return tuple(h.to_ledger for h in self.hops[:-1])

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["hops"] = [
            {f.name: getattr(h, f.name) for f in fields(h)} for h in self.hops
        ]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Route":
        values = dict(data)
        values["hops"] = tuple(RouteHop(**h) for h in data.get("hops", []))
        return cls(**values)


@dataclass(frozen=True)
class LensFilters:
    min_trust: float = 0.0
    min_volume: float = 0.0
    risk_flags: Tuple[RiskFlag, ...] = ()
    ledger_types: Tuple[LedgerType, ...] = ()
    status: Tuple[CorridorStatus, ...] = ()


_FILTER_ENUMS = {
    "risk_flags": RiskFlag,
    "ledger_types": LedgerType,
    "status": CorridorStatus,
}


@dataclass(frozen=True)
class LensConfig:
    lens: Lens
    enabled: bool = True
    opacity: float = 1.0
    filters: LensFilters = field(default_factory=LensFilters)

    def merged(self, changes: Dict[str, Any]) -> "LensConfig":
        """Return a copy with ``changes`` applied.

        ``filters`` may be given as a :class:`LensFilters` or as a mapping of
        filter fields to merge into the current filters.
        """

        allowed = {f.name for f in fields(self)} - {"lens"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"unknown lens config fields: {sorted(unknown)}")
        values = dict(changes)
        filters = values.get("filters")
        if isinstance(filters, dict):
            known = {f.name for f in fields(LensFilters)}
            bad = set(filters) - known
            if bad:
                raise ValueError(f"unknown lens filter fields: {sorted(bad)}")
            converted = dict(filters)
            for key, enum in _FILTER_ENUMS.items():
                if key in converted:
                    converted[key] = tuple(enum(v) for v in converted[key])
            values["filters"] = replace(self.filters, **converted)
        return replace(self, **values)


@dataclass
class OODAState:
    current_phase: OODAPhase = OODAPhase.OBSERVE
    last_observation: str = "Initial topology loaded"
    last_orientation: str = ""
    last_decision: str = "All corridors classified"
    last_action: str = "Map initialized"
    timestamp: str = field(default_factory=utc_now)


@dataclass
class FeynmanSummary:
    summary: str
    complexity: Complexity = Complexity.SIMPLE
    timestamp: str = field(default_factory=utc_now)
