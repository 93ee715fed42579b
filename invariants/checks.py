"""Invariant predicates over connectors and corridors."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping


def _value(x: Any) -> Any:
    return getattr(x, "value", x)


def no_hidden_custody(connectors: Iterable[Any]) -> bool:
    """API-settled connectors must carry the ``custodial`` risk flag."""

    return all(
        "custodial" in {_value(f) for f in c.risk_flags}
        for c in connectors
        if _value(c.settlement) == "api"
    )


def no_fake_bridges(connectors: Iterable[Any]) -> bool:
    """Live bridges must have a verified claim or at least one observation."""

    for c in connectors:
        if _value(c.settlement) != "bridge" or _value(c.liquidity) != "live":
            continue
        if not c.has_verification:
            return False
    return True


def corridors_falsifiable(corridors: Iterable[Any]) -> bool:
    """Every active corridor exposes a success rate it can be judged against."""

    return all(
        c.success_rate is not None for c in corridors if _value(c.status) == "active"
    )


def risk_visible(connectors: Iterable[Any], trust_threshold: float = 0.8) -> bool:
    """Connectors trusted below ``trust_threshold`` must declare some risk."""

    return all(c.risk_flags for c in connectors if c.trust_score < trust_threshold)


def from_results(results: Mapping[str, bool]) -> Dict[str, bool]:
    """Prefix invariant results for telemetry records."""

    return {f"inv_{key}_ok": bool(ok) for key, ok in results.items()}
