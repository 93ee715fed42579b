import copy
import sys
from pathlib import Path

# Ensure package import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from ILP_Topology.config import Config
from ILP_Topology.engine.ooda import CycleSettings
from ILP_Topology.engine.topology import TopologyEngine
from ILP_Topology.graph.model import Connector, Ledger


def _config_snapshot() -> dict:
    return {
        key: copy.deepcopy(value)
        for key, value in vars(Config).items()
        if not key.startswith("_")
        and not callable(value)
        and not isinstance(value, (staticmethod, classmethod))
    }


@pytest.fixture(autouse=True)
def _restore_config():
    """Undo any Config mutation made by a test."""

    saved = _config_snapshot()
    yield
    for key, value in saved.items():
        setattr(Config, key, value)


def make_ledger(ledger_id: str, **extra) -> Ledger:
    data = {"id": ledger_id, "name": f"Ledger {ledger_id}"}
    data.update(extra)
    return Ledger.from_dict(data)


def make_connector(conn_id: str, src: str, dst: str, **extra) -> Connector:
    data = {
        "id": conn_id,
        "name": conn_id.upper(),
        "from": src,
        "to": dst,
        "liquidity": "live",
        "liquidity_depth": 1_000_000,
        "trust_score": 0.8,
        "latency_ms": 100,
        "settlement": "escrow",
        "risk_flags": ["regulatory"],
        "fee_bps": 10,
        "uptime_percent": 99.0,
    }
    data.update(extra)
    return Connector.from_dict(data)


def triangle_topology():
    """Ledgers X, Y and hub H with connectors X->Y, X->H and H->Y."""

    ledgers = [make_ledger("X"), make_ledger("Y"), make_ledger("H")]
    connectors = [
        make_connector("conn-xy", "X", "Y"),
        make_connector(
            "conn-xh",
            "X",
            "H",
            trust_score=0.9,
            fee_bps=5,
            latency_ms=50,
            liquidity_depth=2_000_000,
        ),
        make_connector(
            "conn-hy",
            "H",
            "Y",
            fee_bps=7,
            latency_ms=70,
            liquidity_depth=500_000,
        ),
    ]
    return ledgers, connectors


@pytest.fixture
def quiet_settings() -> CycleSettings:
    """Cycle settings with telemetry synthesis disabled."""

    return CycleSettings(observation_probability=0.0)


@pytest.fixture
def triangle(quiet_settings) -> TopologyEngine:
    ledgers, connectors = triangle_topology()
    return TopologyEngine(ledgers, connectors, hub="H", seed=7, settings=quiet_settings)


@pytest.fixture
def seeded(quiet_settings) -> TopologyEngine:
    return TopologyEngine(seed=7, settings=quiet_settings)
