import math

import numpy as np
import pytest

from telemetry.rolling import TickTelemetry, bootstrap_interval


def test_bootstrap_interval_for_constant_samples():
    assert bootstrap_interval([2.0] * 5, rng=np.random.default_rng(0)) == (2.0, 2.0, 2.0)


def test_bootstrap_interval_empty_is_nan():
    mean, lower, upper = bootstrap_interval([])
    assert math.isnan(mean) and math.isnan(lower) and math.isnan(upper)


def test_histories_drop_old_samples():
    tel = TickTelemetry(max_points=2)
    for v in (1.0, 2.0, 3.0):
        tel.record(counters={"active": v})
    assert tel.get_counters() == {"active": [2.0, 3.0]}
    assert tel.ticks == 3


def test_tick_telemetry_pass_rates_and_intervals():
    tel = TickTelemetry(max_points=10)
    tel.record(counters={"active": 3}, invariants={"inv_a_ok": True})
    tel.record(counters={"active": 5}, invariants={"inv_a_ok": False})
    assert tel.ticks == 2
    assert tel.get_counters() == {"active": [3.0, 5.0]}
    assert tel.get_invariants() == {"inv_a_ok": [1.0, 0.0]}
    assert tel.pass_rates() == {"inv_a_ok": 0.5}
    mean, lower, upper = tel.intervals(rng=np.random.default_rng(1))["active"]
    assert mean == pytest.approx(4.0)
    assert 3.0 <= lower <= mean <= upper <= 5.0
