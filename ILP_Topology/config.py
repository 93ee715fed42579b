# config.py

import os


class Config:
    """Global configuration for the topology engine.

    Attributes
    ----------
    ooda_interval_ms:
        Milliseconds between control loop ticks when the timer is running.
    observation_probability:
        Per-connector chance of synthesising a latency observation during the
        observe phase. ``0`` disables telemetry synthesis, ``1`` samples every
        connector on every tick.
    latency_jitter:
        ``[low, high]`` multipliers applied to a connector's nominal latency
        when an observation is synthesised.
    hub_ledger:
        Ledger id used as the relay point for two-hop routes.
    thickness_reference:
        Liquidity depth that maps to a corridor thickness of ``1.0``.
    thresholds:
        Trust and risk cut-offs used by the orient/decide phases, the
        invariants and the narrative complexity bucket.
    log_files:
        Mapping of log category to a flag enabling JSON-lines output under
        :attr:`output_dir`. Every category is disabled by default.
    """

    base_dir = os.path.abspath(os.path.dirname(__file__))
    config_file: str | None = None
    output_dir = os.path.join(base_dir, "output")

    @staticmethod
    def output_path(*parts: str) -> str:
        """Return absolute path under the current output directory."""
        return os.path.join(Config.output_dir, *parts)

    ooda_interval_ms = 10000
    run_seed: int | None = None

    # Observe phase
    observation_probability = 0.05
    observation_confidence = 0.8
    latency_jitter = [0.8, 1.2]

    # Routing
    hub_ledger = "xrpl"

    # Act phase
    thickness_reference = 100_000_000.0
    base_mass = 30.0
    mass_per_connector = 15.0
    default_success_rate = 0.9

    thresholds = {
        "fog_trust": 0.3,
        "active_trust": 0.7,
        "healthy_trust": 0.7,
        "healthy_max_risk_flags": 1,
        "visible_risk_trust": 0.8,
        "simple_trust": 0.7,
        "moderate_trust": 0.5,
    }

    event_history_size = 100
    route_history_size = 20
    telemetry_points = 100

    default_lens = "trust"
    lens_defaults = {
        "domain": {"enabled": True, "opacity": 1.0},
        "trust": {"enabled": True, "opacity": 1.0},
        "heat": {"enabled": False, "opacity": 0.7},
        "fog": {"enabled": True, "opacity": 0.5},
        "flow": {"enabled": False, "opacity": 0.8},
    }

    log_files = {"tick": False, "event": False, "metrics": False}

    @classmethod
    def is_log_enabled(cls, category: str) -> bool:
        """Return ``True`` if JSON-lines output is enabled for ``category``."""
        return bool(cls.log_files.get(category, False))

    @classmethod
    def load_from_file(cls, path: str) -> None:
        """Load configuration values from a JSON or YAML file.

        Only keys that already exist as attributes on ``Config`` will be
        assigned. Nested dictionaries are merged recursively when the existing
        attribute is also a ``dict``. A relative ``output_dir`` is resolved
        against the directory containing ``path``.

        Parameters
        ----------
        path:
            Path to the configuration file. Files ending in ``.yaml`` or
            ``.yml`` are parsed with :func:`yaml.safe_load`, everything else
            as JSON.
        """

        data = _read_mapping(path)
        cls.config_file = os.path.abspath(path)
        base_dir = os.path.dirname(cls.config_file)

        for key, value in data.items():
            if key.startswith("_") or not hasattr(cls, key):
                continue
            current = getattr(cls, key)
            if callable(current):
                continue
            if key == "output_dir" and not os.path.isabs(value):
                value = os.path.join(base_dir, value)
            if isinstance(current, dict) and isinstance(value, dict):
                _merge_into(current, value)
            else:
                setattr(cls, key, value)


def _merge_into(target: dict, override: dict) -> None:
    for key, value in override.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _merge_into(target[key], value)
        else:
            target[key] = value


def _read_mapping(path: str) -> dict:
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    with open(path) as f:
        if path.endswith((".yaml", ".yml")):
            import yaml

            data = yaml.safe_load(f) or {}
        else:
            import json

            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"configuration root must be a mapping: {path}")
    return data


def load_config(path: str) -> dict:
    """Load configuration from ``path`` and return the data."""
    Config.load_from_file(path)
    return _read_mapping(path)
