import json
import os

import pytest

from ILP_Topology.config import Config, load_config


def test_load_json_merges_nested_thresholds(tmp_path):
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"thresholds": {"fog_trust": 0.25}, "hub_ledger": "eth"}))
    Config.load_from_file(str(cfg))
    assert Config.thresholds["fog_trust"] == 0.25
    assert Config.thresholds["active_trust"] == 0.7
    assert Config.hub_ledger == "eth"
    assert Config.config_file == str(cfg)


def test_load_yaml_and_resolve_output_dir(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "ooda_interval_ms: 250\n"
        "output_dir: out\n"
        "log_files:\n"
        "  tick: true\n"
    )
    data = load_config(str(cfg))
    assert data["ooda_interval_ms"] == 250
    assert Config.ooda_interval_ms == 250
    assert Config.output_dir == os.path.join(str(tmp_path), "out")
    assert Config.output_path("x.json") == os.path.join(str(tmp_path), "out", "x.json")
    assert Config.is_log_enabled("tick")
    assert not Config.is_log_enabled("event")


def test_unknown_and_private_keys_ignored(tmp_path):
    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"not_a_setting": 1, "_secret": 2, "load_from_file": 3}))
    Config.load_from_file(str(cfg))
    assert not hasattr(Config, "not_a_setting")
    assert callable(Config.load_from_file)


def test_non_mapping_root_rejected(tmp_path):
    cfg = tmp_path / "config.json"
    cfg.write_text("[1, 2]")
    with pytest.raises(ValueError):
        Config.load_from_file(str(cfg))


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load_from_file(str(tmp_path / "nope.json"))


def test_config_drives_engine_defaults(tmp_path):
    from ILP_Topology.engine.topology import TopologyEngine, settings_from_config

    cfg = tmp_path / "config.json"
    cfg.write_text(
        json.dumps(
            {
                "event_history_size": 5,
                "default_lens": "heat",
                "observation_probability": 0.0,
                "thresholds": {"fog_trust": 0.75},
            }
        )
    )
    Config.load_from_file(str(cfg))
    settings = settings_from_config()
    assert settings.fog_trust == 0.75
    engine = TopologyEngine()
    assert engine.active_lens.value == "heat"
    engine.tick()
    engine.tick()
    assert len(engine.events()) == 5
    assert engine.get_corridor("corr-conn-xrpl-eth").status.value == "fogged"


def test_lens_filters_from_config_file(tmp_path):
    from ILP_Topology.engine.topology import TopologyEngine
    from ILP_Topology.graph.types import CorridorStatus, Lens

    from conftest import triangle_topology

    cfg = tmp_path / "config.json"
    cfg.write_text(
        json.dumps(
            {
                "lens_defaults": {
                    "trust": {"filters": {"min_trust": 0.85}},
                    "fog": {"filters": {"status": ["fogged"]}},
                }
            }
        )
    )
    Config.load_from_file(str(cfg))
    ledgers, connectors = triangle_topology()
    engine = TopologyEngine(ledgers, connectors, hub="H")
    assert [c.id for c in engine.visible_connectors()] == ["conn-xh"]
    fog = engine.lens_configs[Lens.FOG]
    assert fog.filters.status == (CorridorStatus.FOGGED,)
    cfg_after = engine.update_lens_config("trust", filters={"min_trust": 0.5})
    assert cfg_after.filters.min_trust == 0.5


def test_unknown_lens_default_field_rejected(tmp_path):
    from ILP_Topology.engine.topology import TopologyEngine

    cfg = tmp_path / "config.json"
    cfg.write_text(json.dumps({"lens_defaults": {"heat": {"colour": "red"}}}))
    Config.load_from_file(str(cfg))
    with pytest.raises(ValueError):
        TopologyEngine()
