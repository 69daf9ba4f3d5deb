"""설정 로더 테스트."""

import json

from config import load_config


def test_defaults_without_file(tmp_path):
    config = load_config(tmp_path / "missing.json", environ={})
    assert config["render"]["canvas_size"] == 1200
    assert config["render"]["anchor_policy"] == "refined"
    assert config["chain"]["parts"]["1"]["item"].startswith("0x")


def test_file_is_deep_merged(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"render": {"anchor_policy": "legacy"}, "cache": {"enabled": False}}))
    config = load_config(path, environ={})
    assert config["render"]["anchor_policy"] == "legacy"
    assert config["render"]["portrait_size"] == 640
    assert config["cache"]["enabled"] is False


def test_env_overrides(tmp_path):
    env = {"RPC": "https://rpc.example", "S1V2_CONTRACT": "0xnew", "S1_CONTRACT": "0xold", "PORT": "9000"}
    config = load_config(tmp_path / "missing.json", environ=env)
    assert config["chain"]["rpc_url"] == "https://rpc.example"
    assert config["chain"]["contracts"]["1"] == {"current": "0xnew", "legacy": "0xold"}
    assert config["server"]["port"] == 9000


def test_defaults_are_not_shared(tmp_path):
    first = load_config(tmp_path / "missing.json", environ={"RPC": "a"})
    second = load_config(tmp_path / "missing.json", environ={})
    assert first["chain"]["rpc_url"] == "a"
    assert second["chain"]["rpc_url"] == ""
