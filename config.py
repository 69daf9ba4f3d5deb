"""설정 파일 로더 모듈."""

import copy
import json
import os
from pathlib import Path

# 기본 설정 경로
_CONFIG_PATH = Path(__file__).parent / "config.json"

# 기본값 — config.json에 누락된 키가 있을 때 사용
_DEFAULTS = {
    "server": {
        "host": "0.0.0.0",
        "port": 8080,
    },
    "chain": {
        "rpc_url": "",
        "timeout_sec": 10,
        # 시즌 → 시민 컨트랙트 (current 실패 시 legacy)
        "contracts": {
            "1": {"current": "", "legacy": ""},
            "2": {"current": "", "legacy": ""},
        },
        # 시즌 → 파트 이름 → 컨트랙트
        "parts": {
            "1": {
                "identity": "0x059174c2Fef43F06178D23572FE5556F078F2F99",
                "id": "0x059174c2Fef43F06178D23572FE5556F078F2F99",
                "item": "0xE7489EA1847395d7EeAd33E9c85fe327D513D249",
                "vault": "0x17B2f2b8927A8f11edfd7a27E153Be17d68E69C7",
                "land": "0xCFc6a15b2952B6014A993a0C16c9D580d862e21A",
            },
            "2": {
                "identity": "0x8E9F3C6883993A7A69c37213F2eb9A17450ad6D3",
                "id": "0x8E9F3C6883993A7A69c37213F2eb9A17450ad6D3",
                "land": "0xB58aE9e93b8bee7d890AD87A2a70c135a3Bf4B4e",
                "item": "0x0B8F04F2cA4f15d33274a27439412ab7639EFAd9",
            },
        },
        "legacy_parts": {
            "1": {
                "item": "0x0938E3F7AC6D7f674FeD551c93f363109bda3AF9",
                "vault": "0xab0b0dD7e4EaB0F9e31a539074a03f1C1Be80879",
                "land": "0x3C54b798b3aAD4F6089533aF3bdbD6ce233019bB",
            },
            "2": {
                "identity": "0x698FbAACA64944376e2CDC4CAD86eaa91362cF54",
                "id": "0x698FbAACA64944376e2CDC4CAD86eaa91362cF54",
                "land": "0xf90980AE7A44E2d18B9615396FF5E9252F1DF639",
                "item": "0x7AC66d40d80D2d8D1E45D6b5B10a1C9D1fd69354",
            },
        },
    },
    "render": {
        "canvas_size": 1200,
        "portrait_size": 640,
        "anchor_policy": "refined",
        # 300x300 몸통 에셋 보정 대상 버킷
        "body_repair_buckets": ["QmeqeBpsYTuJL8AZhY9fGBeTj9QuvMVqaZeRWFnjA24QEE"],
    },
    "assets": {
        "directory": "assets/",
    },
    "cache": {
        "enabled": True,
        "directory": "images/",
    },
    "fetch": {
        "timeout_sec": 30,
    },
}

# 환경 변수 → 설정 경로 (배포 비밀값)
_ENV_OVERRIDES = {
    "RPC": ("chain", "rpc_url"),
    "S1_CONTRACT": ("chain", "contracts", "1", "legacy"),
    "S1V2_CONTRACT": ("chain", "contracts", "1", "current"),
    "S2_CONTRACT": ("chain", "contracts", "2", "legacy"),
    "S2V2_CONTRACT": ("chain", "contracts", "2", "current"),
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
}


def _deep_merge(base: dict, override: dict) -> dict:
    """base 딕셔너리에 override 값을 병합한다 (깊은 병합)."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env(config: dict, environ) -> dict:
    """환경 변수가 있으면 해당 설정 값을 덮어쓴다."""
    for name, keys in _ENV_OVERRIDES.items():
        value = environ.get(name)
        if not value:
            continue
        node = config
        for key in keys[:-1]:
            node = node.setdefault(key, {})
        node[keys[-1]] = int(value) if keys[-1] == "port" else value
    return config


def load_config(path: Path | None = None, environ=None) -> dict:
    """설정 파일을 읽어 딕셔너리로 반환한다.

    파일이 없으면 기본값을 사용한다. 환경 변수 (RPC, S1_CONTRACT 등) 가 마지막에 적용된다.
    """
    config_path = path or _CONFIG_PATH
    config = copy.deepcopy(_DEFAULTS)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            user_config = json.load(f)
        config = _deep_merge(config, user_config)
    return _apply_env(config, os.environ if environ is None else environ)
