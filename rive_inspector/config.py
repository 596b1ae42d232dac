"""設定檔載入與基本驗證."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .blueprints import DEFAULT_MAX_CONSECUTIVE_FAILURES, DEFAULT_MAX_PROBES
from .reconciler import DEFAULT_MAX_DEPTH

DEFAULT_CONFIG_PATH = "rive-inspector.config.json"
DEFAULT_OUTPUT_DIR = ".rive-inspector"

# 已知有效的頂層欄位
_KNOWN_TOP_KEYS = {"probe", "reconcile", "export", "source"}

# 各區塊已知欄位（用於拼字提示）
_KNOWN_SECTION_KEYS = {
    "probe": {"maxProbes", "maxConsecutiveFailures"},
    "reconcile": {"maxDepth"},
    "export": {"outputDir", "indent"},
    "source": {"snapshot"},
}

_INT_FIELDS = (
    ("probe", "maxProbes"),
    ("probe", "maxConsecutiveFailures"),
    ("reconcile", "maxDepth"),
    ("export", "indent"),
)


def _warn(msg: str) -> None:
    print(f"   ⚠️  [config] {msg}")


@dataclass(frozen=True)
class InspectorSettings:
    max_probes: int = DEFAULT_MAX_PROBES
    max_consecutive_failures: int = DEFAULT_MAX_CONSECUTIVE_FAILURES
    max_depth: int = DEFAULT_MAX_DEPTH
    output_dir: str = DEFAULT_OUTPUT_DIR
    indent: int = 2
    snapshot: str = ""


def validate_config(cfg: dict) -> None:
    """對 config 做基本欄位驗證，印出警告但不拋例外。"""
    if not cfg:
        return

    # 頂層未知欄位
    for key in cfg:
        if key not in _KNOWN_TOP_KEYS:
            known = ", ".join(sorted(_KNOWN_TOP_KEYS))
            _warn(f"未知頂層欄位 '{key}'（已知欄位：{known}）")

    # 各區塊欄位
    for section, known_keys in _KNOWN_SECTION_KEYS.items():
        section_cfg = cfg.get(section, {})
        if not isinstance(section_cfg, dict):
            _warn(f"'{section}' 應為 JSON 物件，目前是 {type(section_cfg).__name__}")
            continue
        for key in section_cfg:
            if key not in known_keys:
                known = ", ".join(sorted(known_keys))
                _warn(f"[{section}] 未知欄位 '{key}'（已知欄位：{known}）")

    # 整數欄位
    for section, key in _INT_FIELDS:
        section_cfg = cfg.get(section, {})
        if not isinstance(section_cfg, dict):
            continue
        val = section_cfg.get(key)
        if val is None:
            continue
        if isinstance(val, bool) or not isinstance(val, int):
            _warn(f"{section}.{key} 應為整數，目前是 {type(val).__name__}")
        elif val < 0:
            _warn(f"{section}.{key} 不可為負數（{val}）")


def _section(cfg: dict, name: str) -> dict:
    section = cfg.get(name, {})
    return section if isinstance(section, dict) else {}


def _int_or_default(section: dict, key: str, default: int) -> int:
    val = section.get(key)
    if isinstance(val, bool) or not isinstance(val, int) or val < 0:
        return default
    return val


def settings_from_config(cfg: dict) -> InspectorSettings:
    """把 config dict 轉成 InspectorSettings；無效值退回預設."""
    cfg = cfg or {}
    probe = _section(cfg, "probe")
    reconcile = _section(cfg, "reconcile")
    export = _section(cfg, "export")
    source = _section(cfg, "source")
    return InspectorSettings(
        max_probes=_int_or_default(probe, "maxProbes", DEFAULT_MAX_PROBES),
        max_consecutive_failures=_int_or_default(
            probe, "maxConsecutiveFailures", DEFAULT_MAX_CONSECUTIVE_FAILURES
        ),
        max_depth=_int_or_default(reconcile, "maxDepth", DEFAULT_MAX_DEPTH),
        output_dir=export.get("outputDir") or DEFAULT_OUTPUT_DIR,
        indent=_int_or_default(export, "indent", 2),
        snapshot=source.get("snapshot") or "",
    )


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """載入 JSON 設定檔，不存在則回傳空 dict；存在則做基本驗證。"""
    path = Path(config_path)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        cfg: Any = json.load(f)
    if not isinstance(cfg, dict):
        print(f"   ⚠️  [config] '{config_path}' 格式錯誤，應為 JSON 物件，回傳空設定。")
        return {}
    validate_config(cfg)
    return cfg
