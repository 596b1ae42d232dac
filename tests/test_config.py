"""
設定檔載入 / 驗證測試
"""
import json

from rive_inspector.config import (
    DEFAULT_OUTPUT_DIR,
    InspectorSettings,
    load_config,
    settings_from_config,
    validate_config,
)


def test_missing_config_returns_empty(tmp_path):
    assert load_config(str(tmp_path / "nope.json")) == {}


def test_non_object_config_ignored(tmp_path, capsys):
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert load_config(str(path)) == {}
    assert "格式錯誤" in capsys.readouterr().out


def test_load_and_validate(tmp_path, capsys):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"probe": {"maxProbs": 5}, "extra": 1}), encoding="utf-8")
    cfg = load_config(str(path))
    assert cfg["extra"] == 1
    out = capsys.readouterr().out
    assert "'extra'" in out
    assert "'maxProbs'" in out


def test_validate_type_and_sign(capsys):
    validate_config({"probe": {"maxProbes": "many"}, "reconcile": {"maxDepth": -1}, "export": []})
    out = capsys.readouterr().out
    assert "probe.maxProbes" in out
    assert "reconcile.maxDepth" in out
    assert "'export'" in out


def test_validate_clean_config_silent(capsys):
    validate_config({"probe": {"maxProbes": 10}, "source": {"snapshot": "a.json"}})
    assert capsys.readouterr().out == ""


def test_settings_defaults():
    assert settings_from_config({}) == InspectorSettings()
    assert settings_from_config(None).output_dir == DEFAULT_OUTPUT_DIR


def test_settings_from_values():
    settings = settings_from_config({
        "probe": {"maxProbes": 50, "maxConsecutiveFailures": 5},
        "reconcile": {"maxDepth": 8},
        "export": {"outputDir": "out", "indent": 4},
        "source": {"snapshot": "snap.json"},
    })
    assert settings == InspectorSettings(
        max_probes=50,
        max_consecutive_failures=5,
        max_depth=8,
        output_dir="out",
        indent=4,
        snapshot="snap.json",
    )


def test_invalid_values_fall_back():
    settings = settings_from_config({
        "probe": {"maxProbes": True, "maxConsecutiveFailures": -2},
        "reconcile": "deep",
    })
    default = InspectorSettings()
    assert settings.max_probes == default.max_probes
    assert settings.max_consecutive_failures == default.max_consecutive_failures
    assert settings.max_depth == default.max_depth
