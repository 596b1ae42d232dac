import pytest


def _props(*pairs):
    return [{"name": n, "type": t} for n, t in pairs]


@pytest.fixture
def snapshot_data():
    """一份完整的 runtime 快照：兩個 artboard、巢狀 ViewModel、enum 與 asset。"""
    return {
        "activeArtboard": "Main",
        "artboards": [
            {
                "name": "Main",
                "animations": [
                    {"name": "idle", "fps": 60, "duration": 120, "workStart": 0, "workEnd": 120, "loop": "loop"},
                ],
                "stateMachines": [
                    {"name": "Controller", "inputs": [
                        {"name": "speed", "type": 56},
                        {"name": "fire", "type": 58},
                        {"name": "hover", "type": 59},
                        {"name": "mystery", "type": 99},
                        {"name": "untyped"},
                    ]},
                ],
            },
            {"name": "Secondary", "animations": [], "stateMachines": []},
        ],
        "viewModels": [
            {
                "name": "Dashboard",
                "properties": _props(
                    ("Title", "string"),
                    ("Header", "viewModel"),
                    ("Accent", "color"),
                    ("Footer", "viewModel"),
                    ("Size", "enumType"),
                    ("Reset", "trigger"),
                ),
                "instanceNames": [""],
                "instances": [{"name": "", "values": {"Title": "from default"}}],
            },
            {
                "name": "Badge",
                "properties": _props(("Label", "string"), ("Active", "boolean")),
                "instanceNames": ["Primary", "Secondary"],
            },
        ],
        "defaultViewModel": "Dashboard",
        "boundInstance": {
            "name": "",
            "values": {
                "Title": "Hello",
                "Accent": 0xFF0000FF,
                "Size": "Large",
                "Header": {"name": "Badge", "values": {"Label": "top", "Active": True}},
                "Footer": {
                    "name": "",
                    "values": {"Label": "bottom", "Active": False},
                    "properties": _props(("Active", "boolean"), ("Label", "string")),
                },
            },
        },
        "enums": [{"name": "Size", "values": ["Small", "Large"]}],
        "assets": [{"name": "font.ttf", "cdnUuid": "abc-123"}, {}],
    }
