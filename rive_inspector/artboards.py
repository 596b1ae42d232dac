"""
Artboard / enum / asset 掃描（非遞迴）

Structural metadata gathered next to the ViewModel tree: animations and
state-machine inputs per artboard, global enums and referenced assets.
"""

from typing import Any, Optional

from .runtime import call_optional, read_field

# runtime 內容中 state machine input 的數字型別碼
STATE_MACHINE_INPUT_CODES = {
    56: "Number",
    58: "Trigger",
    59: "Boolean",
}


def _warn(msg: str) -> None:
    print(f"   ⚠️  [artboards] {msg}")


def map_state_machine_input_type(raw_type: Any) -> str:
    if raw_type is None:
        return "UnknownInputType"
    if isinstance(raw_type, str):
        return raw_type
    if isinstance(raw_type, int) and not isinstance(raw_type, bool):
        return STATE_MACHINE_INPUT_CODES.get(raw_type, f"NumericType:{raw_type}")
    return f"OtherType:{raw_type}"


def _indexed(obj: Any, count_method: str, item_method: str) -> list:
    count = call_optional(obj, count_method)
    if not isinstance(count, int) or count <= 0:
        return []
    return [call_optional(obj, item_method, i) for i in range(count)]


def _scan_animations(artboard: Any) -> list:
    animations = []
    for anim in _indexed(artboard, "animation_count", "animation_by_index"):
        if anim is None or not read_field(anim, "name"):
            continue
        animations.append({
            "name": read_field(anim, "name"),
            "fps": read_field(anim, "fps"),
            "duration": read_field(anim, "duration"),
            "workStart": read_field(anim, "work_start"),
            "workEnd": read_field(anim, "work_end"),
            "loopType": read_field(anim, "loop"),
        })
    return animations


def _scan_state_machines(artboard: Any) -> list:
    machines = []
    for sm in _indexed(artboard, "state_machine_count", "state_machine_by_index"):
        if sm is None or not read_field(sm, "name"):
            continue
        inputs = []
        for raw_input in read_field(sm, "inputs") or []:
            inputs.append({
                "name": read_field(raw_input, "name"),
                "type": map_state_machine_input_type(read_field(raw_input, "type")),
            })
        machines.append({"name": read_field(sm, "name"), "inputs": inputs})
    return machines


def scan_artboards(file_handle: Any) -> list:
    """List every artboard with its animations and state machines.

    ``viewModels`` is left empty; the assembler attaches the reconciled tree to
    the active artboard.
    """
    artboards = []
    try:
        count = call_optional(file_handle, "artboard_count")
    except Exception as e:
        _warn(f"artboard_count() failed: {e}")
        return artboards
    if not isinstance(count, int):
        return artboards
    for i in range(count):
        try:
            artboard = call_optional(file_handle, "artboard_by_index", i)
        except Exception as e:
            _warn(f"artboard {i} could not be read: {e}")
            continue
        if artboard is None or not read_field(artboard, "name"):
            continue
        entry = {
            "name": read_field(artboard, "name"),
            "animations": [],
            "stateMachines": [],
            "viewModels": [],
        }
        try:
            entry["animations"] = _scan_animations(artboard)
        except Exception as e:
            _warn(f"animations of '{entry['name']}' could not be read: {e}")
        try:
            entry["stateMachines"] = _scan_state_machines(artboard)
        except Exception as e:
            _warn(f"state machines of '{entry['name']}' could not be read: {e}")
        artboards.append(entry)
    return artboards


def scan_enums(file_handle: Any) -> list:
    try:
        raw_enums = call_optional(file_handle, "enums")
    except Exception as e:
        _warn(f"enums() failed: {e}")
        return []
    if not isinstance(raw_enums, (list, tuple)):
        return []

    enums = []
    for raw in raw_enums:
        name = read_field(raw, "name")
        values = read_field(raw, "values")
        if isinstance(name, str) and isinstance(values, (list, tuple)):
            enums.append({"name": name, "values": list(values)})
    return enums


def scan_assets(file_handle: Any) -> list:
    assets = []
    for asset in read_field(file_handle, "assets") or []:
        if asset is None:
            continue
        assets.append({
            "name": read_field(asset, "name") or "Unnamed Asset",
            "cdnUuid": read_field(asset, "cdn_uuid") or read_field(asset, "cdnUuid") or "",
        })
    return assets


def active_artboard_name(file_handle: Any) -> Optional[str]:
    return read_field(read_field(file_handle, "artboard"), "name")
