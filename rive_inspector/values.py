"""
屬性值擷取 — one leaf property of a live instance to a normalized value.

Extraction never raises: a missing accessor, a missing ``.value`` or a runtime
error all end up as a descriptive string in ``PropertyValue.value``.
"""

from dataclasses import dataclass
from typing import Any

from .runtime import has_field, read_field

TRIGGER_MARKER = "N/A (Trigger)"

_NOT_FOUND = object()


@dataclass(frozen=True)
class PropertyValue:
    name: str
    type: str
    value: Any

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type, "value": self.value}


def _is_argb_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int)


def argb_to_hex(argb: Any) -> str:
    """Packed 32-bit ARGB number to ``#RRGGBB`` (alpha dropped).

    Integral floats are accepted; some runtimes hand colors back as doubles.
    """
    if not _is_argb_number(argb):
        return f"NOT_AN_ARGB_NUMBER ({type(argb).__name__}: {argb})"
    return "#" + format(int(argb) & 0xFFFFFF, "06X")


def _handle_value(handle: Any) -> Any:
    if handle is None or not has_field(handle, "value"):
        return _NOT_FOUND
    return read_field(handle, "value")


def _typed_value(instance: Any, accessor: str, prop_name: str, label: str) -> Any:
    fn = read_field(instance, accessor)
    if not callable(fn):
        return f"instance.{accessor} is not a function"
    value = _handle_value(fn(prop_name))
    if value is _NOT_FOUND:
        return f"{label} accessor value not found"
    return value


def _enum_value(instance: Any, prop_name: str) -> Any:
    enum_fn = read_field(instance, "enum")
    if callable(enum_fn):
        value = _handle_value(enum_fn(prop_name))
        if value is not _NOT_FOUND:
            return value
        if not callable(read_field(instance, "string")):
            return "Enum (via .enum) accessor value not found; instance.string is not a function"
        return _typed_value(instance, "string", prop_name, "Enum (via .string fallback)")
    if callable(read_field(instance, "string")):
        return _typed_value(instance, "string", prop_name, "Enum (via .string)")
    return "instance.enum (and .string) is not a function for enumType"


def _color_value(instance: Any, prop_name: str) -> Any:
    color_fn = read_field(instance, "color")
    if not callable(color_fn):
        return "instance.color is not a function"
    handle = color_fn(prop_name)
    # 部分 runtime 直接回傳數字而非 handle
    if _is_argb_number(handle):
        return argb_to_hex(handle)
    raw = _handle_value(handle)
    if raw is _NOT_FOUND:
        return "Color accessor value not found"
    if _is_argb_number(raw):
        return argb_to_hex(raw)
    if isinstance(raw, str):
        return raw
    return f"Color not in expected ARGB format ({type(raw).__name__}: {raw})"


_SIMPLE_ACCESSORS = {
    "number": ("number", "Number"),
    "string": ("string", "String"),
    "boolean": ("boolean", "Boolean"),
}


def extract(instance: Any, declaration: Any) -> PropertyValue:
    """Read the current value of one declared (non view-model) property."""
    name = read_field(declaration, "name")
    ptype = read_field(declaration, "type")
    try:
        if ptype in _SIMPLE_ACCESSORS:
            accessor, label = _SIMPLE_ACCESSORS[ptype]
            value = _typed_value(instance, accessor, name, label)
        elif ptype == "enumType":
            value = _enum_value(instance, name)
        elif ptype == "color":
            value = _color_value(instance, name)
        elif ptype == "trigger":
            value = TRIGGER_MARKER
        else:
            value = f"UNHANDLED_PROPERTY_TYPE: {ptype}"
    except Exception as e:
        value = f"ERROR_IN_PROPERTY_EXTRACTION: {e}"
    return PropertyValue(name=name, type=ptype, value=value)
