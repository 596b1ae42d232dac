"""
Runtime 存取輔助 + JSON 快照 runtime

The animation runtime is an opaque, already-loaded object graph. Everything in
this package reads it through duck-typed attribute and method access; the
helpers below keep every read defensive so a missing member degrades to
``None`` instead of an ``AttributeError``.

``SnapshotFile`` implements the same capability set over a plain JSON
document (a runtime snapshot), which is what the CLI loads and what the tests
use to simulate arbitrary runtime shapes.
"""

from typing import Any, Optional


_MISSING = object()


def read_field(obj: Any, name: str, default: Any = None) -> Any:
    """讀取屬性或 dict key，兩者都沒有就回傳 default."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def has_field(obj: Any, name: str) -> bool:
    if obj is None:
        return False
    if isinstance(obj, dict):
        return name in obj
    return getattr(obj, name, _MISSING) is not _MISSING


def call_optional(obj: Any, method: str, *args: Any) -> Any:
    """Call ``obj.method(*args)`` if it exists and is callable, else ``None``.

    Exceptions raised by the method itself propagate to the caller.
    """
    fn = read_field(obj, method)
    if not callable(fn):
        return None
    return fn(*args)


def read_property_declarations(obj: Any) -> list:
    """Return ``[(name, type), ...]`` in the order the runtime declares them.

    Two read strategies are supported: a materialized ``properties`` list, or a
    ``property_count()`` / ``property_by_index(i)`` pair. Entries without a
    name or a type are dropped.
    """
    raw_props = read_field(obj, "properties")
    if not isinstance(raw_props, (list, tuple)):
        raw_props = None
        count_fn = read_field(obj, "property_count")
        by_index = read_field(obj, "property_by_index")
        if callable(count_fn) and callable(by_index):
            raw_props = [by_index(i) for i in range(count_fn())]

    declarations = []
    for p in raw_props or []:
        name = read_field(p, "name")
        ptype = read_field(p, "type")
        if name and ptype:
            declarations.append((name, ptype))
    return declarations


# ════════════════════════════════════════════════════════════
# JSON snapshot runtime
# ════════════════════════════════════════════════════════════

class SnapshotValue:
    """Accessor handle; the current value lives on ``.value``."""

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"SnapshotValue({self.value!r})"


class SnapshotInstance:
    """A bound view-model instance backed by ``{"name", "values", "properties"}``."""

    def __init__(self, data: dict):
        self.name = data.get("name")
        self._values = data.get("values") or {}
        # 沒有 properties 表示 runtime 不提供 introspection
        if isinstance(data.get("properties"), list):
            self.properties = list(data["properties"])
        if data.get("source"):
            self.source = {"name": data["source"]}

    def _accessor(self, prop_name: str) -> Optional[SnapshotValue]:
        if prop_name not in self._values:
            return None
        return SnapshotValue(self._values[prop_name])

    def number(self, prop_name: str) -> Optional[SnapshotValue]:
        return self._accessor(prop_name)

    def string(self, prop_name: str) -> Optional[SnapshotValue]:
        return self._accessor(prop_name)

    def boolean(self, prop_name: str) -> Optional[SnapshotValue]:
        return self._accessor(prop_name)

    def enum(self, prop_name: str) -> Optional[SnapshotValue]:
        return self._accessor(prop_name)

    def color(self, prop_name: str) -> Optional[SnapshotValue]:
        return self._accessor(prop_name)

    def view_model(self, prop_name: str) -> Optional["SnapshotInstance"]:
        nested = self._values.get(prop_name)
        if not isinstance(nested, dict):
            return None
        return SnapshotInstance(nested)


class SnapshotViewModel:
    """A view-model definition (blueprint) from the snapshot."""

    def __init__(self, data: dict):
        self.name = data.get("name")
        self.properties = list(data.get("properties") or [])
        self._instances = list(data.get("instances") or [])
        names = data.get("instanceNames")
        if names is None:
            names = [inst.get("name", "") for inst in self._instances]
        self.instance_names = list(names)
        self.instance_count = data.get("instanceCount", len(self.instance_names))

    def default_instance(self) -> Optional[SnapshotInstance]:
        if not self._instances:
            return None
        return SnapshotInstance(self._instances[0])

    def instance_by_index(self, index: int) -> Optional[SnapshotInstance]:
        if 0 <= index < len(self._instances):
            return SnapshotInstance(self._instances[index])
        return None


class SnapshotStateMachine:
    def __init__(self, data: dict):
        self.name = data.get("name")
        self.inputs = list(data.get("inputs") or [])


class SnapshotAnimation:
    def __init__(self, data: dict):
        self.name = data.get("name")
        self.fps = data.get("fps")
        self.duration = data.get("duration")
        self.work_start = data.get("workStart")
        self.work_end = data.get("workEnd")
        self.loop = data.get("loop")


class SnapshotArtboard:
    def __init__(self, data: dict):
        self.name = data.get("name")
        self._animations = [SnapshotAnimation(a) for a in data.get("animations") or []]
        self._state_machines = [SnapshotStateMachine(s) for s in data.get("stateMachines") or []]

    def animation_count(self) -> int:
        return len(self._animations)

    def animation_by_index(self, index: int) -> SnapshotAnimation:
        return self._animations[index]

    def state_machine_count(self) -> int:
        return len(self._state_machines)

    def state_machine_by_index(self, index: int) -> SnapshotStateMachine:
        return self._state_machines[index]


class SnapshotFile:
    """File handle over a runtime snapshot document.

    ``view_model_by_index`` raises ``IndexError`` past the last definition,
    which mirrors the out-of-range signal of the real runtime. The snapshot
    deliberately offers no ``view_model_count`` unless ``viewModelCount`` is
    present in the document, so the probing path gets exercised.
    """

    def __init__(self, data: dict):
        self.data = data
        self._view_models = [SnapshotViewModel(vm) for vm in data.get("viewModels") or []]
        self._artboards = [SnapshotArtboard(ab) for ab in data.get("artboards") or []]
        self.assets = list(data.get("assets") or [])

        active_name = data.get("activeArtboard")
        self.artboard = None
        for ab in self._artboards:
            if active_name is None or ab.name == active_name:
                self.artboard = ab
                break

        bound = data.get("boundInstance")
        self.view_model_instance = SnapshotInstance(bound) if isinstance(bound, dict) else None

        if isinstance(data.get("viewModelCount"), int):
            count = data["viewModelCount"]
            self.view_model_count = lambda: count

    def view_model_by_index(self, index: int) -> SnapshotViewModel:
        if index < 0 or index >= len(self._view_models):
            raise IndexError(f"view model index {index} out of range")
        return self._view_models[index]

    def default_view_model(self) -> Optional[SnapshotViewModel]:
        name = self.data.get("defaultViewModel")
        for vm in self._view_models:
            if vm.name == name:
                return vm
        return None

    def artboard_count(self) -> int:
        return len(self._artboards)

    def artboard_by_index(self, index: int) -> SnapshotArtboard:
        return self._artboards[index]

    def enums(self) -> list:
        return list(self.data.get("enums") or [])
