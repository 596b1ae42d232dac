"""
ViewModel blueprint 目錄

Blueprints (view-model definitions) are discovered by probing the file handle
index by index until the runtime signals it has run out, then fingerprinted so
nested instances can be matched structurally when their runtime name does not
identify them.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .runtime import call_optional, read_field, read_property_declarations

DEFAULT_MAX_PROBES = 200
DEFAULT_MAX_CONSECUTIVE_FAILURES = 3

FINGERPRINT_SEPARATOR = "|"

PROPERTY_TYPES = ("number", "string", "boolean", "color", "trigger", "enumType", "viewModel")


@dataclass(frozen=True)
class PropertyDeclaration:
    name: str
    type: str

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type}


def fingerprint(properties: Iterable) -> str:
    """Order-independent identity of a property set.

    Accepts ``PropertyDeclaration`` objects or ``(name, type)`` pairs. Sorting
    is ordinal on name (then type), so the result does not depend on the order
    the runtime enumerates properties in.
    """
    pairs = []
    for p in properties:
        if isinstance(p, PropertyDeclaration):
            pairs.append((p.name, p.type))
        else:
            name, ptype = p
            pairs.append((name, ptype))
    pairs.sort()
    return FINGERPRINT_SEPARATOR.join(f"{name}:{ptype}" for name, ptype in pairs)


@dataclass(frozen=True)
class Blueprint:
    """One view-model definition as discovered in the file."""

    name: str
    properties: tuple
    fingerprint: str
    instance_names: tuple = ()
    instance_count: int = -1
    index: int = -1
    definition: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def from_definition(cls, definition: Any, index: int = -1) -> "Blueprint":
        declarations = tuple(
            PropertyDeclaration(name, ptype)
            for name, ptype in read_property_declarations(definition)
        )
        names = read_field(definition, "instance_names")
        count = read_field(definition, "instance_count")
        if callable(count):
            count = count()
        return cls(
            name=read_field(definition, "name"),
            properties=declarations,
            fingerprint=fingerprint(declarations),
            instance_names=tuple(names) if isinstance(names, (list, tuple)) else (),
            instance_count=count if isinstance(count, int) and not isinstance(count, bool) else -1,
            index=index,
            definition=definition,
        )

    def sorted_properties(self) -> list:
        return sorted(self.properties, key=lambda p: (p.name, p.type))


class BlueprintCatalog:
    """Immutable, ordered collection of discovered blueprints.

    Lookups return the first match in discovery order; names and fingerprints
    are not guaranteed unique.
    """

    def __init__(self, blueprints: Iterable[Blueprint] = ()):
        self._blueprints = tuple(blueprints)

    def __iter__(self):
        return iter(self._blueprints)

    def __len__(self) -> int:
        return len(self._blueprints)

    def __getitem__(self, index: int) -> Blueprint:
        return self._blueprints[index]

    @property
    def blueprints(self) -> tuple:
        return self._blueprints

    def find_by_name(self, name: Optional[str]) -> Optional[Blueprint]:
        if not name:
            return None
        for bp in self._blueprints:
            if bp.name == name:
                return bp
        return None

    def find_by_definition(self, definition: Any) -> Optional[Blueprint]:
        if definition is None:
            return None
        for bp in self._blueprints:
            if bp.definition is definition:
                return bp
        return None

    def find_by_fingerprint(self, value: Optional[str]) -> Optional[Blueprint]:
        if not value:
            return None
        for bp in self._blueprints:
            if bp.fingerprint == value:
                return bp
        return None


def _probe_limit(file_handle: Any, max_probes: int) -> int:
    try:
        count = call_optional(file_handle, "view_model_count")
    except Exception:
        count = None
    if isinstance(count, int) and not isinstance(count, bool) and count > 0:
        return count
    return max_probes


def build_catalog(
    file_handle: Any,
    max_probes: int = DEFAULT_MAX_PROBES,
    max_consecutive_failures: int = DEFAULT_MAX_CONSECUTIVE_FAILURES,
) -> BlueprintCatalog:
    """Probe ``view_model_by_index`` from 0 until the runtime runs dry.

    An exception, ``None`` or a nameless definition all count as a failure;
    ``max_consecutive_failures`` of them in a row ends probing, as does reaching
    the probe limit. Either way is a normal end, never an error.
    """
    probe = read_field(file_handle, "view_model_by_index")
    if not callable(probe):
        return BlueprintCatalog()

    limit = _probe_limit(file_handle, max_probes)
    found = []
    failures = 0
    index = 0
    while index < limit and failures < max_consecutive_failures:
        try:
            definition = probe(index)
        except Exception:
            definition = None
        if definition is not None and read_field(definition, "name"):
            try:
                found.append(Blueprint.from_definition(definition, index=index))
                failures = 0
            except Exception:
                failures += 1
        else:
            failures += 1
        index += 1
    return BlueprintCatalog(found)
