"""
ViewModel instance reconciliation

Walks a live, already-bound instance tree and projects it into immutable
``ViewModelInstanceNode`` objects. The runtime does not tell us which
blueprint a nested instance came from, so each one is resolved against the
catalog: first by its runtime name, then by the fingerprint of whatever
properties the instance exposes.

Resolution strategy per nested instance:
  1. SOURCE       the runtime exposes the definition on ``source``
  2. NAME         runtime ``name`` equals a catalog blueprint name
  3. FINGERPRINT  introspected ``name:type`` set equals a blueprint fingerprint
  4. UNRESOLVED   leaf node, no recursion
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .blueprints import Blueprint, BlueprintCatalog, fingerprint
from .runtime import call_optional, read_field, read_property_declarations
from .values import extract

DEFAULT_MAX_DEPTH = 32

UNRESOLVED_PREFIX = "UNRESOLVED"
DEPTH_LIMIT_MARKER = "DEPTH_LIMIT_REACHED"


def _warn(msg: str) -> None:
    print(f"   ⚠️  [reconcile] {msg}")


class ResolutionStrategy(Enum):
    SOURCE = "source"
    NAME = "name"
    FINGERPRINT = "fingerprint"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Resolution:
    strategy: ResolutionStrategy
    blueprint: Optional[Blueprint] = None
    runtime_name: Optional[str] = None
    fingerprint: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.blueprint is not None


@dataclass(frozen=True)
class ViewModelInstanceNode:
    instance_name: str
    source_blueprint_name: str
    inputs: tuple = ()
    nested_view_models: tuple = ()
    # 對應的 catalog 條目（僅供組裝時標註，不輸出）
    blueprint: Optional[Blueprint] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict:
        return {
            "instanceName": self.instance_name,
            "sourceBlueprintName": self.source_blueprint_name,
            "inputs": [p.to_dict() for p in self.inputs],
            "nestedViewModels": [n.to_dict() for n in self.nested_view_models],
        }

    def walk(self):
        """Yield this node and every nested node, depth first."""
        yield self
        for child in self.nested_view_models:
            yield from child.walk()


def unresolved_marker(property_name: str, runtime_name: Optional[str]) -> str:
    return f"{UNRESOLVED_PREFIX} (property '{property_name}', runtime name '{runtime_name}')"


def blueprint_for_definition(definition: Any, catalog: BlueprintCatalog) -> Optional[Blueprint]:
    """Catalog entry for a runtime definition: same object first, then same name.

    A named definition missing from the catalog is analyzed on the spot.
    """
    by_identity = catalog.find_by_definition(definition)
    if by_identity is not None:
        return by_identity
    definition_name = read_field(definition, "name")
    by_name = catalog.find_by_name(definition_name)
    if by_name is not None:
        return by_name
    if not definition_name:
        return None
    return Blueprint.from_definition(definition)


def resolve_blueprint(instance: Any, catalog: BlueprintCatalog) -> Resolution:
    """Find the blueprint of a nested instance.

    The runtime-provided ``source`` definition wins; otherwise the instance
    name, then the fingerprint of its introspected properties.
    """
    runtime_name = read_field(instance, "name")
    source = read_field(instance, "source")
    if source is not None:
        by_source = blueprint_for_definition(source, catalog)
        if by_source is not None:
            return Resolution(ResolutionStrategy.SOURCE, by_source, runtime_name)

    by_name = catalog.find_by_name(runtime_name)
    if by_name is not None:
        return Resolution(ResolutionStrategy.NAME, by_name, runtime_name)

    try:
        declarations = read_property_declarations(instance)
    except Exception as e:
        _warn(f"could not introspect instance '{runtime_name}': {e}")
        declarations = []
    if not declarations:
        return Resolution(ResolutionStrategy.UNRESOLVED, None, runtime_name)

    instance_fingerprint = fingerprint(declarations)
    by_fingerprint = catalog.find_by_fingerprint(instance_fingerprint)
    if by_fingerprint is not None:
        return Resolution(ResolutionStrategy.FINGERPRINT, by_fingerprint, runtime_name, instance_fingerprint)
    return Resolution(ResolutionStrategy.UNRESOLVED, None, runtime_name, instance_fingerprint)


def _nested_node(
    instance: Any,
    declaration: Any,
    catalog: BlueprintCatalog,
    max_depth: int,
    depth: int,
) -> Optional[ViewModelInstanceNode]:
    try:
        nested = call_optional(instance, "view_model", declaration.name)
    except Exception:
        nested = None
    if nested is None:
        # 未綁定的巢狀 slot 不算錯誤
        return None

    try:
        return _resolved_node(nested, declaration, catalog, max_depth, depth)
    except Exception as e:
        try:
            runtime_name = read_field(nested, "name")
        except Exception:
            runtime_name = None
        _warn(f"nested instance '{declaration.name}' failed: {e}")
        return ViewModelInstanceNode(
            instance_name=declaration.name,
            source_blueprint_name=f"{unresolved_marker(declaration.name, runtime_name)} (error: {e})",
        )


def _resolved_node(
    nested: Any,
    declaration: Any,
    catalog: BlueprintCatalog,
    max_depth: int,
    depth: int,
) -> ViewModelInstanceNode:
    resolution = resolve_blueprint(nested, catalog)
    if not resolution.resolved:
        _warn(
            f"no blueprint for nested instance '{declaration.name}' "
            f"(runtime name '{resolution.runtime_name}')"
        )
        return ViewModelInstanceNode(
            instance_name=declaration.name,
            source_blueprint_name=unresolved_marker(declaration.name, resolution.runtime_name),
        )

    if depth + 1 > max_depth:
        return ViewModelInstanceNode(
            instance_name=declaration.name,
            source_blueprint_name=DEPTH_LIMIT_MARKER,
        )
    return reconcile(
        nested,
        declaration.name,
        resolution.blueprint,
        catalog,
        max_depth=max_depth,
        _depth=depth + 1,
    )


def reconcile(
    instance: Any,
    instance_name: str,
    blueprint: Blueprint,
    catalog: BlueprintCatalog,
    max_depth: int = DEFAULT_MAX_DEPTH,
    _depth: int = 0,
) -> ViewModelInstanceNode:
    """Project a live instance bound to ``blueprint`` into a node tree.

    Properties are visited in blueprint declaration order and that order is
    kept in ``inputs`` and ``nested_view_models``. Nothing raised while reading
    one property escapes; it is recorded on that property instead.
    """
    inputs = []
    nested_nodes = []
    for declaration in blueprint.properties:
        if declaration.type == "viewModel":
            node = _nested_node(instance, declaration, catalog, max_depth, _depth)
            if node is not None:
                nested_nodes.append(node)
        else:
            inputs.append(extract(instance, declaration))

    return ViewModelInstanceNode(
        instance_name=instance_name,
        source_blueprint_name=blueprint.name,
        inputs=tuple(inputs),
        nested_view_models=tuple(nested_nodes),
        blueprint=blueprint,
    )
