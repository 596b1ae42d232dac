"""
Export document 組裝

``produce_document`` is the single entry point downstream consumers use: it
builds the blueprint catalog, reconciles the active artboard's root
ViewModel instance, merges both with the artboard scan and returns a document
restricted to ``EXPORT_KEYS``.
"""

import json
import os
from typing import Any, Optional

from .artboards import active_artboard_name, scan_artboards, scan_assets, scan_enums
from .blueprints import BlueprintCatalog, build_catalog
from .config import InspectorSettings, settings_from_config
from .reconciler import ViewModelInstanceNode, blueprint_for_definition, reconcile
from .runtime import call_optional, read_field

EXPORT_KEYS = (
    "artboards",
    "assets",
    "allViewModelDefinitionsAndInstances",
    "globalEnums",
    "defaultElements",
)

DOCUMENT_FILENAME = "rive-inspection.json"
CATALOG_FILENAME = "view-model-catalog.json"


def _warn(msg: str) -> None:
    print(f"   ⚠️  [document] {msg}")


class InspectionError(Exception):
    """File handle unusable; the only failure surfaced to callers."""

    def __init__(self, error: str, details: Any = None):
        super().__init__(error)
        self.error = error
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.error, "details": self.details}


def _check_handle(file_handle: Any) -> None:
    if file_handle is None:
        raise InspectionError("No file handle", "the runtime did not produce a loaded file")
    if not callable(read_field(file_handle, "view_model_by_index")) and not callable(
        read_field(file_handle, "artboard_count")
    ):
        raise InspectionError(
            "Unusable file handle",
            f"{type(file_handle).__name__} exposes neither view_model_by_index nor artboard_count",
        )


def _root_node(
    file_handle: Any,
    catalog: BlueprintCatalog,
    settings: InspectorSettings,
) -> Optional[ViewModelInstanceNode]:
    """Reconcile the ViewModel instance bound to the active artboard, if any."""
    if read_field(file_handle, "artboard") is None:
        return None
    try:
        definition = call_optional(file_handle, "default_view_model")
    except Exception as e:
        _warn(f"default_view_model() failed: {e}")
        return None
    if definition is None or not read_field(definition, "name"):
        return None

    blueprint = blueprint_for_definition(definition, catalog)
    instance = read_field(file_handle, "view_model_instance")
    if instance is not None:
        output_name = read_field(instance, "name") or f"{blueprint.name}_autoboundInstance"
    else:
        try:
            instance = call_optional(definition, "default_instance")
        except Exception as e:
            _warn(f"{blueprint.name}.default_instance() failed: {e}")
            instance = None
        if instance is None:
            return None
        output_name = read_field(instance, "name") or f"{blueprint.name}_defaultInstance"

    # 只有一個未命名 instance 時統一叫 Instance
    if blueprint.instance_count == 1 and blueprint.instance_names == ("",):
        output_name = "Instance"

    return reconcile(instance, output_name, blueprint, catalog, max_depth=settings.max_depth)


def _catalog_entries(catalog: BlueprintCatalog, root: Optional[ViewModelInstanceNode]) -> list:
    nodes = list(root.walk()) if root is not None else []
    entries = []
    for bp in catalog:
        parsed = []
        seen = set()
        for node in nodes:
            if node.blueprint is bp and node.instance_name not in seen:
                seen.add(node.instance_name)
                parsed.append(node.to_dict())
        entries.append({
            "blueprintName": bp.name,
            "blueprintProperties": [p.to_dict() for p in bp.sorted_properties()],
            "fingerprint": bp.fingerprint,
            "instanceNamesFromDefinition": list(bp.instance_names),
            "instanceCountFromDefinition": bp.instance_count,
            "parsedInstances": parsed,
        })
    return entries


def filter_document(document: dict) -> dict:
    """Keep only ``EXPORT_KEYS``, in that order."""
    return {key: document[key] for key in EXPORT_KEYS if key in document}


def produce_document(file_handle: Any, config: Optional[dict] = None) -> dict:
    """Build the export document for an already-loaded file handle.

    Raises ``InspectionError`` only when the handle itself is unusable;
    everything else degrades into the document.
    """
    _check_handle(file_handle)
    settings = settings_from_config(config or {})

    catalog = build_catalog(
        file_handle,
        max_probes=settings.max_probes,
        max_consecutive_failures=settings.max_consecutive_failures,
    )
    root = _root_node(file_handle, catalog, settings)
    artboards = scan_artboards(file_handle)

    active_name = active_artboard_name(file_handle)
    active_entry = next((ab for ab in artboards if ab["name"] == active_name), None)
    if root is not None:
        if active_entry is None:
            active_entry = {"name": active_name, "animations": [], "stateMachines": [], "viewModels": []}
            artboards.append(active_entry)
        active_entry["viewModels"].append(root.to_dict())

    document = {
        "artboards": artboards,
        "assets": scan_assets(file_handle),
        "allViewModelDefinitionsAndInstances": _catalog_entries(catalog, root),
        "globalEnums": scan_enums(file_handle),
        "defaultElements": {
            "artboardName": active_name,
            "stateMachineNames": [sm["name"] for sm in active_entry["stateMachines"]] if active_entry else [],
            "viewModelName": catalog[0].name if len(catalog) else None,
        },
        "stats": {"blueprintCount": len(catalog)},
    }
    return filter_document(document)


def save_document(
    document: dict,
    output_dir: str = ".rive-inspector",
    indent: int = 2,
) -> tuple[str, str]:
    os.makedirs(output_dir, exist_ok=True)

    doc_path = os.path.join(output_dir, DOCUMENT_FILENAME)
    with open(doc_path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=indent, ensure_ascii=False)

    catalog_path = os.path.join(output_dir, CATALOG_FILENAME)
    with open(catalog_path, "w", encoding="utf-8") as f:
        json.dump(document.get("allViewModelDefinitionsAndInstances", []), f, indent=indent, ensure_ascii=False)

    return doc_path, catalog_path
