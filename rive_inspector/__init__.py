"""
rive-inspector — 動畫檔 ViewModel blueprint 探勘與 instance 對應

列舉檔案內所有 ViewModel blueprint、走訪已綁定的 instance 樹，
並把每個巢狀 instance 對回正確的 blueprint（名稱優先，其次指紋）。
"""

__version__ = "0.3.0"

from .blueprints import (
    Blueprint,
    BlueprintCatalog,
    PropertyDeclaration,
    build_catalog,
    fingerprint,
)
from .values import PropertyValue, argb_to_hex, extract
from .reconciler import (
    Resolution,
    ResolutionStrategy,
    ViewModelInstanceNode,
    blueprint_for_definition,
    reconcile,
    resolve_blueprint,
)
from .artboards import scan_artboards, scan_assets, scan_enums
from .document import EXPORT_KEYS, InspectionError, filter_document, produce_document, save_document
from .runtime import SnapshotFile
from .loader import SnapshotClient, load_snapshot, open_snapshot
from .differ import DocumentDiffer, preview_view_model_tree
from .config import InspectorSettings, load_config, settings_from_config, validate_config

__all__ = [
    "__version__",
    "Blueprint",
    "BlueprintCatalog",
    "PropertyDeclaration",
    "build_catalog",
    "fingerprint",
    "PropertyValue",
    "argb_to_hex",
    "extract",
    "Resolution",
    "ResolutionStrategy",
    "ViewModelInstanceNode",
    "blueprint_for_definition",
    "reconcile",
    "resolve_blueprint",
    "scan_artboards",
    "scan_assets",
    "scan_enums",
    "EXPORT_KEYS",
    "InspectionError",
    "filter_document",
    "produce_document",
    "save_document",
    "SnapshotFile",
    "SnapshotClient",
    "load_snapshot",
    "open_snapshot",
    "DocumentDiffer",
    "preview_view_model_tree",
    "InspectorSettings",
    "load_config",
    "settings_from_config",
    "validate_config",
]
