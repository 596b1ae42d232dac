#!/usr/bin/env python3
"""
rive-inspector CLI — 動畫檔 ViewModel 檢視

  rive-inspect inspect <snapshot>          # 產生 export document
  rive-inspect preview <snapshot>          # 預覽 ViewModel 樹
  rive-inspect diff <before> <after>       # 比對兩份 export
  rive-inspect watch <snapshot>            # 檔案變更時自動 inspect
"""

import argparse
import json
import os
import sys
import time
from typing import Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from . import __version__
from .config import DEFAULT_CONFIG_PATH, load_config, settings_from_config
from .differ import DocumentDiffer, preview_view_model_tree
from .document import InspectionError, produce_document, save_document
from .loader import is_url, open_snapshot


def _snapshot_source(args, config: dict) -> str:
    return getattr(args, "snapshot", None) or settings_from_config(config).snapshot


def _print_failure(err: InspectionError) -> None:
    print(f"   ❌ {err.error}")
    if err.details:
        print(f"      {err.details}")


def perform_inspect(source: str, config: dict, output_dir: Optional[str] = None, echo: bool = False) -> Optional[dict]:
    """Core inspect logic, shared by inspect and watch commands."""
    settings = settings_from_config(config)
    print(f"🔍 Inspecting: {source}")
    try:
        document = produce_document(open_snapshot(source), config)
    except InspectionError as e:
        _print_failure(e)
        return None

    catalog = document["allViewModelDefinitionsAndInstances"]
    print(f"   ✅ {len(document['artboards'])} artboards, {len(catalog)} view model blueprints")

    try:
        doc_path, catalog_path = save_document(document, output_dir or settings.output_dir, settings.indent)
    except OSError as e:
        print(f"   ❌ Could not write export: {e}")
        return None
    print(f"   ✅ Saved to {doc_path}")
    print(f"   📄 Catalog saved to {catalog_path}")
    if echo:
        print(json.dumps(document, indent=settings.indent, ensure_ascii=False))
    return document


def cmd_inspect(args, config: dict) -> int:
    source = _snapshot_source(args, config)
    document = perform_inspect(source, config, output_dir=args.output, echo=args.print)
    return 0 if document is not None else 1


def cmd_preview(args, config: dict) -> int:
    source = _snapshot_source(args, config)
    print(f"👁️  Preview ViewModel tree: {source}")
    try:
        document = produce_document(open_snapshot(source), config)
    except InspectionError as e:
        _print_failure(e)
        return 1

    shown = 0
    for artboard in document["artboards"]:
        for vm in artboard["viewModels"]:
            print(f"\n🎨 {artboard['name']}")
            print(preview_view_model_tree(vm))
            shown += 1
    if not shown:
        print("   ℹ️  No bound ViewModel instance on the active artboard.")
    print(f"\nBlueprints: {len(document['allViewModelDefinitionsAndInstances'])}")
    return 0


def _load_export(path: str) -> Optional[dict]:
    if not os.path.exists(path):
        print(f"❌ 找不到檔案：{path}")
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, ValueError) as e:
        print(f"❌ 無法讀取 export：{path}（{e}）")
        return None
    if not isinstance(document, dict):
        print(f"❌ export 格式錯誤，應為 JSON 物件：{path}")
        return None
    return document


def cmd_diff(args, config: dict) -> int:
    before = _load_export(args.before)
    after = _load_export(args.after)
    if before is None or after is None:
        return 1

    changes = DocumentDiffer().diff(before, after)
    if not changes:
        print("   ✅ No changes.")
        return 0

    print(f"   📝 {len(changes)} changed instances")
    for path, diffs in changes.items():
        status = diffs.get("_status")
        if status == "added":
            print(f"  + NEW: {path}")
        elif status == "deleted":
            print(f"  - DEL: {path}")
        else:
            print(f"  ~ CHANGED: {path}")
            for key, change in diffs.items():
                print(f"      {key}: {change['before']!r} → {change['after']!r}")
    return 0


class SnapshotChangeHandler(FileSystemEventHandler):
    """snapshot 檔案變更事件處理器，帶 debounce 防抖。"""

    def __init__(self, snapshot_path: str, callback, debounce: float = 1.0):
        self.snapshot_path = os.path.abspath(snapshot_path)
        self.callback = callback
        self.last_trigger = 0.0
        self.debounce_seconds = debounce

    def on_modified(self, event):
        if event.is_directory:
            return
        if os.path.abspath(event.src_path) != self.snapshot_path:
            return
        current_time = time.time()
        if current_time - self.last_trigger < self.debounce_seconds:
            return
        self.last_trigger = current_time
        print(f"\n🔄 File changed: {event.src_path}")
        self.callback()

    on_created = on_modified


def cmd_watch(args, config: dict) -> int:
    """Watch: 監聽 snapshot 變更並自動 inspect."""
    source = _snapshot_source(args, config)
    if not source or is_url(source):
        print("❌ watch 需要本機 snapshot 路徑。")
        return 1

    watch_dir = os.path.dirname(os.path.abspath(source))
    print(f"👀 Watching '{source}' for changes...")
    print("   Press Ctrl+C to stop.")

    def inspect_task():
        perform_inspect(source, config, output_dir=args.output)

    inspect_task()

    handler = SnapshotChangeHandler(source, inspect_task, debounce=args.debounce)
    observer = Observer()
    observer.schedule(handler, path=watch_dir, recursive=False)
    observer.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n👋 Stopping watch...")
        observer.stop()
    finally:
        observer.join()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rive-inspect",
        description="rive-inspector: ViewModel blueprint discovery & instance reconciliation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config path")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    inspect_p = sub.add_parser("inspect", help="Produce the export document",
        epilog="Examples:\n  rive-inspect inspect snapshot.json\n  rive-inspect inspect http://localhost:3000/snapshot.json --print",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    inspect_p.add_argument("snapshot", nargs="?", help="Snapshot path or URL (default: source.snapshot)")
    inspect_p.add_argument("--output", "-o", help="Output directory (default: export.outputDir)")
    inspect_p.add_argument("--print", action="store_true", help="Also print the document to stdout")

    preview_p = sub.add_parser("preview", help="Preview the ViewModel tree")
    preview_p.add_argument("snapshot", nargs="?", help="Snapshot path or URL")

    diff_p = sub.add_parser("diff", help="Compare two export documents",
        epilog="Examples:\n  rive-inspect diff old/rive-inspection.json .rive-inspector/rive-inspection.json",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    diff_p.add_argument("before", help="Earlier export document")
    diff_p.add_argument("after", help="Later export document")

    watch_p = sub.add_parser("watch", help="Re-inspect when the snapshot file changes")
    watch_p.add_argument("snapshot", nargs="?", help="Local snapshot path")
    watch_p.add_argument("--output", "-o", help="Output directory")
    watch_p.add_argument("--debounce", type=float, default=1.0, help="Seconds between runs")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)

    if args.command == "inspect":
        return cmd_inspect(args, config)
    elif args.command == "preview":
        return cmd_preview(args, config)
    elif args.command == "diff":
        return cmd_diff(args, config)
    elif args.command == "watch":
        return cmd_watch(args, config)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
