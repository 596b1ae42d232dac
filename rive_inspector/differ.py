"""
Export document diff 與預覽

比對兩份 export document 的 ViewModel 值，產出變更清單。Trigger inputs carry
no state and are skipped.
"""

from typing import Optional


class DocumentDiffer:
    """比對兩份 export 的 ViewModel 樹."""

    def diff(self, before: dict, after: dict) -> dict:
        """回傳 { path: { "inputs.<name>": { before, after } } } 或 _status added/deleted."""
        before_flat = self.flatten(before)
        after_flat = self.flatten(after)
        changes = {}
        for path, after_node in after_flat.items():
            before_node = before_flat.get(path)
            if before_node is None:
                changes[path] = {"_status": "added"}
                continue
            node_changes = self._diff_node(before_node, after_node)
            if node_changes:
                changes[path] = node_changes
        for path in before_flat:
            if path not in after_flat:
                changes[path] = {"_status": "deleted"}
        return changes

    def flatten(self, document: dict) -> dict:
        result = {}
        for artboard in document.get("artboards", []):
            for vm in artboard.get("viewModels", []):
                self._flatten_node(vm, result, artboard.get("name", "?"))
        return result

    def _flatten_node(self, node: dict, result: dict, path: str) -> None:
        full_path = f"{path}/{node.get('instanceName', '?')}"
        result[full_path] = node
        for child in node.get("nestedViewModels", []):
            self._flatten_node(child, result, full_path)

    def _diff_node(self, before: dict, after: dict) -> Optional[dict]:
        changes = {}
        if before.get("sourceBlueprintName") != after.get("sourceBlueprintName"):
            changes["sourceBlueprintName"] = {
                "before": before.get("sourceBlueprintName"),
                "after": after.get("sourceBlueprintName"),
            }
        b_inputs = {i["name"]: i for i in before.get("inputs", []) if i.get("type") != "trigger"}
        a_inputs = {i["name"]: i for i in after.get("inputs", []) if i.get("type") != "trigger"}
        for name in list(b_inputs) + [n for n in a_inputs if n not in b_inputs]:
            b = b_inputs.get(name, {}).get("value")
            a = a_inputs.get(name, {}).get("value")
            if name not in b_inputs or name not in a_inputs or b != a:
                changes[f"inputs.{name}"] = {"before": b, "after": a}
        return changes if changes else None


def preview_view_model_tree(node: dict, indent: int = 0) -> str:
    """除錯用：印出 ViewModel instance 樹."""
    lines = []
    prefix = "  " * indent
    label = f"{prefix}├─ {node.get('instanceName', '???')}  [{node.get('sourceBlueprintName', '?')}]"
    lines.append(label)
    for inp in node.get("inputs", []):
        lines.append(f"{prefix}  • {inp.get('name')} ({inp.get('type')}) = {inp.get('value')!r}")
    for child in node.get("nestedViewModels", []):
        lines.append(preview_view_model_tree(child, indent + 1))
    return "\n".join(lines)
