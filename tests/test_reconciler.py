"""
Instance reconciliation 測試：名稱 → 指紋 → unresolved、順序、決定性、深度保護。
"""
from types import SimpleNamespace

from rive_inspector.blueprints import Blueprint, BlueprintCatalog
from rive_inspector.reconciler import (
    DEPTH_LIMIT_MARKER,
    UNRESOLVED_PREFIX,
    ResolutionStrategy,
    reconcile,
    resolve_blueprint,
)
from rive_inspector.runtime import SnapshotInstance


def bp(name, *props):
    return Blueprint.from_definition(
        {"name": name, "properties": [{"name": n, "type": t} for n, t in props]}
    )


def catalog(*blueprints):
    return BlueprintCatalog(blueprints)


def instance(name, values, properties=None):
    data = {"name": name, "values": values}
    if properties is not None:
        data["properties"] = [{"name": n, "type": t} for n, t in properties]
    return SnapshotInstance(data)


# ─── resolve_blueprint ───────────────────────────────────────────────────────

class TestResolveBlueprint:
    def test_name_match_wins_over_fingerprint(self):
        a = bp("A", ("Label", "string"), ("Active", "boolean"))
        other = bp("Other", ("Label", "string"))
        # 只看得到部分屬性，指紋與 A 不同，但名稱相符
        nested = instance("A", {}, properties=[("Label", "string")])
        resolution = resolve_blueprint(nested, catalog(other, a))
        assert resolution.strategy is ResolutionStrategy.NAME
        assert resolution.blueprint is a

    def test_fingerprint_match(self):
        a = bp("A", ("Label", "string"), ("Active", "boolean"))
        nested = instance("instance-7", {}, properties=[("Active", "boolean"), ("Label", "string")])
        resolution = resolve_blueprint(nested, catalog(a))
        assert resolution.strategy is ResolutionStrategy.FINGERPRINT
        assert resolution.blueprint is a
        assert resolution.fingerprint == "Active:boolean|Label:string"

    def test_unresolved_without_introspection(self):
        nested = instance("nobody", {"x": 1})
        resolution = resolve_blueprint(nested, catalog(bp("A", ("x", "number"))))
        assert resolution.strategy is ResolutionStrategy.UNRESOLVED
        assert not resolution.resolved
        assert resolution.runtime_name == "nobody"

    def test_unresolved_fingerprint_mismatch(self):
        nested = instance("", {}, properties=[("y", "string")])
        resolution = resolve_blueprint(nested, catalog(bp("A", ("x", "number"))))
        assert resolution.strategy is ResolutionStrategy.UNRESOLVED
        assert resolution.fingerprint == "y:string"

    def test_identical_fingerprints_bind_first_catalog_entry(self):
        first = bp("First", ("a", "number"))
        second = bp("Second", ("a", "number"))
        nested = instance("", {}, properties=[("a", "number")])
        assert resolve_blueprint(nested, catalog(first, second)).blueprint is first
        assert resolve_blueprint(nested, catalog(second, first)).blueprint is second

    def test_source_definition_resolves_by_identity(self):
        child = bp("Child", ("Count", "number"))
        nested = SimpleNamespace(name="", source=child.definition)
        resolution = resolve_blueprint(nested, catalog(bp("Other"), child))
        assert resolution.strategy is ResolutionStrategy.SOURCE
        assert resolution.blueprint is child

    def test_source_wins_over_instance_name(self):
        child = bp("Child", ("Count", "number"))
        other = bp("Other", ("Count", "number"))
        nested = SimpleNamespace(name="Other", source=child.definition)
        assert resolve_blueprint(nested, catalog(other, child)).blueprint is child

    def test_source_matched_by_name(self):
        child = bp("Child", ("Count", "number"))
        nested = SimpleNamespace(name="", source={"name": "Child"})
        resolution = resolve_blueprint(nested, catalog(child))
        assert resolution.strategy is ResolutionStrategy.SOURCE
        assert resolution.blueprint is child

    def test_source_outside_catalog_analyzed_directly(self):
        source = {"name": "Late", "properties": [{"name": "v", "type": "number"}]}
        resolution = resolve_blueprint(SimpleNamespace(name="", source=source), catalog())
        assert resolution.strategy is ResolutionStrategy.SOURCE
        assert resolution.blueprint.name == "Late"
        assert resolution.blueprint.fingerprint == "v:number"

    def test_nameless_source_falls_back(self):
        a = bp("A", ("x", "number"))
        nested = instance("A", {})
        nested.source = {"name": ""}
        assert resolve_blueprint(nested, catalog(a)).strategy is ResolutionStrategy.NAME


# ─── reconcile ───────────────────────────────────────────────────────────────

class TestReconcile:
    def _fixture(self):
        child = bp("Child", ("Count", "number"))
        root = bp(
            "Root",
            ("Title", "string"),
            ("Left", "viewModel"),
            ("Tint", "color"),
            ("Right", "viewModel"),
            ("Go", "trigger"),
        )
        live = instance("root", {
            "Title": "Hi",
            "Left": {"name": "Child", "values": {"Count": 1}},
            "Tint": 0xFF0000FF,
            "Right": {"name": "", "values": {"Count": 2}, "properties": [{"name": "Count", "type": "number"}]},
        })
        return root, child, live

    def test_tree_shape_and_order(self):
        root, child, live = self._fixture()
        node = reconcile(live, "Main", root, catalog(root, child))
        assert node.instance_name == "Main"
        assert node.source_blueprint_name == "Root"
        assert [p.name for p in node.inputs] == ["Title", "Tint", "Go"]
        assert [p.value for p in node.inputs] == ["Hi", "#0000FF", "N/A (Trigger)"]
        assert [n.instance_name for n in node.nested_view_models] == ["Left", "Right"]
        assert [n.source_blueprint_name for n in node.nested_view_models] == ["Child", "Child"]
        assert node.nested_view_models[1].inputs[0].value == 2

    def test_determinism(self):
        root, child, live = self._fixture()
        cat = catalog(root, child)
        first = reconcile(live, "Main", root, cat)
        second = reconcile(live, "Main", root, cat)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_unbound_nested_slot_skipped(self):
        root = bp("Root", ("Slot", "viewModel"), ("N", "number"))
        node = reconcile(instance("r", {"N": 1}), "r", root, catalog(root))
        assert node.nested_view_models == ()
        assert node.inputs[0].value == 1

    def test_unresolved_nested_is_leaf_and_siblings_continue(self, capsys):
        known = bp("Known", ("v", "number"))
        root = bp("Root", ("Mystery", "viewModel"), ("Next", "viewModel"), ("Label", "string"))
        live = instance("r", {
            "Mystery": {"name": "Ghost", "values": {"q": 1}, "properties": [{"name": "q", "type": "string"}]},
            "Next": {"name": "Known", "values": {"v": 5}},
            "Label": "after",
        })
        node = reconcile(live, "r", root, catalog(root, known))

        mystery, nxt = node.nested_view_models
        assert mystery.source_blueprint_name.startswith(UNRESOLVED_PREFIX)
        assert "Mystery" in mystery.source_blueprint_name
        assert "Ghost" in mystery.source_blueprint_name
        assert mystery.nested_view_models == ()
        assert mystery.inputs == ()
        assert nxt.source_blueprint_name == "Known"
        assert node.inputs[0].value == "after"
        assert "Mystery" in capsys.readouterr().out

    def test_missing_accessor_degrades(self):
        root = bp("Root", ("Speed", "number"), ("Name", "string"))
        live = SimpleNamespace(string=lambda n: SimpleNamespace(value="ok"))
        node = reconcile(live, "r", root, catalog(root))
        speed, name = node.inputs
        assert isinstance(speed.value, str) and speed.value
        assert name.value == "ok"

    def test_nested_accessor_raising_is_skipped(self):
        class Raising:
            name = "r"

            def view_model(self, n):
                raise RuntimeError("no such property")

            def number(self, n):
                return SimpleNamespace(value=3)

        root = bp("Root", ("Child", "viewModel"), ("N", "number"))
        node = reconcile(Raising(), "r", root, catalog(root))
        assert node.nested_view_models == ()
        assert node.inputs[0].value == 3

    def test_nested_source_reconciled(self):
        child = bp("Child", ("Count", "number"))
        root = bp("Root", ("Slot", "viewModel"))
        live = instance("r", {"Slot": {"name": "", "values": {"Count": 4}, "source": "Child"}})
        (slot,) = reconcile(live, "r", root, catalog(root, child)).nested_view_models
        assert slot.source_blueprint_name == "Child"
        assert slot.inputs[0].value == 4

    def test_failing_nested_instance_marker_names_property(self, capsys):
        class Detached:
            name = "Broken"

            @property
            def source(self):
                raise RuntimeError("detached")

        class Parent:
            name = "p"

            def view_model(self, n):
                return Detached()

            def string(self, n):
                return SimpleNamespace(value="still here")

        root = bp("Root", ("Slot", "viewModel"), ("Label", "string"))
        node = reconcile(Parent(), "p", root, catalog(root))
        (slot,) = node.nested_view_models
        assert slot.source_blueprint_name == (
            "UNRESOLVED (property 'Slot', runtime name 'Broken') (error: detached)"
        )
        assert slot.nested_view_models == ()
        assert node.inputs[0].value == "still here"
        assert "Slot" in capsys.readouterr().out

    def test_self_referential_graph_stops_at_depth_limit(self):
        loop = bp("Loop", ("Next", "viewModel"))

        class Cyclic:
            name = "Loop"

            def view_model(self, n):
                return self

        node = reconcile(Cyclic(), "start", loop, catalog(loop), max_depth=4)
        depth = 0
        current = node
        while current.nested_view_models:
            current = current.nested_view_models[0]
            depth += 1
        # 深度 1..4 正常展開，第 5 層為 leaf
        assert depth == 5
        assert current.source_blueprint_name == DEPTH_LIMIT_MARKER

    def test_nodes_reference_catalog_blueprint(self):
        root, child, live = self._fixture()
        node = reconcile(live, "Main", root, catalog(root, child))
        assert node.blueprint is root
        assert all(n.blueprint is child for n in node.nested_view_models)
        assert [n.instance_name for n in node.walk()] == ["Main", "Left", "Right"]

    def test_to_dict_keys(self):
        root, child, live = self._fixture()
        data = reconcile(live, "Main", root, catalog(root, child)).to_dict()
        assert set(data) == {"instanceName", "sourceBlueprintName", "inputs", "nestedViewModels"}
        assert data["nestedViewModels"][0]["inputs"] == [{"name": "Count", "type": "number", "value": 1}]
