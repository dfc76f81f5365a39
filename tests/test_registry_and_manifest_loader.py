"""Tests for ShapeRegistry and manifest loading."""

from pathlib import Path

import pytest
import yaml

from shapecheck import j
from shapecheck.exceptions import ManifestLoadError, ShapeDefinitionError
from shapecheck.manifest_loader import compile_shapes, load_payload, load_shape_manifest
from shapecheck.registry import ShapeRef, ShapeRegistry


def _write_yaml(path: Path, payload) -> None:
    path.write_text(yaml.safe_dump(payload))


class TestShapeRegistry:
    def test_register_and_get(self):
        registry = ShapeRegistry()
        registry.register("name", j.string)
        assert registry.get("name") is j.string
        assert "name" in registry
        assert len(registry) == 1
        assert list(registry) == ["name"]

    def test_duplicate_registration(self):
        registry = ShapeRegistry()
        registry.register("name", j.string)
        with pytest.raises(ShapeDefinitionError):
            registry.register("name", j.number)

    def test_register_non_checker(self):
        with pytest.raises(ShapeDefinitionError):
            ShapeRegistry().register("name", "string")  # type: ignore[arg-type]

    def test_unknown_shape(self):
        registry = ShapeRegistry()
        registry.register("a", j.string)
        with pytest.raises(KeyError) as excinfo:
            registry.get("b")
        assert "['a']" in str(excinfo.value)

    def test_deferred_looks_up_lazily(self):
        registry = ShapeRegistry()
        user = j.object({"manager?": registry.deferred("user"), "name": j.string})
        registry.register("user", user)
        assert user.check({"name": "a", "manager": {"name": "b"}}) is True
        assert user.check({"name": "a", "manager": {"name": 1}}) is False

    def test_ref_is_a_checker(self):
        registry = ShapeRegistry()
        ref = registry.ref("name")
        registry.register("name", j.string)
        assert isinstance(ref, ShapeRef)
        assert j.array(ref).check(["a", "b"]) is True
        assert j.array(ref).check(["a", 1]) is False

    def test_lookup_returns_none_for_unknown_name(self):
        registry = ShapeRegistry()
        registry.register("name", j.string)
        assert registry.lookup("name") is j.string
        assert registry.lookup("missing") is None

    def test_unregistered_ref_rejects(self):
        registry = ShapeRegistry()
        ref = registry.ref("missing")
        assert ref.check("a") is False
        assert j.array(ref).check(["a"]) is False
        assert j.array(ref).check([]) is True
        assert j.object({"a": ref}).check({"a": 1}) is False
        assert j.any([ref, j.string]).check("a") is True

    def test_unregistered_deferred_rejects(self):
        registry = ShapeRegistry()
        checker = j.object({"a": registry.deferred("missing"), "b?": registry.deferred("missing")})
        assert checker.check({"a": 1}) is False
        assert j.array(checker).check([{"a": 1}]) is False
        registry.register("missing", j.number)
        assert checker.check({"a": 1}) is True


MANIFEST = {
    "version": 1,
    "shapes": {
        "kind": {"any": [{"literal": "user"}, {"literal": "admin"}]},
        "user": {
            "object": {
                "id": "number",
                "name": "string",
                "active": "boolean",
                "email?": {"nullable": "string"},
                "kind": {"ref": "kind"},
                "manager?": {"ref": "user"},
                "meta?": "unknown",
                "deleted_at?": "nil",
            }
        },
        "tree": {
            "object": {
                "label": "string",
                "children": {"array": {"ref": "tree"}},
            }
        },
    },
}


class TestCompileShapes:
    def test_compiles_all_shapes(self):
        registry = compile_shapes(MANIFEST)
        assert registry.names() == ["kind", "tree", "user"]

    def test_compiled_object(self):
        user = compile_shapes(MANIFEST).get("user")
        assert user.check({"id": 1, "name": "a", "active": True, "kind": "user"}) is True
        assert user.check({"id": 1, "name": "a", "active": True, "kind": "guest"}) is False
        assert user.check({"id": 1, "name": "a", "kind": "user"}) is False
        assert (
            user.check(
                {
                    "id": 1,
                    "name": "a",
                    "active": False,
                    "kind": "admin",
                    "email": None,
                    "manager": {"id": 2, "name": "b", "active": True, "kind": "user"},
                }
            )
            is True
        )

    def test_recursive_array_ref(self):
        tree = compile_shapes(MANIFEST).get("tree")
        leaf = {"label": "leaf", "children": []}
        assert tree.check({"label": "root", "children": [leaf]}) is True
        assert tree.check({"label": "root", "children": [{"label": 1, "children": []}]}) is False

    def test_extends_existing_registry(self):
        registry = ShapeRegistry()
        registry.register("name", j.string)
        compile_shapes({"shapes": {"person": {"object": {"name": {"ref": "name"}}}}}, registry=registry)
        assert registry.get("person").check({"name": "a"}) is True

    def test_empty_object_expression(self):
        registry = compile_shapes({"shapes": {"anything": {"object": None}}})
        assert registry.get("anything").check({"x": 1}) is True

    @pytest.mark.parametrize(
        "expr,fragment",
        [
            ("text", "unknown primitive 'text'"),
            ({"literal": 1}, "literal expects a string"),
            ({"any": "string"}, "any expects a list"),
            ({"array": "string", "nullable": "string"}, "single-key mapping"),
            ({"tuple": "string"}, "unknown combinator 'tuple'"),
            ({"ref": "missing"}, "unresolved ref 'missing'"),
            ({"object": {"a": {"ref": "missing"}}}, "unresolved ref 'missing'"),
            ({"object": ["a"]}, "object expects a mapping"),
            (42, "single-key mapping"),
            ({"object": {1: "string"}}, "property names must be strings"),
            ({"object": {True: "string"}}, "property names must be strings"),
        ],
    )
    def test_invalid_expressions(self, expr, fragment):
        with pytest.raises(ManifestLoadError) as excinfo:
            compile_shapes({"shapes": {"bad": expr}}, file_name="bad.yaml")
        assert excinfo.value.file_name == "bad.yaml"
        assert fragment in excinfo.value.message
        assert "shapes.bad" in excinfo.value.message

    def test_invalid_document(self):
        with pytest.raises(ManifestLoadError):
            compile_shapes({"shapes": ["user"]})

    def test_clash_with_existing_registry(self):
        registry = ShapeRegistry()
        registry.register("user", j.string)
        with pytest.raises(ManifestLoadError):
            compile_shapes({"shapes": {"user": "string"}}, registry=registry)


class TestLoadShapeManifest:
    def test_load_yaml(self, tmp_path: Path):
        _write_yaml(tmp_path / "shapes.yaml", MANIFEST)
        registry = load_shape_manifest(tmp_path / "shapes.yaml")
        assert "user" in registry

    def test_load_json(self, tmp_path: Path):
        (tmp_path / "shapes.json").write_text('{"shapes": {"name": "string"}}')
        registry = load_shape_manifest(str(tmp_path / "shapes.json"))
        assert registry.get("name").check("a") is True

    def test_escaped_keys_in_yaml(self, tmp_path: Path):
        (tmp_path / "shapes.yaml").write_text(
            'shapes:\n  q:\n    object:\n      "why??": string\n      "maybe?": number\n'
        )
        q = load_shape_manifest(tmp_path / "shapes.yaml").get("q")
        assert q.check({"why?": "because"}) is True
        assert q.check({"why": "because"}) is False

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ManifestLoadError) as excinfo:
            load_shape_manifest(tmp_path / "nope.yaml")
        assert excinfo.value.message == "File not found"

    def test_empty_file(self, tmp_path: Path):
        (tmp_path / "shapes.yaml").write_text("")
        with pytest.raises(ManifestLoadError) as excinfo:
            load_shape_manifest(tmp_path / "shapes.yaml")
        assert excinfo.value.message == "Empty file"

    def test_invalid_yaml(self, tmp_path: Path):
        (tmp_path / "shapes.yaml").write_text("shapes: [unclosed")
        with pytest.raises(ManifestLoadError) as excinfo:
            load_shape_manifest(tmp_path / "shapes.yaml")
        assert "Invalid YAML" in excinfo.value.message

    def test_invalid_json(self, tmp_path: Path):
        (tmp_path / "shapes.json").write_text("{bad")
        with pytest.raises(ManifestLoadError) as excinfo:
            load_shape_manifest(tmp_path / "shapes.json")
        assert "Invalid JSON" in excinfo.value.message

    def test_non_string_key_in_yaml(self, tmp_path: Path):
        (tmp_path / "shapes.yaml").write_text("shapes:\n  flag:\n    object:\n      true: string\n")
        with pytest.raises(ManifestLoadError) as excinfo:
            load_shape_manifest(tmp_path / "shapes.yaml")
        assert "property names must be strings" in excinfo.value.message


class TestLoadPayload:
    def test_json_payload(self, tmp_path: Path):
        (tmp_path / "p.json").write_text('{"a": [1, null, true]}')
        assert load_payload(tmp_path / "p.json") == {"a": [1, None, True]}

    def test_missing_payload(self, tmp_path: Path):
        with pytest.raises(ManifestLoadError):
            load_payload(tmp_path / "p.json")

    def test_json_exponent_numbers_are_floats(self, tmp_path: Path):
        (tmp_path / "p.json").write_text('{"x": 1e5, "y": 2.5E-3}')
        assert load_payload(tmp_path / "p.json") == {"x": 100000.0, "y": 0.0025}

    def test_yaml_payload(self, tmp_path: Path):
        (tmp_path / "p.yml").write_text("a:\n  - 1\n  - null\n")
        assert load_payload(tmp_path / "p.yml") == {"a": [1, None]}

    def test_invalid_json_payload(self, tmp_path: Path):
        (tmp_path / "p.json").write_text("a: 1")
        with pytest.raises(ManifestLoadError) as excinfo:
            load_payload(tmp_path / "p.json")
        assert "Invalid JSON" in excinfo.value.message
