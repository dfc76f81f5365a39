"""Tests for runtime type inference."""

from typing import Any, List, Literal, Optional, Union

import pytest
from pydantic import TypeAdapter, ValidationError
from typing_extensions import Never, NotRequired, Required, get_type_hints, is_typeddict

from shapecheck import JsonOf, j, json_type_of
from shapecheck.registry import ShapeRegistry
from tests.helpers.checkers import RecordingChecker


class TestPrimitives:
    def test_primitive_types(self):
        assert json_type_of(j.string) is str
        assert json_type_of(j.number) is float
        assert json_type_of(j.boolean) is bool
        assert json_type_of(j.nil) is None
        assert json_type_of(j.unknown) is Any

    def test_literal(self):
        assert json_type_of(j.literal("literal")) == Literal["literal"]

    def test_jsonof_alias(self):
        assert JsonOf is json_type_of


class TestCombinators:
    def test_any_is_union(self):
        inferred = json_type_of(j.any([j.string, j.number, j.literal("x")]))
        assert inferred == Union[str, float, Literal["x"]]

    def test_any_with_unknown_collapses(self):
        assert json_type_of(j.any([j.string, j.unknown, j.number])) is Any

    def test_empty_any_is_never(self):
        assert json_type_of(j.any([])) is Never

    def test_single_member_any(self):
        assert json_type_of(j.any([j.string])) is str

    def test_nullable(self):
        assert json_type_of(j.nullable(j.string)) == Optional[str]
        assert json_type_of(j.nullable(j.array(j.string))) == Optional[List[str]]

    def test_nullable_unknown_stays_unknown(self):
        assert json_type_of(j.nullable(j.unknown)) is Any

    def test_array(self):
        assert json_type_of(j.array(j.string)) == List[str]
        assert json_type_of(j.array(j.array(j.number))) == List[List[float]]
        assert json_type_of(j.array(j.any([j.string, j.number]))) == List[Union[str, float]]

    def test_user_checker_is_any(self):
        assert json_type_of(RecordingChecker(True)) is Any


class TestObject:
    def test_empty_object(self):
        inferred = json_type_of(j.object({}))
        assert is_typeddict(inferred)
        assert inferred.__required_keys__ == frozenset()
        assert inferred.__optional_keys__ == frozenset()

    def test_name(self):
        assert json_type_of(j.object({}), name="User").__name__ == "User"
        assert json_type_of(j.object({})).__name__ == "Shape"

    def test_keys_are_unescaped(self):
        inferred = json_type_of(
            j.object(
                {
                    "string": j.string,
                    "optional?": j.string,
                    "escaped??": j.string,
                    "escaped_optional???": j.string,
                }
            )
        )
        assert inferred.__required_keys__ == frozenset({"string", "escaped?"})
        assert inferred.__optional_keys__ == frozenset({"optional", "escaped_optional?"})
        hints = get_type_hints(inferred)
        assert set(hints) == {"string", "optional", "escaped?", "escaped_optional?"}
        assert all(hint is str for hint in hints.values())

    def test_deferred_property_resolved(self):
        inferred = json_type_of(j.object({"foo": lambda: j.string}))
        assert get_type_hints(inferred) == {"foo": str}

    def test_deferred_non_checker_is_never(self):
        inferred = json_type_of(j.object({"foo": lambda: "foo"}))
        assert get_type_hints(inferred) == {"foo": Never}

    def test_nested_object(self):
        inferred = json_type_of(j.object({"point": j.object({"x": j.number})}), name="Shape")
        point = get_type_hints(inferred)["point"]
        assert is_typeddict(point)
        assert point.__name__ == "Shape_point"
        assert get_type_hints(point) == {"x": float}

    def test_recursive_deferred_terminates(self):
        node = j.object({"value": j.number, "next?": lambda: node})
        inferred = json_type_of(node, name="Node")
        inner = get_type_hints(inferred)["next"]
        assert is_typeddict(inner)
        assert get_type_hints(inner)["next"] is Any

    def test_recursive_registry_ref_terminates(self):
        registry = ShapeRegistry()
        registry.register("tree", j.object({"children": j.array(registry.ref("tree"))}))
        inferred = json_type_of(registry.get("tree"))
        assert is_typeddict(inferred)


class TestPydanticInterop:
    def test_inferred_typeddict_validates(self):
        checker = j.object({"string": j.string, "optional?": j.string, "escaped??": j.string})
        adapter = TypeAdapter(json_type_of(checker, name="Escaped"))
        payload = {"string": "a", "escaped?": "b"}
        assert adapter.validate_python(payload) == payload
        with pytest.raises(ValidationError):
            adapter.validate_python({"string": "a"})

    def test_inferred_list_validates(self):
        adapter = TypeAdapter(json_type_of(j.array(j.nullable(j.string))))
        assert adapter.validate_python(["a", None]) == ["a", None]
