"""Tests for the marker decorators and their standalone source."""

import ast
from typing import Any

from lazyprops import MARKER_QUALIFIED_NAMES, MARKER_SOURCE, LazyProp, extensible, lazy_prop
from lazyprops.marker import MARKER_UNIT_KEY, emit_marker_definition


class TestRuntimeMarkers:
    """The markers do nothing at runtime besides recording their arguments."""

    def test_lazy_prop_returns_function_unchanged(self) -> None:
        def get_sum() -> int:
            return 7

        decorated = lazy_prop("Sum", thread_safe=True)(get_sum)
        assert decorated is get_sum
        assert decorated() == 7
        assert get_sum.__lazy_props__ == (LazyProp("Sum", thread_safe=True),)  # type: ignore[attr-defined]

    def test_repeated_markers_are_recorded_in_application_order(self) -> None:
        @lazy_prop("Outer")
        @lazy_prop("Inner", field_prefix="_i")
        def compute() -> int:
            return 1

        names = [marker.property_name for marker in compute.__lazy_props__]  # type: ignore[attr-defined]
        assert names == ["Inner", "Outer"]

    def test_extensible_returns_class_unchanged(self) -> None:
        class Plain:
            pass

        assert extensible(Plain) is Plain

    def test_defaults(self) -> None:
        marker = LazyProp("FullName")
        assert marker.thread_safe is False
        assert marker.field_prefix is None


class TestMarkerSource:
    """Tests for the standalone marker module."""

    def test_qualified_names(self) -> None:
        assert "lazyprops.lazy_prop" in MARKER_QUALIFIED_NAMES
        assert "lazyprops.marker.lazy_prop" in MARKER_QUALIFIED_NAMES
        assert "lazyprops_marker.lazy_prop" in MARKER_QUALIFIED_NAMES

    def test_source_defines_the_markers(self) -> None:
        tree = ast.parse(MARKER_SOURCE)
        names = {
            node.name
            for node in tree.body
            if isinstance(node, (ast.FunctionDef, ast.ClassDef))
        }
        assert names == {"LazyProp", "extensible"}

    def test_source_behaves_like_the_package(self) -> None:
        namespace: dict[str, Any] = {"__name__": "lazyprops_marker"}
        exec(compile(MARKER_SOURCE, "lazyprops_marker.py", "exec"), namespace)

        def get_sum() -> int:
            return 7

        assert namespace["lazy_prop"]("Sum", thread_safe=True)(get_sum) is get_sum
        (marker,) = get_sum.__lazy_props__  # type: ignore[attr-defined]
        assert (marker.property_name, marker.thread_safe, marker.field_prefix) == (
            "Sum",
            True,
            None,
        )
        assert namespace["extensible"](int) is int

    def test_emit_marker_definition(self) -> None:
        unit = emit_marker_definition()
        assert unit.key == MARKER_UNIT_KEY
        assert unit.text == MARKER_SOURCE
        assert unit.type_path == ()
