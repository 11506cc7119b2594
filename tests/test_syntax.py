"""Tests for the syntax-only candidate filter."""

import ast
import textwrap

import pytest

from lazyprops.syntax import (
    decorator_name,
    is_candidate,
    iter_nodes_with_parent,
    returns_no_value,
    takes_no_arguments,
)


def _candidates(code: str, **kwargs: object) -> list[str]:
    tree = ast.parse(textwrap.dedent(code))
    return [
        node.name
        for node, parent in iter_nodes_with_parent(tree)
        if is_candidate(node, parent, **kwargs)  # type: ignore[arg-type]
    ]


class TestIsCandidate:
    """Tests for is_candidate."""

    def test_plain_method(self) -> None:
        code = """
        @extensible
        class Person:
            @lazy_prop("FullName")
            def get_full_name(self) -> str:
                return ""
        """
        assert _candidates(code) == ["get_full_name"]

    def test_undecorated_method_is_ignored(self) -> None:
        code = """
        @extensible
        class Person:
            def get_full_name(self) -> str:
                return ""
        """
        assert _candidates(code) == []

    def test_method_with_parameters_is_ignored(self) -> None:
        code = """
        @extensible
        class Person:
            @lazy_prop("A")
            def positional(self, other) -> str: ...

            @lazy_prop("B")
            def variadic(self, *args) -> str: ...

            @lazy_prop("C")
            def keyword_only(self, *, flag) -> str: ...

            @lazy_prop("D")
            def keywords(self, **kwargs) -> str: ...
        """
        assert _candidates(code) == []

    def test_none_return_is_ignored(self) -> None:
        code = """
        @extensible
        class Person:
            @lazy_prop("XYZ")
            def get_xyz(self) -> None:
                pass

            @lazy_prop("Quoted")
            def get_quoted(self) -> "None":
                pass
        """
        assert _candidates(code) == []

    def test_unannotated_return_is_allowed(self) -> None:
        code = """
        @extensible
        class Person:
            @lazy_prop("Untyped")
            def get_untyped(self):
                return 1
        """
        assert _candidates(code) == ["get_untyped"]

    def test_class_without_extensible_marker_is_ignored(self) -> None:
        code = """
        class Person:
            @lazy_prop("FullName")
            def get_full_name(self) -> str:
                return ""
        """
        assert _candidates(code) == []

    def test_extensible_marker_forms(self) -> None:
        code = """
        @lazyprops.extensible
        class Qualified:
            @lazy_prop("A")
            def a(self) -> int: ...

        @extensible()
        class Called:
            @lazy_prop("B")
            def b(self) -> int: ...
        """
        assert _candidates(code) == ["a", "b"]

    def test_configured_extensible_names(self) -> None:
        code = """
        @partial
        class Person:
            @lazy_prop("A")
            def a(self) -> int: ...
        """
        assert _candidates(code) == []
        assert _candidates(code, extensible_names=("partial",)) == ["a"]

    def test_method_must_be_directly_in_class_body(self) -> None:
        code = """
        @extensible
        class Person:
            if True:
                @lazy_prop("A")
                def a(self) -> int: ...

            def outer(self):
                @lazy_prop("B")
                def b(self) -> int: ...
        """
        assert _candidates(code) == []

    def test_async_method_is_ignored(self) -> None:
        code = """
        @extensible
        class Person:
            @lazy_prop("A")
            async def a(self) -> int: ...
        """
        assert _candidates(code) == []

    def test_nested_extensible_class(self) -> None:
        code = """
        class Outer:
            @extensible
            class Inner:
                @lazy_prop("A")
                def a(self) -> int: ...
        """
        assert _candidates(code) == ["a"]


class TestTakesNoArguments:
    """Tests for receiver handling in takes_no_arguments."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            ("def f(self): ...", True),
            ("def f(self, /): ...", True),
            ("def f(): ...", False),
            ("@staticmethod\ndef f(): ...", True),
            ("@staticmethod\ndef f(x): ...", False),
            ("@classmethod\ndef f(cls): ...", True),
        ],
    )
    def test_receiver(self, code: str, expected: bool) -> None:
        node = ast.parse(code).body[0]
        assert isinstance(node, ast.FunctionDef)
        assert takes_no_arguments(node) is expected


class TestReturnsNoValue:
    """Tests for returns_no_value."""

    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [("None", True), ('"None"', True), ("int", False), ("Optional[int]", False)],
    )
    def test_annotation(self, annotation: str, expected: bool) -> None:
        node = ast.parse(f"def f(self) -> {annotation}: ...").body[0]
        assert isinstance(node, ast.FunctionDef)
        assert returns_no_value(node) is expected


class TestDecoratorName:
    """Tests for decorator_name."""

    def test_forms(self) -> None:
        assert decorator_name(ast.parse("extensible", mode="eval").body) == "extensible"
        assert decorator_name(ast.parse("a.b.extensible", mode="eval").body) == "extensible"
        assert decorator_name(ast.parse("extensible()", mode="eval").body) == "extensible"
        assert decorator_name(ast.parse("items[0]", mode="eval").body) is None


class TestIterNodesWithParent:
    """Tests for iter_nodes_with_parent."""

    def test_pre_order_with_parents(self) -> None:
        tree = ast.parse("class A:\n    def f(self): ...\n")
        pairs = [
            (type(node).__name__, type(parent).__name__ if parent else None)
            for node, parent in iter_nodes_with_parent(tree)
            if isinstance(node, (ast.Module, ast.ClassDef, ast.FunctionDef, ast.arg))
        ]
        assert pairs == [
            ("Module", None),
            ("ClassDef", "Module"),
            ("FunctionDef", "ClassDef"),
            ("arg", "arguments"),
        ]

    def test_deep_expression_does_not_recurse(self) -> None:
        terms = 1200
        tree = ast.parse("DATA = " + " + ".join(["'x'"] * terms))
        constants = [
            node for node, _ in iter_nodes_with_parent(tree) if isinstance(node, ast.Constant)
        ]
        assert len(constants) == terms
