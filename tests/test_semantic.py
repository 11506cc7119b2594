"""Tests for the per-module semantic model."""

import ast
import textwrap

import pytest

from lazyprops.semantic import ConstantSentinel, SemanticModel


def _model(code: str, module_name: str = "pkg.mod", *, is_package: bool = False) -> SemanticModel:
    return SemanticModel.build(
        module_name, ast.parse(textwrap.dedent(code)), is_package=is_package
    )


def _expression(code: str) -> ast.expr:
    return ast.parse(code, mode="eval").body


class TestBindings:
    """Tests for name resolution through imports and definitions."""

    def test_import_from(self) -> None:
        model = _model("from lazyprops import lazy_prop, lazy_prop as lp")
        assert model.resolve_name("lazy_prop") == "lazyprops.lazy_prop"
        assert model.resolve_name("lp") == "lazyprops.lazy_prop"

    def test_plain_import_binds_top_package(self) -> None:
        model = _model("import lazyprops.marker")
        assert model.resolve_reference(_expression("lazyprops.marker.lazy_prop")) == (
            "lazyprops.marker.lazy_prop"
        )

    def test_import_as(self) -> None:
        model = _model("import lazyprops.marker as m")
        assert model.resolve_reference(_expression("m.lazy_prop")) == "lazyprops.marker.lazy_prop"

    def test_local_definition_shadows_import(self) -> None:
        model = _model(
            """
            from lazyprops import lazy_prop

            def lazy_prop(name):
                return lambda f: f
            """
        )
        assert model.resolve_name("lazy_prop") == "pkg.mod.lazy_prop"

    def test_relative_import_from_module(self) -> None:
        model = _model("from .markers import cached", module_name="pkg.sub.mod")
        assert model.resolve_name("cached") == "pkg.sub.markers.cached"

    def test_relative_import_from_package(self) -> None:
        model = _model("from ..markers import cached", module_name="pkg.sub", is_package=True)
        assert model.resolve_name("cached") == "pkg.markers.cached"

    def test_star_import_fallback(self) -> None:
        model = _model("from lazyprops import *")
        assert model.resolve_name("lazy_prop") == "lazyprops.lazy_prop"

    def test_last_star_import_wins(self) -> None:
        model = _model(
            """
            from app.helpers import *
            from lazyprops_marker import *
            """
        )
        assert model.resolve_name("lazy_prop") == "lazyprops_marker.lazy_prop"

    def test_unbound_name(self) -> None:
        model = _model("x = 1")
        assert model.resolve_name("lazy_prop") is None
        assert model.resolve_reference(_expression("f()")) is None

    def test_conditional_import(self) -> None:
        model = _model(
            """
            try:
                from lazyprops import lazy_prop
            except ImportError:
                from lazyprops_marker import lazy_prop
            """
        )
        assert model.resolve_name("lazy_prop") == "lazyprops_marker.lazy_prop"

    def test_class_body_binding_before_method(self) -> None:
        model = _model(
            """
            from lazyprops import lazy_prop

            class Person:
                lazy_prop = staticmethod(print)

                def first(self) -> int: ...

            class Other:
                def second(self) -> int: ...

                lazy_prop = None
            """
        )
        first, second = (
            symbol for node, symbol in model.methods.items() if node.name in ("first", "second")
        )
        assert model.resolve_name("lazy_prop", within=first) == "pkg.mod.Person.lazy_prop"
        assert model.resolve_name("lazy_prop", within=second) == "lazyprops.lazy_prop"


class TestDeclaredSymbols:
    """Tests for classes and methods declared in the module."""

    def test_nested_class_qualified_name(self) -> None:
        model = _model(
            """
            class Outer:
                class Inner:
                    def method(self) -> int: ...
            """
        )
        assert set(model.classes) == {"Outer", "Outer.Inner"}
        (symbol,) = model.methods.values()
        assert symbol.name == "method"
        assert symbol.containing_type.qualified_name == "Outer.Inner"

    def test_class_inside_function_has_no_symbol(self) -> None:
        code = textwrap.dedent(
            """
            def factory():
                class Local:
                    def method(self) -> int: ...
                return Local
            """
        )
        tree = ast.parse(code)
        model = SemanticModel.build("pkg.mod", tree)
        method = next(node for node in ast.walk(tree) if isinstance(node, ast.FunctionDef) and node.name == "method")
        assert model.declared_method(method) is None
        assert model.classes == {}


class TestConstantValue:
    """Tests for compile-time constant evaluation."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            ('"FullName"', "FullName"),
            ("True", True),
            ('"Full" + "Name"', "FullName"),
            ('f"FullName"', "FullName"),
            ("NAME", "FullName"),
            ('NAME + "2"', "FullName2"),
        ],
    )
    def test_constant(self, code: str, expected: object) -> None:
        model = _model('NAME = "FullName"')
        assert model.constant_value(_expression(code)) == expected

    @pytest.mark.parametrize(
        "code",
        ["name()", 'f"{NAME}"', "REASSIGNED", "UNKNOWN", "1 + NAME", "obj.attr"],
    )
    def test_not_constant(self, code: str) -> None:
        model = _model(
            """
            NAME = "FullName"
            REASSIGNED = "a"
            REASSIGNED = "b"
            """
        )
        assert model.constant_value(_expression(code)) is ConstantSentinel.NOT_CONSTANT

    def test_class_scope(self) -> None:
        model = _model(
            """
            NAME = "Outer"
            OTHER = "Module"

            class Things:
                NAME = "Inner"
                OTHER = other()

                def get(self) -> int: ...
            """
        )
        (method,) = model.methods.values()
        assert model.constant_value(_expression("NAME")) == "Outer"
        assert model.constant_value(_expression("NAME"), within=method) == "Inner"
        assert model.constant_value(_expression('NAME + "2"'), within=method) == "Inner2"
        assert (
            model.constant_value(_expression("OTHER"), within=method)
            is ConstantSentinel.NOT_CONSTANT
        )

    def test_long_concatenation(self) -> None:
        terms = 1200
        model = _model("")
        assert model.constant_value(_expression(" + ".join(['"x"'] * terms))) == "x" * terms
