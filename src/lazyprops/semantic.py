"""
Per-module symbol information for resolving decorator references.

A :class:`SemanticModel` answers the questions the resolver cannot answer from
raw syntax: which fully qualified name a decorator expression refers to, which
value a module-level constant holds, and which class a method belongs to.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import final

logger = logging.getLogger(__name__)


class ConstantSentinel(Enum):
    NOT_CONSTANT = auto()
    """The expression cannot be evaluated at generation time."""


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class ClassSymbol:
    qualified_name: str
    """Dotted path from the module to the class, e.g. ``Outer.Inner``."""

    node: ast.ClassDef


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class MethodSymbol:
    name: str
    containing_type: ClassSymbol
    node: ast.FunctionDef


def _binding_statements(body: list[ast.stmt]) -> Iterator[ast.stmt]:
    """Yield statements that bind names in the scope owning ``body``."""
    for statement in body:
        match statement:
            case ast.If(body=inner, orelse=orelse) | ast.For(
                body=inner, orelse=orelse
            ) | ast.While(body=inner, orelse=orelse):
                yield from _binding_statements(inner)
                yield from _binding_statements(orelse)
            case ast.With(body=inner):
                yield from _binding_statements(inner)
            case ast.Try(body=inner, orelse=orelse, finalbody=finalbody, handlers=handlers):
                yield from _binding_statements(inner)
                for handler in handlers:
                    yield from _binding_statements(handler.body)
                yield from _binding_statements(orelse)
                yield from _binding_statements(finalbody)
            case _:
                yield statement


def _assigned_names(target: ast.expr) -> Iterator[str]:
    match target:
        case ast.Name(id=name):
            yield name
        case ast.Tuple(elts=elements) | ast.List(elts=elements):
            for element in elements:
                yield from _assigned_names(element)
        case ast.Starred(value=value):
            yield from _assigned_names(value)


def _resolve_relative_module(
    module_name: str, is_package: bool, level: int, module: str | None
) -> str:
    parts = module_name.split(".") if module_name else []
    if not is_package:
        parts = parts[:-1]
    if level > 1:
        parts = parts[: max(len(parts) - (level - 1), 0)]
    if module:
        parts.append(module)
    return ".".join(parts)


def collect_bindings(
    body: list[ast.stmt],
    *,
    scope_name: str,
    module_name: str,
    is_package: bool,
    stop_at: ast.stmt | None = None,
) -> tuple[dict[str, str], list[str]]:
    """
    Map every name bound in ``body`` to the fully qualified name it refers to.

    Imports bind to the imported object; definitions and assignments bind to
    ``scope_name.<name>``. Later bindings shadow earlier ones. Collection stops
    before ``stop_at`` when given.

    :return: The bindings and the modules imported with ``*``.
    """
    bindings: dict[str, str] = {}
    star_modules: list[str] = []

    def qualify(name: str) -> str:
        return f"{scope_name}.{name}" if scope_name else name

    for statement in _binding_statements(body):
        if statement is stop_at:
            break
        match statement:
            case ast.Import(names=aliases):
                for alias in aliases:
                    if alias.asname is not None:
                        bindings[alias.asname] = alias.name
                    else:
                        head = alias.name.split(".", 1)[0]
                        bindings[head] = head
            case ast.ImportFrom(module=module, names=aliases, level=level):
                source = (
                    _resolve_relative_module(module_name, is_package, level, module)
                    if level
                    else module or ""
                )
                for alias in aliases:
                    if alias.name == "*":
                        star_modules.append(source)
                    else:
                        bindings[alias.asname or alias.name] = f"{source}.{alias.name}"
            case ast.FunctionDef(name=name) | ast.AsyncFunctionDef(
                name=name
            ) | ast.ClassDef(name=name):
                bindings[name] = qualify(name)
            case ast.Assign(targets=targets):
                for target in targets:
                    for name in _assigned_names(target):
                        bindings[name] = qualify(name)
            case ast.AnnAssign(target=target, value=value) if value is not None:
                for name in _assigned_names(target):
                    bindings[name] = qualify(name)
            case ast.AugAssign(target=target):
                for name in _assigned_names(target):
                    bindings[name] = qualify(name)
    return bindings, star_modules


def _collect_constants(
    body: list[ast.stmt], *, stop_at: ast.stmt | None = None
) -> dict[str, object]:
    """Names assigned exactly once in ``body``, to a literal constant."""
    counts: dict[str, int] = {}
    values: dict[str, object] = {}
    for statement in _binding_statements(body):
        if statement is stop_at:
            break
        match statement:
            case ast.Assign(targets=[ast.Name(id=name)], value=ast.Constant(value=value)):
                counts[name] = counts.get(name, 0) + 1
                values[name] = value
            case ast.AnnAssign(target=ast.Name(id=name), value=ast.Constant(value=value)):
                counts[name] = counts.get(name, 0) + 1
                values[name] = value
            case ast.Assign(targets=targets):
                for target in targets:
                    for name in _assigned_names(target):
                        counts[name] = counts.get(name, 0) + 2
            case ast.AnnAssign(target=target) | ast.AugAssign(target=target):
                for name in _assigned_names(target):
                    counts[name] = counts.get(name, 0) + 2
            case ast.FunctionDef(name=name) | ast.AsyncFunctionDef(
                name=name
            ) | ast.ClassDef(name=name):
                counts[name] = counts.get(name, 0) + 2
            case ast.Import(names=aliases) | ast.ImportFrom(names=aliases):
                for alias in aliases:
                    bound = alias.asname or alias.name.split(".", 1)[0]
                    counts[bound] = counts.get(bound, 0) + 2
    return {name: value for name, value in values.items() if counts[name] == 1}


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class SemanticModel:
    """Name resolution for a single parsed module."""

    module_name: str
    is_package: bool
    tree: ast.Module

    bindings: Mapping[str, str]
    """Module-level names and the fully qualified names they refer to."""

    star_modules: tuple[str, ...]
    """Modules imported with ``from ... import *``, in import order."""

    constants: Mapping[str, object]

    classes: Mapping[str, ClassSymbol]
    """Classes reachable through class nesting only, keyed by qualified name."""

    methods: Mapping[ast.FunctionDef, MethodSymbol]

    @staticmethod
    def build(module_name: str, tree: ast.Module, *, is_package: bool = False) -> "SemanticModel":
        bindings, star_modules = collect_bindings(
            tree.body,
            scope_name=module_name,
            module_name=module_name,
            is_package=is_package,
        )
        classes: dict[str, ClassSymbol] = {}
        methods: dict[ast.FunctionDef, MethodSymbol] = {}

        def visit(body: list[ast.stmt], prefix: str) -> None:
            for statement in _binding_statements(body):
                if not isinstance(statement, ast.ClassDef):
                    continue
                qualified_name = f"{prefix}{statement.name}"
                symbol = ClassSymbol(qualified_name=qualified_name, node=statement)
                # A redefinition replaces the earlier class, as it does at runtime.
                classes[qualified_name] = symbol
                for member in _binding_statements(statement.body):
                    if isinstance(member, ast.FunctionDef):
                        methods[member] = MethodSymbol(
                            name=member.name, containing_type=symbol, node=member
                        )
                visit(statement.body, f"{qualified_name}.")

        visit(tree.body, "")
        return SemanticModel(
            module_name=module_name,
            is_package=is_package,
            tree=tree,
            bindings=bindings,
            star_modules=tuple(star_modules),
            constants=_collect_constants(tree.body),
            classes=classes,
            methods=methods,
        )

    def declared_method(self, node: ast.FunctionDef) -> MethodSymbol | None:
        """The symbol declared by ``node``, or ``None`` outside a class body."""
        return self.methods.get(node)

    def _class_scope(self, within: MethodSymbol) -> tuple[dict[str, str], dict[str, object]]:
        """Bindings and constants of the class body of ``within``, up to the method."""
        class_node = within.containing_type.node
        bindings, _ = collect_bindings(
            class_node.body,
            scope_name=f"{self.module_name}.{within.containing_type.qualified_name}",
            module_name=self.module_name,
            is_package=self.is_package,
            stop_at=within.node,
        )
        return bindings, _collect_constants(class_node.body, stop_at=within.node)

    def resolve_name(self, name: str, *, within: MethodSymbol | None = None) -> str | None:
        """
        Resolve a bare name to a fully qualified name.

        Names bound earlier in the class body of ``within`` take precedence over
        module-level names, matching how decorators are evaluated. Unbound names
        fall back to the last star import, which is the one that wins at runtime
        as far as can be said without importing the star-imported modules.
        """
        if within is not None:
            class_bindings, _ = self._class_scope(within)
            if name in class_bindings:
                return class_bindings[name]
        if name in self.bindings:
            return self.bindings[name]
        if self.star_modules:
            return f"{self.star_modules[-1]}.{name}"
        return None

    def resolve_reference(
        self, expression: ast.expr, *, within: MethodSymbol | None = None
    ) -> str | None:
        """Resolve a ``Name`` or dotted ``Attribute`` chain to a qualified name."""
        match expression:
            case ast.Name(id=name):
                return self.resolve_name(name, within=within)
            case ast.Attribute(value=value, attr=attribute):
                base = self.resolve_reference(value, within=within)
                return None if base is None else f"{base}.{attribute}"
            case _:
                return None

    def _name_value(self, name: str, within: MethodSymbol | None) -> object:
        if within is not None:
            class_bindings, class_constants = self._class_scope(within)
            if name in class_bindings:
                return class_constants.get(name, ConstantSentinel.NOT_CONSTANT)
        return self.constants.get(name, ConstantSentinel.NOT_CONSTANT)

    def constant_value(
        self, expression: ast.expr, *, within: MethodSymbol | None = None
    ) -> object:
        """
        Evaluate ``expression`` if it is a compile-time constant.

        Supports literals, string concatenation with ``+``, f-strings without
        placeholders, and names assigned once to a literal. A name bound in the
        class body of ``within`` before the method shadows the module-level
        name, and is only constant if the class-level binding is.

        :return: The value, or :attr:`ConstantSentinel.NOT_CONSTANT`.
        """
        match expression:
            case ast.Constant(value=value):
                return value
            case ast.Name(id=name):
                return self._name_value(name, within)
            case ast.BinOp(op=ast.Add()):
                # Left-deep chains are unrolled so that long concatenations do not recurse.
                operands: list[ast.expr] = []
                current: ast.expr = expression
                while isinstance(current, ast.BinOp) and isinstance(current.op, ast.Add):
                    operands.append(current.right)
                    current = current.left
                operands.append(current)
                values = [
                    self.constant_value(operand, within=within) for operand in reversed(operands)
                ]
                if all(isinstance(value, str) for value in values):
                    return "".join(values)  # type: ignore[arg-type]
                return ConstantSentinel.NOT_CONSTANT
            case ast.JoinedStr(values=values):
                parts = []
                for part in values:
                    if not isinstance(part, ast.Constant) or not isinstance(part.value, str):
                        return ConstantSentinel.NOT_CONSTANT
                    parts.append(part.value)
                return "".join(parts)
            case _:
                return ConstantSentinel.NOT_CONSTANT
