"""
Syntax-only discovery of generation candidates.

Nothing here looks beyond the node being tested and its direct parent, so the
filter is cheap enough to run over every function in the source set before the
semantic stage sees any of them.
"""

from __future__ import annotations

import ast
from collections.abc import Callable, Collection, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias, final

if TYPE_CHECKING:
    from lazyprops.compilation import SourceFile


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class SyntaxNode:
    """An AST node together with the source it came from and its direct parent."""

    source: "SourceFile"
    node: ast.AST
    parent: ast.AST | None


SyntaxPredicate: TypeAlias = Callable[[ast.AST, "ast.AST | None"], bool]


def iter_nodes_with_parent(
    tree: ast.AST, parent: ast.AST | None = None
) -> Iterator[tuple[ast.AST, ast.AST | None]]:
    """
    Depth-first, pre-order walk yielding every node with its direct parent.

    The walk keeps an explicit stack, so deeply nested expressions such as long
    literal concatenations cannot exhaust the interpreter's recursion limit.
    """
    stack: list[tuple[ast.AST, ast.AST | None]] = [(tree, parent)]
    while stack:
        node, node_parent = stack.pop()
        yield node, node_parent
        children = list(ast.iter_child_nodes(node))
        stack.extend((child, node) for child in reversed(children))


def decorator_name(decorator: ast.expr) -> str | None:
    """The last name component of a decorator, ignoring a trailing call."""
    match decorator:
        case ast.Call(func=func):
            return decorator_name(func)
        case ast.Name(id=name):
            return name
        case ast.Attribute(attr=attribute):
            return attribute
        case _:
            return None


def is_extensible_class(node: ast.AST | None, extensible_names: Collection[str]) -> bool:
    return isinstance(node, ast.ClassDef) and any(
        decorator_name(decorator) in extensible_names for decorator in node.decorator_list
    )


def _is_staticmethod(node: ast.FunctionDef) -> bool:
    return any(decorator_name(decorator) == "staticmethod" for decorator in node.decorator_list)


def takes_no_arguments(node: ast.FunctionDef) -> bool:
    """Whether the method can be called with no arguments besides its receiver."""
    arguments = node.args
    if arguments.vararg or arguments.kwarg or arguments.kwonlyargs:
        return False
    positional = [*arguments.posonlyargs, *arguments.args]
    if _is_staticmethod(node):
        return not positional
    return len(positional) == 1


def returns_no_value(node: ast.FunctionDef) -> bool:
    """Whether the return annotation is ``None`` (or the string ``"None"``)."""
    match node.returns:
        case ast.Constant(value=None) | ast.Constant(value="None"):
            return True
        case _:
            return False


def is_candidate(
    node: ast.AST,
    parent: ast.AST | None,
    *,
    extensible_names: Collection[str] = ("extensible",),
) -> bool:
    """
    Syntactic eligibility of a method for property generation.

    A candidate is a plain ``def`` with at least one decorator, no arguments
    besides its receiver and a return annotation other than ``None``, declared
    directly in the body of a class flagged as extensible.
    """
    return (
        isinstance(node, ast.FunctionDef)
        and len(node.decorator_list) > 0
        and takes_no_arguments(node)
        and not returns_no_value(node)
        and is_extensible_class(parent, extensible_names)
    )
