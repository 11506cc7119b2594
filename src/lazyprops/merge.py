"""
Build-time merge of generated units into their originating classes.

Python has no partial classes, so instead of compiling generated fragments
alongside the originals, the members of each unit are appended to the body of
the class they extend, producing the source that is actually shipped.
"""

from __future__ import annotations

import ast
import logging
import textwrap
from collections.abc import Iterable, Mapping, Sequence
from pathlib import PurePosixPath

from lazyprops.compilation import Compilation, SourceFile
from lazyprops.model import GeneratedUnit
from lazyprops.semantic import SemanticModel
from lazyprops.synthesizer import INDENT

logger = logging.getLogger(__name__)


def _body_indent(lines: Sequence[str], class_node: ast.ClassDef) -> str:
    first = class_node.body[0]
    if first.lineno == class_node.lineno:
        # Single-line class body, e.g. ``class A: pass``.
        line = lines[class_node.lineno - 1]
        return line[: class_node.col_offset] + INDENT
    line = lines[first.lineno - 1]
    return line[: first.col_offset]


def _reindent(members: str, indent: str) -> str:
    """Re-indent four-space ``members`` under ``indent``, keeping its tab or space style."""
    unit = "\t" if "\t" in indent else INDENT
    lines: list[str] = []
    for line in textwrap.dedent(members).splitlines(keepends=True):
        stripped = line.lstrip(" ")
        if not stripped.strip():
            lines.append("\n")
            continue
        level = (len(line) - len(stripped)) // len(INDENT)
        lines.append(f"{indent}{unit * level}{stripped}")
    return "".join(lines)


def _threading_import_line(tree: ast.Module) -> int | None:
    """
    Zero-based line index where ``import threading`` must be inserted, or
    ``None`` when the module already imports it at top level.
    """
    insert_at = 0
    for index, statement in enumerate(tree.body):
        match statement:
            case ast.Import(names=aliases) if any(
                alias.name == "threading" and alias.asname is None for alias in aliases
            ):
                return None
            case ast.Expr(value=ast.Constant(value=str())) if index == 0:
                insert_at = statement.end_lineno or 0
            case ast.ImportFrom(module="__future__"):
                insert_at = statement.end_lineno or 0
    return insert_at


def merge_units(source: SourceFile, units: Iterable[GeneratedUnit]) -> str:
    """
    Splice the members of ``units`` into the classes of ``source``.

    Units whose class cannot be found are skipped with a warning. Members of
    several units extending the same class are appended in unit order.
    """
    lines = source.text.splitlines(keepends=True)
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"

    model = SemanticModel.build(source.module_name, source.tree, is_package=source.is_package)
    by_class: dict[tuple[str, ...], list[GeneratedUnit]] = {}
    for unit in units:
        by_class.setdefault(unit.type_path, []).append(unit)

    insertions: list[tuple[int, int, list[str]]] = []
    requires_threading = False
    for type_path, class_units in by_class.items():
        class_symbol = model.classes.get(".".join(type_path))
        if class_symbol is None or class_symbol.node.end_lineno is None:
            logger.warning(
                "Cannot merge into %s.%s: class not found", source.module_name, ".".join(type_path)
            )
            continue
        class_node = class_symbol.node
        indent = _body_indent(lines, class_node)
        members = "\n".join(unit.members for unit in class_units)
        block = ["\n", *_reindent(members, indent).splitlines(keepends=True)]
        insertions.append((class_node.end_lineno, -len(indent), block))
        requires_threading = requires_threading or any(
            unit.requires_threading for unit in class_units
        )

    # Bottom-up, so that earlier line numbers stay valid. A nested class ending on
    # the same line as its outer class is inserted last, landing above the outer members.
    for end_line, _, block in sorted(insertions, key=lambda item: item[:2], reverse=True):
        lines[end_line:end_line] = block

    if requires_threading:
        import_line = _threading_import_line(source.tree)
        if import_line is not None:
            lines[import_line:import_line] = ["import threading\n"]

    return "".join(lines)


def merge_compilation(
    compilation: Compilation, units: Iterable[GeneratedUnit]
) -> Mapping[PurePosixPath, str]:
    """
    Merged text of every source in ``compilation``, keyed by relative path.

    Sources without generated units are returned unchanged.
    """
    by_module: dict[str, list[GeneratedUnit]] = {}
    for unit in units:
        if unit.type_name:
            by_module.setdefault(unit.namespace, []).append(unit)

    merged: dict[PurePosixPath, str] = {}
    for source in compilation.sources:
        module_units = by_module.get(source.module_name)
        merged[source.path] = (
            merge_units(source, module_units) if module_units else source.text
        )
    return merged
