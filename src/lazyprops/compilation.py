"""
Source snapshots handed to the generator.

A :class:`Compilation` plays the part of the host build: it owns the parsed
modules of one pass, supplies per-module semantic models, and exposes the
filtered syntax discovery the generator consumes.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path, PurePosixPath
from typing import final

from lazyprops.semantic import SemanticModel
from lazyprops.syntax import SyntaxNode, SyntaxPredicate, iter_nodes_with_parent

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class SourceFile:
    path: PurePosixPath
    """Path relative to the source root, with forward slashes."""

    module_name: str
    is_package: bool
    text: str
    tree: ast.Module


def module_name_for(relative_path: PurePosixPath) -> tuple[str, bool]:
    """
    Derive the dotted module name of a source file.

    ``pkg/__init__.py`` becomes ``("pkg", True)`` and ``pkg/mod.py`` becomes
    ``("pkg.mod", False)``.
    """
    parts = list(relative_path.with_suffix("").parts)
    is_package = parts[-1] == "__init__"
    if is_package:
        parts.pop()
    return ".".join(parts), is_package


def parse_source(relative_path: PurePosixPath, text: str) -> SourceFile:
    """
    Parse one source file.

    :raises SyntaxError: If ``text`` is not valid Python.
    :raises RecursionError: If ``text`` is nested too deeply for the parser.
    """
    module_name, is_package = module_name_for(relative_path)
    tree = ast.parse(text, filename=str(relative_path), type_comments=False)
    return SourceFile(
        path=relative_path,
        module_name=module_name,
        is_package=is_package,
        text=text,
        tree=tree,
    )


def _discover_python_files(root: Path) -> Iterator[Path]:
    """Yield ``*.py`` files below ``root`` in sorted order, skipping hidden directories."""
    for entry in sorted(root.iterdir()):
        if entry.name.startswith(".") or entry.name == "__pycache__":
            continue
        if entry.is_dir():
            yield from _discover_python_files(entry)
        elif entry.is_file() and entry.suffix == ".py":
            yield entry


@final
@dataclass(frozen=True, kw_only=True)
class Compilation:
    """An immutable snapshot of every module taking part in a generation pass."""

    sources: tuple[SourceFile, ...]

    skipped: tuple[PurePosixPath, ...] = ()
    """Files that could not be parsed."""

    _models: dict[PurePosixPath, SemanticModel] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    @staticmethod
    def from_texts(texts: Mapping[str, str]) -> "Compilation":
        """
        Build a compilation from in-memory sources keyed by relative path.

        Files that fail to parse, including files nested too deeply for the
        parser, are skipped with a warning.
        """
        sources: list[SourceFile] = []
        skipped: list[PurePosixPath] = []
        for raw_path in sorted(texts):
            relative_path = PurePosixPath(raw_path)
            try:
                sources.append(parse_source(relative_path, texts[raw_path]))
            except (SyntaxError, ValueError, RecursionError, MemoryError) as e:
                logger.warning("Skipping %s: %s", relative_path, e)
                skipped.append(relative_path)
        return Compilation(sources=tuple(sources), skipped=tuple(skipped))

    @staticmethod
    def from_directory(root: Path) -> "Compilation":
        """
        Parse every Python file below ``root``.

        Module names are relative to ``root``, so ``root`` should be the
        directory that would be on ``sys.path`` (for example ``src``).

        :raises ValueError: If ``root`` is not a directory.
        """
        if not root.is_dir():
            raise ValueError(f"Path is not a directory: {root}")

        texts: dict[str, str] = {}
        for file_path in _discover_python_files(root):
            relative_path = file_path.relative_to(root).as_posix()
            try:
                texts[relative_path] = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping %s: %s", relative_path, e)
        return Compilation.from_texts(texts)

    @cached_property
    def _by_module(self) -> Mapping[str, SourceFile]:
        return {source.module_name: source for source in self.sources}

    def source(self, module_name: str) -> SourceFile:
        return self._by_module[module_name]

    def semantic_model(self, source: SourceFile) -> SemanticModel:
        """The semantic model of ``source``, built once per compilation."""
        model = self._models.get(source.path)
        if model is None:
            model = SemanticModel.build(
                source.module_name, source.tree, is_package=source.is_package
            )
            self._models[source.path] = model
        return model

    def syntax_nodes(self, predicate: SyntaxPredicate) -> Iterator[SyntaxNode]:
        """Lazily yield the nodes of every source that satisfy ``predicate``."""
        for source in self.sources:
            for node, parent in iter_nodes_with_parent(source.tree):
                if predicate(node, parent):
                    yield SyntaxNode(source=source, node=node, parent=parent)
