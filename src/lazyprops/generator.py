"""
The generation pass: filter, resolve, synthesize, register.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import partial
from typing import final

from lazyprops.compilation import Compilation
from lazyprops.config import GeneratorConfig
from lazyprops.marker import MARKER_QUALIFIED_NAMES, emit_marker_definition
from lazyprops.model import CandidateMethod, GeneratedUnit, LazyPropSpec
from lazyprops.resolver import extract_specs, resolve
from lazyprops.sink import OutputSink
from lazyprops.synthesizer import INDENT, synthesize
from lazyprops.syntax import is_candidate

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class GenerationRequest:
    """All specs of one originating method, grouped by (namespace, type, method)."""

    namespace: str
    type_name: str
    method_name: str
    specs: tuple[LazyPropSpec, ...]

    @property
    def key(self) -> str:
        """
        ``<namespace as directories>/<Type>.<method>.g.py``.

        Each component of the module name becomes a directory, so a nested class
        ``Outer.Inner`` in ``pkg`` (``pkg/Outer.Inner.m.g.py``) and a class
        ``Inner`` in ``pkg.Outer`` (``pkg/Outer/Inner.m.g.py``) never collide.
        """
        module_path = self.namespace.replace(".", "/")
        return f"{module_path}/{self.type_name}.{self.method_name}.g.py"

    @property
    def method(self) -> CandidateMethod:
        return self.specs[0].method


def unit_text(request: GenerationRequest, members: str, *, header: str) -> str:
    """Wrap ``members`` in class declarations mirroring the originating type."""
    requires_threading = any(spec.thread_safe for spec in request.specs)
    lines = [
        header,
        f"# Extends {request.namespace}.{request.type_name} "
        f"with properties computed by {request.method_name}().",
        "from __future__ import annotations",
        "",
    ]
    if requires_threading:
        lines.extend(["import threading", ""])
    lines.append("")
    path = request.type_name.split(".")
    for depth, name in enumerate(path):
        lines.append(f"{INDENT * depth}class {name}:")
    body_indent = INDENT * (len(path) - 1)
    lines.extend(
        f"{body_indent}{line}" if line else "" for line in members.rstrip("\n").split("\n")
    )
    return "\n".join(lines) + "\n"


@dataclass(frozen=True, kw_only=True)
class LazyPropGenerator:
    """
    Turns a :class:`Compilation` into generated units.

    Every pass recomputes everything from the compilation it is given; the
    generator keeps no state between passes.
    """

    config: GeneratorConfig = field(default_factory=GeneratorConfig)

    @property
    def marker_names(self) -> frozenset[str]:
        return MARKER_QUALIFIED_NAMES | self.config.marker_names

    def collect(self, compilation: Compilation) -> list[GenerationRequest]:
        """
        Build the table of generation requests for ``compilation``.

        Requests come out in source order; methods redefined under the same
        name in the same class share one request.
        """
        predicate = partial(is_candidate, extensible_names=self.config.extensible_names)
        grouped: dict[tuple[str, str, str], list[LazyPropSpec]] = {}
        for syntax_node in compilation.syntax_nodes(predicate):
            assert isinstance(syntax_node.node, ast.FunctionDef)
            model = compilation.semantic_model(syntax_node.source)
            candidate = resolve(syntax_node.node, model, self.marker_names)
            if candidate is None:
                continue
            specs = extract_specs(
                candidate, model, within=model.declared_method(syntax_node.node)
            )
            if not specs:
                continue
            group_key = (candidate.namespace, candidate.type_name, candidate.name)
            grouped.setdefault(group_key, []).extend(specs)

        return [
            GenerationRequest(
                namespace=namespace,
                type_name=type_name,
                method_name=method_name,
                specs=tuple(specs),
            )
            for (namespace, type_name, method_name), specs in grouped.items()
        ]

    def build_unit(self, request: GenerationRequest) -> GeneratedUnit:
        members = synthesize(request.method, request.specs)
        return GeneratedUnit(
            key=request.key,
            namespace=request.namespace,
            type_name=request.type_name,
            method_name=request.method_name,
            text=unit_text(request, members, header=self.config.header),
            members=members,
            requires_threading=any(spec.thread_safe for spec in request.specs),
        )

    def generate(self, compilation: Compilation) -> list[GeneratedUnit]:
        """Generated units for every request in ``compilation``, in source order."""
        return [self.build_unit(request) for request in self.collect(compilation)]

    def run(self, compilation: Compilation, sink: OutputSink) -> Sequence[GeneratedUnit]:
        """
        Execute one full pass and register its output with ``sink``.

        The marker module is registered first when ``config.emit_marker`` is set.
        """
        units = self.generate(compilation)
        if self.config.emit_marker:
            marker_unit = emit_marker_definition()
            sink.add_source(marker_unit.key, marker_unit.text)
        for unit in units:
            sink.add_source(unit.key, unit.text)
            logger.info("Generated %s", unit.key)
        return units


def generate(
    compilation: Compilation, config: GeneratorConfig | None = None
) -> list[GeneratedUnit]:
    """Shortcut for ``LazyPropGenerator(config=config).generate(compilation)``."""
    generator = LazyPropGenerator() if config is None else LazyPropGenerator(config=config)
    return generator.generate(compilation)
