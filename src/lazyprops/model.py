"""
Entities shared by the stages of one generation pass.

All of them are immutable and owned by the pass that created them.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import final


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class CandidateMethod:
    """A method that survived both the syntactic filter and marker resolution."""

    name: str

    return_type: str | None
    """Return annotation as written, or ``None`` when the method is unannotated."""

    namespace: str
    """Dotted name of the module declaring the method."""

    type_name: str
    """Qualified name of the enclosing class, dotted for nested classes."""

    markers: tuple[ast.expr, ...]
    """Decorator expressions confirmed to refer to the marker, in source order."""

    @property
    def type_path(self) -> tuple[str, ...]:
        return tuple(self.type_name.split("."))


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class LazyPropSpec:
    """One generation request, derived from a single marker application."""

    property_name: str
    thread_safe: bool
    field_prefix: str
    method: CandidateMethod

    @property
    def storage_field(self) -> str:
        return f"{self.field_prefix}Storage"

    @property
    def written_field(self) -> str:
        return f"{self.field_prefix}Written"

    @property
    def mutex_field(self) -> str:
        return f"{self.field_prefix}Mutex"


def default_field_prefix(property_name: str) -> str:
    """``"FullName"`` becomes ``"_fullName"``."""
    return f"_{property_name[0].lower()}{property_name[1:]}"


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class GeneratedUnit:
    """One emitted source artifact, produced for one originating method."""

    key: str
    """Identifier unique within the compilation."""

    namespace: str
    type_name: str
    method_name: str

    text: str
    """Complete source text of the unit."""

    members: str
    """Class-body level declarations, indented by four spaces."""

    requires_threading: bool
    """Whether ``members`` refer to the ``threading`` module."""

    @property
    def type_path(self) -> tuple[str, ...]:
        return tuple(self.type_name.split(".")) if self.type_name else ()
