"""
Marker decorators recognised by the generator.

Both markers are inert at runtime: ``lazy_prop`` only records its arguments on
the decorated function and ``extensible`` returns the class unchanged. The
generator reads them from source, never from live objects.

The same definitions are available as standalone source text
(:data:`MARKER_SOURCE`) so that a project can vendor them as
``lazyprops_marker.py`` without depending on this package at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Final, TypeVar, final

from lazyprops.model import GeneratedUnit

TFunction = TypeVar("TFunction", bound=Callable[..., object])
TClass = TypeVar("TClass", bound=type)

MARKER_MODULES: Final = ("lazyprops", "lazyprops.marker", "lazyprops_marker")
"""Modules that define (or re-export) the marker decorators."""

MARKER_SYMBOLS: Final = ("lazy_prop", "LazyProp")

MARKER_QUALIFIED_NAMES: Final = frozenset(
    f"{module}.{symbol}" for module in MARKER_MODULES for symbol in MARKER_SYMBOLS
)

MARKER_UNIT_KEY: Final = "lazyprops_marker.py"


@final
@dataclass(frozen=True, slots=True)
class LazyProp:
    """
    Marks a zero-argument method of an ``@extensible`` class as the computation
    behind a lazily evaluated, cached property.

    May be applied several times to the same method; every application yields
    an independent property.
    """

    property_name: str
    """Name of the generated property."""

    thread_safe: bool = field(default=False, kw_only=True)
    """Guard the first computation with a per-instance lock."""

    field_prefix: str | None = field(default=None, kw_only=True)
    """
    Prefix of the backing fields. Defaults to an underscore followed by the
    property name with its first letter lower-cased.
    """

    def __call__(self, function: TFunction) -> TFunction:
        existing = getattr(function, "__lazy_props__", ())
        function.__lazy_props__ = (*existing, self)  # type: ignore[attr-defined]
        return function


lazy_prop = LazyProp


def extensible(cls: TClass) -> TClass:
    """Marks a class whose body may be extended with generated members."""
    return cls


MARKER_SOURCE: Final = '''\
# <auto-generated/>
"""Marker decorators for the lazyprops generator."""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class LazyProp:
    property_name: str
    thread_safe: bool = field(default=False, kw_only=True)
    field_prefix: str | None = field(default=None, kw_only=True)

    def __call__(self, function):
        existing = getattr(function, "__lazy_props__", ())
        function.__lazy_props__ = (*existing, self)
        return function


lazy_prop = LazyProp


def extensible(cls):
    return cls
'''


def emit_marker_definition() -> GeneratedUnit:
    """Return the marker module as a generated unit, emitted once per pass."""
    return GeneratedUnit(
        key=MARKER_UNIT_KEY,
        namespace="lazyprops_marker",
        type_name="",
        method_name="",
        text=MARKER_SOURCE,
        members="",
        requires_threading=False,
    )
