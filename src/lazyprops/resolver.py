"""
Semantic confirmation of marker decorators and extraction of their settings.

Both stages are lenient: a decorator that does not resolve to the marker, or a
marker whose arguments cannot be evaluated, is dropped without a diagnostic.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Collection

from lazyprops.marker import MARKER_QUALIFIED_NAMES
from lazyprops.model import CandidateMethod, LazyPropSpec, default_field_prefix
from lazyprops.semantic import MethodSymbol, SemanticModel

logger = logging.getLogger(__name__)

THREAD_SAFE_ARGUMENT = "thread_safe"
FIELD_PREFIX_ARGUMENT = "field_prefix"


def _callee(decorator: ast.expr) -> ast.expr:
    return decorator.func if isinstance(decorator, ast.Call) else decorator


def is_marker(
    decorator: ast.expr,
    model: SemanticModel,
    method: MethodSymbol,
    marker_names: Collection[str] = MARKER_QUALIFIED_NAMES,
) -> bool:
    """Whether ``decorator`` refers to the marker by its fully qualified name."""
    return model.resolve_reference(_callee(decorator), within=method) in marker_names


def resolve(
    node: ast.FunctionDef,
    model: SemanticModel,
    marker_names: Collection[str] = MARKER_QUALIFIED_NAMES,
) -> CandidateMethod | None:
    """
    Keep the decorators of ``node`` that really are the marker.

    :return: The candidate, or ``None`` when no decorator survives or ``node``
        declares no method symbol.
    """
    method = model.declared_method(node)
    if method is None:
        return None

    markers = tuple(
        decorator
        for decorator in node.decorator_list
        if is_marker(decorator, model, method, marker_names)
    )
    if not markers:
        logger.debug(
            "%s.%s.%s has no marker decorator",
            model.module_name,
            method.containing_type.qualified_name,
            method.name,
        )
        return None

    return CandidateMethod(
        name=method.name,
        return_type=None if node.returns is None else ast.unparse(node.returns),
        namespace=model.module_name,
        type_name=method.containing_type.qualified_name,
        markers=markers,
    )


def extract_spec(
    marker: ast.expr,
    candidate: CandidateMethod,
    model: SemanticModel,
    *,
    within: MethodSymbol | None = None,
) -> LazyPropSpec | None:
    """
    Read the settings of one marker application.

    The single positional argument must evaluate to a non-blank string;
    ``thread_safe`` is honored when it evaluates to a ``bool`` and
    ``field_prefix`` when it evaluates to a ``str``.
    """
    if not isinstance(marker, ast.Call):
        return None
    match marker.args:
        case [ast.Starred()]:
            return None
        case [argument]:
            property_name = model.constant_value(argument, within=within)
        case _:
            return None
    if not isinstance(property_name, str):
        return None
    property_name = property_name.strip()
    if not property_name:
        return None

    thread_safe = False
    field_prefix = default_field_prefix(property_name)
    for keyword in marker.keywords:
        value = model.constant_value(keyword.value, within=within)
        if keyword.arg == THREAD_SAFE_ARGUMENT and isinstance(value, bool):
            thread_safe = value
        elif keyword.arg == FIELD_PREFIX_ARGUMENT and isinstance(value, str):
            field_prefix = value

    return LazyPropSpec(
        property_name=property_name,
        thread_safe=thread_safe,
        field_prefix=field_prefix,
        method=candidate,
    )


def extract_specs(
    candidate: CandidateMethod, model: SemanticModel, *, within: MethodSymbol | None = None
) -> tuple[LazyPropSpec, ...]:
    """
    One spec per well-formed marker application, in decorator order.

    :param within: The method carrying the markers. Names bound in its class body
        before it shadow module-level constants, as they do when the decorators run.
    """
    specs: list[LazyPropSpec] = []
    for marker in candidate.markers:
        spec = extract_spec(marker, candidate, model, within=within)
        if spec is None:
            logger.debug(
                "Discarding malformed marker on %s.%s.%s at line %d",
                candidate.namespace,
                candidate.type_name,
                candidate.name,
                marker.lineno,
            )
            continue
        specs.append(spec)
    return tuple(specs)
