"""
Emission of cached properties.

For every spec the synthesizer declares a storage field, a written flag and,
for thread-safe specs, a lock slot, followed by a ``property`` whose getter
calls the originating method at most once per instance:

Plain getter::

    if not written: storage = method(); written = True
    return storage

Thread-safe getter (double-checked locking)::

    if written: return storage
    with lock:
        if not written: storage = method(); written = True
    return storage

Storage is always assigned before the written flag, so a reader that sees the
flag set on the unlocked fast path also sees the value. The lock is created on
first use with ``dict.setdefault`` on the instance dictionary, which is atomic,
so every instance and every spec owns a distinct lock.
"""

from __future__ import annotations

from collections.abc import Sequence

from lazyprops.model import CandidateMethod, LazyPropSpec

INDENT = "    "


def _getter_signature(spec: LazyPropSpec) -> str:
    return_type = spec.method.return_type
    annotation = "" if return_type is None else f" -> {return_type}"
    return f"def {spec.property_name}(self){annotation}:"


def _plain_property(spec: LazyPropSpec) -> list[str]:
    storage, written = spec.storage_field, spec.written_field
    return [
        "@property",
        _getter_signature(spec),
        f"{INDENT}if not self.{written}:",
        f"{INDENT * 2}self.{storage} = self.{spec.method.name}()",
        f"{INDENT * 2}self.{written} = True",
        f"{INDENT}return self.{storage}",
    ]


def _thread_safe_property(spec: LazyPropSpec) -> list[str]:
    storage, written, mutex = spec.storage_field, spec.written_field, spec.mutex_field
    return [
        "@property",
        _getter_signature(spec),
        f"{INDENT}if self.{written}:",
        f"{INDENT * 2}return self.{storage}",
        f'{INDENT}with self.__dict__.setdefault("{mutex}", threading.Lock()):',
        f"{INDENT * 2}if not self.{written}:",
        f"{INDENT * 3}self.{storage} = self.{spec.method.name}()",
        f"{INDENT * 3}self.{written} = True",
        f"{INDENT}return self.{storage}",
    ]


def synthesize_property(spec: LazyPropSpec) -> list[str]:
    """Lines of the fields and property for one spec, without indentation."""
    lines = [
        f"{spec.storage_field} = None",
        f"{spec.written_field} = False",
    ]
    if spec.thread_safe:
        lines.append(f"{spec.mutex_field} = None")
        lines.append("")
        lines.extend(_thread_safe_property(spec))
    else:
        lines.append("")
        lines.extend(_plain_property(spec))
    return lines


def synthesize(method: CandidateMethod, specs: Sequence[LazyPropSpec]) -> str:
    """
    Class-body text for all ``specs`` of ``method``, indented one level.

    Duplicate property names are emitted as they are.
    """
    blocks: list[str] = []
    for spec in specs:
        assert spec.method.name == method.name
        body = "\n".join(
            f"{INDENT}{line}" if line else "" for line in synthesize_property(spec)
        )
        blocks.append(body + "\n")
    return "\n".join(blocks)
